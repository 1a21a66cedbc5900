import math

import pytest

from black_ink_assistant.rag.chunker import ParagraphChunker, chunk_document, chunk_stats


def test_empty_document_yields_no_chunks(make_document):
    assert chunk_document(make_document("")) == []


def test_whitespace_document_yields_no_chunks(make_document):
    assert chunk_document(make_document("  \n\n \t\n")) == []


def test_short_document_is_a_single_unchanged_chunk(make_document):
    content = "Primer párrafo.\n\n\nSegundo párrafo.\nCon salto simple."
    chunks = chunk_document(make_document(content))

    assert len(chunks) == 1
    assert chunks[0].content == content


def test_paragraphs_accumulate_with_trailing_overlap(make_document):
    paragraphs = [letter * 300 for letter in "abcde"]
    chunks = chunk_document(make_document("\n\n".join(paragraphs)))

    assert [len(c.content) for c in chunks] == [602, 702, 400]
    assert chunks[0].content == "a" * 300 + "\n\n" + "b" * 300
    # Each chunk starts with the last 100 characters of its predecessor
    for previous, current in zip(chunks, chunks[1:]):
        assert current.content.startswith(previous.content[-100:])
    assert all(len(c.content) <= 800 for c in chunks)


def test_oversized_paragraph_is_never_split(make_document):
    content = "\n\n".join(["x" * 50, "y" * 1000, "z" * 50])
    chunks = chunk_document(make_document(content))

    assert [c.content for c in chunks] == [
        "x" * 50,
        "x" * 50 + "y" * 1000,
        "y" * 100 + "z" * 50,
    ]


def test_full_overlap_kept_when_seeded_chunk_exceeds_size(make_document):
    content = "a" * 500 + "\n\n" + "b" * 750
    chunks = chunk_document(make_document(content))

    assert [c.content for c in chunks] == ["a" * 500, "a" * 100 + "b" * 750]
    assert chunks[1].content.startswith(chunks[0].content[-100:])
    assert len(chunks[1].content) == 850


def test_chunk_metadata_carries_document_fields(make_document):
    content = "Tatuajes pequeños desde $80."
    chunk = chunk_document(make_document(content, category="pricing"))[0]

    assert chunk.metadata["source"] == "faq_system"
    assert chunk.metadata["category"] == "pricing"
    assert chunk.metadata["priority"] == 5
    assert isinstance(chunk.metadata["last_updated"], str)
    assert chunk.metadata["original_length"] == len(content)
    assert chunk.metadata["tokens"] == math.ceil(len(content) / 4)


def test_zero_overlap_starts_fresh(make_document):
    content = "\n\n".join(["a" * 10, "b" * 10])
    chunks = ParagraphChunker(chunk_size=15, overlap_size=0).chunk(make_document(content))

    assert [c.content for c in chunks] == ["a" * 10, "b" * 10]


@pytest.mark.parametrize("size, overlap", [(100, 100), (100, 150), (100, -1), (0, 0)])
def test_invalid_sizes_rejected(size, overlap):
    with pytest.raises(ValueError):
        ParagraphChunker(chunk_size=size, overlap_size=overlap)


def test_chunk_stats(make_document):
    chunks = chunk_document(make_document("\n\n".join(["a" * 500, "b" * 500])))
    stats = chunk_stats(chunks)

    assert stats["chunk_count"] == 2
    assert stats["max_chunk_size"] == 600
    assert chunk_stats([]) == {"chunk_count": 0, "total_chars": 0, "max_chunk_size": 0}
