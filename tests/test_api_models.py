import pytest
from pydantic import ValidationError

from black_ink_assistant.api.models import ChatMessage, ChatRequest, IngestRequest, SearchRequest
from black_ink_assistant.embeddings.models import DocumentMetadata


def test_chat_request_user_id_alias():
    """Verify the widget's camelCase userId is accepted."""
    req = ChatRequest(messages=[ChatMessage(role="user", content="hola")], userId="client-1")
    assert req.user_id == "client-1"


def test_chat_request_user_id_optional():
    req = ChatRequest(messages=[ChatMessage(role="user", content="hola")])
    assert req.user_id is None


def test_chat_message_ignores_extra_fields():
    msg = ChatMessage.model_validate({"role": "user", "content": "hola", "id": "m1", "createdAt": 1})
    assert msg.content == "hola"


def test_chat_message_invalid_role():
    with pytest.raises(ValidationError):
        ChatMessage(role="tool", content="hola")


def test_search_request_defaults():
    req = SearchRequest(query="precio")
    assert req.top_k == 5
    assert req.filters is None


def test_ingest_request_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        IngestRequest.model_validate({"docs": []})


@pytest.mark.parametrize("priority", [0, 6])
def test_document_priority_bounds(priority):
    with pytest.raises(ValidationError):
        DocumentMetadata(source="faq_system", priority=priority)
