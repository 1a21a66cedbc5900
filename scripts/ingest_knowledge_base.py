import asyncio
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from black_ink_assistant.core.errors import IngestionError
from black_ink_assistant.core.logging import configure_logging
from black_ink_assistant.embeddings.embedder import Embedder
from black_ink_assistant.rag.pipeline import RetrievalPipeline
from black_ink_assistant.rag.sources import load_documents
from black_ink_assistant.rag.vector_store import VectorStore


async def main() -> int:
    configure_logging()

    pipeline = RetrievalPipeline(Embedder(), VectorStore())
    documents = load_documents()
    print(f"Ingesting {len(documents)} documents...")

    try:
        result = await pipeline.ingest(documents)
    except IngestionError as exc:
        print(f"Ingestion failed at stage '{exc.stage}': {exc}", file=sys.stderr)
        return 1

    print(f"Done! docs={result.documents} chunks={result.chunks} stored={result.stored}")
    return 0

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
