from functools import lru_cache

from ..agents.router import AgentRouter
from ..embeddings.embedder import Embedder
from ..llm.client import LLMClient
from ..memory.client_memory import ClientMemoryService, MemoryClient
from ..rag.pipeline import RetrievalPipeline
from ..rag.vector_store import VectorStore


@lru_cache
def get_llm_client() -> LLMClient:
    return LLMClient()


@lru_cache
def get_embedder() -> Embedder:
    return Embedder()


@lru_cache
def get_vector_store() -> VectorStore:
    return VectorStore()


@lru_cache
def get_pipeline() -> RetrievalPipeline:
    return RetrievalPipeline(get_embedder(), get_vector_store())


@lru_cache
def get_agent_router() -> AgentRouter:
    return AgentRouter(get_llm_client(), get_pipeline())


@lru_cache
def get_memory_service() -> ClientMemoryService:
    return ClientMemoryService(MemoryClient(), get_llm_client())
