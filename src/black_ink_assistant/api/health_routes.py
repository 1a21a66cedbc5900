from fastapi import APIRouter
from ..config import settings

router = APIRouter(tags=["health"])

@router.get("/health")
def health():
    return {
        "status": "ok",
        "environment": settings.environment,
        "vector_store_configured": bool(settings.pinecone_index_host),
        "memory_enabled": bool(settings.mem0_api_key.get_secret_value()),
    }
