"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter

from ...infrastructure.dependencies import get_service_container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Report which remote provider and local storage are configured."""
    container = get_service_container()
    storage = container.get("storage")
    return {
        "status": "healthy",
        "remote_provider": container.get("remote").provider_name,
        "remote_base_url": container.config.linkedtrust.base_url,
        "storage_backend": container.config.storage.backend,
        "storage_available": storage.is_available,
    }
