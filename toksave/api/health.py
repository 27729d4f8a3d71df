from fastapi import APIRouter

from toksave.config.settings import config
from toksave.core.state import state
from toksave.i18n import i18n

router = APIRouter()


async def redis_status() -> str:
    if state.redis is None:
        return i18n.get("response.redis_disabled")
    try:
        await state.redis.ping()
    except Exception:
        return i18n.get("response.redis_disconnected")
    return i18n.get("response.redis_connected")


@router.get("/")
async def root():
    """Service banner"""
    return {
        "status": i18n.get("response.status_running"),
        "service": config.api.title,
        "version": config.api.version,
        "redis_enabled": state.redis is not None,
        "history_backend": state.history_backend,
    }


@router.get("/health")
async def health_check():
    return {
        "status": i18n.get("health.status"),
        "redis": await redis_status(),
        "history_backend": state.history_backend,
        "history_size": len(state.history.entries) if state.history else 0,
    }
