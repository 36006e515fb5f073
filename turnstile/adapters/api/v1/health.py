from fastapi import APIRouter

from turnstile.core.config.settings import settings

router = APIRouter()


@router.get("", tags=["health"], summary="Liveness probe")
async def health() -> dict:
    return {"status": "ok", "env": settings.APP_ENV, "version": settings.VERSION}
