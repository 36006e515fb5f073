"""Authentication routes, mounted under ``/auth``."""

from fastapi import APIRouter

from .routes import login, logout, oauth, refresh, register, two_factor

router = APIRouter()

router.include_router(register.router, prefix="/register")
router.include_router(login.router, prefix="/login")
router.include_router(oauth.router, prefix="/login/oauth")
router.include_router(refresh.router, prefix="/refresh")
router.include_router(logout.router, prefix="/logout")
router.include_router(two_factor.router, prefix="/2fa")

__all__ = ["router"]
