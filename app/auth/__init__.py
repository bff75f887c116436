# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Supabase Auth for TrackAura: passwordless magic-link sign-in and JWT
# verification of the resulting access tokens.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.post("/watchlist")
#   async def save(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse

__all__ = [
    "get_current_user",
    "AuthUser",
    "UserResponse",
]
