# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Passwordless sign-in through Supabase Auth:
#
#   POST /auth/magic-link  -> email a sign-in link (accounts are created on
#                             first sign-in)
#   POST /auth/confirm     -> exchange the link's token_hash for tokens
#   GET  /auth/me          -> profile of the signed-in user
#   GET  /auth/verify      -> check a stored token is still valid
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import (
    AuthUser,
    MagicLinkConfirmRequest,
    MagicLinkRequest,
    SessionTokens,
    UserResponse,
)
from app.config import settings
from app.dependencies import SupabaseDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/magic-link")
async def send_magic_link(body: MagicLinkRequest, supabase: SupabaseDep) -> dict:
    """
    Email a magic sign-in link.

    The link sends the user back to `redirectTo` (default
    AUTH_REDIRECT_URL) with a token_hash for POST /auth/confirm.
    """
    email = body.email.strip().lower()
    supabase.send_magic_link(email, body.redirect_to or settings.AUTH_REDIRECT_URL)
    return {"sent": True, "email": email}


@router.post("/confirm", response_model=SessionTokens, response_model_by_alias=True)
async def confirm_magic_link(body: MagicLinkConfirmRequest, supabase: SupabaseDep) -> SessionTokens:
    """
    Exchange a magic-link token for a session.

    Raises:
        401: If the token is invalid, expired or already used
    """
    session = supabase.verify_magic_link(body.token_hash, body.type)
    logger.info(f"User {session['user_id']} signed in")
    return SessionTokens(**session)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    supabase: SupabaseDep,
    user: AuthUser = Depends(get_current_user),
) -> UserResponse:
    """
    Get the current authenticated user's profile.

    Raises:
        401: If not authenticated
    """
    profile = supabase.fetch_user_profile(user.id)
    if profile:
        return UserResponse(**profile)

    # User exists in auth but not yet in public.users
    return UserResponse(id=user.id, email=user.email)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
