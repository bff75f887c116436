# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from datetime import datetime
from typing import Optional


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    id: UUID
    email: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class UserResponse(BaseModel):
    """
    Full user response for API endpoints.

    Includes additional profile data from the public.users table.
    """
    id: UUID
    email: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MagicLinkRequest(BaseModel):
    """
    Body of POST /auth/magic-link.

    Example:
        {"email": "ada@example.com", "redirectTo": "https://app.example.com/auth/confirm"}
    """
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    redirect_to: Optional[str] = Field(default=None, alias="redirectTo")

    model_config = ConfigDict(populate_by_name=True)


class MagicLinkConfirmRequest(BaseModel):
    """Token from the magic-link email, exchanged for a session."""
    token_hash: str = Field(..., min_length=1, alias="tokenHash")
    type: str = Field(default="email")

    model_config = ConfigDict(populate_by_name=True)


class SessionTokens(BaseModel):
    """Tokens returned after a successful magic-link confirmation."""
    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")
    expires_in: Optional[int] = Field(default=None, alias="expiresIn")
    user_id: str = Field(..., alias="userId")
    email: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)
