# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database and auth calls:
# - Category catalog (categories + items tables)
# - Watchlist rows for a user
# - Passwordless (magic link) sign-in
# - Batch writes used by the seed and teaser refresh jobs
#
# The wrapper is an ordinary object. The API builds one instance at startup
# (see app.main lifespan) and hands it to route handlers through
# app.dependencies.get_supabase_client; tests pass a fake instead.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   supabase = SupabaseClient.from_settings(settings)
#   rows = supabase.fetch_watchlist(user_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import Settings
from app.exceptions import BackendError

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(BackendError):
    """
    Error during Supabase operations.

    Rendered by the API's exception handler like any other BackendError.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        super().__init__(
            message=message,
            suggestion=suggestion,
            details=details,
            status_code=status_code,
        )
        self.code = code


def _normalize_uuid(value: str | UUID) -> str:
    """Convert UUID to string for queries."""
    return str(value) if isinstance(value, UUID) else value


class SupabaseClient:
    """
    Typed wrapper for Supabase database and auth operations.

    Holds two lazily created clients:
    - service client (service_role key): server-side reads and writes,
      bypasses Row Level Security
    - anon client (anon key): auth calls made on behalf of end users

    Example:
        supabase = SupabaseClient(url, service_key, anon_key)
        supabase.insert_watchlist_entry(user_id, "bitcoin", "crypto", "")
        entries = supabase.fetch_watchlist(user_id)
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        anon_key: str | None = None,
    ):
        self.url = url
        self._service_key = service_key
        self._anon_key = anon_key or service_key
        self._client: Client | None = None
        self._anon_client: Client | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseClient":
        """Build a wrapper from application settings."""
        return cls(
            url=settings.SUPABASE_URL,
            service_key=settings.SUPABASE_SERVICE_KEY,
            anon_key=settings.SUPABASE_ANON_KEY,
        )

    # -------------------------------------------------------------------------
    # Client Creation
    # -------------------------------------------------------------------------

    def _create(self, key: str, key_name: str) -> Client:
        try:
            client = create_client(self.url, key)
            logger.info(f"Supabase client initialized ({key_name})")
            return client
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create Supabase client: {e}",
                code="CLIENT_INIT_FAILED",
                suggestion=f"Check SUPABASE_URL and {key_name} in your .env file"
            ) from e

    @property
    def client(self) -> Client:
        """
        Service-role client, created on first use.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if self._client is None:
            self._client = self._create(self._service_key, "SUPABASE_SERVICE_KEY")
        return self._client

    @property
    def anon_client(self) -> Client:
        """Anon-key client for auth calls, created on first use."""
        if self._anon_client is None:
            self._anon_client = self._create(self._anon_key, "SUPABASE_ANON_KEY")
        return self._anon_client

    def ping(self) -> None:
        """Cheap query used by the readiness probe."""
        self.client.table("categories").select("id").limit(1).execute()

    # -------------------------------------------------------------------------
    # Category Catalog
    # -------------------------------------------------------------------------

    def fetch_categories(self) -> list[dict[str, Any]]:
        """
        Fetch every category row.

        Returns:
            List of dicts with keys: id, slug, name, label, icon,
            description, parent_id (nullable)

        Raises:
            SupabaseClientError: If query fails
        """
        try:
            response = (
                self.client.table("categories")
                .select("id, slug, name, label, icon, description, parent_id")
                .order("name")
                .execute()
            )
            return response.data or []
        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch categories: {e}",
                code="FETCH_CATEGORIES_FAILED",
                suggestion="Check that the categories table exists (run scripts/seed.py)"
            ) from e

    def fetch_items(self) -> list[dict[str, Any]]:
        """
        Fetch every catalog item row.

        Returns:
            List of dicts with keys: slug, name, image_url, teaser_price,
            trend, category_id
        """
        try:
            response = (
                self.client.table("items")
                .select("slug, name, image_url, teaser_price, trend, category_id")
                .order("teaser_price", desc=True)
                .execute()
            )
            return response.data or []
        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch items: {e}",
                code="FETCH_ITEMS_FAILED",
                suggestion="Check that the items table exists (run scripts/seed.py)"
            ) from e

    def fetch_category_id(self, slug: str) -> str | None:
        """Look up a category id by slug; None if the category doesn't exist."""
        try:
            response = (
                self.client.table("categories")
                .select("id")
                .eq("slug", slug)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch category id: {e}",
                code="FETCH_CATEGORY_FAILED",
                details={"slug": slug}
            ) from e
        rows = response.data or []
        return str(rows[0]["id"]) if rows else None

    def upsert_rows(self, table: str, rows: list[dict[str, Any]], on_conflict: str) -> int:
        """
        Upsert rows into a table.

        Returns:
            Number of rows written
        """
        if not rows:
            return 0
        try:
            response = self.client.table(table).upsert(rows, on_conflict=on_conflict).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to upsert into {table}: {e}",
                code="UPSERT_FAILED",
                details={"table": table, "rows": len(rows)}
            ) from e
        written = len(response.data or [])
        logger.debug(f"Upserted {written} rows into {table}")
        return written

    def clear_table(self, table: str) -> None:
        """Delete every row of a table (seeding only)."""
        try:
            self.client.table(table).delete().neq("slug", "").execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to clear {table}: {e}",
                code="CLEAR_FAILED",
                details={"table": table}
            ) from e

    def update_item_teaser(self, slug: str, price: float, trend: float) -> None:
        """Write a refreshed teaser price and 24h trend for one item."""
        try:
            (
                self.client.table("items")
                .update({"teaser_price": price, "trend": trend})
                .eq("slug", slug)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update teaser for {slug}: {e}",
                code="UPDATE_ITEM_FAILED",
                details={"slug": slug}
            ) from e

    # -------------------------------------------------------------------------
    # Watchlists
    # -------------------------------------------------------------------------

    def fetch_watchlist(self, user_id: str | UUID) -> list[dict[str, Any]]:
        """
        Fetch a user's watchlist, newest saves first.

        Raises:
            SupabaseClientError: If query fails
        """
        user_id_str = _normalize_uuid(user_id)
        try:
            response = (
                self.client.table("watchlists")
                .select("id, user_id, item_slug, category, notes, created_at")
                .eq("user_id", user_id_str)
                .order("created_at", desc=True)
                .execute()
            )
            rows = response.data or []
            logger.debug(f"Fetched {len(rows)} watchlist rows for user {user_id_str}")
            return rows
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to load watchlist: {e}",
                code="FETCH_WATCHLIST_FAILED",
                suggestion="Try refreshing; check that the watchlists table exists",
                details={"user_id": user_id_str}
            ) from e

    def insert_watchlist_entry(
        self,
        user_id: str | UUID,
        item_slug: str,
        category: str,
        notes: str,
    ) -> dict[str, Any]:
        """
        Insert one watchlist row.

        Returns:
            The created row

        Raises:
            SupabaseClientError: If the insert fails or returns nothing
        """
        data = {
            "user_id": _normalize_uuid(user_id),
            "item_slug": item_slug,
            "category": category,
            "notes": notes,
        }
        try:
            response = self.client.table("watchlists").insert(data).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to save watchlist entry: {e}",
                code="INSERT_WATCHLIST_FAILED",
                details={"item_slug": item_slug}
            ) from e

        if not response.data:
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_WATCHLIST_FAILED",
                details={"item_slug": item_slug}
            )
        return response.data[0]

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def fetch_user_profile(self, user_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a row from public.users, or None if it doesn't exist yet."""
        try:
            response = (
                self.client.table("users")
                .select("*")
                .eq("id", _normalize_uuid(user_id))
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.warning(f"Could not fetch user profile: {e}")
            return None
        rows = response.data or []
        return rows[0] if rows else None

    # -------------------------------------------------------------------------
    # Auth (magic link)
    # -------------------------------------------------------------------------

    def send_magic_link(self, email: str, redirect_to: str) -> None:
        """
        Email a passwordless sign-in link.

        New addresses get an account created on first sign-in.

        Raises:
            SupabaseClientError: If Supabase rejects the request
        """
        try:
            self.anon_client.auth.sign_in_with_otp({
                "email": email,
                "options": {"email_redirect_to": redirect_to},
            })
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to send magic link: {e}",
                code="MAGIC_LINK_FAILED",
                suggestion="Check the email address and try again",
                status_code=400,
            ) from e
        logger.info(f"Magic link sent to {email}")

    def verify_magic_link(self, token_hash: str, otp_type: str = "email") -> dict[str, Any]:
        """
        Exchange the token from a magic link for a session.

        Returns:
            Dict with access_token, refresh_token, expires_in, user_id, email

        Raises:
            SupabaseClientError: 401 if the token is invalid or expired
        """
        try:
            response = self.anon_client.auth.verify_otp({
                "token_hash": token_hash,
                "type": otp_type,
            })
        except Exception as e:
            raise SupabaseClientError(
                message=f"Sign-in error: {e}",
                code="MAGIC_LINK_INVALID",
                suggestion="Request a new magic link; links expire after one use",
                status_code=401,
            ) from e

        session = response.session
        if session is None or response.user is None:
            raise SupabaseClientError(
                message="Sign-in error: no session returned",
                code="MAGIC_LINK_INVALID",
                suggestion="Request a new magic link",
                status_code=401,
            )
        return {
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
            "expires_in": session.expires_in,
            "user_id": str(response.user.id),
            "email": response.user.email,
        }
