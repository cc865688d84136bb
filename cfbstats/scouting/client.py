from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from cfbstats.utils.env import getenv_float, getenv_str
from cfbstats.web.cache import TTLCache


logger = logging.getLogger(__name__)

LINK_STATUSES = ("pending", "approved", "rejected")
REVIEW_STATUSES = ("approved", "rejected")

DEFAULT_BASE_URL = "http://localhost:8000"


class ScoutingError(RuntimeError):
    pass


class ScoutingClient:
    """
    Client for the scouting API: player scouting profiles (cached) and the
    pending-link moderation queue (always fresh).
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 10,
        cache: Optional[TTLCache] = None,
        profile_ttl_seconds: float = 3600,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout_seconds
        self._profile_ttl = profile_ttl_seconds
        self._cache = cache if cache is not None else TTLCache(ttl_seconds=profile_ttl_seconds)

    @classmethod
    def from_env(cls, *, session: Optional[requests.Session] = None) -> "ScoutingClient":
        return cls(
            base_url=getenv_str("SCOUT_API_URL", DEFAULT_BASE_URL),
            session=session,
            profile_ttl_seconds=getenv_float("SCOUT_CACHE_TTL_SECONDS", 3600),
        )

    def _get_json(self, path: str, *, params: Optional[dict[str, Any]] = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            resp = self._session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise ScoutingError(f"Request failed: GET {url}: {e}") from e
        if resp.status_code == 404:
            return None
        if not resp.ok:
            raise ScoutingError(f"HTTP {resp.status_code} for GET {url}")
        try:
            return resp.json()
        except ValueError as e:
            raise ScoutingError(f"Invalid JSON from GET {url}") from e

    # --- profiles -------------------------------------------------------
    def get_player_scouting_profile(self, player_id: int) -> Optional[dict[str, Any]]:
        """Profile with timeline and reports; None when unknown or unreachable."""
        key = ("profile", str(player_id))
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        try:
            profile = self._get_json(f"/players/{player_id}")
        except ScoutingError as e:
            logger.error("Failed to fetch scouting profile for %s: %s", player_id, e)
            return None
        if not isinstance(profile, dict):
            return None
        self._cache.set(key, profile, ttl_seconds=self._profile_ttl)
        return profile

    def invalidate_profile(self, player_id: int) -> bool:
        return self._cache.invalidate(("profile", str(player_id)))

    # --- moderation queue ----------------------------------------------
    def get_pending_links(self, status: str = "pending", limit: int = 50) -> list[dict[str, Any]]:
        if status not in LINK_STATUSES:
            raise ValueError(f"status must be one of {LINK_STATUSES}, got {status!r}")
        try:
            payload = self._get_json("/admin/pending-links", params={"status": status, "limit": int(limit)})
        except ScoutingError as e:
            logger.error("Failed to fetch pending links: %s", e)
            return []
        return payload if isinstance(payload, list) else []

    def review_pending_link(self, link_id: int, status: str) -> bool:
        """Approve or reject a candidate match. True only on a 2xx response."""
        if status not in REVIEW_STATUSES:
            raise ValueError(f"status must be one of {REVIEW_STATUSES}, got {status!r}")
        url = f"{self._base_url}/admin/pending-links/{link_id}/review"
        try:
            resp = self._session.post(url, json={"status": status}, timeout=self._timeout)
        except requests.RequestException as e:
            logger.error("Failed to review link %s: %s", link_id, e)
            return False
        if not 200 <= resp.status_code < 300:
            logger.warning("Review of link %s returned HTTP %s", link_id, resp.status_code)
            return False
        return True
