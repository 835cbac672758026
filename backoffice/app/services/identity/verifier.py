"""
Firebase ID token verification against the provider's JWKS.

Signature, audience (project id), issuer, expiry and subject are checked
here. Freshness and admin authorization are layered on top by the
authenticator.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Dict, List, Optional, Protocol

import httpx
from jose import JWTError, jwt

from backoffice.app.core.logging import get_logger

logger = get_logger(__name__)


class TokenVerificationError(Exception):
    """Raised when an ID token fails verification."""

    def __init__(self, code: str, detail: Optional[str] = None):
        super().__init__(detail or code)
        self.code = code
        self.detail = detail


class TokenVerifier(Protocol):
    """Capability: verify a token and return its claims or raise."""

    async def verify(self, token: str) -> Dict[str, Any]:
        ...


class FirebaseTokenVerifier:
    """Verify Firebase ID tokens (RS256) using Google's published JWKS."""

    def __init__(
        self,
        project_id: str,
        jwks_url: str,
        http_client: httpx.AsyncClient | None = None,
        *,
        refresh_interval: int = 3600,
        min_refresh_interval: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.project_id = project_id
        self.issuer = f"https://securetoken.google.com/{project_id}"
        self.jwks_url = jwks_url
        self.refresh_interval = refresh_interval
        self.min_refresh_interval = min_refresh_interval
        self._clock = clock
        self._client = http_client
        self._keys: Optional[List[Dict[str, Any]]] = None
        self._last_refresh: float = 0.0
        self._lock = asyncio.Lock()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            from backoffice.app.core.http_client import get_http_client
            self._client = get_http_client()
        return self._client

    async def verify(self, token: str) -> Dict[str, Any]:
        """Validate the token and return its claims.

        Raises:
            TokenVerificationError: On malformed tokens, unknown signing keys,
                bad signatures, wrong audience/issuer, expiry or missing subject.
        """
        if not self.project_id:
            raise TokenVerificationError("not_configured", "Identity provider project id is not set")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise TokenVerificationError("malformed", str(exc)) from exc

        kid = header.get("kid")
        if not isinstance(kid, str) or not kid:
            raise TokenVerificationError("missing_kid", "Token header missing key id")
        if header.get("alg") != "RS256":
            raise TokenVerificationError("bad_algorithm", f"Unexpected algorithm {header.get('alg')!r}")

        key = await self._get_key(kid)
        if key is None:
            raise TokenVerificationError("unknown_kid", f"Signing key {kid} not found")

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                audience=self.project_id,
                issuer=self.issuer,
            )
        except JWTError as exc:
            raise TokenVerificationError("invalid", str(exc)) from exc

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise TokenVerificationError("missing_subject", "Token missing subject claim")
        return claims

    async def _get_key(self, kid: str) -> Optional[Dict[str, Any]]:
        await self._refresh_keys(force=False)
        for key in self._keys or []:
            if key.get("kid") == kid:
                return key

        # Keys rotate; refresh once more before giving up, but at most once
        # per min_refresh_interval however many unknown kids arrive.
        if not self._recently_refreshed():
            await self._refresh_keys(force=True)
        for key in self._keys or []:
            if key.get("kid") == kid:
                return key
        return None

    def _is_fresh(self) -> bool:
        return self._keys is not None and (self._clock() - self._last_refresh) < self.refresh_interval

    def _recently_refreshed(self) -> bool:
        return self._keys is not None and (self._clock() - self._last_refresh) < self.min_refresh_interval

    async def _refresh_keys(self, *, force: bool) -> None:
        if not force and self._is_fresh():
            return

        async with self._lock:
            # Another task may have refreshed while this one waited
            current = self._recently_refreshed() if force else self._is_fresh()
            if current:
                return

            try:
                response = await self._get_client().get(self.jwks_url)
                response.raise_for_status()
                payload = response.json()
            except (httpx.HTTPError, ValueError) as exc:
                raise TokenVerificationError("jwks_fetch_failed", str(exc)) from exc

            keys = payload.get("keys") if isinstance(payload, dict) else None
            if not isinstance(keys, list):
                raise TokenVerificationError("jwks_invalid", "JWKS response missing 'keys' array")

            self._keys = keys
            self._last_refresh = self._clock()
            logger.debug(f"Loaded {len(keys)} identity provider signing keys")
