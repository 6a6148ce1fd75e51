"""Bearer token verification against a JWKS endpoint.

Tokens are JWTs signed by the identity provider; the ``sub`` claim is the
user id. The key set is fetched over HTTP and cached for
``AuthSettings.jwks_cache_seconds``; an unknown ``kid`` forces one refresh so
key rotation is picked up without a restart.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import jwt

from agentic_chat_stream.platform.settings import AuthSettings

logger = logging.getLogger(__name__)

type JWKSFetcher = Callable[[], Awaitable[dict[str, Any]]]


class Unauthorized(Exception):
    """The request carries no valid credentials."""


def http_jwks_fetcher(http_client: httpx.AsyncClient, jwks_url: str) -> JWKSFetcher:
    """Create a fetcher that downloads the key set with the shared HTTP client."""

    async def fetch() -> dict[str, Any]:
        response = await http_client.get(jwks_url)
        response.raise_for_status()
        return response.json()

    return fetch


class TokenVerifier:
    """Verifies bearer tokens and extracts the user id."""

    def __init__(
        self,
        settings: AuthSettings,
        fetch_jwks: JWKSFetcher,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self._fetch_jwks = fetch_jwks
        self._clock = clock
        self._key_set: jwt.PyJWKSet | None = None
        self._fetched_at = 0.0
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return (
            self._key_set is not None
            and self._clock() - self._fetched_at < self.settings.jwks_cache_seconds
        )

    async def _get_key_set(self, refresh: bool = False) -> jwt.PyJWKSet:
        async with self._lock:
            key_set = self._key_set
            if key_set is None or refresh or not self._is_fresh():
                try:
                    key_set = jwt.PyJWKSet.from_dict(await self._fetch_jwks())
                except (httpx.HTTPError, jwt.PyJWTError) as e:
                    raise Unauthorized(f"Unable to load signing keys: {e}") from e
                self._key_set = key_set
                self._fetched_at = self._clock()
                logger.debug(f"Loaded {len(key_set.keys)} signing key(s)")
            return key_set

    async def _signing_key(self, token: str) -> jwt.PyJWK:
        try:
            kid = jwt.get_unverified_header(token).get("kid")
        except jwt.PyJWTError as e:
            raise Unauthorized(f"Malformed token: {e}") from e

        key_set = await self._get_key_set()
        key = self._find_key(key_set, kid)
        if key is None:
            key = self._find_key(await self._get_key_set(refresh=True), kid)
        if key is None:
            raise Unauthorized("No signing key matches the token")
        return key

    @staticmethod
    def _find_key(key_set: jwt.PyJWKSet, kid: str | None) -> jwt.PyJWK | None:
        if kid is None:
            return key_set.keys[0] if len(key_set.keys) == 1 else None
        for key in key_set.keys:
            if key.key_id == kid:
                return key
        return None

    async def verify(self, token: str) -> str:
        """Verify a token and return its subject.

        Raises:
            Unauthorized: If the token is malformed, expired, signed by an
                unknown key, or has no subject
        """
        key = await self._signing_key(token)
        try:
            claims = jwt.decode(
                token,
                key=key.key,
                algorithms=self.settings.algorithms,
                audience=self.settings.audience,
                issuer=self.settings.issuer or None,
                options={
                    "require": ["exp", "sub"],
                    "verify_aud": self.settings.audience is not None,
                },
            )
        except jwt.PyJWTError as e:
            raise Unauthorized(f"Invalid token: {e}") from e

        subject = claims.get("sub")
        if not subject:
            raise Unauthorized("Token has no subject")
        return str(subject)
