"""Security related functions."""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
import jwt
from jwt import InvalidTokenError

from app.core.config import Settings
from app.exceptions.base import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass
class Identity:
    """Authenticated identity as reported by the identity provider."""

    subject: str
    email: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str | None:
        return self.metadata.get("full_name") or self.metadata.get("name")

    @property
    def avatar_url(self) -> str | None:
        return self.metadata.get("avatar_url")


class IdentityAuthenticator:
    """
    Verifies bearer tokens issued by the external identity provider.

    When a JWT secret is configured the token is verified locally with PyJWT
    (HS256, expected audience). Otherwise the provider's user endpoint is asked
    to resolve the token, which is what the provider's own client libraries do.

    :ivar jwt_secret: Shared secret used to verify tokens locally.
    :type jwt_secret: str | None
    :ivar api_url: Base URL of the identity provider.
    :type api_url: str | None
    """

    def __init__(self, config: Settings, http_client: httpx.AsyncClient | None = None):
        self.jwt_secret = config.auth_jwt_secret
        self.audience = config.auth_jwt_audience
        self.api_url = config.auth_api_url.rstrip("/") if config.auth_api_url else None
        self.api_key = config.auth_api_key
        self.timeout = config.auth_request_timeout
        self._http_client = http_client

    async def authenticate(self, token: str) -> Identity:
        """
        Resolve a bearer token to an :class:`Identity`.

        :param token: The raw bearer token.
        :return: The identity the token belongs to.
        :raises UnauthorizedError: If the token is missing, invalid, expired or
            does not carry an email address.
        """
        if not token:
            raise UnauthorizedError("Authentication token is required")

        if self.jwt_secret:
            payload = self._decode(token)
            identity = Identity(
                subject=str(payload.get("sub") or ""),
                email=payload.get("email") or "",
                metadata=payload.get("user_metadata") or {},
            )
        elif self.api_url:
            identity = await self._lookup(token)
        else:
            logger.error("No identity provider configured")
            raise UnauthorizedError("Authentication is not configured")

        if not identity.email:
            raise UnauthorizedError("Invalid authentication token")
        return identity

    def _decode(self, token: str) -> dict:
        try:
            return jwt.decode(
                token,
                self.jwt_secret,
                algorithms=["HS256"],
                audience=self.audience,
            )
        except InvalidTokenError as e:
            logger.info("Rejected bearer token: %s", e)
            raise UnauthorizedError("Invalid authentication token") from e

    async def _lookup(self, token: str) -> Identity:
        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        url = f"{self.api_url}/auth/v1/user"
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Identity provider lookup failed: %s", e)
            raise UnauthorizedError("Authentication failed") from e

        if response.status_code != 200:
            raise UnauthorizedError("Invalid authentication token")

        data = response.json()
        return Identity(
            subject=str(data.get("id") or ""),
            email=data.get("email") or "",
            metadata=data.get("user_metadata") or {},
        )
