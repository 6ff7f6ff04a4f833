"""
HTTP identity validator implementing the IdentityValidator interface.

This module follows Black Box Design principles:
- Implements IdentityValidator protocol
- Accepts configuration via dependency injection
- No direct environment variable access
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ...config.provider import AuthConfig, DEFAULT_USER_INFO_PATH
from .errors import IdentityPayloadError
from .interfaces import IdentityResponse, IdentityValidator
from .models import UserInfoPayload

logger = logging.getLogger(__name__)


class HttpIdentityValidator(IdentityValidator):
    """
    Validates API keys against the remote identity endpoint.

    Sends one GET per call with the key in the X-API-Key header and maps
    the response to an IdentityResponse. Network errors propagate to the
    caller as httpx exceptions.
    """

    def __init__(
        self,
        base_url: str,
        path: str = DEFAULT_USER_INFO_PATH,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the validator.

        Args:
            base_url: Identity service root (e.g., https://api.example.com)
            path: Path of the user info endpoint
            timeout: Request timeout in seconds
            client: Optional shared AsyncClient; one is opened per call otherwise
        """
        self.url = base_url.rstrip("/") + path
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_config(
        cls, config: AuthConfig, client: Optional[httpx.AsyncClient] = None
    ) -> "HttpIdentityValidator":
        return cls(
            config.api_base_url,
            path=config.user_info_path,
            timeout=config.request_timeout,
            client=client,
        )

    async def fetch_identity(self, credential: str) -> IdentityResponse:
        """
        Look up the user owning a credential.

        Args:
            credential: API key sent as X-API-Key

        Returns:
            IdentityResponse with user_id set on 2xx

        Raises:
            httpx.HTTPError: Transport failure
            IdentityPayloadError: 2xx body without a user id
        """
        headers = {
            "Content-Type": "application/json",
            "X-API-Key": credential,
        }

        if self._client is not None:
            response = await self._client.get(self.url, headers=headers, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.url, headers=headers)

        if not response.is_success:
            logger.debug(f"Identity endpoint returned {response.status_code}")
            return IdentityResponse(
                ok=False,
                status_code=response.status_code,
                status_text=response.reason_phrase,
            )

        try:
            payload = UserInfoPayload.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise IdentityPayloadError(f"Unexpected identity response: {e}") from e

        return IdentityResponse(
            ok=True,
            status_code=response.status_code,
            status_text=response.reason_phrase,
            user_id=payload.user_id,
        )
