"""Authentication interfaces following Black Box Design principles."""
from dataclasses import dataclass
from typing import Optional, Protocol

from ..storage import LoadResult


class CredentialStore(Protocol):
    """Protocol for durable credential storage - allows swappable backends."""

    async def load(self) -> LoadResult:
        """
        Load everything stored.

        Returns:
            LoadResult whose data may hold "apiKey" and "hasConsented"
        """
        ...

    async def save(self, key: str, value: str) -> None:
        """Persist one string value."""
        ...


@dataclass
class IdentityResponse:
    """Outcome of one request to the identity endpoint."""
    ok: bool
    status_code: int
    status_text: str = ""
    user_id: Optional[str] = None


class IdentityValidator(Protocol):
    """Protocol for the remote identity check."""

    async def fetch_identity(self, credential: str) -> IdentityResponse:
        """
        Ask the identity endpoint who owns a credential.

        Args:
            credential: Well-formed API key

        Returns:
            IdentityResponse; transport failures raise instead
        """
        ...
