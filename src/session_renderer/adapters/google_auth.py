"""Google service-account credentials for Sheets and Drive."""

import asyncio
from dataclasses import dataclass, field
from typing import Protocol

from google.auth.transport.requests import Request
from google.oauth2 import service_account

GOOGLE_SCOPES = (
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.file",
)


class TokenProvider(Protocol):
    """Interface for adapters that need a bearer token."""

    async def authorization_headers(self) -> dict[str, str]:
        """Return request headers carrying a valid access token."""


@dataclass
class GoogleServiceAccountAuth:
    """Loads a service-account key and keeps its access token fresh."""

    credentials_file: str
    scopes: tuple[str, ...] = GOOGLE_SCOPES
    _credentials: service_account.Credentials | None = field(
        default=None, init=False, repr=False
    )

    async def authenticate(self) -> None:
        """Load the key file and fetch the first access token."""
        await self._load()

    async def authorization_headers(self) -> dict[str, str]:
        """Return an Authorization header, refreshing an expired token."""
        credentials = self._credentials
        if credentials is None:
            credentials = await self._load()
        elif not credentials.valid:
            await asyncio.to_thread(credentials.refresh, Request())
        return {"Authorization": f"Bearer {credentials.token}"}

    async def _load(self) -> service_account.Credentials:
        credentials = service_account.Credentials.from_service_account_file(
            self.credentials_file, scopes=list(self.scopes)
        )
        await asyncio.to_thread(credentials.refresh, Request())
        self._credentials = credentials
        return credentials
