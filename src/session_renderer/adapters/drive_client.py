"""Google Drive upload client."""

import asyncio
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import httpx

from session_renderer.adapters.google_auth import TokenProvider
from session_renderer.domain.publishing import RemoteFile

DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"
# Drive requires chunks in multiples of 256 KiB, except the last one.
DEFAULT_CHUNK_SIZE = 32 * 256 * 1024
_RESUME_INCOMPLETE = 308


class DriveUploadError(RuntimeError):
    """The resumable upload session ended without a file resource."""


@dataclass
class HttpxDriveClient:
    """Streams files into Drive folders through a resumable upload session."""

    auth: TokenProvider
    http_client: httpx.AsyncClient
    upload_url: str = DRIVE_UPLOAD_URL
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @classmethod
    def create(cls, auth: TokenProvider) -> "HttpxDriveClient":
        """Create a Drive client with a managed httpx session."""
        return cls(auth=auth, http_client=httpx.AsyncClient())

    async def upload(
        self, local_path: Path, display_name: str, destination_id: str
    ) -> RemoteFile:
        """Upload a file into `destination_id` and return its Drive reference."""
        mime_type = mimetypes.guess_type(local_path.name)[0] or "application/octet-stream"
        total = local_path.stat().st_size
        session_url = await self._start_session(
            display_name, destination_id, mime_type, total
        )
        with local_path.open("rb") as media:
            data = await self._send_chunks(session_url, media, total)
        return RemoteFile(
            remote_id=data["id"],
            name=data.get("name", display_name),
            link=data.get("webViewLink"),
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _start_session(
        self, display_name: str, destination_id: str, mime_type: str, total: int
    ) -> str:
        """Create the upload session and return its URL."""
        headers = await self.auth.authorization_headers()
        headers["X-Upload-Content-Type"] = mime_type
        headers["X-Upload-Content-Length"] = str(total)
        response = await self.http_client.post(
            self.upload_url,
            params={
                "uploadType": "resumable",
                "fields": "id,name,webViewLink",
                "supportsAllDrives": "true",
            },
            headers=headers,
            json={"name": display_name, "parents": [destination_id]},
            timeout=30,
        )
        response.raise_for_status()
        location = response.headers.get("Location")
        if not location:
            raise DriveUploadError("Drive did not return an upload session URL")
        return location

    async def _send_chunks(
        self, session_url: str, media: BinaryIO, total: int
    ) -> dict[str, object]:
        """PUT the file chunk by chunk, resuming from the offset Drive reports."""
        offset = 0
        while True:
            await asyncio.to_thread(media.seek, offset)
            chunk = await asyncio.to_thread(media.read, self.chunk_size)
            headers = await self.auth.authorization_headers()
            if total == 0:
                headers["Content-Range"] = "bytes */0"
            else:
                end = offset + len(chunk) - 1
                headers["Content-Range"] = f"bytes {offset}-{end}/{total}"
            response = await self.http_client.put(
                session_url, headers=headers, content=chunk, timeout=300
            )
            if response.status_code != _RESUME_INCOMPLETE:
                response.raise_for_status()
                return response.json()
            offset = _next_offset(response.headers.get("Range"))
            if offset >= total:
                raise DriveUploadError("Drive acknowledged all bytes but sent no file")


def _next_offset(range_header: str | None) -> int:
    """Offset after the last byte Drive has stored (`bytes=0-1234`)."""
    if not range_header:
        return 0
    _, _, last = range_header.partition("-")
    return int(last) + 1
