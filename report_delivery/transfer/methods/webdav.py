"""
WebDAV transfer session using httpx.

Uploads are plain HTTP PUT requests; directories are created with MKCOL
and the connection is verified with a depth 0 PROPFIND on open.
"""

from pathlib import Path
from typing import Optional
from urllib.parse import quote
import logging

import httpx

from ..base import TransferSession
from ..factory import register_session_type
from ...core.exceptions import ConnectionError, TransferError
from ...models.config import Protocol, SessionOptions, TransferMode

logger = logging.getLogger(__name__)


@register_session_type(Protocol.WEBDAV)
class WebDavSession(TransferSession):
    """WebDAV session over HTTP or HTTPS (webdav_secure)."""

    def __init__(self, options: SessionOptions, transport: Optional[httpx.BaseTransport] = None):
        super().__init__(options)
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    @property
    def base_url(self) -> str:
        scheme = 'https' if self.options.webdav_secure else 'http'
        return f"{scheme}://{self.options.host_name}:{self.options.port_number}"

    @staticmethod
    def _url_path(remote_path: str) -> str:
        return quote('/' + remote_path.lstrip('/'))

    def open(self) -> "WebDavSession":
        """Create the HTTP client and check the server answers WebDAV requests."""
        if self._client:
            return self

        auth = None
        if self.options.user_name:
            auth = (self.options.user_name, self.options.password or '')

        client = httpx.Client(
            base_url=self.base_url,
            auth=auth,
            timeout=self.options.timeout,
            verify=not self.options.accept_any_certificate,
            transport=self._transport,
        )

        try:
            response = client.request('PROPFIND', '/', headers={'Depth': '0'})
            response.raise_for_status()
        except httpx.HTTPError as e:
            client.close()
            self.logger.error(f"WebDAV connection to {self.host_label} failed: {e}")
            raise ConnectionError(
                f"Unable to connect to '{self.host_label}': {e}",
                details={'protocol': 'webdav'}
            ) from e

        self._client = client
        self.logger.info(f"WebDAV connection established to {self.base_url}")
        return self

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None
            self.logger.debug("WebDAV connection closed")

    def exists(self, remote_path: str) -> bool:
        response = self._client.head(self._url_path(remote_path))
        if response.status_code == 404:
            return False
        response.raise_for_status()
        return True

    def make_directories(self, remote_dir: str) -> None:
        """Create collections one level at a time."""
        current_path = ''
        for part in remote_dir.strip('/').split('/'):
            if not part:
                continue
            current_path = f"{current_path}/{part}"
            response = self._client.request('MKCOL', self._url_path(current_path) + '/')
            # 405 Method Not Allowed means the collection already exists
            if response.status_code not in (200, 201, 405):
                raise TransferError(
                    f"Unable to create remote directory {current_path}: "
                    f"HTTP {response.status_code}"
                )

    def _upload(self, local_path: Path, remote_path: str, transfer_mode: TransferMode) -> int:
        headers = {}
        if transfer_mode == TransferMode.ASCII:
            headers['Content-Type'] = 'text/plain; charset=utf-8'
        else:
            headers['Content-Type'] = 'application/octet-stream'

        content = local_path.read_bytes()
        response = self._client.put(self._url_path(remote_path), content=content, headers=headers)
        response.raise_for_status()
        return len(content)
