"""
Base classes for transfer sessions.

This module defines the abstract session every protocol implementation
follows, together with the result structure returned by uploads.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union
import logging
import posixpath

from ..core.exceptions import TransferError
from ..models.config import Protocol, SessionOptions, TransferMode, TransferOptions
from ..utils.helpers import format_bytes

logger = logging.getLogger(__name__)

# Extensions uploaded as text when the transfer mode is automatic
TEXT_EXTENSIONS = {
    '.txt', '.csv', '.htm', '.html', '.xml', '.json', '.log', '.md', '.sql', '.tsv'
}


class TransferStatus(str, Enum):
    """Status of a transfer operation."""
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass
class TransferResult:
    """Result of an upload."""
    success: bool
    status: TransferStatus
    local_path: str
    remote_path: str
    bytes_transferred: int = 0
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def elapsed_time(self) -> Optional[float]:
        """Elapsed time in seconds."""
        if not self.finished_at:
            return None
        return (self.finished_at - self.started_at).total_seconds()


class TransferSession(ABC):
    """
    Abstract base class for an open connection to a file server.

    A session is opened once, used for one or more uploads and closed.
    Sessions are context managers: leaving the ``with`` block closes them.
    """

    PROTOCOLS: List[Protocol] = []

    def __init__(self, options: SessionOptions):
        """
        Initialize the session with connection options.

        Args:
            options: Connection options for the file server
        """
        self.options = options
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def host_label(self) -> str:
        return f"{self.options.host_name}:{self.options.port_number}"

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the session is connected."""

    @abstractmethod
    def open(self) -> "TransferSession":
        """
        Connect and authenticate.

        Returns:
            The session itself

        Raises:
            ConnectionError: If the server cannot be reached or refuses the login
        """

    @abstractmethod
    def close(self) -> None:
        """Close the connection. Closing a closed session does nothing."""

    @abstractmethod
    def exists(self, remote_path: str) -> bool:
        """Check whether a remote file exists."""

    @abstractmethod
    def make_directories(self, remote_dir: str) -> None:
        """Create a remote directory and its missing parents."""

    @abstractmethod
    def _upload(self, local_path: Path, remote_path: str, transfer_mode: TransferMode) -> int:
        """Send the file content, returning the number of bytes sent."""

    def put_file(
        self,
        local_path: Union[str, Path],
        remote_path: str,
        options: Optional[TransferOptions] = None
    ) -> TransferResult:
        """
        Upload a single local file.

        Args:
            local_path: Local file to upload
            remote_path: Full remote path of the uploaded file
            options: Transfer options, overwriting by default

        Returns:
            TransferResult with operation details

        Raises:
            TransferError: If the upload cannot be performed
        """
        options = options or TransferOptions()
        source = Path(local_path)
        remote_path = remote_path.replace('\\', '/')

        if not source.is_file():
            raise TransferError(
                f"Source file not found: {source}",
                details={'local_path': str(source)}
            )
        if not self.is_open:
            raise TransferError(f"Session to {self.host_label} is not open")

        result = TransferResult(
            success=False,
            status=TransferStatus.PENDING,
            local_path=str(source),
            remote_path=remote_path,
        )

        try:
            if not options.overwrite and self.exists(remote_path):
                raise TransferError(
                    f"Remote file already exists: {remote_path}",
                    details={'remote_path': remote_path}
                )

            remote_dir = posixpath.dirname(remote_path)
            if options.create_directories and remote_dir not in ('', '/'):
                self.make_directories(remote_dir)

            mode = self.resolve_transfer_mode(source, options.transfer_mode)
            result.bytes_transferred = self._upload(source, remote_path, mode)
        except TransferError:
            raise
        except Exception as e:
            self.logger.error(f"Upload of {source} to {remote_path} failed: {e}")
            raise TransferError(
                f"Failed to upload '{source.name}' to '{remote_path}': {e}",
                details={'local_path': str(source), 'remote_path': remote_path}
            ) from e

        result.success = True
        result.status = TransferStatus.COMPLETED
        result.finished_at = datetime.now()
        self.logger.info(
            f"Uploaded {source} to {self.host_label}{remote_path} "
            f"({format_bytes(result.bytes_transferred)})"
        )
        return result

    @staticmethod
    def resolve_transfer_mode(source: Path, mode: TransferMode) -> TransferMode:
        """Pick binary or ascii for an automatic transfer mode."""
        if mode != TransferMode.AUTOMATIC:
            return mode
        if source.suffix.lower() in TEXT_EXTENSIONS:
            return TransferMode.ASCII
        return TransferMode.BINARY

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
