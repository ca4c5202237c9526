"""
SFTP and SCP transfer sessions using paramiko.

Both sessions share the SSH connection handling: password or agent/key
authentication and host key verification against known_hosts, an expected
fingerprint, or (when explicitly allowed) any key.
"""

import base64
import hashlib
import posixpath
import shlex
import stat
from pathlib import Path
from typing import Optional, Set, Tuple
import logging

import paramiko
from paramiko import SSHClient, SFTPClient, AutoAddPolicy, RejectPolicy

from ..base import TransferSession
from ..factory import register_session_type
from ...core.exceptions import ConnectionError, TransferError
from ...models.config import Protocol, SessionOptions, TransferMode

logger = logging.getLogger(__name__)


def key_fingerprints(key: paramiko.PKey) -> Set[str]:
    """Return the MD5 (colon separated) and SHA256 fingerprints of a host key."""
    raw = key.asbytes()
    md5 = hashlib.md5(raw).hexdigest()
    sha256 = base64.b64encode(hashlib.sha256(raw).digest()).decode('ascii').rstrip('=')
    return {
        ":".join(md5[i:i + 2] for i in range(0, len(md5), 2)),
        f"SHA256:{sha256}",
        sha256,
    }


def fingerprint_matches(key: paramiko.PKey, expected: str) -> bool:
    """
    Compare a host key with an expected fingerprint.

    The expected value may carry the key type and size in front of the
    fingerprint, e.g. ``ssh-rsa 2048 9d:34:41:...``.
    """
    if not expected or not expected.strip():
        return False
    token = expected.strip().split()[-1].rstrip('=')
    if token.lower().startswith('md5:'):
        token = token[4:]
    candidates = key_fingerprints(key)
    return token in candidates or token.lower() in candidates


class FingerprintPolicy(paramiko.MissingHostKeyPolicy):
    """Accept an unknown host key only if it matches the configured fingerprint."""

    def __init__(self, expected_fingerprint: str):
        self.expected_fingerprint = expected_fingerprint

    def missing_host_key(self, client, hostname, key):
        if not fingerprint_matches(key, self.expected_fingerprint):
            raise paramiko.SSHException(
                f"Host key for {hostname} does not match the expected fingerprint "
                f"{self.expected_fingerprint}"
            )
        client.get_host_keys().add(hostname, key.get_name(), key)


class SshSession(TransferSession):
    """Shared SSH connection handling for SFTP and SCP."""

    def __init__(self, options: SessionOptions):
        super().__init__(options)
        self._ssh_client: Optional[SSHClient] = None

    @property
    def is_open(self) -> bool:
        return self._ssh_client is not None

    def _host_key_policy(self) -> paramiko.MissingHostKeyPolicy:
        if self.options.ssh_host_key_fingerprint:
            return FingerprintPolicy(self.options.ssh_host_key_fingerprint)
        if self.options.accept_any_certificate:
            return AutoAddPolicy()
        return RejectPolicy()

    def _connect(self) -> SSHClient:
        ssh_client = SSHClient()
        ssh_client.load_system_host_keys()
        ssh_client.set_missing_host_key_policy(self._host_key_policy())

        connect_params = {
            'hostname': self.options.host_name,
            'port': self.options.port_number,
            'username': self.options.user_name or None,
            'timeout': self.options.timeout,
            'look_for_keys': not self.options.password,
            'allow_agent': not self.options.password,
        }
        if self.options.password:
            connect_params['password'] = self.options.password

        try:
            ssh_client.connect(**connect_params)
        except Exception:
            ssh_client.close()
            raise
        return ssh_client

    def _after_connect(self) -> None:
        """Hook for protocol specific setup once SSH is connected."""

    def open(self) -> "SshSession":
        """Establish the SSH connection."""
        if self._ssh_client:
            return self

        try:
            self._ssh_client = self._connect()
            self._after_connect()
        except Exception as e:
            self.logger.error(f"SSH connection to {self.host_label} failed: {e}")
            self.close()
            raise ConnectionError(
                f"Unable to connect to '{self.host_label}': {e}",
                details={'protocol': self.PROTOCOLS[0].value if self.PROTOCOLS else 'ssh'}
            ) from e

        self.logger.info(f"SSH connection established to {self.host_label}")
        return self

    def close(self) -> None:
        """Close the SSH connection."""
        if self._ssh_client:
            self._ssh_client.close()
            self._ssh_client = None
            self.logger.debug("SSH connection closed")


@register_session_type(Protocol.SFTP)
class SftpSession(SshSession):
    """SFTP session using paramiko's SFTPClient."""

    def __init__(self, options: SessionOptions):
        super().__init__(options)
        self._sftp_client: Optional[SFTPClient] = None

    def _after_connect(self) -> None:
        self._sftp_client = self._ssh_client.open_sftp()

    def close(self) -> None:
        if self._sftp_client:
            self._sftp_client.close()
            self._sftp_client = None
        super().close()

    def exists(self, remote_path: str) -> bool:
        try:
            self._sftp_client.stat(remote_path)
            return True
        except FileNotFoundError:
            return False

    def make_directories(self, remote_dir: str) -> None:
        """Create remote directories with SFTP mkdir."""
        current_path = '/' if remote_dir.startswith('/') else ''

        for part in remote_dir.strip('/').split('/'):
            if not part:
                continue
            current_path = posixpath.join(current_path, part) if current_path else part

            try:
                attributes = self._sftp_client.stat(current_path)
            except FileNotFoundError:
                self._sftp_client.mkdir(current_path)
                continue

            if not stat.S_ISDIR(attributes.st_mode):
                raise TransferError(f"Remote path is not a directory: {current_path}")

    def _upload(self, local_path: Path, remote_path: str, transfer_mode: TransferMode) -> int:
        attributes = self._sftp_client.put(str(local_path), remote_path)
        return attributes.st_size if attributes and attributes.st_size is not None else local_path.stat().st_size


@register_session_type(Protocol.SCP)
class ScpSession(SshSession):
    """SCP session speaking the ``scp -t`` sink protocol over an exec channel."""

    CHUNK_SIZE = 32768

    def _exec(self, command: str) -> Tuple[int, str]:
        _stdin, stdout, stderr = self._ssh_client.exec_command(command, timeout=self.options.timeout)
        status = stdout.channel.recv_exit_status()
        return status, stderr.read().decode('utf-8', errors='replace').strip()

    def exists(self, remote_path: str) -> bool:
        status, _ = self._exec(f"test -f {shlex.quote(remote_path)}")
        return status == 0

    def make_directories(self, remote_dir: str) -> None:
        status, error = self._exec(f"mkdir -p {shlex.quote(remote_dir)}")
        if status != 0:
            raise TransferError(f"Unable to create remote directory {remote_dir}: {error}")

    @staticmethod
    def _check_ack(channel) -> None:
        response = channel.recv(1)
        if response == b'\x00':
            return
        message = b''
        if response in (b'\x01', b'\x02'):
            while not message.endswith(b'\n'):
                chunk = channel.recv(1)
                if not chunk:
                    break
                message += chunk
        raise TransferError(f"SCP error: {message.decode('utf-8', errors='replace').strip() or response!r}")

    def _upload(self, local_path: Path, remote_path: str, transfer_mode: TransferMode) -> int:
        transport = self._ssh_client.get_transport()
        channel = transport.open_session()
        file_size = local_path.stat().st_size
        transferred = 0

        try:
            channel.settimeout(self.options.timeout)
            channel.exec_command(f"scp -t {shlex.quote(remote_path)}")
            self._check_ack(channel)

            file_mode = oct(local_path.stat().st_mode)[-4:]
            remote_name = posixpath.basename(remote_path)
            channel.sendall(f"C{file_mode} {file_size} {remote_name}\n".encode('utf-8'))
            self._check_ack(channel)

            with open(local_path, 'rb') as f:
                for chunk in iter(lambda: f.read(self.CHUNK_SIZE), b''):
                    channel.sendall(chunk)
                    transferred += len(chunk)

            # End of file marker
            channel.sendall(b'\x00')
            self._check_ack(channel)
        finally:
            channel.close()

        return transferred
