"""Password encryption for device files."""

import base64
import logging
from functools import lru_cache
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..core.exceptions import SecurityError

logger = logging.getLogger(__name__)

# Used only when no passphrase is configured. Set REPORT_DELIVERY_PASSWORD_KEY
# (or password_key in the settings file) for any shared deployment.
DEVELOPMENT_PASSPHRASE = "report-delivery-development-key"

KEY_SALT = b'report_delivery_password_salt'
KEY_ITERATIONS = 100000


class PasswordCipher:
    """Encrypts and decrypts stored passwords with a key derived from a passphrase."""

    def __init__(self, passphrase: str, salt: bytes = KEY_SALT):
        """Initialize the cipher.

        Args:
            passphrase: Application level secret the key is derived from
            salt: Salt for key derivation
        """
        if not passphrase:
            raise SecurityError("A passphrase is required to encrypt passwords")
        self._fernet = Fernet(self.derive_key(passphrase, salt))

    @staticmethod
    def derive_key(passphrase: str, salt: bytes = KEY_SALT) -> bytes:
        """Derive a Fernet key from a passphrase using PBKDF2.

        Args:
            passphrase: Passphrase to derive the key from
            salt: Salt for key derivation

        Returns:
            Base64-encoded Fernet key
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=KEY_ITERATIONS,
        )
        return base64.urlsafe_b64encode(kdf.derive(passphrase.encode('utf-8')))

    def encrypt(self, clear_text: Optional[str]) -> str:
        """Encrypt a clear text password.

        Args:
            clear_text: Password to encrypt

        Returns:
            Encrypted token as text, empty string for an empty password
        """
        if not clear_text:
            return ""
        try:
            return self._fernet.encrypt(clear_text.encode('utf-8')).decode('ascii')
        except Exception as e:
            logger.error(f"Password encryption failed: {e}")
            raise SecurityError(f"Failed to encrypt password: {e}")

    def decrypt(self, token: Optional[str]) -> str:
        """Decrypt an encrypted password.

        Args:
            token: Encrypted token produced by encrypt()

        Returns:
            Clear text password, empty string for an empty token
        """
        if not token:
            return ""
        try:
            return self._fernet.decrypt(token.encode('ascii')).decode('utf-8')
        except InvalidToken:
            logger.error("Password decryption failed: invalid token")
            raise SecurityError("Failed to decrypt password: invalid or corrupted token")
        except Exception as e:
            logger.error(f"Password decryption failed: {e}")
            raise SecurityError(f"Failed to decrypt password: {e}")


@lru_cache(maxsize=None)
def get_password_cipher(passphrase: Optional[str] = None) -> PasswordCipher:
    """Return a shared cipher for a passphrase.

    Without an explicit passphrase the one from the application settings
    is used. An empty passphrase falls back to the development passphrase.

    Raises:
        SecurityError: If the settings holding the passphrase cannot be loaded
    """
    if passphrase is None:
        from ..models.config import load_settings
        try:
            passphrase = load_settings().password_key
        except Exception as e:
            logger.error(f"Unable to load the password key settings: {e}")
            raise SecurityError(f"Unable to load the password key settings: {e}") from e
    if not passphrase:
        logger.warning(
            "No password key configured, using the development key. "
            "Set REPORT_DELIVERY_PASSWORD_KEY to protect stored passwords."
        )
        passphrase = DEVELOPMENT_PASSPHRASE
    return PasswordCipher(passphrase)
