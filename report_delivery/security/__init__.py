"""Security module for Report Delivery."""

from .encryption import PasswordCipher, get_password_cipher

__all__ = [
    'PasswordCipher',
    'get_password_cipher',
]
