"""
Factory for creating transfer session instances.

This module provides the SessionFactory class that creates the
session implementation matching the protocol of the session options.
"""

from typing import Dict, Type, List
import logging

from .base import TransferSession
from ..core.exceptions import ConfigurationError
from ..models.config import Protocol, SessionOptions

logger = logging.getLogger(__name__)


class SessionFactory:
    """
    Factory class for creating transfer sessions.

    Session classes register themselves for one or more protocols with the
    register_session_type decorator.
    """

    # Registry of available session classes
    _session_types: Dict[Protocol, Type[TransferSession]] = {}

    @classmethod
    def register_session_type(cls, protocol: Protocol, session_class: Type[TransferSession]) -> None:
        """
        Register a session class for a protocol.

        Args:
            protocol: Protocol handled by the class
            session_class: Session class to register
        """
        cls._session_types[Protocol(protocol)] = session_class
        logger.debug(f"Registered session type for {protocol.value}: {session_class.__name__}")

    @classmethod
    def get_available_protocols(cls) -> List[str]:
        """
        Get the protocols that have a registered session class.

        Returns:
            List of protocol names
        """
        _load_builtin_sessions()
        return [protocol.value for protocol in cls._session_types]

    @classmethod
    def create_session(cls, options: SessionOptions) -> TransferSession:
        """
        Create an unopened session for the options' protocol.

        Args:
            options: Connection options

        Returns:
            Session instance

        Raises:
            ConfigurationError: If no session class handles the protocol
        """
        _load_builtin_sessions()
        session_class = cls._session_types.get(options.protocol)

        if session_class is None:
            available = ", ".join(cls.get_available_protocols())
            raise ConfigurationError(
                f"Unsupported protocol: {options.protocol}. "
                f"Available protocols: {available}"
            )

        logger.debug(f"Creating {session_class.__name__} for {options.host_name}")
        return session_class(options)


def register_session_type(*protocols: Protocol):
    """
    Decorator to register a session class with the factory.

    Args:
        protocols: Protocols handled by the decorated class
    """
    def decorator(cls: Type[TransferSession]) -> Type[TransferSession]:
        for protocol in protocols:
            SessionFactory.register_session_type(protocol, cls)
        cls.PROTOCOLS = list(protocols)
        return cls
    return decorator


def _load_builtin_sessions() -> None:
    # Importing the methods package registers the built-in sessions
    from . import methods  # noqa: F401
