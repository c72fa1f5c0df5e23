"""
Notifier registry and factory for Tailwatch.

Notifier classes register themselves under a type name so that the
``notifiers:`` section of the settings file can refer to them.
"""

from collections.abc import Callable, Iterable
from typing import Any

from tailwatch.config import NotifierConfig
from tailwatch.core import Notifier
from tailwatch.logging_config import get_logger

logger = get_logger(__name__)


class NotifierRegistry:
    """Mapping of notifier type names to implementation classes."""

    def __init__(self) -> None:
        self._notifiers: dict[str, type[Notifier]] = {}

    def register_notifier(self, type_name: str, cls: type[Notifier]) -> None:
        """
        Register a notifier implementation.

        Raises:
            ValueError: If the type name is already taken by another class
        """
        existing = self._notifiers.get(type_name)
        if existing is not None and existing is not cls:
            raise ValueError(
                f"Notifier type '{type_name}' already registered by {existing.__name__}"
            )
        self._notifiers[type_name] = cls

    def get_notifier(self, type_name: str) -> type[Notifier]:
        """Get a notifier class by type name."""
        if type_name not in self._notifiers:
            raise ValueError(f"Unknown notifier type: {type_name}")
        return self._notifiers[type_name]

    def list_notifiers(self) -> list[str]:
        """List registered notifier type names."""
        return sorted(self._notifiers)


# Global registry instance
_registry = NotifierRegistry()


def create_notifier(type_name: str, config: dict[str, Any]) -> Notifier:
    """Create a notifier instance from configuration."""
    cls = _registry.get_notifier(type_name)
    return cls(config)


def build_notifiers(configs: Iterable[NotifierConfig]) -> list[Notifier]:
    """
    Instantiate every configured notifier, in order.

    Raises:
        ValueError: If an entry names an unknown type
    """
    notifiers = []
    for entry in configs:
        notifiers.append(create_notifier(entry.type, entry.config))
        logger.debug("Created %s notifier", entry.type)
    return notifiers


def register_notifier(type_name: str) -> Callable[[type[Notifier]], type[Notifier]]:
    """Decorator to register a notifier class."""
    def decorator(cls: type[Notifier]) -> type[Notifier]:
        _registry.register_notifier(type_name, cls)
        return cls
    return decorator


def get_registry() -> NotifierRegistry:
    """Get the global notifier registry."""
    return _registry
