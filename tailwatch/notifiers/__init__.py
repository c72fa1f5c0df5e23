"""
Built-in notification sinks.

Every module in this package is imported on first use so that its
``@register_notifier`` decorators run. Exports that are not Notifier
subclasses, or that never registered a type name, are reported and left out.
"""

import importlib
import inspect
import pkgutil

from tailwatch.core import Notifier
from tailwatch.logging_config import get_logger
from tailwatch.registry import get_registry

logger = get_logger(__name__)

__all__: list[str] = []


def _registered_classes() -> set[type[Notifier]]:
    registry = get_registry()
    return {registry.get_notifier(name) for name in registry.list_notifiers()}


def _load_builtin_notifiers() -> None:
    for module_info in pkgutil.iter_modules(__path__):
        module = importlib.import_module(f"{__name__}.{module_info.name}")
        registered = _registered_classes()

        for name in getattr(module, "__all__", []):
            if name in __all__:
                logger.warning(
                    "Notifier '%s' from module '%s' shadows an earlier export - skipping",
                    name,
                    module_info.name
                )
                continue

            cls = getattr(module, name)
            if not inspect.isclass(cls) or not issubclass(cls, Notifier):
                logger.warning(
                    "Export '%s' in module '%s' is not a Notifier subclass - skipping",
                    name,
                    module_info.name
                )
                continue

            if cls not in registered:
                logger.warning(
                    "Notifier '%s' in module '%s' has no @register_notifier type name",
                    name,
                    module_info.name
                )

            globals()[name] = cls
            __all__.append(name)


_load_builtin_notifiers()
