"""
Plugin initialization for Tailwatch.

Importing this module registers all built-in notifiers with the registry.
"""

# Import the notifiers package to trigger registration decorators
# pylint: disable=unused-import
# ruff: noqa: F401
from tailwatch import notifiers
from tailwatch.registry import build_notifiers, create_notifier, get_registry

__all__ = [
    "build_notifiers",
    "create_notifier",
    "get_registry",
]
