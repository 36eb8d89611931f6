"""
Plugin system for the Pterodactyl provider.

This package provides the resource plugins, the panel API clients they talk
to, and the registry that maps resource type names to plugins.
"""

from plugins.base import (
    Diagnostic,
    Diagnostics,
    LifecycleOperation,
    ResourceResponse,
    UserModel,
)
from plugins.registry import ResourceRegistry, get_registry

__all__ = [
    "Diagnostic",
    "Diagnostics",
    "LifecycleOperation",
    "ResourceResponse",
    "UserModel",
    "ResourceRegistry",
    "get_registry",
]
