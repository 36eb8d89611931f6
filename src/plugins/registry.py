"""
Resource Registry - Discovery and registration of resource plugins.

This module provides the central registry mapping resource type names
(``<provider>_<resource>``) to resource plugin classes.
"""

import logging
from importlib.metadata import entry_points
from typing import Dict, List, Optional, Type

from plugins.resources.base import ResourcePlugin
from validation import validate_config_schema

logger = logging.getLogger(__name__)

PROVIDER_TYPE_NAME = "pterodactyl"


class ResourceRegistry:
    """
    Central registry for resource plugins.

    Plugins are registered as classes; instances are built per provider
    configuration since each one is bound to a client.
    """

    def __init__(self, provider_type_name: str = PROVIDER_TYPE_NAME):
        self.provider_type_name = provider_type_name
        # Registered plugin classes keyed by full resource type name
        self._resources: Dict[str, Type[ResourcePlugin]] = {}

    def type_name_for(self, plugin_class: Type[ResourcePlugin]) -> str:
        """Full resource type name for a plugin class."""
        return f"{self.provider_type_name}_{plugin_class.name}"

    def register_resource(self, plugin_class: Type[ResourcePlugin]) -> str:
        """
        Register a resource plugin class.

        Args:
            plugin_class: The ResourcePlugin subclass to register

        Returns:
            The resource type name it was registered under.

        Raises:
            ValueError: If the class does not declare a name or its
                configuration schema is not valid JSON Schema
        """
        if not plugin_class.name:
            raise ValueError(
                f"Resource plugin {plugin_class.__name__} does not declare a name"
            )

        valid, error = validate_config_schema(plugin_class.config_schema())
        if not valid:
            raise ValueError(f"Resource plugin {plugin_class.__name__}: {error}")

        type_name = self.type_name_for(plugin_class)
        if type_name in self._resources:
            logger.warning(f"Overwriting existing resource plugin: {type_name}")

        self._resources[type_name] = plugin_class
        logger.info(f"Registered resource plugin: {type_name}")
        return type_name

    def get_resource_class(self, type_name: str) -> Type[ResourcePlugin]:
        """
        Get the plugin class for a resource type.

        Raises:
            ValueError: If the type name is not registered
        """
        if type_name not in self._resources:
            available = ", ".join(self._resources.keys()) or "none"
            raise ValueError(
                f"Unknown resource type: {type_name}. Available types: {available}"
            )
        return self._resources[type_name]

    def has_resource(self, type_name: str) -> bool:
        """Check if a resource type is registered."""
        return type_name in self._resources

    def list_resources(self) -> List[str]:
        """List all registered resource type names."""
        return list(self._resources.keys())


# Global registry instance
_registry: Optional[ResourceRegistry] = None


def get_registry() -> ResourceRegistry:
    """Get the global resource registry singleton."""
    global _registry
    if _registry is None:
        _registry = ResourceRegistry()
    return _registry


def reset_registry() -> None:
    """Reset the global registry (mainly for testing)."""
    global _registry
    _registry = None


def register_builtin_resources() -> None:
    """
    Register the built-in resources and discover extra resource plugins
    via entry points.
    """
    registry = get_registry()

    from plugins.resources.user import UserResource

    registry.register_resource(UserResource)

    discovered = entry_points(group="pterodactyl.resources")
    for ep in discovered:
        try:
            registry.register_resource(ep.load())
        except Exception as e:
            logger.warning(f"Could not load resource plugin {ep.name}: {e}")
