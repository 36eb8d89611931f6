"""
Provider - Host-facing entry point for lifecycle commands.

The host configures the provider once, then sends tagged lifecycle commands.
Each command is routed to the resource plugin registered for its type name
and answered with a ResourceResponse; nothing here raises for remote or
configuration failures, they come back as diagnostics.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from config import PanelConfig
from plugins.base import (
    Command,
    Diagnostics,
    LifecycleOperation,
    ResourceResponse,
    UserModel,
)
from plugins.clients.pterodactyl import PterodactylClient
from plugins.registry import ResourceRegistry, get_registry
from plugins.resources.base import PlanResult, ResourcePlugin
from validation import validate_config_against_schema

logger = logging.getLogger(__name__)


class PterodactylProvider:
    """Routes lifecycle commands to configured resource plugins."""

    def __init__(self, registry: Optional[ResourceRegistry] = None):
        self.registry = registry or get_registry()
        # Handed to every resource plugin on configure; None until configured.
        self.provider_data: Any = None

    @property
    def type_name(self) -> str:
        return self.registry.provider_type_name

    def configure(self, panel: PanelConfig) -> Diagnostics:
        """
        Build the panel client shared by all resources of this provider.

        Args:
            panel: Panel connection settings.

        Returns:
            Diagnostics; an error if the URL or API key is missing.
        """
        diagnostics = Diagnostics()
        missing = [name for name in ("url", "api_key") if not getattr(panel, name)]
        if missing:
            diagnostics.add_error(
                "Missing Pterodactyl API configuration",
                f"The provider cannot create the panel client: "
                f"{', '.join(missing)} not set.",
            )
            return diagnostics

        self.provider_data = PterodactylClient(
            base_url=panel.url, api_key=panel.api_key, timeout=panel.timeout
        )
        logger.info(f"Configured provider for panel {panel.url}")
        return diagnostics

    def resource(
        self, type_name: str
    ) -> Tuple[Optional[ResourcePlugin], Diagnostics]:
        """Get a resource plugin bound to this provider's client."""
        diagnostics = Diagnostics()
        if not self.registry.has_resource(type_name):
            available = ", ".join(self.registry.list_resources()) or "none"
            diagnostics.add_error(
                "Unknown resource type",
                f"Resource type {type_name!r} is not supported by this provider. "
                f"Available types: {available}",
            )
            return None, diagnostics

        plugin_class = self.registry.get_resource_class(type_name)
        plugin, diagnostics = plugin_class.configure(self.provider_data)
        if plugin is None and not diagnostics.has_error():
            diagnostics.add_error(
                "Provider not configured",
                f"Resource type {type_name!r} needs a configured provider.",
            )
        return plugin, diagnostics

    def validate_config(self, type_name: str, config: Dict[str, Any]) -> Diagnostics:
        """Check declared attributes against the resource's schema."""
        diagnostics = Diagnostics()
        plugin_class = self.registry.get_resource_class(type_name)
        valid, error = validate_config_against_schema(
            config, plugin_class.config_schema()
        )
        if not valid:
            diagnostics.add_error("Invalid resource configuration", error)
        return diagnostics

    def plan(
        self,
        type_name: str,
        prior: Optional[UserModel],
        config: Optional[Dict[str, Any]],
    ) -> Tuple[Optional[PlanResult], Diagnostics]:
        """Plan one resource instance without calling the panel."""
        plugin, diagnostics = self.resource(type_name)
        if plugin is None:
            return None, diagnostics

        if config is not None:
            diagnostics.extend(self.validate_config(type_name, config))
            if diagnostics.has_error():
                return None, diagnostics

        return plugin.plan(prior, config), diagnostics

    async def dispatch(self, command: Command) -> ResourceResponse:
        """
        Execute one lifecycle command.

        Args:
            command: A Create/Read/Update/Delete/Import command.

        Returns:
            The plugin's ResourceResponse, or a response carrying only
            diagnostics when the command never reached the plugin.
        """
        operation = command.operation
        plugin, diagnostics = self.resource(command.type_name)
        if plugin is None:
            return ResourceResponse(operation=operation, diagnostics=diagnostics)

        if operation in (LifecycleOperation.CREATE, LifecycleOperation.UPDATE):
            diagnostics.extend(
                self.validate_config(command.type_name, command.plan.declared())
            )
            if diagnostics.has_error():
                return ResourceResponse(operation=operation, diagnostics=diagnostics)

        logger.debug(f"Dispatching {operation.value} for {command.type_name}")

        if operation is LifecycleOperation.CREATE:
            response = await plugin.create(command.plan)
        elif operation is LifecycleOperation.READ:
            response = await plugin.read(command.state)
        elif operation is LifecycleOperation.UPDATE:
            response = await plugin.update(command.plan)
        elif operation is LifecycleOperation.DELETE:
            response = await plugin.delete(command.state)
        else:
            response = await plugin.import_state(command.import_id)

        response.diagnostics[:0] = diagnostics
        return response
