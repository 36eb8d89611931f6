"""
Resource Plugin Base - Abstract interface for resource plugins.

Resource plugins own the reconciliation rules for one resource type. The host
issues one lifecycle command at a time; a plugin performs a single remote
call per command and answers with the new authoritative record or with
diagnostics. Plugins keep no state between calls apart from the client they
were constructed with.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from plugins.base import Diagnostics, ResourceResponse, UserModel


class PlanAction(Enum):
    """Lifecycle call a plan resolves to."""

    NOOP = "no-op"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class PlanResult:
    """Outcome of planning one resource instance."""

    action: PlanAction = PlanAction.NOOP
    planned: Optional[UserModel] = None
    changed: List[str] = field(default_factory=list)


class ResourcePlugin(ABC):
    """
    Abstract base class for resource plugins.

    Subclasses set ``name``, the suffix appended to the provider type name
    to form the resource type name (e.g. ``user`` -> ``pterodactyl_user``).
    """

    name: str = ""

    @classmethod
    @abstractmethod
    def configure(
        cls, provider_data: Any
    ) -> Tuple[Optional["ResourcePlugin"], Diagnostics]:
        """
        Build a plugin bound to the provider's client.

        Args:
            provider_data: The opaque handle produced by provider configuration,
                or None when the provider is not configured yet.

        Returns:
            Tuple of (plugin or None, diagnostics).
        """
        pass

    @classmethod
    @abstractmethod
    def schema(cls) -> Dict[str, Any]:
        """Attribute schema of the resource."""
        pass

    @classmethod
    @abstractmethod
    def config_schema(cls) -> Dict[str, Any]:
        """JSON Schema for the user-declared configuration."""
        pass

    @abstractmethod
    def plan(
        self, prior: Optional[UserModel], config: Optional[Dict[str, Any]]
    ) -> PlanResult:
        """
        Decide which lifecycle call converges prior state to the config.

        Args:
            prior: The recorded state, or None if the resource is absent.
            config: The declared attributes, or None if no longer declared.
        """
        pass

    @abstractmethod
    async def create(self, plan: UserModel) -> ResourceResponse:
        pass

    @abstractmethod
    async def read(self, state: UserModel) -> ResourceResponse:
        pass

    @abstractmethod
    async def update(self, plan: UserModel) -> ResourceResponse:
        pass

    @abstractmethod
    async def delete(self, state: UserModel) -> ResourceResponse:
        pass

    @abstractmethod
    async def import_state(self, import_id: str) -> ResourceResponse:
        pass
