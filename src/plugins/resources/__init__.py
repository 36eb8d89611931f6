"""
Resource plugins package.

Resource plugins own the reconciliation rules for one resource type each.
Third-party resources are discovered via Python entry points
(group: 'pterodactyl.resources').
"""

from plugins.resources.base import PlanAction, PlanResult, ResourcePlugin
from plugins.resources.user import UserResource

__all__ = ["PlanAction", "PlanResult", "ResourcePlugin", "UserResource"]
