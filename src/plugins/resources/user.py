"""
User Resource - Reconciles a Pterodactyl panel user.

The panel is the source of truth: reads overwrite the declared fields with
what the panel reports. ``id`` and ``created_at`` are assigned once by the
panel and carried over from state afterwards.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from plugins.base import (
    Diagnostics,
    LifecycleOperation,
    ResourceResponse,
    UserModel,
)
from plugins.clients.base import PanelAPIError, PanelClient
from plugins.clients.models import PartialUser
from plugins.resources.base import PlanAction, PlanResult, ResourcePlugin

logger = logging.getLogger(__name__)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as RFC 3339 with second precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.replace(microsecond=0)
    if value.utcoffset().total_seconds() == 0:
        return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    return value.isoformat()


def _partial_user(model: UserModel) -> PartialUser:
    return PartialUser(**model.declared())


class UserResource(ResourcePlugin):
    """Resource plugin for ``pterodactyl_user``."""

    name = "user"

    def __init__(self, client: PanelClient):
        self.client = client

    @classmethod
    def configure(
        cls, provider_data: Any
    ) -> Tuple[Optional["UserResource"], Diagnostics]:
        diagnostics = Diagnostics()

        # The host may ask for a resource before the provider is configured.
        if provider_data is None:
            return None, diagnostics

        if not isinstance(provider_data, PanelClient):
            diagnostics.add_error(
                "Unexpected Resource Configure Type",
                f"Expected PanelClient, got: {type(provider_data).__name__}. "
                "Please report this issue to the provider developers.",
            )
            return None, diagnostics

        return cls(provider_data), diagnostics

    @classmethod
    def schema(cls) -> Dict[str, Any]:
        return {
            "description": (
                "The Pterodactyl user resource allows Terraform to manage users "
                "in the Pterodactyl Panel API."
            ),
            "attributes": {
                "id": {
                    "type": "integer",
                    "description": "The ID of the user.",
                    "computed": True,
                    "use_state_for_unknown": True,
                },
                "username": {
                    "type": "string",
                    "description": "The username of the user.",
                    "required": True,
                },
                "email": {
                    "type": "string",
                    "description": "The email of the user.",
                    "required": True,
                },
                "first_name": {
                    "type": "string",
                    "description": "The first name of the user.",
                    "required": True,
                },
                "last_name": {
                    "type": "string",
                    "description": "The last name of the user.",
                    "required": True,
                },
                "created_at": {
                    "type": "string",
                    "description": "The creation date of the user.",
                    "computed": True,
                    "use_state_for_unknown": True,
                },
                "updated_at": {
                    "type": "string",
                    "description": "The last update date of the user.",
                    "computed": True,
                },
            },
        }

    @classmethod
    def config_schema(cls) -> Dict[str, Any]:
        attributes = cls.schema()["attributes"]
        declared = {
            name: attr for name, attr in attributes.items() if attr.get("required")
        }
        properties = {
            name: {
                "type": attr["type"],
                "description": attr["description"],
                "minLength": 1,
            }
            for name, attr in declared.items()
        }
        properties["email"]["format"] = "email"
        return {
            "type": "object",
            "required": list(declared),
            "properties": properties,
            "additionalProperties": False,
        }

    def plan(
        self, prior: Optional[UserModel], config: Optional[Dict[str, Any]]
    ) -> PlanResult:
        if config is None:
            if prior is None:
                return PlanResult()
            return PlanResult(action=PlanAction.DELETE, changed=list(prior.declared()))

        desired = UserModel.from_dict(config)
        if prior is None:
            return PlanResult(
                action=PlanAction.CREATE,
                planned=UserModel(**desired.declared()),
                changed=list(desired.declared()),
            )

        prior_fields = prior.declared()
        changed = [
            name
            for name, value in desired.declared().items()
            if prior_fields[name] != value
        ]
        if not changed:
            return PlanResult(planned=prior)

        planned = UserModel(
            id=prior.id,
            created_at=prior.created_at,
            updated_at=None,
            **desired.declared(),
        )
        return PlanResult(action=PlanAction.UPDATE, planned=planned, changed=changed)

    async def create(self, plan: UserModel) -> ResourceResponse:
        response = ResourceResponse(operation=LifecycleOperation.CREATE)

        try:
            user = await self.client.create_user(_partial_user(plan))
        except PanelAPIError as e:
            logger.error(f"Failed to create user {plan.username}: {e}")
            response.diagnostics.add_error(
                "Error creating user",
                f"Could not create user, unexpected error: {e}",
            )
            return response

        # updated_at is the local clock until the next read returns the panel's.
        response.state = UserModel(
            id=user.id,
            created_at=format_timestamp(user.created_at),
            updated_at=format_timestamp(datetime.now(timezone.utc)),
            **plan.declared(),
        )
        logger.info(f"Created user {plan.username} with ID {user.id}")
        return response

    async def read(self, state: UserModel) -> ResourceResponse:
        response = ResourceResponse(operation=LifecycleOperation.READ)

        try:
            user = await self.client.get_user(state.id)
        except PanelAPIError as e:
            logger.warning(f"Failed to read user ID {state.id}: {e}")
            response.diagnostics.add_error(
                "Error Reading Pterodactyl User",
                f"Could not read Pterodactyl user ID {state.id}: {e}",
            )
            return response

        response.state = UserModel(
            id=state.id,
            username=state.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            created_at=format_timestamp(user.created_at),
            updated_at=format_timestamp(user.updated_at),
        )
        logger.info(f"Refreshed user ID {state.id}")
        return response

    async def update(self, plan: UserModel) -> ResourceResponse:
        response = ResourceResponse(operation=LifecycleOperation.UPDATE)

        try:
            user = await self.client.update_user(plan.id, _partial_user(plan))
        except PanelAPIError as e:
            logger.error(f"Failed to update user ID {plan.id}: {e}")
            response.diagnostics.add_error(
                "Error Updating Pterodactyl User",
                f"Could not update user, unexpected error: {e}",
            )
            return response

        # username stays as planned; it is not refreshed from the response.
        response.state = UserModel(
            id=plan.id,
            username=plan.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            created_at=plan.created_at,
            updated_at=format_timestamp(user.updated_at),
        )
        logger.info(f"Updated user ID {plan.id}")
        return response

    async def delete(self, state: UserModel) -> ResourceResponse:
        response = ResourceResponse(operation=LifecycleOperation.DELETE)

        try:
            await self.client.delete_user(state.id)
        except PanelAPIError as e:
            logger.error(f"Failed to delete user ID {state.id}: {e}")
            response.diagnostics.add_error(
                "Error Deleting Pterodactyl User",
                f"Could not delete user, unexpected error: {e}",
            )
            return response

        logger.info(f"Deleted user ID {state.id}")
        return response

    async def import_state(self, import_id: str) -> ResourceResponse:
        response = ResourceResponse(operation=LifecycleOperation.IMPORT)

        try:
            user = await self.client.get_user_by_username(import_id)
        except PanelAPIError as e:
            logger.error(f"Failed to import user {import_id}: {e}")
            response.diagnostics.add_error(
                "Error Importing Pterodactyl User",
                f"Could not import user: {e}",
            )
            return response

        response.state = UserModel(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            created_at=format_timestamp(user.created_at),
            updated_at=format_timestamp(user.updated_at),
        )
        logger.info(f"Imported user {user.username} with ID {user.id}")
        return response
