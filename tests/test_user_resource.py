"""Unit tests for the user resource plugin."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from plugins.base import LifecycleOperation, Severity, UserModel
from plugins.clients.base import PanelAPIError
from plugins.clients.models import User
from plugins.resources.base import PlanAction, ResourcePlugin
from plugins.resources.user import UserResource, format_timestamp

from fakes import CREATED_AT, UPDATED_AT, FakePanelClient

# ==================== Test Helpers ====================


def stored_user(**overrides):
    """A user record as it sits in state after a create."""
    values = dict(
        id=42,
        username="alice",
        email="a@x.com",
        first_name="A",
        last_name="L",
        created_at="2024-01-01T00:00:00Z",
        updated_at="2024-01-01T00:00:05Z",
    )
    values.update(overrides)
    return UserModel(**values)


def panel_response(**overrides):
    """A user as the panel returns it from an update."""
    values = dict(
        id=42,
        username="alice",
        email="a@x.com",
        first_name="A",
        last_name="L",
        created_at=CREATED_AT,
        updated_at=UPDATED_AT,
    )
    values.update(overrides)
    return User(**values)


@pytest.fixture
def resource(fake_client):
    return UserResource(fake_client)


# ==================== format_timestamp Tests ====================


class TestFormatTimestamp:
    """Tests for RFC 3339 rendering."""

    def test_utc_uses_z_suffix(self):
        value = datetime(2024, 1, 1, 8, 30, 15, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2024-01-01T08:30:15Z"

    def test_drops_fractional_seconds(self):
        value = datetime(2024, 1, 1, 8, 30, 15, 123456, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2024-01-01T08:30:15Z"

    def test_keeps_numeric_offset(self):
        value = datetime(2024, 1, 1, 8, 30, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(value) == "2024-01-01T08:30:00+02:00"

    def test_naive_is_treated_as_utc(self):
        assert format_timestamp(datetime(2024, 1, 1)) == "2024-01-01T00:00:00Z"


# ==================== Configure / Schema Tests ====================


class TestConfigure:
    """Tests for binding the resource to a provider client."""

    def test_is_resource_plugin(self):
        assert issubclass(UserResource, ResourcePlugin)
        assert UserResource.name == "user"

    def test_configure_with_client(self, fake_client):
        resource, diagnostics = UserResource.configure(fake_client)
        assert isinstance(resource, UserResource)
        assert resource.client is fake_client
        assert not diagnostics

    def test_configure_without_provider_data(self):
        """Provider not configured yet is not an error."""
        resource, diagnostics = UserResource.configure(None)
        assert resource is None
        assert not diagnostics

    def test_configure_with_wrong_type(self):
        resource, diagnostics = UserResource.configure({"url": "http://panel"})
        assert resource is None
        assert diagnostics.has_error()
        assert diagnostics[0].summary == "Unexpected Resource Configure Type"
        assert "got: dict" in diagnostics[0].detail

    def test_configured_resources_are_independent(self):
        first, _ = UserResource.configure(FakePanelClient())
        second, _ = UserResource.configure(FakePanelClient())
        assert first.client is not second.client


class TestSchema:
    """Tests for the attribute and configuration schemas."""

    def test_attributes(self):
        attributes = UserResource.schema()["attributes"]
        assert set(attributes) == {
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "created_at",
            "updated_at",
        }
        assert attributes["id"]["computed"] is True
        assert attributes["id"]["use_state_for_unknown"] is True
        assert attributes["created_at"]["use_state_for_unknown"] is True
        assert "use_state_for_unknown" not in attributes["updated_at"]
        assert attributes["username"]["required"] is True
        assert attributes["email"]["description"] == "The email of the user."

    def test_config_schema_covers_declared_attributes(self):
        schema = UserResource.config_schema()
        assert schema["required"] == ["username", "email", "first_name", "last_name"]
        assert schema["additionalProperties"] is False
        assert schema["properties"]["email"]["format"] == "email"


# ==================== Plan Tests ====================


class TestPlan:
    """Tests for plan decisions."""

    def test_create_when_absent(self, resource, desired_user):
        result = resource.plan(None, desired_user.declared())
        assert result.action is PlanAction.CREATE
        assert result.planned.id is None
        assert result.planned.created_at is None
        assert result.planned.username == "alice"

    def test_noop_when_unchanged(self, resource):
        prior = stored_user()
        result = resource.plan(prior, prior.declared())
        assert result.action is PlanAction.NOOP
        assert result.planned == prior
        assert result.changed == []

    def test_update_keeps_identity(self, resource):
        prior = stored_user()
        config = dict(prior.declared(), email="b@x.com")

        result = resource.plan(prior, config)

        assert result.action is PlanAction.UPDATE
        assert result.changed == ["email"]
        assert result.planned.id == 42
        assert result.planned.created_at == "2024-01-01T00:00:00Z"
        assert result.planned.updated_at is None
        assert result.planned.email == "b@x.com"

    def test_username_change_is_an_update(self, resource):
        prior = stored_user()
        result = resource.plan(prior, dict(prior.declared(), username="alicia"))
        assert result.action is PlanAction.UPDATE
        assert result.changed == ["username"]

    def test_delete_when_no_longer_declared(self, resource):
        result = resource.plan(stored_user(), None)
        assert result.action is PlanAction.DELETE
        assert result.planned is None

    def test_noop_when_both_absent(self, resource):
        result = resource.plan(None, None)
        assert result.action is PlanAction.NOOP

    def test_plan_makes_no_remote_calls(self, resource, fake_client, desired_user):
        resource.plan(None, desired_user.declared())
        assert fake_client.calls == []


# ==================== Lifecycle Tests ====================


@pytest.mark.asyncio
class TestCreate:
    """Tests for Create."""

    async def test_create_assigns_computed_attributes(self, resource, desired_user):
        before = datetime.now(timezone.utc).replace(microsecond=0)

        response = await resource.create(desired_user)

        assert response.operation is LifecycleOperation.CREATE
        assert response.success
        state = response.state
        assert state.id == 42
        assert state.username == "alice"
        assert state.email == "a@x.com"
        assert state.first_name == "A"
        assert state.last_name == "L"
        assert state.created_at == "2024-01-01T00:00:00Z"
        updated_at = datetime.strptime(state.updated_at, "%Y-%m-%dT%H:%M:%SZ")
        assert updated_at.replace(tzinfo=timezone.utc) >= before

    async def test_create_sends_only_declared_fields(
        self, resource, fake_client, desired_user
    ):
        await resource.create(replace(desired_user, id=7, created_at="x"))

        name, partial = fake_client.calls[0]
        assert name == "create_user"
        assert partial.model_dump() == {
            "username": "alice",
            "email": "a@x.com",
            "first_name": "A",
            "last_name": "L",
        }

    async def test_create_does_not_mutate_plan(self, resource, desired_user):
        await resource.create(desired_user)
        assert desired_user.id is None
        assert desired_user.created_at is None

    async def test_create_failure(self, resource, fake_client, desired_user):
        fake_client.fail_with = PanelAPIError("The email has already been taken.", 422)

        response = await resource.create(desired_user)

        assert response.state is None
        assert not response.success
        diagnostic = response.diagnostics[0]
        assert diagnostic.severity is Severity.ERROR
        assert diagnostic.summary == "Error creating user"
        assert diagnostic.detail == (
            "Could not create user, unexpected error: "
            "The email has already been taken. (HTTP 422)"
        )

    async def test_create_makes_one_call(self, resource, fake_client, desired_user):
        await resource.create(desired_user)
        assert len(fake_client.calls) == 1


@pytest.mark.asyncio
class TestRead:
    """Tests for Read."""

    async def test_remote_wins(self, resource, fake_client, panel_user):
        fake_client.users[42] = panel_user.model_copy(
            update={
                "email": "b@x.com",
                "updated_at": datetime(2024, 3, 1, tzinfo=timezone.utc),
            }
        )

        response = await resource.read(stored_user())

        assert response.success
        assert response.state.email == "b@x.com"
        assert response.state.updated_at == "2024-03-01T00:00:00Z"
        assert response.state.created_at == "2024-01-01T00:00:00Z"

    async def test_keeps_id_and_username(self, resource, fake_client, panel_user):
        fake_client.users[42] = panel_user.model_copy(update={"username": "other"})

        response = await resource.read(stored_user())

        assert response.state.id == 42
        assert response.state.username == "alice"

    async def test_read_failure_names_id(self, resource):
        response = await resource.read(stored_user())

        assert response.state is None
        assert response.diagnostics[0].summary == "Error Reading Pterodactyl User"
        assert response.diagnostics[0].detail.startswith(
            "Could not read Pterodactyl user ID 42: "
        )

    async def test_read_does_not_mutate_input(self, resource, fake_client, panel_user):
        fake_client.users[42] = panel_user.model_copy(update={"email": "b@x.com"})
        state = stored_user()

        await resource.read(state)

        assert state.email == "a@x.com"


@pytest.mark.asyncio
class TestUpdate:
    """Tests for Update."""

    async def test_update_refreshes_editable_fields(
        self, resource, fake_client, panel_user
    ):
        fake_client.users[42] = panel_user
        plan = stored_user(email="b@x.com", first_name="B", updated_at=None)

        response = await resource.update(plan)

        assert response.success
        state = response.state
        assert state.email == "b@x.com"
        assert state.first_name == "B"
        assert state.updated_at == "2024-02-01T12:30:00Z"
        assert state.id == 42
        assert state.created_at == "2024-01-01T00:00:00Z"

    async def test_update_sends_declared_fields(
        self, resource, fake_client, panel_user
    ):
        fake_client.users[42] = panel_user
        await resource.update(stored_user(last_name="M"))

        name, user_id, partial = fake_client.calls[0]
        assert name == "update_user"
        assert user_id == 42
        assert partial.last_name == "M"
        assert partial.username == "alice"

    async def test_update_does_not_refresh_username(self, resource):
        resource.client = AsyncMock()
        resource.client.update_user.return_value = panel_response(
            username="renamed-by-panel"
        )

        response = await resource.update(stored_user())

        assert response.state.username == "alice"

    async def test_update_failure(self, resource):
        response = await resource.update(stored_user())

        assert response.state is None
        assert response.diagnostics[0].summary == "Error Updating Pterodactyl User"
        assert "Could not update user, unexpected error:" in (
            response.diagnostics[0].detail
        )


@pytest.mark.asyncio
class TestDelete:
    """Tests for Delete."""

    async def test_delete_returns_no_state(self, resource, fake_client, panel_user):
        fake_client.users[42] = panel_user

        response = await resource.delete(stored_user())

        assert response.operation is LifecycleOperation.DELETE
        assert response.success
        assert response.state is None
        assert 42 not in fake_client.users

    async def test_delete_failure(self, resource, fake_client):
        fake_client.fail_with = PanelAPIError("Server Error", 500)

        response = await resource.delete(stored_user())

        assert not response.success
        assert response.state is None
        assert response.diagnostics[0].summary == "Error Deleting Pterodactyl User"
        assert "Server Error" in response.diagnostics[0].detail


@pytest.mark.asyncio
class TestImport:
    """Tests for Import."""

    async def test_import_builds_full_record(self, resource, fake_client, panel_user):
        fake_client.users[42] = panel_user.model_copy(update={"updated_at": UPDATED_AT})

        response = await resource.import_state("alice")

        assert response.success
        assert response.state == UserModel(
            id=42,
            username="alice",
            email="a@x.com",
            first_name="A",
            last_name="L",
            created_at="2024-01-01T00:00:00Z",
            updated_at="2024-02-01T12:30:00Z",
        )
        assert fake_client.calls == [("get_user_by_username", "alice")]

    async def test_import_failure(self, resource):
        response = await resource.import_state("nobody")

        assert response.state is None
        assert response.diagnostics[0].summary == "Error Importing Pterodactyl User"
        assert response.diagnostics[0].detail.startswith("Could not import user: ")


# ==================== Lifecycle Property Tests ====================


@pytest.mark.asyncio
class TestLifecycleProperties:
    """Tests chaining lifecycle calls against one fake panel."""

    async def test_create_then_read_is_stable(self, resource, desired_user):
        created = (await resource.create(desired_user)).state
        read = (await resource.read(created)).state

        assert read.id == created.id
        assert read.created_at == created.created_at
        assert read.declared() == desired_user.declared()

    async def test_update_preserves_identity(self, resource, desired_user):
        created = (await resource.create(desired_user)).state
        plan = replace(created, email="new@x.com", updated_at=None)

        updated = (await resource.update(plan)).state

        assert updated.id == created.id
        assert updated.created_at == created.created_at
        assert updated.email == "new@x.com"

    async def test_read_after_delete_fails(self, resource, desired_user):
        created = (await resource.create(desired_user)).state
        assert (await resource.delete(created)).success

        response = await resource.read(created)

        assert response.state is None
        assert response.diagnostics.has_error()

    async def test_import_after_create(self, resource, desired_user):
        created = (await resource.create(desired_user)).state

        imported = (await resource.import_state("alice")).state

        assert imported.id == created.id
        assert imported.username == "alice"
        assert all(value is not None for value in imported.to_dict().values())
