"""
Core provider types and dataclasses.

This module contains the shared types exchanged between the host and the
resource plugins: the resource record, diagnostics, and the tagged lifecycle
commands with their response.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class LifecycleOperation(Enum):
    """Lifecycle commands a host can issue against a resource."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    IMPORT = "import"


class Severity(Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A single user-facing diagnostic."""

    severity: Severity
    summary: str
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.severity.value}: {self.summary}: {self.detail}"
        return f"{self.severity.value}: {self.summary}"


class Diagnostics(List[Diagnostic]):
    """Ordered collection of diagnostics produced by one call."""

    def add_error(self, summary: str, detail: str = "") -> None:
        self.append(Diagnostic(Severity.ERROR, summary, detail))

    def add_warning(self, summary: str, detail: str = "") -> None:
        self.append(Diagnostic(Severity.WARNING, summary, detail))

    def has_error(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self)

    def errors(self) -> List[Diagnostic]:
        return [d for d in self if d.severity is Severity.ERROR]


@dataclass
class UserModel:
    """
    State record of a panel user.

    ``id``, ``created_at`` and ``updated_at`` are computed by the panel and
    stay ``None`` until known.
    """

    username: str
    email: str
    first_name: str
    last_name: str
    id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    DECLARED_FIELDS = ("username", "email", "first_name", "last_name")

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def declared(self) -> Dict[str, str]:
        """User-declared attributes only."""
        return {name: getattr(self, name) for name in self.DECLARED_FIELDS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserModel":
        """
        Build a record from a host state or config mapping.

        Raises:
            ValueError: If a declared attribute is missing or ``id`` is not
                an integer.
        """
        missing = [name for name in cls.DECLARED_FIELDS if name not in data]
        if missing:
            raise ValueError(f"Record is missing attributes: {', '.join(missing)}")

        user_id = data.get("id")
        if user_id is not None and (
            isinstance(user_id, bool) or not isinstance(user_id, int)
        ):
            raise ValueError(f"Record id must be an integer, got: {user_id!r}")

        return cls(
            id=user_id,
            username=data["username"],
            email=data["email"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class CreateCommand:
    type_name: str
    plan: UserModel
    operation: LifecycleOperation = field(
        default=LifecycleOperation.CREATE, init=False
    )


@dataclass
class ReadCommand:
    type_name: str
    state: UserModel
    operation: LifecycleOperation = field(default=LifecycleOperation.READ, init=False)


@dataclass
class UpdateCommand:
    type_name: str
    plan: UserModel
    operation: LifecycleOperation = field(
        default=LifecycleOperation.UPDATE, init=False
    )


@dataclass
class DeleteCommand:
    type_name: str
    state: UserModel
    operation: LifecycleOperation = field(
        default=LifecycleOperation.DELETE, init=False
    )


@dataclass
class ImportCommand:
    type_name: str
    import_id: str
    operation: LifecycleOperation = field(
        default=LifecycleOperation.IMPORT, init=False
    )


Command = Union[CreateCommand, ReadCommand, UpdateCommand, DeleteCommand, ImportCommand]


@dataclass
class ResourceResponse:
    """
    Result of one lifecycle command.

    ``state`` is the new authoritative record, or ``None`` when the record
    no longer exists (successful delete) or the call failed. On failure the
    host keeps whatever state it had before the call.
    """

    operation: LifecycleOperation
    state: Optional[UserModel] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def success(self) -> bool:
        return not self.diagnostics.has_error()
