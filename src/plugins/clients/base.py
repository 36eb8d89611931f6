"""
Panel Client Base - Abstract interface for the remote user API.

Resource plugins receive a client at construction time and issue exactly one
call per lifecycle operation. Transport, authentication and timeouts are the
client's concern.
"""

from abc import ABC, abstractmethod
from typing import Optional

from plugins.clients.models import PartialUser, User


class PanelAPIError(Exception):
    """Raised when a panel API call fails."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.message} (HTTP {self.status})"
        return self.message


class PanelClient(ABC):
    """
    Abstract base class for panel API clients.

    Every method raises PanelAPIError on failure.
    """

    @abstractmethod
    async def create_user(self, partial: PartialUser) -> User:
        """
        Create a user.

        Args:
            partial: The user-declared attributes

        Returns:
            The created user, including its panel-assigned id and timestamps.
        """
        pass

    @abstractmethod
    async def get_user(self, user_id: int) -> User:
        """Fetch a user by its numeric id."""
        pass

    @abstractmethod
    async def get_user_by_username(self, username: str) -> User:
        """Fetch a user by exact username."""
        pass

    @abstractmethod
    async def update_user(self, user_id: int, partial: PartialUser) -> User:
        """
        Update a user.

        Args:
            user_id: The user to update
            partial: The full set of user-declared attributes

        Returns:
            The user as stored by the panel after the update.
        """
        pass

    @abstractmethod
    async def delete_user(self, user_id: int) -> None:
        """Delete a user."""
        pass
