"""
Panel API clients package.

Clients wrap the remote control-plane API that resource plugins converge
towards the declared state.
"""

from plugins.clients.base import PanelAPIError, PanelClient
from plugins.clients.models import PartialUser, User

__all__ = ["PanelAPIError", "PanelClient", "PartialUser", "User"]
