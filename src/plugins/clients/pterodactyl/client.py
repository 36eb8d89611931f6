"""
Pterodactyl Panel Client - Implements PanelClient for the application API.

Talks to ``/api/application/users`` with an application API key. Each call
opens its own session; there is no retry at this layer.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
from pydantic import ValidationError

from plugins.clients.base import PanelAPIError, PanelClient
from plugins.clients.models import PartialUser, User

logger = logging.getLogger(__name__)

USERS_PATH = "/api/application/users"
PAGE_SIZE = 100


class PterodactylClient(PanelClient):
    """Client for the Pterodactyl Panel application API."""

    def __init__(self, base_url: str, api_key: str, timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"PterodactylClient(base_url={self.base_url!r})"

    async def create_user(self, partial: PartialUser) -> User:
        body = await self._request(
            "POST", USERS_PATH, json=partial.model_dump(), expected=(200, 201)
        )
        return self._parse_user(body)

    async def get_user(self, user_id: int) -> User:
        body = await self._request("GET", f"{USERS_PATH}/{user_id}")
        return self._parse_user(body)

    async def get_user_by_username(self, username: str) -> User:
        # The panel filter is a partial match, so pick the exact username
        # and walk every page of candidates.
        page = 1
        while True:
            body = await self._request(
                "GET",
                USERS_PATH,
                params={
                    "filter[username]": username,
                    "per_page": str(PAGE_SIZE),
                    "page": str(page),
                },
            )
            data = body.get("data", [])
            if not isinstance(data, list):
                raise PanelAPIError("unexpected user list payload")
            for item in data:
                if not isinstance(item, dict):
                    continue
                attributes = item.get("attributes")
                if isinstance(attributes, dict) and (
                    attributes.get("username") == username
                ):
                    return self._parse_user(item)

            pagination = body.get("meta", {}).get("pagination", {})
            if page >= pagination.get("total_pages", 1):
                break
            page += 1

        raise PanelAPIError(f"user {username!r} not found", status=404)

    async def update_user(self, user_id: int, partial: PartialUser) -> User:
        body = await self._request(
            "PATCH", f"{USERS_PATH}/{user_id}", json=partial.model_dump()
        )
        return self._parse_user(body)

    async def delete_user(self, user_id: int) -> None:
        await self._request("DELETE", f"{USERS_PATH}/{user_id}", expected=(204,))

    # Private helper methods

    def _get_headers(self) -> Dict[str, str]:
        """Get HTTP headers for panel API requests."""
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        expected: tuple = (200,),
    ) -> Dict[str, Any]:
        """
        Perform one API request.

        Returns:
            The decoded JSON body, or an empty dict for bodiless responses.

        Raises:
            PanelAPIError: On transport failure or an unexpected status.
        """
        url = f"{self.base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(
                    method, url, headers=self._get_headers(), json=json, params=params
                ) as response:
                    if response.status not in expected:
                        message = await self._error_message(response)
                        logger.warning(
                            f"{method} {path} failed: {response.status} - {message}"
                        )
                        raise PanelAPIError(message, status=response.status)
                    if response.status == 204:
                        return {}
                    try:
                        body = await response.json()
                    except (aiohttp.ContentTypeError, ValueError) as e:
                        raise PanelAPIError(
                            f"unexpected response body: {e}", status=response.status
                        )
                    if not isinstance(body, dict):
                        raise PanelAPIError(
                            "unexpected response body: expected a JSON object, "
                            f"got {type(body).__name__}",
                            status=response.status,
                        )
                    return body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"{method} {path} transport error: {e}")
            reason = str(e) or type(e).__name__
            raise PanelAPIError(f"request to {url} failed: {reason}")

    @staticmethod
    async def _error_message(response: Any) -> str:
        """Extract the panel's error details from a failed response."""
        try:
            body = await response.json()
        except (aiohttp.ContentTypeError, ValueError):
            return (await response.text()) or f"HTTP {response.status}"

        errors = body.get("errors", []) if isinstance(body, dict) else []
        details = [e.get("detail") or e.get("code", "") for e in errors]
        details = [d for d in details if d]
        return "; ".join(details) or f"HTTP {response.status}"

    @staticmethod
    def _parse_user(body: Dict[str, Any]) -> User:
        try:
            return User.from_envelope(body)
        except ValidationError as e:
            raise PanelAPIError(f"unexpected user payload: {e}")
