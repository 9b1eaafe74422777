"""SharePoint site REST client."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Self
from urllib.parse import urlsplit

import httpx
from azure.core.credentials import TokenCredential
from tenacity import (
    retry,
    retry_if_result,
    stop_after_attempt,
    wait_exponential_jitter,
)

from sitegroups.core.config import DEFAULT_REQUEST_TIMEOUT
from sitegroups.core.errors import RemoteOperationError

logger = logging.getLogger(__name__)

# Throttling retry configuration
MAX_RETRIES = 5
MIN_WAIT_SECONDS = 1
MAX_WAIT_SECONDS = 30

THROTTLE_STATUS_CODES = {429, 503}

JSON_HEADERS = {
    "Accept": "application/json;odata=nometadata",
    "Content-Type": "application/json;odata=nometadata",
}


@dataclass
class SiteGroup:
    """Represents a SharePoint site group."""

    id: int
    title: str
    description: str | None = None
    login_name: str | None = None


def _is_throttled(response: httpx.Response) -> bool:
    """Check if response indicates throttling (429/503)."""
    return response.status_code in THROTTLE_STATUS_CODES


def _log_retry(retry_state) -> None:
    """Log retry attempts."""
    logger.warning(f"SharePoint throttled request, retry attempt {retry_state.attempt_number}")


def _odata_literal(value: str) -> str:
    """Quote a value as an OData string literal."""
    return "'" + value.replace("'", "''") + "'"


def sharepoint_scope(site_url: str) -> str:
    """Get the token scope for the tenant hosting a site.

    Args:
        site_url: Full site URL, e.g. https://contoso.sharepoint.com/sites/team

    Returns:
        Scope such as https://contoso.sharepoint.com/.default
    """
    parts = urlsplit(site_url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Not an absolute site URL: {site_url}")
    return f"{parts.scheme}://{parts.netloc}/.default"


class SharePointSite:
    """Session against a single SharePoint site.

    Use as an async context manager; the HTTP session is closed on exit,
    whether or not the body raised.
    """

    def __init__(
        self,
        site_url: str,
        credential: TokenCredential,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """Initialize the session.

        Args:
            site_url: Full URL of the target site
            credential: Azure credential used to obtain SharePoint tokens
            timeout: HTTP timeout in seconds
        """
        self.site_url = site_url.rstrip("/")
        self.credential = credential
        self.timeout = timeout
        self.client: httpx.AsyncClient | None = None

    @property
    def api_url(self) -> str:
        """Base URL of the site's web REST endpoint."""
        return f"{self.site_url}/_api/web"

    async def __aenter__(self) -> Self:
        """Acquire a token and open the HTTP session."""
        try:
            # azure-identity credentials block on network I/O
            token = await asyncio.to_thread(
                self.credential.get_token, sharepoint_scope(self.site_url)
            )
        except Exception as e:
            raise RemoteOperationError("Open site session", str(e)) from e

        self.client = httpx.AsyncClient(
            headers={**JSON_HEADERS, "Authorization": f"Bearer {token.token}"},
            follow_redirects=True,
            timeout=self.timeout,
        )
        logger.debug(f"Opened session for {self.site_url}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the HTTP session."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if open."""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.debug(f"Closed session for {self.site_url}")

    @retry(
        retry=retry_if_result(_is_throttled),
        stop=stop_after_attempt(MAX_RETRIES),
        wait=wait_exponential_jitter(initial=MIN_WAIT_SECONDS, max=MAX_WAIT_SECONDS),
        before_sleep=_log_retry,
        retry_error_callback=lambda retry_state: retry_state.outcome.result(),
    )
    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a request, retrying while SharePoint throttles."""
        if not self.client:
            raise RuntimeError("Site session must be used as async context manager")
        return await self.client.request(method, url, **kwargs)

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        allow_not_found: bool = False,
        **kwargs,
    ) -> httpx.Response | None:
        """Call the site REST API.

        Args:
            operation: Human-readable name used in errors
            method: HTTP method
            path: Path relative to the web endpoint
            allow_not_found: Return None on 404 instead of raising
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response, or None for an allowed 404

        Raises:
            RemoteOperationError: On transport errors or non-2xx responses
        """
        url = f"{self.api_url}/{path}"
        try:
            response = await self._send(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteOperationError(operation, str(e)) from e

        if allow_not_found and response.status_code == 404:
            return None

        if not response.is_success:
            raise RemoteOperationError(
                operation,
                _error_message(response),
                status_code=response.status_code,
            )
        return response

    async def get_group(self, name: str) -> SiteGroup | None:
        """Find a site group by name.

        Returns:
            SiteGroup if it exists, None otherwise
        """
        response = await self._request(
            "Find site group",
            "GET",
            f"sitegroups/getbyname({_odata_literal(name)})",
            allow_not_found=True,
        )
        if response is None:
            return None
        return _to_site_group(response.json())

    async def create_group(self, name: str, description: str) -> SiteGroup:
        """Create a site group."""
        response = await self._request(
            "Create site group",
            "POST",
            "sitegroups",
            json={"Title": name, "Description": description},
        )
        return _to_site_group(response.json())

    async def get_role_definition_id(self, level: str) -> int:
        """Look up the id of a permission level by name.

        Raises:
            RemoteOperationError: If the permission level does not exist
        """
        response = await self._request(
            f"Find permission level '{level}'",
            "GET",
            f"roledefinitions/getbyname({_odata_literal(level)})",
        )
        return int(response.json()["Id"])

    async def grant_permission(self, group: SiteGroup, level: str) -> None:
        """Assign a permission level to a site group on this site."""
        role_id = await self.get_role_definition_id(level)
        await self._request(
            f"Grant '{level}' to {group.title}",
            "POST",
            f"roleassignments/addroleassignment(principalid={group.id},roledefid={role_id})",
        )

    async def add_member(self, group: SiteGroup, login_name: str) -> None:
        """Add a principal to a site group by login name."""
        await self._request(
            f"Add member to {group.title}",
            "POST",
            f"sitegroups({group.id})/users",
            json={"LoginName": login_name},
        )


def _to_site_group(data: dict) -> SiteGroup:
    """Convert a REST SP.Group payload to SiteGroup."""
    return SiteGroup(
        id=int(data["Id"]),
        title=data.get("Title", ""),
        description=data.get("Description"),
        login_name=data.get("LoginName"),
    )


def _error_message(response: httpx.Response) -> str:
    """Extract the OData error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("odata.error") or body.get("error")
        message = error.get("message") if isinstance(error, dict) else error
        if isinstance(message, dict):
            message = message.get("value")
        if message and isinstance(message, str):
            return message
    return response.text or response.reason_phrase
