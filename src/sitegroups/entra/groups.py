"""Entra ID group lookup."""

import logging
from dataclasses import dataclass

from kiota_abstractions.base_request_configuration import RequestConfiguration
from msgraph import GraphServiceClient
from msgraph.generated.groups.groups_request_builder import GroupsRequestBuilder
from msgraph.generated.models.group import Group

from sitegroups.core.errors import DirectoryLookupError
from sitegroups.core.msgraph_client import get_graph_client

logger = logging.getLogger(__name__)


@dataclass
class DirectoryGroup:
    """Represents an Entra ID group."""

    id: str
    display_name: str
    mail_nickname: str | None = None


def _odata_literal(value: str) -> str:
    """Quote a value as an OData string literal."""
    return "'" + value.replace("'", "''") + "'"


class DirectoryGroupResolver:
    """Resolve Entra ID groups by display name or alias."""

    def __init__(self, client: GraphServiceClient | None = None) -> None:
        """Initialize the resolver.

        Args:
            client: Graph client to use. If None, one is created from
                environment credentials.
        """
        self.client: GraphServiceClient = client or get_graph_client()

    async def resolve(self, name: str) -> DirectoryGroup | None:
        """Find a group by exact display name, then by mail nickname.

        When several groups match, the first one returned wins.

        Args:
            name: Display name (or alias) of the group

        Returns:
            DirectoryGroup if found, None if not found or the lookup failed
        """
        try:
            for field in ("displayName", "mailNickname"):
                matches = await self._find_groups(field, name)
                if matches:
                    if len(matches) > 1:
                        logger.warning(
                            f"{len(matches)} directory groups match {field} '{name}', "
                            f"using {matches[0].id}"
                        )
                    logger.debug(f"Resolved directory group '{name}' to {matches[0].id}")
                    return matches[0]
        except DirectoryLookupError as e:
            logger.error(f"Directory lookup failed for '{name}': {e}")
            return None

        logger.warning(f"Directory group not found: {name}")
        return None

    async def _find_groups(self, field: str, value: str) -> list[DirectoryGroup]:
        """Query groups where ``field`` equals ``value``.

        Raises:
            DirectoryLookupError: If the Graph request fails
        """
        query_params = GroupsRequestBuilder.GroupsRequestBuilderGetQueryParameters(
            filter=f"{field} eq {_odata_literal(value)}",
            select=["id", "displayName", "mailNickname"],
        )
        config = RequestConfiguration(query_parameters=query_params)

        try:
            result = await self.client.groups.get(request_configuration=config)
        except Exception as e:
            raise DirectoryLookupError(str(e)) from e

        if result and result.value:
            return [self._to_directory_group(group) for group in result.value if group.id]
        return []

    def _to_directory_group(self, group: Group) -> DirectoryGroup:
        """Convert MS Graph Group to DirectoryGroup."""
        return DirectoryGroup(
            id=group.id or "",
            display_name=group.display_name or "",
            mail_nickname=group.mail_nickname,
        )
