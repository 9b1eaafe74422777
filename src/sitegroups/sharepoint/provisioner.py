"""Provision SharePoint site groups from manifest rows."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from azure.core.credentials import TokenCredential

from sitegroups.core.config import ProvisioningConfig
from sitegroups.core.log_format import log_success
from sitegroups.entra.groups import DirectoryGroupResolver
from sitegroups.manifest import ManifestRow
from sitegroups.sharepoint.client import SharePointSite

logger = logging.getLogger(__name__)

SiteFactory = Callable[[str], SharePointSite]


class RowOutcome(Enum):
    """Result of provisioning one manifest row."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class RowResult:
    """Result of provisioning a single manifest row."""

    row: ManifestRow
    outcome: RowOutcome
    created: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        """Whether every step for the row succeeded."""
        return self.outcome == RowOutcome.SUCCESS


def member_login_name(group_id: str, prefix: str) -> str:
    """Build the SharePoint claims login for an Entra ID group.

    Args:
        group_id: Object id of the directory group
        prefix: Claims prefix, normally ``c:0t.c|tenant|``

    Returns:
        Login name such as ``c:0t.c|tenant|<group id>``
    """
    return f"{prefix}{group_id}"


class SiteGroupProvisioner:
    """Make a site's group, permission and membership match a manifest row."""

    def __init__(
        self,
        resolver: DirectoryGroupResolver,
        config: ProvisioningConfig,
        credential: TokenCredential | None = None,
        site_factory: SiteFactory | None = None,
        dry_run: bool = False,
    ) -> None:
        """Initialize the provisioner.

        Args:
            resolver: Directory group resolver
            config: Provisioning settings
            credential: Credential for SharePoint tokens (required unless
                site_factory is given)
            site_factory: Builds a site session for a URL
            dry_run: Look things up but make no changes
        """
        if site_factory is None:
            if credential is None:
                raise ValueError("credential is required when no site_factory is given")
            site_factory = self._default_site_factory(credential, config.request_timeout)

        self.resolver = resolver
        self.config = config
        self.site_factory = site_factory
        self.dry_run = dry_run

    @staticmethod
    def _default_site_factory(credential: TokenCredential, timeout: float) -> SiteFactory:
        def factory(site_url: str) -> SharePointSite:
            return SharePointSite(site_url, credential, timeout=timeout)

        return factory

    async def provision(self, row: ManifestRow) -> RowResult:
        """Provision one manifest row.

        Never raises; failures are reported in the returned RowResult.
        """
        if row.is_blank:
            logger.warning(f"Line {row.line_number}: missing site URL or group name, skipping")
            return RowResult(row=row, outcome=RowOutcome.SKIPPED)

        result = RowResult(row=row, outcome=RowOutcome.SUCCESS)
        logger.info(f"Processing '{row.group_name}' on {row.site_url}")

        try:
            async with self.site_factory(row.site_url) as site:
                await self._apply(site, row, result)
        except Exception as e:
            result.errors.append(str(e))
            logger.error(f"Failed to provision '{row.group_name}' on {row.site_url}: {e}")

        if result.errors:
            result.outcome = RowOutcome.FAILED
        return result

    async def _apply(self, site: SharePointSite, row: ManifestRow, result: RowResult) -> None:
        group = await site.get_group(row.group_name)
        if group:
            logger.info(f"Site group already exists: {row.group_name} (ID: {group.id})")
        elif self.dry_run:
            logger.info(f"Would create site group: {row.group_name}")
        else:
            group = await site.create_group(row.group_name, self.config.group_description)
            result.created = True
            log_success(logger, f"Created site group: {row.group_name} (ID: {group.id})")

        if row.permission_level:
            if group is None or self.dry_run:
                logger.info(f"Would grant '{row.permission_level}' to {row.group_name}")
            else:
                await site.grant_permission(group, row.permission_level)
                log_success(logger, f"Granted '{row.permission_level}' to {group.title}")

        if not row.directory_group_name:
            return

        directory_group = await self.resolver.resolve(row.directory_group_name)
        if directory_group is None:
            message = f"Directory group not found: {row.directory_group_name}"
            result.errors.append(message)
            logger.error(f"{message}, skipping membership for {row.group_name}")
            return

        login_name = member_login_name(directory_group.id, self.config.login_prefix)
        if group is None or self.dry_run:
            logger.info(f"Would add {row.directory_group_name} to {row.group_name}")
            return

        await site.add_member(group, login_name)
        log_success(logger, f"Added {row.directory_group_name} to {group.title}")
