"""CLI script to provision SharePoint site groups from a CSV manifest.

Each manifest row names a site, a site group, an optional permission level
and an optional Entra ID group. The site group is created if missing, the
permission level granted, and the Entra ID group added as a member.

Exit code is 1 when the manifest or credentials cannot be loaded, or when
the manifest becomes unreadable part way through. Individual row failures
are reported in the summary.
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from sitegroups.core.config import load_provisioning_config
from sitegroups.core.errors import ManifestError, ManifestRowError
from sitegroups.core.log_format import configure_logging, log_success
from sitegroups.core.msgraph_client import get_credential, get_graph_client
from sitegroups.entra.groups import DirectoryGroupResolver
from sitegroups.manifest import Manifest, load_manifest
from sitegroups.sharepoint.provisioner import RowOutcome, RowResult, SiteGroupProvisioner

logger = logging.getLogger(__name__)


class RunState(Enum):
    """Lifecycle of a provisioning run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED_LOAD = "failed_load"


@dataclass(frozen=True)
class RunResult:
    """Counts accumulated over a run."""

    success_count: int = 0
    error_count: int = 0
    skipped_count: int = 0
    aborted: bool = False

    def add(self, row_result: RowResult) -> "RunResult":
        """Return a new RunResult with one row result folded in."""
        if row_result.outcome == RowOutcome.SUCCESS:
            return replace(self, success_count=self.success_count + 1)
        if row_result.outcome == RowOutcome.FAILED:
            return replace(self, error_count=self.error_count + 1)
        return replace(self, skipped_count=self.skipped_count + 1)

    def add_error(self) -> "RunResult":
        """Return a new RunResult with one more error."""
        return replace(self, error_count=self.error_count + 1)


class ProvisioningRun:
    """Drive the provisioner over every manifest row."""

    def __init__(self, provisioner: SiteGroupProvisioner) -> None:
        self.provisioner = provisioner
        self.state = RunState.NOT_STARTED

    async def run(self, csv_path: Path) -> RunResult:
        """Load the manifest and provision all rows in file order.

        Row failures are counted and never stop the run.

        Raises:
            ManifestError: If the manifest cannot be loaded
        """
        try:
            manifest = load_manifest(csv_path)
        except ManifestError:
            self.state = RunState.FAILED_LOAD
            raise

        return await self.run_manifest(manifest)

    async def run_manifest(self, manifest: Manifest) -> RunResult:
        """Provision every row of an already loaded manifest.

        If the file stops being readable part way through, the rows already
        processed are kept and the result is marked aborted.
        """
        self.state = RunState.RUNNING
        result = RunResult()

        try:
            for entry in manifest:
                if isinstance(entry, ManifestRowError):
                    logger.error(f"Invalid manifest row: {entry}")
                    result = result.add_error()
                    continue
                result = result.add(await self.provisioner.provision(entry))
        except ManifestError as e:
            logger.error(f"Manifest read aborted: {e}")
            self.state = RunState.FAILED_LOAD
            return replace(result, aborted=True)

        self.state = RunState.COMPLETED
        return result


def log_summary(result: RunResult) -> None:
    """Log the final counts."""
    logger.info("")
    logger.info("=" * 50)
    logger.info("Summary")
    logger.info("=" * 50)
    log_success(logger, f"Succeeded: {result.success_count}")
    if result.error_count:
        logger.error(f"Failed: {result.error_count}")
    else:
        logger.info(f"Failed: {result.error_count}")
    if result.skipped_count:
        logger.warning(f"Skipped (blank site or group): {result.skipped_count}")
    if result.aborted:
        logger.error("Run aborted: manifest could not be read to the end")


async def run_provisioning(
    csv_path: Path,
    tenant_url: str,
    dry_run: bool = False,
    description: str | None = None,
) -> int:
    """Provision site groups from a manifest.

    Args:
        csv_path: Path to the CSV manifest
        tenant_url: Tenant root site URL (for logging)
        dry_run: If True, don't change anything, just show what would be done
        description: Override the description given to new site groups

    Returns:
        Exit code
    """
    logger.info("=" * 50)
    logger.info("Provision SharePoint Site Groups")
    logger.info("=" * 50)

    if dry_run:
        logger.info("DRY RUN - no changes will be made")

    logger.info(f"Tenant: {tenant_url}")
    logger.info(f"Manifest: {csv_path}")
    logger.info("")

    try:
        config = load_provisioning_config()
        credential = get_credential()
    except (ValueError, FileNotFoundError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    if description:
        config.group_description = description

    resolver = DirectoryGroupResolver(get_graph_client(credential))
    provisioner = SiteGroupProvisioner(
        resolver=resolver,
        config=config,
        credential=credential,
        dry_run=dry_run,
    )

    try:
        result = await ProvisioningRun(provisioner).run(csv_path)
    except ManifestError as e:
        logger.error(f"Failed to load manifest: {e}")
        return 1

    log_summary(result)
    return 1 if result.aborted else 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Create SharePoint site groups from a CSV manifest and add "
        "Entra ID security groups as members",
    )
    parser.add_argument(
        "csv_path",
        type=Path,
        help="CSV manifest: site URL, group name, permission level, directory group name",
    )
    parser.add_argument(
        "tenant_url",
        help="Tenant root site URL, e.g. https://contoso.sharepoint.com",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without making changes",
    )
    parser.add_argument(
        "--description",
        help="Description for newly created site groups",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()
    configure_logging(verbose=args.verbose)

    exit_code = asyncio.run(
        run_provisioning(
            csv_path=args.csv_path,
            tenant_url=args.tenant_url,
            dry_run=args.dry_run,
            description=args.description,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
