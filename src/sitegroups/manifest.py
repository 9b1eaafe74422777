"""CSV manifest of site groups to provision.

Columns are read by position, never by header name:

    site URL, group name, permission level, directory group name

A header line is optional. The first non-empty line is treated as a header
when its first cell is filled in and is not an http(s) URL. A first line
with an empty site cell is data and is reported as a skipped row.
"""

import csv
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from sitegroups.core.errors import ManifestError, ManifestRowError

__all__ = ["Manifest", "ManifestRow", "load_manifest"]

REQUIRED_COLUMNS = 4


@dataclass(frozen=True)
class ManifestRow:
    """One line of the manifest."""

    site_url: str
    group_name: str
    permission_level: str = ""
    directory_group_name: str = ""
    line_number: int = 0

    @classmethod
    def from_fields(cls, fields: list[str], line_number: int = 0) -> "ManifestRow":
        """Build a row from positional CSV fields.

        Raises:
            ManifestRowError: If fewer than four columns are present
        """
        if len(fields) < REQUIRED_COLUMNS:
            raise ManifestRowError(line_number, fields)
        site_url, group_name, permission_level, directory_group_name = (
            value.strip() for value in fields[:REQUIRED_COLUMNS]
        )
        return cls(
            site_url=site_url,
            group_name=group_name,
            permission_level=permission_level,
            directory_group_name=directory_group_name,
            line_number=line_number,
        )

    @property
    def is_blank(self) -> bool:
        """Rows without a site or group name are skipped."""
        return not self.site_url or not self.group_name


def _is_header(fields: list[str]) -> bool:
    first = fields[0].strip().lower() if fields else ""
    return bool(first) and not first.startswith(("http://", "https://"))


class Manifest:
    """Lazy, restartable view of a manifest file.

    Each iteration re-reads the file and yields a ManifestRow per data line,
    or a ManifestRowError for lines with too few columns. Read and decode
    failures anywhere in the file raise ManifestError.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def __iter__(self) -> Iterator[ManifestRow | ManifestRowError]:
        try:
            with self.path.open(newline="", encoding="utf-8-sig") as f:
                reader = csv.reader(f)
                seen_first = False
                for fields in reader:
                    if not any(value.strip() for value in fields):
                        continue
                    if not seen_first:
                        seen_first = True
                        if _is_header(fields):
                            continue
                    try:
                        yield ManifestRow.from_fields(fields, line_number=reader.line_num)
                    except ManifestRowError as e:
                        yield e
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise ManifestError(f"Could not read manifest {self.path}: {e}") from e

    def __repr__(self) -> str:
        return f"Manifest({str(self.path)!r})"


def load_manifest(path: Path | str) -> Manifest:
    """Open and validate a manifest file.

    Args:
        path: Path to the CSV file

    Returns:
        Manifest over the file's data rows

    Raises:
        ManifestError: If the file is missing, unreadable, or has no data rows
    """
    manifest = Manifest(path)

    if not manifest.path.is_file():
        raise ManifestError(f"Manifest file not found: {manifest.path}")

    entries = iter(manifest)
    try:
        has_rows = next(entries, None) is not None
    finally:
        entries.close()

    if not has_rows:
        raise ManifestError(f"Manifest has no data rows: {manifest.path}")

    return manifest
