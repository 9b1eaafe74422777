"""Exceptions raised while provisioning site groups."""


class ProvisioningError(Exception):
    """Base exception for provisioning errors."""


class ManifestError(ProvisioningError):
    """The manifest file is missing or has no data rows."""


class ManifestRowError(ProvisioningError):
    """A manifest row has fewer than the four required columns."""

    def __init__(self, line_number: int, fields: list[str]) -> None:
        self.line_number = line_number
        self.fields = fields
        super().__init__(
            f"Line {line_number}: expected 4 columns, found {len(fields)}"
        )


class DirectoryLookupError(ProvisioningError):
    """The directory service could not be queried."""


class RemoteOperationError(ProvisioningError):
    """A call to the SharePoint site failed."""

    def __init__(self, operation: str, message: str, status_code: int | None = None) -> None:
        self.operation = operation
        self.status_code = status_code
        detail = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{operation} failed{detail}: {message}")
