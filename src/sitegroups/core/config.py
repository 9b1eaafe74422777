"""Configuration loading utilities."""

import json
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_GROUP_DESCRIPTION = "Provisioned from site group manifest"
DEFAULT_LOGIN_PREFIX = "c:0t.c|tenant|"
DEFAULT_REQUEST_TIMEOUT = 30.0


@dataclass
class AzureCredentials:
    """App registration credentials for Graph and SharePoint.

    SharePoint REST rejects app-only tokens issued for a client secret, so
    a certificate is used for site calls whenever one is configured.
    """

    tenant_id: str
    client_id: str
    client_secret: str | None = None
    certificate_path: str | None = None
    certificate_password: str | None = None

    @property
    def uses_certificate(self) -> bool:
        """Whether certificate authentication is configured."""
        return bool(self.certificate_path)


def get_azure_credentials() -> AzureCredentials:
    """Get app registration credentials from environment.

    Environment variables:
        MS_GRAPH_TENANT_ID: Tenant ID
        MS_GRAPH_CLIENT_ID: App client ID
        MS_GRAPH_CLIENT_SECRET: Client secret
        SHAREPOINT_CERTIFICATE_PATH: Path to a .pem/.pfx certificate
        SHAREPOINT_CERTIFICATE_PASSWORD: Password for the certificate

    Returns:
        AzureCredentials

    Raises:
        ValueError: If tenant/client are missing, or neither a secret nor a
            certificate is configured
    """
    load_dotenv()

    tenant_id = os.getenv("MS_GRAPH_TENANT_ID")
    client_id = os.getenv("MS_GRAPH_CLIENT_ID")
    client_secret = os.getenv("MS_GRAPH_CLIENT_SECRET")
    cert_path = os.getenv("SHAREPOINT_CERTIFICATE_PATH")
    cert_password = os.getenv("SHAREPOINT_CERTIFICATE_PASSWORD")

    if not tenant_id or not client_id:
        raise ValueError(
            "MS Graph credentials not set. Required: MS_GRAPH_TENANT_ID, MS_GRAPH_CLIENT_ID"
        )

    if not client_secret and not cert_path:
        raise ValueError(
            "No client credential set. Required: "
            "MS_GRAPH_CLIENT_SECRET or SHAREPOINT_CERTIFICATE_PATH"
        )

    return AzureCredentials(
        tenant_id=tenant_id,
        client_id=client_id,
        client_secret=client_secret or None,
        certificate_path=cert_path or None,
        certificate_password=cert_password or None,
    )


@dataclass
class ProvisioningConfig:
    """Settings for site group provisioning.

    Loaded from config/provisioning.json when present.
    """

    group_description: str = DEFAULT_GROUP_DESCRIPTION
    login_prefix: str = DEFAULT_LOGIN_PREFIX
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def get_project_root() -> Path:
    """Get the project root directory."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Could not find project root (no pyproject.toml found)")


def load_provisioning_config(config_path: Path | str | None = None) -> ProvisioningConfig:
    """Load provisioning settings.

    Args:
        config_path: Path to a JSON config file. If None, uses
            config/provisioning.json under the project root when it exists.

    Returns:
        ProvisioningConfig, with defaults for anything not configured
    """
    load_dotenv()

    if config_path is None:
        try:
            config_path = get_project_root() / "config" / "provisioning.json"
        except RuntimeError:
            config_path = None
    elif not Path(config_path).exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    config_data: dict = {}
    if config_path is not None and Path(config_path).exists():
        with Path(config_path).open() as f:
            config_data = json.load(f)

    description = os.getenv("SITE_GROUP_DESCRIPTION") or config_data.get(
        "group_description", DEFAULT_GROUP_DESCRIPTION
    )

    return ProvisioningConfig(
        group_description=description,
        login_prefix=config_data.get("login_prefix", DEFAULT_LOGIN_PREFIX),
        request_timeout=float(config_data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)),
    )
