"""Core utilities for site group provisioning."""

from sitegroups.core.config import (
    AzureCredentials,
    ProvisioningConfig,
    get_azure_credentials,
    load_provisioning_config,
)
from sitegroups.core.msgraph_client import get_credential, get_graph_client

__all__ = [
    "AzureCredentials",
    "ProvisioningConfig",
    "get_azure_credentials",
    "get_credential",
    "get_graph_client",
    "load_provisioning_config",
]
