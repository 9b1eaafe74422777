"""Bulk provisioning of SharePoint site groups linked to Entra ID groups."""

__version__ = "0.1.0"
