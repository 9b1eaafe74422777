"""Entra ID directory lookups."""

from sitegroups.entra.groups import DirectoryGroup, DirectoryGroupResolver

__all__ = ["DirectoryGroup", "DirectoryGroupResolver"]
