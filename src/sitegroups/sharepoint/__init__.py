"""SharePoint site group operations."""
