"""Shared pytest fixtures."""

from unittest.mock import MagicMock

import pytest

from sitegroups.entra.groups import DirectoryGroup
from sitegroups.sharepoint.client import SiteGroup


@pytest.fixture
def sample_manifest_content():
    """Sample manifest CSV with a header row."""
    return """SiteUrl,GroupName,PermissionLevel,EntraGroupName
https://contoso.sharepoint.com/sites/a,Team A,Read,Team-A-SG
https://contoso.sharepoint.com/sites/b,Team B,Contribute,
https://contoso.sharepoint.com/sites/c,Team C,,Team-C-SG
"""


@pytest.fixture
def manifest_file(tmp_path, sample_manifest_content):
    """Sample manifest written to disk."""
    path = tmp_path / "groups.csv"
    path.write_text(sample_manifest_content, encoding="utf-8")
    return path


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set mock environment variables for testing."""
    monkeypatch.setenv("MS_GRAPH_TENANT_ID", "test-tenant-id")
    monkeypatch.setenv("MS_GRAPH_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("MS_GRAPH_CLIENT_SECRET", "test-client-secret")
    monkeypatch.delenv("SHAREPOINT_CERTIFICATE_PATH", raising=False)
    monkeypatch.delenv("SHAREPOINT_CERTIFICATE_PASSWORD", raising=False)


@pytest.fixture
def mock_graph_client():
    """Mock MS Graph client for testing."""
    client = MagicMock()
    return client


@pytest.fixture
def mock_credential():
    """Mock Azure credential returning a fixed token."""
    credential = MagicMock()
    credential.get_token.return_value = MagicMock(token="test-token")
    return credential


class FakeSite:
    """In-memory stand-in for a SharePointSite session."""

    def __init__(self, service: "FakeSiteService", site_url: str) -> None:
        self.service = service
        self.site_url = site_url

    async def __aenter__(self):
        self.service._record("open", self.site_url)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.service._record("close", self.site_url)

    async def get_group(self, name):
        self.service._record("get_group", name)
        return self.service.groups.get((self.site_url, name))

    async def create_group(self, name, description):
        self.service._record("create_group", name)
        group = SiteGroup(id=len(self.service.groups) + 1, title=name, description=description)
        self.service.groups[(self.site_url, name)] = group
        return group

    async def grant_permission(self, group, level):
        self.service._record("grant_permission", level)
        self.service.permissions.setdefault((self.site_url, group.title), set()).add(level)

    async def add_member(self, group, login_name):
        self.service._record("add_member", login_name)
        self.service.members.setdefault((self.site_url, group.title), set()).add(login_name)


class FakeSiteService:
    """Remote site state shared across sessions, with optional failures."""

    def __init__(self) -> None:
        self.groups: dict[tuple[str, str], SiteGroup] = {}
        self.permissions: dict[tuple[str, str], set[str]] = {}
        self.members: dict[tuple[str, str], set[str]] = {}
        self.events: list[tuple[str, str]] = []
        self.failures: dict[str, Exception] = {}

    def __call__(self, site_url: str) -> FakeSite:
        return FakeSite(self, site_url)

    def _record(self, operation: str, arg: str) -> None:
        self.events.append((operation, arg))
        if operation in self.failures:
            raise self.failures[operation]

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.events]


class FakeResolver:
    """Directory resolver backed by a name -> id mapping."""

    def __init__(self, groups: dict[str, str] | None = None) -> None:
        self.groups = groups or {}
        self.calls: list[str] = []

    async def resolve(self, name):
        self.calls.append(name)
        group_id = self.groups.get(name)
        if group_id is None:
            return None
        return DirectoryGroup(id=group_id, display_name=name)


@pytest.fixture
def site_service():
    """Fake SharePoint site service."""
    return FakeSiteService()


@pytest.fixture
def fake_resolver():
    """Fake resolver knowing a couple of directory groups."""
    return FakeResolver({"Team-A-SG": "g-123", "Team-C-SG": "g-789"})
