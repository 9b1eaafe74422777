"""Tests for sitegroups.core.config."""

import json
from unittest.mock import patch

import pytest

from sitegroups.core.config import (
    DEFAULT_GROUP_DESCRIPTION,
    DEFAULT_LOGIN_PREFIX,
    get_azure_credentials,
    load_provisioning_config,
)


class TestGetAzureCredentials:
    """Tests for get_azure_credentials function."""

    def test_returns_credentials_when_set(self, mock_env_vars):
        # Patch load_dotenv to do nothing so our env vars are used
        with patch("sitegroups.core.config.load_dotenv"):
            creds = get_azure_credentials()

        assert creds.tenant_id == "test-tenant-id"
        assert creds.client_id == "test-client-id"
        assert creds.client_secret == "test-client-secret"
        assert creds.uses_certificate is False

    def test_certificate_without_secret(self, monkeypatch):
        monkeypatch.setenv("MS_GRAPH_TENANT_ID", "tenant")
        monkeypatch.setenv("MS_GRAPH_CLIENT_ID", "client")
        monkeypatch.delenv("MS_GRAPH_CLIENT_SECRET", raising=False)
        monkeypatch.setenv("SHAREPOINT_CERTIFICATE_PATH", "/certs/app.pem")
        monkeypatch.setenv("SHAREPOINT_CERTIFICATE_PASSWORD", "pw")

        with patch("sitegroups.core.config.load_dotenv"):
            creds = get_azure_credentials()

        assert creds.uses_certificate is True
        assert creds.client_secret is None
        assert creds.certificate_path == "/certs/app.pem"
        assert creds.certificate_password == "pw"

    def test_raises_when_tenant_id_missing(self, monkeypatch):
        monkeypatch.delenv("MS_GRAPH_TENANT_ID", raising=False)
        monkeypatch.setenv("MS_GRAPH_CLIENT_ID", "client")
        monkeypatch.setenv("MS_GRAPH_CLIENT_SECRET", "secret")

        with (
            patch("sitegroups.core.config.load_dotenv"),
            pytest.raises(ValueError, match="MS_GRAPH_TENANT_ID"),
        ):
            get_azure_credentials()

    def test_raises_when_client_id_missing(self, monkeypatch):
        monkeypatch.setenv("MS_GRAPH_TENANT_ID", "tenant")
        monkeypatch.delenv("MS_GRAPH_CLIENT_ID", raising=False)
        monkeypatch.setenv("MS_GRAPH_CLIENT_SECRET", "secret")

        with (
            patch("sitegroups.core.config.load_dotenv"),
            pytest.raises(ValueError, match="MS_GRAPH_CLIENT_ID"),
        ):
            get_azure_credentials()

    def test_raises_when_no_secret_or_certificate(self, monkeypatch):
        monkeypatch.setenv("MS_GRAPH_TENANT_ID", "tenant")
        monkeypatch.setenv("MS_GRAPH_CLIENT_ID", "client")
        monkeypatch.delenv("MS_GRAPH_CLIENT_SECRET", raising=False)
        monkeypatch.delenv("SHAREPOINT_CERTIFICATE_PATH", raising=False)

        with (
            patch("sitegroups.core.config.load_dotenv"),
            pytest.raises(ValueError, match="SHAREPOINT_CERTIFICATE_PATH"),
        ):
            get_azure_credentials()


class TestLoadProvisioningConfig:
    """Tests for load_provisioning_config function."""

    def test_defaults_when_no_config_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SITE_GROUP_DESCRIPTION", raising=False)

        with (
            patch("sitegroups.core.config.load_dotenv"),
            patch("sitegroups.core.config.get_project_root", return_value=tmp_path),
        ):
            config = load_provisioning_config()

        assert config.group_description == DEFAULT_GROUP_DESCRIPTION
        assert config.login_prefix == DEFAULT_LOGIN_PREFIX
        assert config.request_timeout == 30.0

    def test_loads_values_from_project_config(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SITE_GROUP_DESCRIPTION", raising=False)
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "provisioning.json").write_text(
            json.dumps({"group_description": "Team access", "request_timeout": 60})
        )

        with (
            patch("sitegroups.core.config.load_dotenv"),
            patch("sitegroups.core.config.get_project_root", return_value=tmp_path),
        ):
            config = load_provisioning_config()

        assert config.group_description == "Team access"
        assert config.request_timeout == 60.0
        assert config.login_prefix == DEFAULT_LOGIN_PREFIX

    def test_env_overrides_description(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SITE_GROUP_DESCRIPTION", "From env")
        config_file = tmp_path / "custom.json"
        config_file.write_text(json.dumps({"group_description": "From file"}))

        with patch("sitegroups.core.config.load_dotenv"):
            config = load_provisioning_config(config_file)

        assert config.group_description == "From env"

    def test_explicit_missing_file_raises(self, tmp_path):
        with (
            patch("sitegroups.core.config.load_dotenv"),
            pytest.raises(FileNotFoundError),
        ):
            load_provisioning_config(tmp_path / "missing.json")
