"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from mcm_placement.config import AuthMode, LogLevel, PlacementConfig


class TestPlacementConfig:
    """Tests for PlacementConfig."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MCM_PLACEMENT_REGISTRY_POLL_INTERVAL", raising=False)
        config = PlacementConfig(_env_file=None)

        assert config.auth_mode == AuthMode.AUTO
        assert config.registry_group == "clusterregistry.k8s.io"
        assert config.registry_version == "v1alpha1"
        assert config.registry_plural == "clusters"
        assert config.registry_poll_interval == 10.0
        assert config.log_level == LogLevel.INFO

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MCM_PLACEMENT_AUTH_MODE", "kubeconfig")
        monkeypatch.setenv("MCM_PLACEMENT_KUBECONFIG_CONTEXT", "hub")
        monkeypatch.setenv("MCM_PLACEMENT_REGISTRY_POLL_INTERVAL", "2.5")
        monkeypatch.setenv("MCM_PLACEMENT_LOG_LEVEL", "DEBUG")

        config = PlacementConfig(_env_file=None)

        assert config.auth_mode == AuthMode.KUBECONFIG
        assert config.kubeconfig_context == "hub"
        assert config.registry_poll_interval == 2.5
        assert config.log_level == LogLevel.DEBUG

    def test_poll_interval_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            PlacementConfig(_env_file=None, registry_poll_interval=0)


class TestEffectiveAuthMode:
    """Tests for resolving the AUTO auth mode."""

    def test_explicit_mode_is_kept(self) -> None:
        config = PlacementConfig(_env_file=None, auth_mode=AuthMode.IN_CLUSTER)

        assert config.effective_auth_mode() == AuthMode.IN_CLUSTER

    def test_auto_with_service_account(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        token = tmp_path / "token"
        token.write_text("secret")
        monkeypatch.setattr("mcm_placement.config.SERVICE_ACCOUNT_TOKEN_PATH", token)

        config = PlacementConfig(_env_file=None, auth_mode=AuthMode.AUTO)

        assert config.effective_auth_mode() == AuthMode.IN_CLUSTER

    def test_auto_without_service_account(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setattr(
            "mcm_placement.config.SERVICE_ACCOUNT_TOKEN_PATH", tmp_path / "missing"
        )

        config = PlacementConfig(_env_file=None, auth_mode=AuthMode.AUTO)

        assert config.effective_auth_mode() == AuthMode.KUBECONFIG
