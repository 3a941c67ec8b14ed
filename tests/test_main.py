"""Tests for the mcm-placement command."""

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from mcm_placement.__main__ import build_config, load_placement, main, parse_args
from mcm_placement.utils.errors import NotFoundError, RegistryListError


@pytest.fixture
def placement_file(tmp_path: Path) -> Path:
    """A PlacementRule-style YAML file selecting prod clusters."""
    path = tmp_path / "placement.yaml"
    path.write_text(
        "apiVersion: apps.open-cluster-management.io/v1\n"
        "kind: PlacementRule\n"
        "metadata:\n"
        "  name: prod\n"
        "spec:\n"
        "  clusterSelector:\n"
        "    matchLabels:\n"
        "      env: prod\n"
    )
    return path


class TestLoadPlacement:
    """Tests for load_placement."""

    def test_placement_rule_spec(self, placement_file: Path) -> None:
        placement = load_placement(placement_file)

        assert placement.cluster_selector is not None
        assert placement.cluster_selector.match_labels == {"env": "prod"}

    def test_bare_json_placement(self, tmp_path: Path) -> None:
        path = tmp_path / "placement.json"
        path.write_text(json.dumps({"clusters": [{"name": "c1"}], "local": True}))

        placement = load_placement(path)

        assert [ref.name for ref in placement.clusters] == ["c1"]
        assert placement.local is True

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "placement.yaml"
        path.write_text("- c1\n- c2\n")

        with pytest.raises(ValueError):
            load_placement(path)

    def test_invalid_placement(self, tmp_path: Path) -> None:
        path = tmp_path / "placement.yaml"
        path.write_text("clusters: not-a-list\n")

        with pytest.raises(ValueError):
            load_placement(path)


class TestResolveCommand:
    """Tests for the resolve command."""

    def test_prints_resolved_clusters(
        self,
        placement_file: Path,
        registry: Any,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        with patch("mcm_placement.__main__.KubernetesClusterRegistry", return_value=registry):
            exit_code = main(["resolve", str(placement_file)])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output == {"local": False, "clusters": ["c1", "c2"]}

    def test_registry_not_installed(
        self,
        placement_file: Path,
        registry: Any,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        registry.installed = False

        with patch("mcm_placement.__main__.KubernetesClusterRegistry", return_value=registry):
            exit_code = main(["resolve", str(placement_file)])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)["clusters"] == []

    def test_registry_error(self, placement_file: Path) -> None:
        reader = MagicMock()
        reader.list_clusters.side_effect = RegistryListError("forbidden", status=403)

        with patch("mcm_placement.__main__.KubernetesClusterRegistry", return_value=reader):
            assert main(["resolve", str(placement_file)]) == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        assert main(["resolve", str(tmp_path / "missing.yaml")]) == 1


class TestWatchRegistryCommand:
    """Tests for the watch-registry command."""

    def test_already_ready(self) -> None:
        reader = MagicMock()
        reader.list_clusters.return_value = []

        with (
            patch("mcm_placement.__main__.KubernetesClusterRegistry", return_value=reader),
            patch("mcm_placement.__main__.exit_for_restart") as mock_exit,
        ):
            assert main(["watch-registry"]) == 0

        mock_exit.assert_not_called()

    def test_exits_once_ready(self) -> None:
        reader = MagicMock()
        reader.list_clusters.side_effect = [NotFoundError("clusters"), []]

        with (
            patch("mcm_placement.__main__.KubernetesClusterRegistry", return_value=reader),
            patch("mcm_placement.__main__.exit_for_restart") as mock_exit,
        ):
            assert main(["watch-registry", "--interval", "0.01"]) == 0

        mock_exit.assert_called_once_with()

    def test_invalid_interval(self) -> None:
        assert main(["watch-registry", "--interval", "-1"]) == 2

    def test_zero_interval_is_rejected(self) -> None:
        assert main(["watch-registry", "--interval", "0"]) == 2

    def test_interval_overrides_default(self) -> None:
        config = build_config(parse_args(["watch-registry", "--interval", "2.5"]))

        assert config.registry_poll_interval == 2.5
