"""Unit tests for the shedctl command line."""

import json
import os
from unittest.mock import AsyncMock, patch

import pytest
import yaml
from click.testing import CliRunner

from config import reset_config
from errors import RegistryError
from helpers import make_result
from main import cli, default_state_file
from models import RepositoryResource, RepositoryState
from plugins.registry import reset_registry
from state import load_resource, save_resource


@pytest.fixture(autouse=True)
def fresh_globals():
    reset_registry()
    reset_config()
    yield
    reset_registry()
    reset_config()


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def patched_client(mock_client):
    with patch("main.get_client", AsyncMock(return_value=mock_client)):
        yield mock_client


@pytest.fixture
def spec_file(tmp_path, sample_attributes):
    path = tmp_path / "fastqc.yaml"
    path.write_text(yaml.safe_dump(sample_attributes))
    return path


@pytest.fixture
def installed_state_file(tmp_path, sample_spec):
    path = tmp_path / "fastqc.state.json"
    save_resource(
        RepositoryResource(
            spec=sample_spec, state=RepositoryState.from_result(make_result())
        ),
        str(path),
    )
    return path


class TestStartup:
    def test_invalid_client_setting_is_reported(self, runner, spec_file):
        with patch.dict(os.environ, {"GALAXY_TIMEOUT": "soon"}):
            result = runner.invoke(cli, ["install", str(spec_file)])

        assert result.exit_code == 1
        assert "Error: GALAXY_TIMEOUT must be a whole number of seconds" in (
            result.output
        )


class TestDefaultStateFile:
    def test_replaces_extension(self):
        assert default_state_file("specs/fastqc.yaml") == "specs/fastqc.state.json"


class TestInstall:
    """Tests for `shedctl install`."""

    def test_install_writes_state(self, runner, patched_client, spec_file, tmp_path):
        result = runner.invoke(cli, ["install", str(spec_file), "-o", "json"])

        assert result.exit_code == 0, result.output
        patched_client.install.assert_awaited_once_with(
            "toolshed.example.org", "devteam", "fastqc", "", False, False, False, "", ""
        )
        resource = load_resource(str(tmp_path / "fastqc.state.json"))
        assert resource.id == "f2db41e1fa331b3e"
        assert resource.state.status == "Installed"
        assert '"id": "f2db41e1fa331b3e"' in result.output

    def test_install_json_spec_and_custom_state_file(
        self, runner, patched_client, tmp_path, sample_attributes
    ):
        sample_attributes["remove_from_disk"] = False
        spec_path = tmp_path / "fastqc.json"
        spec_path.write_text(json.dumps(sample_attributes))
        state_path = tmp_path / "custom.json"

        result = runner.invoke(
            cli, ["install", str(spec_path), "--state-file", str(state_path)]
        )

        assert result.exit_code == 0, result.output
        assert load_resource(str(state_path)).spec.remove_from_disk is False

    def test_install_table_output(self, runner, patched_client, spec_file):
        result = runner.invoke(cli, ["install", str(spec_file)])

        assert result.exit_code == 0, result.output
        assert "installed_changeset_revision" in result.output
        assert "e7b2202befea" in result.output

    def test_conflicting_placement_fails_before_install(
        self, runner, patched_client, tmp_path, sample_attributes
    ):
        sample_attributes["tool_panel_section_id"] = "ngs_qc"
        sample_attributes["new_tool_panel_section_label"] = "Quality Control"
        spec_path = tmp_path / "fastqc.yaml"
        spec_path.write_text(yaml.safe_dump(sample_attributes))

        result = runner.invoke(cli, ["install", str(spec_path)])

        assert result.exit_code == 1
        assert "Error:" in result.output
        patched_client.install.assert_not_called()
        assert not (tmp_path / "fastqc.state.json").exists()

    def test_already_installed_fails_without_state(
        self, runner, patched_client, spec_file, tmp_path
    ):
        patched_client.install.return_value = []

        result = runner.invoke(cli, ["install", str(spec_file)])

        assert result.exit_code == 1
        assert (
            "Error: Repository toolshed.example.org/devteam/fastqc/ already installed"
            in result.output
        )
        assert not (tmp_path / "fastqc.state.json").exists()

    def test_many_results_warns_and_succeeds(
        self, runner, patched_client, spec_file, tmp_path
    ):
        patched_client.install.return_value = [make_result("aaa"), make_result("bbb")]

        result = runner.invoke(cli, ["install", str(spec_file)])

        assert result.exit_code == 0, result.output
        assert "Warning: Unexpected number of repositories created: 2" in result.output
        assert "Repository IDs: ['aaa', 'bbb']" in result.output
        assert load_resource(str(tmp_path / "fastqc.state.json")).id == "aaa"

    def test_registry_error_fails(self, runner, patched_client, spec_file):
        patched_client.install.side_effect = RegistryError("connection refused")

        result = runner.invoke(cli, ["install", str(spec_file)])

        assert result.exit_code == 1
        assert "Error: connection refused" in result.output

    def test_refuses_to_overwrite_tracked_repository(
        self, runner, patched_client, spec_file, installed_state_file
    ):
        result = runner.invoke(
            cli, ["install", str(spec_file), "-s", str(installed_state_file)]
        )

        assert result.exit_code == 1
        assert "already tracks an installed repository" in result.output
        patched_client.install.assert_not_called()

    def test_unparseable_spec(self, runner, patched_client, tmp_path):
        spec_path = tmp_path / "broken.yaml"
        spec_path.write_text("name: [unclosed")

        result = runner.invoke(cli, ["install", str(spec_path)])

        assert result.exit_code == 1
        assert "Could not parse" in result.output

    def test_spec_must_be_mapping(self, runner, patched_client, tmp_path):
        spec_path = tmp_path / "list.yaml"
        spec_path.write_text("- fastqc\n")

        result = runner.invoke(cli, ["install", str(spec_path)])

        assert result.exit_code == 1
        assert "must contain a mapping" in result.output


class TestRefresh:
    """Tests for `shedctl refresh`."""

    def test_refresh_updates_state(
        self, runner, patched_client, installed_state_file
    ):
        patched_client.get.return_value = make_result(status="Error", ctx_rev="30")

        result = runner.invoke(cli, ["refresh", str(installed_state_file)])

        assert result.exit_code == 0, result.output
        patched_client.get.assert_awaited_once_with("f2db41e1fa331b3e")
        state = load_resource(str(installed_state_file)).state
        assert state.status == "Error"
        assert state.ctx_rev == "30"

    def test_refresh_reports_drift(self, runner, patched_client, installed_state_file):
        patched_client.get.return_value = make_result(deleted=True)

        result = runner.invoke(cli, ["refresh", str(installed_state_file)])

        assert result.exit_code == 0, result.output
        assert "is no longer installed" in result.output
        patched_client.install.assert_not_called()

    def test_refresh_error_keeps_state(
        self, runner, patched_client, installed_state_file
    ):
        before = installed_state_file.read_text()
        patched_client.get.side_effect = RegistryError("not found", 404)

        result = runner.invoke(cli, ["refresh", str(installed_state_file)])

        assert result.exit_code == 1
        assert "Error: not found" in result.output
        assert installed_state_file.read_text() == before


class TestUninstall:
    """Tests for `shedctl uninstall`."""

    def test_uninstall_removes_state_file(
        self, runner, patched_client, installed_state_file
    ):
        result = runner.invoke(cli, ["uninstall", str(installed_state_file), "--yes"])

        assert result.exit_code == 0, result.output
        patched_client.uninstall.assert_awaited_once_with("f2db41e1fa331b3e", True)
        assert not installed_state_file.exists()
        assert "Uninstalled repository f2db41e1fa331b3e" in result.output

    def test_uninstall_keep_on_disk(
        self, runner, patched_client, tmp_path, sample_attributes
    ):
        sample_attributes["remove_from_disk"] = False
        path = tmp_path / "keep.state.json"
        path.write_text(
            json.dumps(
                {
                    "spec": sample_attributes,
                    "state": {"id": "f2db41e1fa331b3e", "status": "Installed"},
                }
            )
        )

        result = runner.invoke(cli, ["uninstall", str(path), "--yes"])

        assert result.exit_code == 0, result.output
        patched_client.uninstall.assert_awaited_once_with("f2db41e1fa331b3e", False)

    def test_uninstall_error_keeps_state_file(
        self, runner, patched_client, installed_state_file
    ):
        patched_client.uninstall.side_effect = RegistryError("server error", 500)

        result = runner.invoke(cli, ["uninstall", str(installed_state_file), "--yes"])

        assert result.exit_code == 1
        assert installed_state_file.exists()
        assert "State kept in" in result.output

    def test_uninstall_requires_confirmation(
        self, runner, patched_client, installed_state_file
    ):
        result = runner.invoke(
            cli, ["uninstall", str(installed_state_file)], input="n\n"
        )

        assert result.exit_code == 1
        patched_client.uninstall.assert_not_called()
        assert installed_state_file.exists()


class TestShow:
    """Tests for `shedctl show`."""

    def test_show_yaml(self, runner, patched_client):
        patched_client.get.return_value = make_result("abc")

        result = runner.invoke(cli, ["show", "abc", "-o", "yaml"])

        assert result.exit_code == 0, result.output
        patched_client.get.assert_awaited_once_with("abc")
        assert yaml.safe_load(result.output)["id"] == "abc"

    def test_show_not_found(self, runner, patched_client):
        patched_client.get.side_effect = RegistryError("No repository with id abc", 404)

        result = runner.invoke(cli, ["show", "abc"])

        assert result.exit_code == 1
        assert "Error: No repository with id abc" in result.output
