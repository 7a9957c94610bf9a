"""Tests for the command line interface."""

import stat

import pytest
from click.testing import CliRunner

from deploy_pilot.cli.main import Context, cli
from deploy_pilot.constants import PROJECT_CONFIG_FILE

FAKE_PM2 = """#!/bin/sh
case "$1" in
  describe) test -f "{state}" ;;
  start) touch "{state}" ;;
  *) exit 0 ;;
esac
"""

LOCAL_CONFIG = """\
project:
  name: app
build:
  commands: []
  artifact_dir: artifacts
  env_template: null
remote:
  app_dir: {app_dir}
  upload_dir: {upload_dir}
release:
  ownership_command: null
  install_command: test -f package-lock.json
supervisor:
  process_name: app
  binary: {pm2}
health:
  url: http://127.0.0.1:9/
  settle_seconds: 0
  interval_seconds: 0
  timeout: 2
"""


@pytest.fixture
def runner(monkeypatch):
    for name in ("DEPLOY_HOST", "DEPLOY_USER", "DEPLOY_SSH_KEY", "DEPLOY_PILOT_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


@pytest.fixture
def local_project(project_dir, host_dir, tmp_path, monkeypatch):
    pm2 = tmp_path / "pm2"
    pm2.write_text(FAKE_PM2.format(state=tmp_path / "pm2.state"))
    pm2.chmod(pm2.stat().st_mode | stat.S_IXUSR)
    (project_dir / PROJECT_CONFIG_FILE).write_text(LOCAL_CONFIG.format(
        app_dir=host_dir / "app",
        upload_dir=host_dir / "upload",
        pm2=pm2,
    ))
    monkeypatch.chdir(project_dir)
    return project_dir


class TestCliApp:
    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("init", "build", "deploy", "rollback", "snapshots", "status"):
            assert command in result.output

    def test_snapshots_subcommands(self, runner):
        result = runner.invoke(cli, ["snapshots", "--help"])
        assert result.exit_code == 0
        assert "list" in result.output
        assert "prune" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.3.0" in result.output

    def test_host_options_override_environment(self, runner, monkeypatch):
        monkeypatch.setenv("DEPLOY_HOST", "203.0.113.7")
        monkeypatch.setenv("DEPLOY_USER", "deployer")
        credentials = Context(host="198.51.100.2").credentials
        assert credentials.host == "198.51.100.2"
        assert credentials.user == "deployer"
        assert Context(user="ops").credentials.host == "203.0.113.7"


class TestInitCommand:
    def test_writes_config(self, runner, tmp_path):
        result = runner.invoke(cli, ["init", str(tmp_path), "--name", "shop"])
        assert result.exit_code == 0
        assert "name: shop" in (tmp_path / PROJECT_CONFIG_FILE).read_text()

    def test_refuses_to_overwrite(self, runner, tmp_path):
        runner.invoke(cli, ["init", str(tmp_path)])
        result = runner.invoke(cli, ["init", str(tmp_path)])
        assert result.exit_code == 1
        assert runner.invoke(cli, ["init", str(tmp_path), "--force"]).exit_code == 0


class TestDeployCommand:
    def test_requires_a_project(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(cli, ["deploy"])
        assert result.exit_code == 1
        assert PROJECT_CONFIG_FILE in result.output

    def test_skip_build_requires_artifact(self, runner, local_project):
        result = runner.invoke(cli, ["deploy", "--skip-build"])
        assert result.exit_code == 2

    def test_remote_deploy_requires_credentials(self, runner, local_project):
        result = runner.invoke(cli, ["deploy"])
        assert result.exit_code == 1
        assert "DEPLOY_HOST" in result.output

    def test_local_deploy_with_unreachable_service(self, runner, local_project, host_dir):
        result = runner.invoke(cli, ["deploy", "--local"])

        assert result.exit_code == 1
        assert "000" in result.output
        assert (host_dir / "app" / "dist" / "index.js").read_text() == "v1"

    def test_build_only(self, runner, local_project):
        result = runner.invoke(cli, ["build"])
        assert result.exit_code == 0
        assert list((local_project / "artifacts").glob("release-*.tar.gz"))


class TestSnapshotsCommand:
    def test_prune_requires_positive_keep(self, runner, local_project):
        result = runner.invoke(cli, ["snapshots", "prune", "--keep", "0", "--local"])
        assert result.exit_code == 2

    def test_list_empty(self, runner, local_project):
        result = runner.invoke(cli, ["snapshots", "list", "--local"])
        assert result.exit_code == 0
        assert "No snapshots found" in result.output

    def test_rollback_without_snapshot(self, runner, local_project):
        result = runner.invoke(cli, ["rollback", "--local", "--yes"])
        assert result.exit_code == 1
