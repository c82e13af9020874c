"""Tests for the DeployKit command line."""

import json
import re
import tempfile

import pytest
from click.testing import CliRunner

from deploykit.commands.deploy import RunDeploymentCommand
from deploykit.config import DeploymentInputs
from deploykit.main import cli
from deploykit.outputs import OutputWriter
from deploykit.services.session_cleaner import SessionCleaner
from deploykit.services.ssh_session import SessionCredentialManager


def _json_document(output: str) -> dict:
    """Pick the JSON document out of output that may also hold log lines."""
    match = re.search(r"^\{.*^\}", output, re.S | re.M)
    assert match, output
    return json.loads(match.group(0))


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Keep ~/.ssh and the temp dir inside tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    monkeypatch.delenv("SSH_AGENT_PID", raising=False)
    return tmp_path


class TestCli:
    """Test the click front door."""

    def test_parse_options_json(self):
        result = CliRunner().invoke(cli, ["parse-options", '--tag="v1.0" --flag', "--json"])

        assert result.exit_code == 0
        assert _json_document(result.output) == {"tokens": ["--tag=v1.0", "--flag"]}

    def test_deploy_requires_inputs(self, isolated_home, monkeypatch):
        output_file = isolated_home / "out"
        output_file.write_text("")
        monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))

        result = CliRunner().invoke(cli, ["deploy", "--environment", "production"])

        assert result.exit_code == 1
        content = output_file.read_text()
        assert "deployment-status<<" in content
        assert "\nfailed\n" in content

    def test_deploy_help_states_ssh_config_scope(self):
        result = CliRunner().invoke(cli, ["deploy", "--help"])

        assert result.exit_code == 0
        assert "GIT_SSH_COMMAND" in result.output

    def test_deploy_rejects_bad_verbosity(self):
        result = CliRunner().invoke(cli, ["deploy", "--verbosity", "loud"])

        assert result.exit_code == 2

    def test_private_key_file_and_inline_key_conflict(self, isolated_home):
        key = isolated_home / "key"
        key.write_text("KEY\n")

        result = CliRunner().invoke(
            cli,
            [
                "deploy",
                "--private-key-file",
                str(key),
                "--ssh-private-key",
                "OTHER",
                "--environment",
                "prod",
                "--revision",
                "abc",
            ],
        )

        assert result.exit_code == 1

    def test_cleanup_json(self, isolated_home):
        result = CliRunner().invoke(cli, ["cleanup", "--json"])

        assert result.exit_code == 0
        report = _json_document(result.output)
        assert report["removed"] == []
        assert report["sockets_removed"] == 0
        assert report["agent_terminated"] is False


class TestJsonMode:
    """JSON mode keeps stdout for the result document."""

    @pytest.mark.asyncio
    async def test_live_output_and_workflow_commands_go_to_stderr(
        self, monkeypatch, capsys, tmp_path, make_deployer, workdir, fake_agent, fake_add
    ):
        monkeypatch.setenv("GITHUB_ACTIONS", "true")
        make_deployer('echo "deploying hosts"')
        command = RunDeploymentCommand({}, json_output=True)
        logger = command.init_logger("deploy")
        orchestrator = command.build_orchestrator(logger, OutputWriter(tmp_path / "out"))
        orchestrator.credentials = SessionCredentialManager(
            logger,
            ssh_dir=tmp_path / "home" / ".ssh",
            temp_dir=tmp_path,
            agent_command=str(fake_agent),
            add_command=str(fake_add),
        )
        orchestrator.cleaner = SessionCleaner(
            logger, temp_dir=tmp_path, agent_command=str(fake_agent)
        )

        result = await orchestrator.run(
            DeploymentInputs(
                ssh_private_key="KEY",
                environment="production",
                revision="abc123",
                working_directory=str(workdir),
            )
        )
        command.output_json(result.to_dict())

        captured = capsys.readouterr()
        document = json.loads(captured.out)
        assert document["status"] == "success"
        assert document["output"] == "deploying hosts\n"
        assert "deploying hosts" in captured.err
        assert "::add-mask::KEY" in captured.err
        assert "::group::Deploying to production" in captured.err
