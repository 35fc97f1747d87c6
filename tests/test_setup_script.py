import importlib.util
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest


SETUP_PATH = Path(__file__).resolve().parent.parent / "scripts" / "setup.py"


@pytest.fixture
def setup_script():
    spec = importlib.util.spec_from_file_location("bench_setup_script", SETUP_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_run_command_success(setup_script, capsys):
    completed = MagicMock(stdout="ok\n")
    with patch.object(setup_script.subprocess, "run", return_value=completed) as run:
        assert setup_script.run_command("echo ok", "Echo") is True
    run.assert_called_once_with("echo ok", shell=True, check=True, capture_output=True, text=True)
    assert "Echo completed" in capsys.readouterr().out


def test_run_command_failure(setup_script, capsys):
    error = subprocess.CalledProcessError(1, "false", stderr="boom")
    with patch.object(setup_script.subprocess, "run", side_effect=error):
        assert setup_script.run_command("false", "Fail") is False
    out = capsys.readouterr().out
    assert "Fail failed" in out
    assert "boom" in out


def test_main_installs_project_and_chromium(setup_script):
    with patch.object(setup_script, "run_command", return_value=True) as run_command:
        setup_script.main()
    commands = [call.args[0] for call in run_command.call_args_list]
    assert "pip install -e" in commands[0]
    assert commands[1].endswith("-m playwright install chromium")


def test_main_exits_when_install_fails(setup_script):
    with patch.object(setup_script, "run_command", return_value=False):
        with pytest.raises(SystemExit):
            setup_script.main()
