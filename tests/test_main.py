import sys

import pytest

from cliroute.__main__ import bootstrap, find_cliroute_config, main

CONFIG = """
handlers:
  - name: status
    route: status
    action: cliroute_main_actions.status
"""

ACTIONS = """
def status() -> int:
    return 5
"""


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("CLIROUTE_CONFIG", raising=False)
    monkeypatch.chdir(project)
    monkeypatch.setattr(sys, "path", list(sys.path))
    yield project
    sys.modules.pop("cliroute_main_actions", None)


def test_no_config_found(workspace):
    assert find_cliroute_config() is None
    with pytest.raises(SystemExit) as excinfo:
        main(["prog"])
    assert excinfo.value.code == 1


def test_config_in_working_directory(workspace):
    path = workspace / "cliroute.yaml"
    path.write_text(CONFIG)
    assert find_cliroute_config() == path


def test_environment_variable_wins(workspace, tmp_path, monkeypatch):
    (workspace / "cliroute.yaml").write_text(CONFIG)
    other = tmp_path / "other.toml"
    other.write_text("handlers = []\n")
    monkeypatch.setenv("CLIROUTE_CONFIG", str(other))
    assert find_cliroute_config() == other


def test_config_in_home_directory(workspace, tmp_path):
    config_dir = tmp_path / "home" / ".config" / "cliroute"
    config_dir.mkdir(parents=True)
    path = config_dir / "cliroute.toml"
    path.write_text("handlers = []\n")
    assert find_cliroute_config() == path


def test_bootstrap_adds_config_directory_to_path(workspace):
    (workspace / "cliroute.yaml").write_text(CONFIG)
    assert bootstrap() == workspace / "cliroute.yaml"
    assert sys.path[0] == str(workspace)


def test_main_routes_argv(workspace):
    (workspace / "cliroute.yaml").write_text(CONFIG)
    (workspace / "cliroute_main_actions.py").write_text(ACTIONS)
    with pytest.raises(SystemExit) as excinfo:
        main(["prog", "status"])
    assert excinfo.value.code == 5


def test_main_reports_invalid_config(workspace):
    (workspace / "cliroute.yaml").write_text("handlers:\n  - name: status\n    action: nowhere.run\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["prog"])
    assert excinfo.value.code == 1
