#!filepath: tests/test_cli.py
import pytest
import yaml
from typer.testing import CliRunner

from ibonarium import __version__
from ibonarium.cli import app
from ibonarium.persistence.kv_store import InMemoryKeyValueStore
from ibonarium.workflows.lab import build_lab

runner = CliRunner()


@pytest.fixture(autouse=True)
def run_in_tmp(tmp_path, monkeypatch):
    # logs/ and .env are resolved against the working directory
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("IBONARIUM_SEED", raising=False)
    monkeypatch.delenv("IBONARIUM_SNAPSHOT_PATH", raising=False)


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert f"v{__version__}" in result.stdout


def test_simulate_prints_layers():
    result = runner.invoke(app, ["simulate", "--ticks", "20", "--seed", "7"])

    assert result.exit_code == 0, result.stdout
    assert "Global harmony" in result.stdout
    assert "Pulse: 7.83Hz" in result.stdout


def test_simulate_is_reproducible():
    first = runner.invoke(app, ["simulate", "--ticks", "50", "--seed", "11"])
    second = runner.invoke(app, ["simulate", "--ticks", "50", "--seed", "11"])

    def stats(out):
        return [line for line in out.splitlines() if "Stability:" in line or "MagSTRESS" in line]

    assert stats(first.stdout) == stats(second.stdout)


@pytest.mark.parametrize("args", [
    ["simulate", "--ticks", "0"],
    ["simulate", "--seed", "-1"],
    ["run", "--duration", "-5"],
])
def test_bad_input_exits_with_code_2(args):
    result = runner.invoke(app, args)

    assert result.exit_code == 2


def test_missing_config_file_exits_with_code_2():
    result = runner.invoke(app, ["simulate", "--config", "nope.yml"])

    assert result.exit_code == 2
    assert "config file not found" in result.stdout


@pytest.mark.parametrize("command", ["simulate", "run", "snapshot"])
def test_non_integer_seed_env_exits_with_code_2(monkeypatch, command):
    monkeypatch.setenv("IBONARIUM_SEED", "abc")

    result = runner.invoke(app, [command])

    assert result.exit_code == 2
    assert "IBONARIUM_SEED" in result.stdout


def test_invalid_yaml_value_exits_with_code_2(tmp_path):
    bad = tmp_path / "bad.yml"
    bad.write_text(yaml.safe_dump({"scheduler": {"tick_interval": -1}}), encoding="utf-8")

    result = runner.invoke(app, ["simulate", "--config", str(bad)])

    assert result.exit_code == 2
    assert result.exception is None or isinstance(result.exception, SystemExit)


class FailingKeyValueStore:
    def get(self, key):
        return None

    def set(self, key, value):
        raise OSError("disk full")


def _offline_lab_factory(monkeypatch, kv_store):
    built = []

    def factory(cfg, **kwargs):
        lab = build_lab(cfg, kv_store=kv_store, offline=True)
        built.append(lab)
        return lab

    monkeypatch.setattr("ibonarium.cli.build_lab", factory)
    return built


def test_snapshot_saves_and_reports(monkeypatch):
    kv = InMemoryKeyValueStore()
    built = _offline_lab_factory(monkeypatch, kv)

    result = runner.invoke(app, ["snapshot"])

    assert result.exit_code == 0, result.stdout
    assert "saved ibonarium_snapshot" in result.stdout
    assert kv.get("ibonarium_snapshot")["state"]["time"]["pulse"] == 7.83
    assert built[0].store.closed


def test_snapshot_shuts_lab_down_when_save_fails(monkeypatch):
    built = _offline_lab_factory(monkeypatch, FailingKeyValueStore())

    result = runner.invoke(app, ["snapshot"])

    assert isinstance(result.exception, OSError)
    assert built[0].store.closed
    assert built[0].sync.cancelled
