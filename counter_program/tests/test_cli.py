from __future__ import annotations

import json
import logging

import pytest
from typer.testing import CliRunner

from counter_program.cli import app
from counter_program.config import DEFAULT_PROGRAM_ID, get_config
from counter_program.pda import counter_address
from counter_program.types.ints import U64_MAX
from counter_program.version import ABI_VERSION, __version__, git_describe

runner = CliRunner()


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    for var in ("COUNTER_PROGRAM_ID", "COUNTER_LOG_LEVEL", "COUNTER_LOG_FORMAT", "COUNTER_VERIFY_SIGNATURES"):
        monkeypatch.delenv(var, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_rent_default_and_explicit():
    assert runner.invoke(app, ["rent"]).stdout.strip() == "960480"
    assert runner.invoke(app, ["rent", "0"]).stdout.strip() == "890880"


def test_derive_matches_library():
    owner = "ab" * 32
    result = runner.invoke(app, ["derive", "0x" + owner])
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    addr, bump = counter_address(bytes.fromhex(owner), DEFAULT_PROGRAM_ID)
    assert out == {"address": "0x" + addr.hex(), "bump": bump, "program_id": "0x" + DEFAULT_PROGRAM_ID.hex()}


def test_derive_rejects_short_owner():
    result = runner.invoke(app, ["derive", "abcd"])
    assert result.exit_code != 0


def test_decode_increment():
    payload = (b"\x01" + (101).to_bytes(8, "little")).hex()
    result = runner.invoke(app, ["decode", payload])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"op": "IncrementCounter", "opcode": 1, "increment_by": 101}


def test_decode_rejects_unknown_opcode():
    result = runner.invoke(app, ["decode", "09"])
    assert result.exit_code == 1


def test_demo_json_flow():
    result = runner.invoke(app, ["demo", "--json"])
    assert result.exit_code == 0, result.output
    steps = json.loads(result.stdout)
    assert [s["step"] for s in steps] == ["initialize", "increment", "close"]
    assert all(s["status"] == "success" for s in steps)
    assert [s["counter"] for s in steps] == [0, 101, None]
    assert steps[-1]["recipient"] == 960_480


def test_demo_table_output():
    result = runner.invoke(app, ["demo", "--increment-by", "7"])
    assert result.exit_code == 0, result.output
    assert "counter demo" in result.stdout
    assert "increment" in result.stdout


def test_version_verbose_reports_abi_and_describe(monkeypatch):
    monkeypatch.setenv("COUNTER_GIT_DESCRIBE", "v0.1.0-3-gabc1234-dirty")
    git_describe.cache_clear()
    try:
        result = runner.invoke(app, ["version", "--verbose"])
    finally:
        git_describe.cache_clear()
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {
        "version": __version__,
        "abi": ABI_VERSION,
        "describe": "v0.1.0-3-gabc1234-dirty",
        "dirty": True,
    }


@pytest.mark.parametrize(
    "argv",
    [
        ["demo", "--json", "--increment-by", str(U64_MAX + 1)],
        ["demo", "--json", "--increment-by", "-1"],
        ["rent", "--", "-1"],
    ],
)
def test_out_of_range_arguments_are_usage_errors(argv):
    result = runner.invoke(app, argv)
    assert result.exit_code == 2
    assert not isinstance(result.exception, (OverflowError, ValueError))


def test_demo_accepts_max_increment():
    result = runner.invoke(app, ["demo", "--json", "--increment-by", str(U64_MAX)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)[1]["counter"] == U64_MAX


def test_log_level_taken_from_env(monkeypatch):
    monkeypatch.setenv("COUNTER_LOG_LEVEL", "ERROR")
    assert runner.invoke(app, ["rent"]).exit_code == 0
    assert logging.getLogger().level == logging.ERROR
    assert runner.invoke(app, ["--log-level", "DEBUG", "rent"]).exit_code == 0
    assert logging.getLogger().level == logging.DEBUG
