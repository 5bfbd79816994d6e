"""CLI commands via Typer's CliRunner: run, plan, interpreter, config, --version."""

import json
import shlex

import pytest
from typer.testing import CliRunner

from plansim.cli.commands.interpreter import parse_command
from plansim.cli.main import app
from plansim.core.plan import Param, Plan
from plansim.exceptions import MalformedPlan
from plansim.types import Endpoint, Step
from plansim.version import __version__

cli = CliRunner()

INTERPRETER_MODULE = '''
import hashlib

from plansim.types import CallResult


class CountingInterpreter:
    def __init__(self):
        self.count = 0

    def invoke(self, store, program_id, params, method, max_units):
        self.count += 1
        call_id = hashlib.sha256(program_id + method.encode() + bytes([self.count])).digest()
        return CallResult(call_id=call_id, results=[b"ok"], balance=max_units // 2)
'''


def _json_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep a developer's .env and PLANSIM_* variables out of CLI tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PLANSIM_INTERPRETER", raising=False)
    monkeypatch.delenv("PLANSIM_DEBUG", raising=False)


@pytest.fixture
def counting_interpreter(tmp_path, monkeypatch):
    (tmp_path / "plansim_cli_interp.py").write_text(INTERPRETER_MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.setenv("PLANSIM_INTERPRETER", "plansim_cli_interp:CountingInterpreter")


class TestVersion:

    def test_version_flag(self):
        result = cli.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"plansim v{__version__}" in result.output


class TestRunCommand:

    def test_inline_key_step_as_json(self, step_json):
        result = cli.invoke(app, ["run", "--step", step_json("key", "key_create", [("ed25519", "alice")]), "--json"])
        assert result.exit_code == 0
        [response] = _json_lines(result.output)
        assert response["id"] == 0
        assert response["endpoint"] == "key"
        assert response["result"]["msg"].startswith("created named key with address ")
        assert "error" not in response

    def test_step_from_file(self, tmp_path, step_json, program_file):
        path = tmp_path / "create.json"
        path.write_text(step_json("execute", "program_create", [("string", str(program_file))]))
        result = cli.invoke(app, ["run", "-f", str(path), "--json"])
        assert result.exit_code == 0
        [response] = _json_lines(result.output)
        assert len(bytes.fromhex(response["result"]["id"])) == 32

    def test_panel_output(self, step_json):
        result = cli.invoke(app, ["run", "-s", step_json("key", "key_create", [("ed25519", "alice")])])
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_no_source_exits_1(self):
        result = cli.invoke(app, ["run"])
        assert result.exit_code == 1
        assert "--step" in result.output

    def test_rejected_step_exits_1(self, step_json):
        result = cli.invoke(app, ["run", "--step", step_json("execute", "call", [("id", "step_3")])])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_call_without_interpreter_is_failed_response(self, step_json):
        program_id = bytes(range(32))
        result = cli.invoke(app, ["run", "--json", "--step", step_json("execute", "call", [("id", program_id)])])
        assert result.exit_code == 1
        [response] = _json_lines(result.output)
        assert "no program interpreter" in response["error"]


class TestPlanCommand:

    def _write_plan(self, tmp_path, plan: Plan):
        path = tmp_path / "plan.json"
        path.write_text(plan.to_json())
        return str(path)

    def test_key_and_program_plan(self, tmp_path, program_file):
        plan = Plan(caller_key="alice")
        plan.add_step(Step.create_key("alice"))
        plan.add_step(Step.create_program(str(program_file)))
        result = cli.invoke(app, ["plan", self._write_plan(tmp_path, plan), "--json"])
        assert result.exit_code == 0
        responses = _json_lines(result.output)
        assert [r["id"] for r in responses] == [0, 1]

    def test_plan_with_calls(self, tmp_path, program_file, counting_interpreter):
        plan = Plan(caller_key="alice")
        plan.add_step(Step.create_key("alice"))
        program = plan.add_step(Step.create_program(str(program_file)))
        plan.add_step(Step(
            endpoint=Endpoint.EXECUTE, method="init", max_units=100,
            params=[Param.id(program), Param.ed25519("alice")],
        ))
        plan.add_step(Step(endpoint=Endpoint.READONLY, method="get", params=[Param.id(program)]))

        result = cli.invoke(app, ["plan", self._write_plan(tmp_path, plan), "--json"])
        assert result.exit_code == 0, result.output
        responses = _json_lines(result.output)
        assert responses[2]["result"]["balance"] == 50
        assert "balance" not in responses[3]["result"]

    def test_aborted_plan_exits_1(self, tmp_path):
        plan = Plan()
        plan.add_step(Step.create_key("alice"))
        plan.add_step(Step(endpoint=Endpoint.READONLY, method="get", params=[Param.id("step_0")]))
        result = cli.invoke(app, ["plan", self._write_plan(tmp_path, plan)])
        assert result.exit_code == 1
        assert "Aborted" in result.output

    def test_missing_plan_file(self, tmp_path):
        result = cli.invoke(app, ["plan", str(tmp_path / "none.json")])
        assert result.exit_code == 1


class TestInterpreterCommand:

    def test_step_references_span_lines(self, step_json, program_file, counting_interpreter):
        lines = [
            step_json("key", "key_create", [("ed25519", "alice")]),
            "run --step " + shlex.quote(step_json("execute", "program_create", [("string", str(program_file))])),
            "run -s " + shlex.quote(step_json("execute", "transfer", [("id", "step_1"), ("ed25519", "alice")], 40)),
            "exit",
            step_json("key", "key_create", [("ed25519", "never")]),
        ]
        result = cli.invoke(app, ["interpreter"], input="\n".join(lines) + "\n")
        assert result.exit_code == 0, result.output
        responses = _json_lines(result.output)
        assert [r["id"] for r in responses] == [0, 1, 2]
        assert responses[2]["result"]["balance"] == 20

    def test_file_command(self, tmp_path, step_json):
        path = tmp_path / "key.json"
        path.write_text(step_json("key", "key_create", [("ed25519", "alice")]))
        result = cli.invoke(app, ["interpreter"], input=f"run --file {path}\n")
        assert result.exit_code == 0
        assert len(_json_lines(result.output)) == 1

    def test_rejected_step_stops_with_error_response(self, step_json):
        lines = [
            step_json("key", "key_create", [("ed25519", "alice")]),
            step_json("readonly", "get", [("id", "step_0")]),
            step_json("key", "key_create", [("ed25519", "bob")]),
        ]
        result = cli.invoke(app, ["interpreter"], input="\n".join(lines) + "\n")
        assert result.exit_code == 1
        responses = _json_lines(result.output)
        assert len(responses) == 2
        assert responses[1]["id"] == 1
        assert responses[1]["error_kind"] == "unresolved_step_reference"

    def test_unknown_command_rejected(self):
        result = cli.invoke(app, ["interpreter"], input="launch rockets\n")
        assert result.exit_code == 1
        [response] = _json_lines(result.output)
        assert response["error_kind"] == "malformed_plan"


class TestParseCommand:

    def test_bare_json(self):
        assert parse_command('{"endpoint": "key"}') == ('{"endpoint": "key"}', None)

    def test_run_flags(self):
        assert parse_command("run --file steps/a.json") == (None, "steps/a.json")
        assert parse_command("run -s '{\"a\": 1}'") == ('{"a": 1}', None)

    @pytest.mark.parametrize("line", ["run --step", "run --bogus x", "walk -s x", "run -s 'unterminated"])
    def test_bad_lines(self, line):
        with pytest.raises(MalformedPlan):
            parse_command(line)


def test_config_command():
    result = cli.invoke(app, ["config"])
    assert result.exit_code == 0
    assert "Configuration" in result.output
    assert "debug" in result.output
