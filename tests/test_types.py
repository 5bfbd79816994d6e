"""Unit tests for shared types: wire encoding of parameters, steps and responses."""

import base64
import json

import pytest
from pydantic import ValidationError

from plansim.exceptions import MultiResponseUnsupported
from plansim.types import (
    Endpoint, Parameter, ParamType, Response, Step, PROGRAM_CREATE,
    parse_program_id, program_id_to_str,
)


class TestParameter:

    def test_base64_value_is_decoded(self):
        param = Parameter.model_validate({"type": "string", "value": base64.b64encode(b"hello").decode()})
        assert param.value == b"hello"
        assert param.text == "hello"

    def test_text_is_strict_utf8(self):
        with pytest.raises(UnicodeDecodeError):
            Parameter(type=ParamType.KEY_ED25519, value=b"\xffa").text

    def test_bytes_value_kept_as_is(self):
        param = Parameter(type=ParamType.UINT64, value=b"\x01\x00")
        assert param.value == b"\x01\x00"

    def test_invalid_base64_rejected(self):
        with pytest.raises(ValidationError):
            Parameter.model_validate({"type": "string", "value": "not base64!"})

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            Parameter.model_validate({"type": "float", "value": ""})

    def test_dump_encodes_value(self):
        dumped = Parameter(type=ParamType.ID, value=b"step_3").model_dump(mode="json")
        assert dumped == {"type": "id", "value": base64.b64encode(b"step_3").decode()}


class TestStep:

    def test_camel_case_fields(self):
        step = Step.model_validate({
            "endpoint": "execute",
            "method": "transfer",
            "maxUnits": 5000,
            "callerKey": "alice",
            "params": [],
        })
        assert step.endpoint == Endpoint.EXECUTE
        assert step.max_units == 5000
        assert step.caller_key == "alice"

    def test_params_default_empty(self):
        step = Step.model_validate({"endpoint": "key", "method": "key_create"})
        assert step.params == []
        assert step.max_units == 0

    def test_negative_max_units_rejected(self):
        with pytest.raises(ValidationError):
            Step.model_validate({"endpoint": "execute", "maxUnits": -1})

    def test_create_program_uses_sentinel(self):
        step = Step.create_program("./token.wasm")
        assert step.endpoint == Endpoint.EXECUTE
        assert step.method == PROGRAM_CREATE
        assert step.params[0].type == ParamType.STRING
        assert step.params[0].value == b"./token.wasm"

    def test_create_key(self):
        step = Step.create_key("alice")
        assert step.endpoint == Endpoint.KEY
        assert step.params[0].type == ParamType.KEY_ED25519

    def test_dump_by_alias_matches_wire(self):
        data = json.loads(Step.create_key("alice").model_dump_json(by_alias=True, exclude_none=True))
        assert data["endpoint"] == "key"
        assert data["maxUnits"] == 0
        assert "callerKey" not in data


class TestResponse:

    def test_new_response_is_ok(self):
        resp = Response(id=2)
        assert resp.ok
        assert resp.get_tx_id() is None

    def test_set_error_clears_success_fields(self):
        resp = Response(id=1, endpoint=Endpoint.EXECUTE, method="call")
        resp.set_msg("hi")
        resp.set_tx_id("ab" * 32)
        resp.set_response(b"\x01")
        resp.set_balance(10)
        resp.set_timestamp(1700000000)

        resp.set_error(MultiResponseUnsupported("multi response not supported"))

        assert not resp.ok
        assert resp.error_kind == "multi_response_unsupported"
        assert resp.result.msg is None
        assert resp.result.id is None
        assert resp.result.response is None
        assert resp.result.balance is None
        assert resp.result.timestamp == 1700000000

    def test_set_error_with_plain_exception(self):
        resp = Response(id=0)
        resp.set_error(RuntimeError("boom"))
        assert resp.error == "boom"
        assert resp.error_kind == "RuntimeError"

    def test_json_shape(self):
        resp = Response(id=4, endpoint=Endpoint.READONLY, method="balance")
        resp.set_response(b"\x07")
        resp.set_timestamp(12)
        data = json.loads(resp.model_dump_json(exclude_none=True))
        assert data == {
            "id": 4,
            "endpoint": "readonly",
            "method": "balance",
            "result": {"timestamp": 12, "response": base64.b64encode(b"\x07").decode()},
        }


class TestProgramIds:

    def test_raw_bytes_accepted(self):
        raw = bytes(range(32))
        assert parse_program_id(raw) == raw

    def test_hex_text_decoded(self):
        raw = bytes(range(32))
        assert parse_program_id(program_id_to_str(raw).encode()) == raw

    @pytest.mark.parametrize("value", [b"", b"short", b"z" * 64, b"\x00" * 31])
    def test_malformed_rejected(self, value):
        assert parse_program_id(value) is None
