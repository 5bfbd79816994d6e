"""Loading steps and plans, and building plans from Python.

A step arrives either inline (``--step '<json>'``) or from a file. JSON is the
wire format; files ending in .yaml/.yml are read with PyYAML so plans can be
written by hand.
"""

import json
import struct
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from plansim.exceptions import InvalidEndpoint, MalformedPlan
from plansim.types import (
    Parameter, ParamType, Step, STEP_REF_PREFIX,
)

_YAML_SUFFIXES = {".yaml", ".yml"}


def _parse_payload(payload: str, yaml_format: bool = False) -> Any:
    try:
        if yaml_format:
            return yaml.safe_load(payload)
        return json.loads(payload)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise MalformedPlan(f"cannot parse step payload: {exc}") from exc


def _read_file(file: Union[str, Path]) -> tuple[str, bool]:
    path = Path(file)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedPlan(f"cannot read plan file {path}: {exc}") from exc
    return text, path.suffix.lower() in _YAML_SUFFIXES


def step_from_data(data: Any) -> Step:
    """Validate a decoded payload into a Step.

    Raises:
        InvalidEndpoint: if only the endpoint value is unknown
        MalformedPlan: for any other shape problem
    """
    if not isinstance(data, dict):
        raise MalformedPlan(f"step must be an object, got {type(data).__name__}")
    try:
        return Step.model_validate(data)
    except ValidationError as exc:
        errors = exc.errors()
        if errors and all(e["loc"][:1] == ("endpoint",) and e["type"] == "enum" for e in errors):
            raise InvalidEndpoint(f"invalid endpoint: {data.get('endpoint')}") from exc
        problems = "; ".join(
            f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in errors
        )
        raise MalformedPlan(f"invalid step: {problems}") from exc


def load_step(step_text: Optional[str] = None, file: Optional[Union[str, Path]] = None) -> Step:
    """Deserialize one step from inline text or a file.

    Inline text takes precedence when both are given.

    Raises:
        MalformedPlan: no source, unreadable file, or unparsable payload
        InvalidEndpoint: payload parses but names an unknown endpoint
    """
    if step_text:
        return step_from_data(_parse_payload(step_text))
    if file:
        text, yaml_format = _read_file(file)
        return step_from_data(_parse_payload(text, yaml_format))
    raise MalformedPlan("please specify either a --step or a --file flag")


# ── Plan builder ───────────────────────────────────────────────────────

class StepRef:
    """Handle to a step added to a Plan. Used as an ``id`` parameter it
    becomes the ``step_N`` reference resolved at run time."""

    def __init__(self, index: int):
        self.index = index

    def __str__(self) -> str:
        return f"{STEP_REF_PREFIX}{self.index}"

    def __repr__(self) -> str:
        return f"StepRef({self.index})"

    def __eq__(self, other) -> bool:
        return isinstance(other, StepRef) and other.index == self.index

    def __hash__(self) -> int:
        return hash(self.index)


class Param:
    """Constructors for typed parameters in their wire encoding."""

    @staticmethod
    def u64(value: int) -> Parameter:
        return Parameter(type=ParamType.UINT64, value=struct.pack("<Q", value))

    @staticmethod
    def bool(value: bool) -> Parameter:
        return Parameter(type=ParamType.BOOL, value=b"\x01" if value else b"\x00")

    @staticmethod
    def string(value: str) -> Parameter:
        return Parameter(type=ParamType.STRING, value=value.encode())

    @staticmethod
    def id(ref: Union[StepRef, bytes, str]) -> Parameter:
        if isinstance(ref, StepRef):
            value = str(ref).encode()
        elif isinstance(ref, str):
            value = ref.encode()
        else:
            value = bytes(ref)
        return Parameter(type=ParamType.ID, value=value)

    @staticmethod
    def ed25519(name: str) -> Parameter:
        return Parameter(type=ParamType.KEY_ED25519, value=name.encode())


class Plan(BaseModel):
    """Ordered steps run with one shared ledger and state store."""
    model_config = ConfigDict(populate_by_name=True)

    caller_key: str = Field(default="", alias="callerKey")
    steps: list[Step] = Field(default_factory=list)

    def add_step(self, step: Step) -> StepRef:
        """Append ``step`` and return a reference to it."""
        if step.caller_key is None and self.caller_key:
            step = step.model_copy(update={"caller_key": self.caller_key})
        self.steps.append(step)
        return StepRef(len(self.steps) - 1)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


def load_plan(file: Union[str, Path]) -> Plan:
    """Read a whole plan (``{"callerKey": ..., "steps": [...]}``) from a file.

    Raises:
        MalformedPlan: unreadable file or a payload that is not a plan
        InvalidEndpoint: a step names an unknown endpoint
    """
    text, yaml_format = _read_file(file)
    data = _parse_payload(text, yaml_format)
    if not isinstance(data, dict) or not isinstance(data.get("steps"), list):
        raise MalformedPlan(f"plan file {file} must contain a 'steps' list")

    plan = Plan(caller_key=str(data.get("callerKey") or ""))
    for raw_step in data["steps"]:
        plan.add_step(step_from_data(raw_step))
    return plan
