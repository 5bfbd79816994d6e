"""plansim: plan step execution engine.

Usage:
    from plansim import PlanRunner, MemoryStore, Plan, Param, Step

    plan = Plan(caller_key="alice")
    plan.add_step(Step.create_key("alice"))
    program = plan.add_step(Step.create_program("./token.wasm"))

    runner = PlanRunner(MemoryStore(), interpreter=my_interpreter)
    responses = runner.run_plan(plan)
"""

from plansim.types import (
    Endpoint, ParamType, Parameter, Step, Response, StepResult, CallResult,
    PROGRAM_CREATE, UNLIMITED_UNITS,
)
from plansim.exceptions import (
    PlanSimError, StepError, ErrorKind, ParamRequirement, MalformedPlan,
    InvalidStep, InvalidEndpoint, InvalidParamType, UnresolvedStepReference,
    PathNotFound, NamedKeyNotFound, MultiResponseUnsupported, Unsupported,
    PlanAborted, CollaboratorError, DuplicateKeyName, ProgramLoadError,
    InterpreterError,
)
from plansim.core.plan import Plan, Param, StepRef, load_step, load_plan
from plansim.core.runner import PlanRunner
from plansim.state import MemoryStore, KeyStore, ProgramLoader
from plansim.runtime import Interpreter, load_interpreter
from plansim.version import __version__

__all__ = [
    "Endpoint", "ParamType", "Parameter", "Step", "Response", "StepResult", "CallResult",
    "PROGRAM_CREATE", "UNLIMITED_UNITS",
    "PlanSimError", "StepError", "ErrorKind", "ParamRequirement", "MalformedPlan",
    "InvalidStep", "InvalidEndpoint", "InvalidParamType", "UnresolvedStepReference",
    "PathNotFound", "NamedKeyNotFound", "MultiResponseUnsupported", "Unsupported",
    "PlanAborted", "CollaboratorError", "DuplicateKeyName", "ProgramLoadError",
    "InterpreterError",
    "Plan", "Param", "StepRef", "load_step", "load_plan",
    "PlanRunner",
    "MemoryStore", "KeyStore", "ProgramLoader",
    "Interpreter", "load_interpreter",
    "__version__",
]
