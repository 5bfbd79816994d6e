"""Typed exception hierarchy. Every error plansim can raise."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    MALFORMED_PLAN = "malformed_plan"
    INVALID_STEP = "invalid_step"
    INVALID_ENDPOINT = "invalid_endpoint"
    INVALID_PARAM_TYPE = "invalid_param_type"
    UNRESOLVED_STEP_REFERENCE = "unresolved_step_reference"
    PATH_NOT_FOUND = "path_not_found"
    NAMED_KEY_NOT_FOUND = "named_key_not_found"
    MULTI_RESPONSE_UNSUPPORTED = "multi_response_unsupported"
    UNSUPPORTED = "unsupported"


class ParamRequirement(str, Enum):
    """Qualifies an InvalidParamType raised for the first parameter."""
    FIRST_PARAM_REQUIRED_ID = "first param required to be an id"
    FIRST_PARAM_REQUIRED_STRING = "first param required to be a string"


class PlanSimError(Exception):
    """Base exception for all plansim errors."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


# ── Step errors ──────────────────────────────────────────────────────────────


class StepError(PlanSimError):
    """A step could not be loaded, validated, resolved or dispatched.

    ``kind`` is fixed per subclass so callers can match on it without
    parsing the message. ``detail`` optionally narrows the kind.
    """
    kind: ErrorKind = ErrorKind.INVALID_STEP

    def __init__(
        self,
        message: str,
        step_index: Optional[int] = None,
        detail: Optional[ParamRequirement] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.step_index = step_index
        self.detail = detail

    def __str__(self) -> str:
        message = super().__str__()
        if self.detail is not None:
            message = f"{message}: {self.detail.value}"
        if self.step_index is not None:
            message = f"step {self.step_index}: {message}"
        return message


class MalformedPlan(StepError):
    """No plan source was given, or the payload does not parse into a Step."""
    kind = ErrorKind.MALFORMED_PLAN


class InvalidStep(StepError):
    """Step is structurally incomplete (e.g. no params)."""
    kind = ErrorKind.INVALID_STEP


class InvalidEndpoint(StepError):
    """Endpoint is not one of key, execute, readonly."""
    kind = ErrorKind.INVALID_ENDPOINT


class InvalidParamType(StepError):
    """Parameter type is not accepted at this position or endpoint."""
    kind = ErrorKind.INVALID_PARAM_TYPE


class UnresolvedStepReference(StepError):
    """``step_N`` refers to a step that has not produced an identifier."""
    kind = ErrorKind.UNRESOLVED_STEP_REFERENCE

    def __init__(self, message: str, reference: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.reference = reference


class PathNotFound(StepError):
    kind = ErrorKind.PATH_NOT_FOUND

    def __init__(self, message: str, path: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


class NamedKeyNotFound(StepError):
    """A named key was used outside key creation before it was created."""
    kind = ErrorKind.NAMED_KEY_NOT_FOUND

    def __init__(self, message: str, key_name: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.key_name = key_name


class MultiResponseUnsupported(StepError):
    """The interpreter returned more than one result payload."""
    kind = ErrorKind.MULTI_RESPONSE_UNSUPPORTED


class Unsupported(StepError):
    """Declared in the step format but not implemented (e.g. secp256k1)."""
    kind = ErrorKind.UNSUPPORTED


class PlanAborted(PlanSimError):
    """A plan stopped early because one of its steps was rejected.

    ``responses`` holds the Responses of the steps that did run.
    """
    def __init__(
        self,
        message: str,
        responses: list = None,
        completed_steps: int = 0,
        total_steps: int = 0,
        cause: Optional[StepError] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.responses = responses or []
        self.completed_steps = completed_steps
        self.total_steps = total_steps
        self.cause = cause


# ── Collaborator errors ──────────────────────────────────────────────────────


class CollaboratorError(PlanSimError):
    """Failure inside the state store, key store, loader or interpreter."""
    pass


class DuplicateKeyName(CollaboratorError):
    """A named key with this name already exists.

    Carries the stored public key so key creation can reuse it.
    """
    def __init__(self, message: str, key_name: str = "", public_key: bytes = b"", **kwargs):
        super().__init__(message, **kwargs)
        self.key_name = key_name
        self.public_key = public_key


class ProgramLoadError(CollaboratorError):
    """Program module could not be read or stored."""
    def __init__(self, message: str, path: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


class InterpreterError(CollaboratorError):
    """Program invocation failed or no interpreter is configured."""
    def __init__(self, message: str, method: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.method = method
