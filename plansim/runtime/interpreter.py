"""Program interpreter contract and loader.

plansim does not execute program code itself. An interpreter is any object
with an ``invoke`` method matching the Interpreter protocol; the CLI loads
one from a ``module:attr`` import path (PLANSIM_INTERPRETER).
"""

import importlib
import logging
from typing import Optional, Protocol, runtime_checkable

from plansim.exceptions import InterpreterError
from plansim.state.store import StateStore
from plansim.types import CallResult, Parameter

logger = logging.getLogger(__name__)


@runtime_checkable
class Interpreter(Protocol):
    """Invokes ``method`` on a stored program."""

    def invoke(
        self,
        store: StateStore,
        program_id: bytes,
        params: list[Parameter],
        method: str,
        max_units: int,
    ) -> CallResult:
        """Run the call against ``store`` charging at most ``max_units``.

        Returns:
            CallResult with the call ID, result payloads, and caller balance
        """
        ...


class UnavailableInterpreter:
    """Placeholder used when no interpreter is configured. Every call fails."""

    def invoke(
        self,
        store: StateStore,
        program_id: bytes,
        params: list[Parameter],
        method: str,
        max_units: int,
    ) -> CallResult:
        raise InterpreterError(
            f"no program interpreter configured; cannot call {method!r} "
            "(set PLANSIM_INTERPRETER to a module:attr import path)",
            method=method,
        )


def load_interpreter(import_path: Optional[str]) -> Interpreter:
    """Resolve ``module:attr`` to an Interpreter instance.

    ``attr`` may be an instance or a zero-argument factory (e.g. a class).
    An empty path yields UnavailableInterpreter.

    Raises:
        InterpreterError: if the path is malformed, cannot be imported, or
            does not produce an object with ``invoke``.
    """
    if not import_path:
        return UnavailableInterpreter()

    module_name, sep, attr = import_path.partition(":")
    if not sep or not module_name or not attr:
        raise InterpreterError(
            f"interpreter path must look like 'package.module:attr', got {import_path!r}"
        )

    importlib.invalidate_caches()
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise InterpreterError(f"cannot import interpreter module {module_name!r}: {exc}") from exc

    target = getattr(module, attr, None)
    if target is None:
        raise InterpreterError(f"module {module_name!r} has no attribute {attr!r}")

    if isinstance(target, type) or (callable(target) and not hasattr(target, "invoke")):
        interpreter = target()
    else:
        interpreter = target
    if not isinstance(interpreter, Interpreter):
        raise InterpreterError(
            f"{import_path!r} is not an interpreter (missing invoke method). "
            f"Got: {type(interpreter).__name__}"
        )
    logger.info("Loaded program interpreter %s", import_path)
    return interpreter
