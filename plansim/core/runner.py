"""Plan runner: load → verify → resolve → dispatch → record → advance.

The runner owns the RunLedger for the lifetime of a run and borrows the
state store from its caller. Steps run strictly one after another; each
step's effects are visible to the next step's resolution.

Error policy:
- loading, validation and resolution errors raise. Nothing has touched the
  store yet, the counter does not move, and the run should stop.
- dispatch errors are recorded on the step's Response. The counter still
  advances so later ``step_N`` numbering stays stable.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

from plansim.callbacks.base import (
    STEP_COMPLETED, STEP_FAILED, STEP_REJECTED, STEP_STARTED,
)
from plansim.core.dispatcher import StepDispatcher
from plansim.core.ledger import RunLedger
from plansim.core.plan import Plan, load_step
from plansim.core.resolver import ParameterResolver
from plansim.core.validator import StepValidator
from plansim.exceptions import PlanAborted, PlanSimError, StepError
from plansim.runtime.interpreter import Interpreter, UnavailableInterpreter
from plansim.state.keys import KeyStore
from plansim.state.programs import ProgramLoader
from plansim.state.store import StateStore
from plansim.types import Response, Step

logger = logging.getLogger(__name__)


class PlanRunner:
    """Runs plan steps against one shared state store."""

    def __init__(
        self,
        store: StateStore,
        key_store: Optional[KeyStore] = None,
        program_loader: Optional[ProgramLoader] = None,
        interpreter: Optional[Interpreter] = None,
        validator: Optional[StepValidator] = None,
        callbacks: list = None,
    ):
        """
        Args:
            store: Mutable state shared by all steps (borrowed, not owned)
            key_store: Named key collaborator (default: Ed25519 KeyStore)
            program_loader: Program module collaborator (default: ProgramLoader)
            interpreter: Program call collaborator (default: UnavailableInterpreter)
            validator: Step validator (default: StepValidator)
            callbacks: Callables invoked as ``cb(event, data)``
        """
        self.store = store
        self.ledger = RunLedger()
        key_store = key_store or KeyStore()
        self.validator = validator or StepValidator()
        self.resolver = ParameterResolver(self.ledger, key_store)
        self.dispatcher = StepDispatcher(
            store=store,
            key_store=key_store,
            program_loader=program_loader or ProgramLoader(),
            interpreter=interpreter or UnavailableInterpreter(),
        )
        self.callbacks = callbacks or []

    @property
    def step_index(self) -> int:
        return self.ledger.step

    def run_step(
        self,
        step_text: Optional[str] = None,
        file: Optional[Union[str, Path]] = None,
    ) -> Response:
        """Load one step from inline text or a file and run it.

        Raises:
            StepError: the step could not be loaded, validated or resolved
        """
        try:
            step = load_step(step_text=step_text, file=file)
        except StepError as exc:
            self._reject(exc)
            raise
        return self.run(step)

    def run(self, step: Step) -> Response:
        """Run one already-parsed step.

        Returns:
            The step's Response; carries ``error`` if dispatch failed

        Raises:
            StepError: validation or resolution failed (counter unchanged)
        """
        index = self.ledger.step
        logger.info(
            "[Runner] step=%d endpoint=%s method=%s max_units=%d params=%d",
            index, step.endpoint.value, step.method, step.max_units, len(step.params),
        )

        try:
            self.validator.verify(index, step)
            params = self.resolver.resolve(self.store, step.params, step.endpoint, step_index=index)
        except StepError as exc:
            logger.error("[Runner] step %d rejected: %s", index, exc)
            self._reject(exc)
            raise

        self._fire(STEP_STARTED, {
            "step_index": index,
            "endpoint": step.endpoint.value,
            "method": step.method,
            "max_units": step.max_units,
            "param_count": len(params),
        })

        response = Response(id=index, endpoint=step.endpoint, method=step.method)
        try:
            self.dispatcher.execute(step.endpoint, step.max_units, step.method, params, response=response)
        except PlanSimError as exc:
            logger.warning("[Runner] step %d failed: %s", index, exc)
            response.set_error(exc)
        except Exception as exc:
            logger.error("[Runner] step %d crashed in a collaborator: %s", index, exc, exc_info=True)
            response.set_error(exc)

        # map generated ids to their step_N reference
        tx_id = response.get_tx_id() if response.ok else None
        if tx_id:
            self.ledger.record(index, bytes.fromhex(tx_id))

        self.ledger.advance()

        if response.ok:
            self._fire(STEP_COMPLETED, {
                "step_index": index,
                "endpoint": step.endpoint.value,
                "method": step.method,
                "tx_id": tx_id,
            })
        else:
            self._fire(STEP_FAILED, {
                "step_index": index,
                "error": response.error,
                "error_kind": response.error_kind,
            })
        return response

    def run_plan(self, plan: Plan) -> list[Response]:
        """Run every step of ``plan`` in order.

        Dispatch failures do not stop the plan. The first rejected step does.

        Raises:
            PlanAborted: carrying the responses produced before the rejection
        """
        responses: list[Response] = []
        for step in plan.steps:
            try:
                responses.append(self.run(step))
            except StepError as exc:
                raise PlanAborted(
                    f"plan aborted at step {self.ledger.step}: {exc}",
                    responses=responses,
                    completed_steps=len(responses),
                    total_steps=len(plan.steps),
                    cause=exc,
                ) from exc
        return responses

    def _reject(self, exc: StepError) -> None:
        self._fire(STEP_REJECTED, {
            "step_index": self.ledger.step,
            "error": str(exc),
            "error_kind": exc.kind.value,
        })

    def _fire(self, event: str, data: dict[str, Any]) -> None:
        """Invoke all registered callbacks for a lifecycle event."""
        for cb in self.callbacks:
            try:
                cb(event, data)
            except Exception as cb_exc:
                logger.warning(f"[Runner] Callback error on '{event}': {cb_exc}")
