"""Routes a validated, resolved step to its endpoint handler.

Three handlers with different side effects:
- key: create (or reuse) a named key
- execute: create a program, or call one charging ``max_units``
- readonly: call a program without charging, no balance reported

Handlers raise on failure; the caller records the error on the Response.
The completion timestamp is stamped either way.
"""

import logging
import time
from typing import Optional

from plansim.exceptions import (
    DuplicateKeyName, InterpreterError, InvalidEndpoint, InvalidParamType,
    MultiResponseUnsupported, ParamRequirement, ProgramLoadError,
)
from plansim.runtime.interpreter import Interpreter
from plansim.state.keys import KeyStore, address_to_str, derive_address
from plansim.state.programs import ProgramLoader
from plansim.state.store import StateStore
from plansim.types import (
    CallResult, Endpoint, Parameter, PROGRAM_CREATE, PROGRAM_ID_LEN, Response,
    UNLIMITED_UNITS, program_id_to_str,
)

logger = logging.getLogger(__name__)


def _single_result(call: CallResult) -> Optional[bytes]:
    if len(call.results) > 1:
        raise MultiResponseUnsupported(
            f"multi response not supported: interpreter returned {len(call.results)} results"
        )
    return call.results[0] if call.results else None


def _program_id(param: Parameter) -> bytes:
    if len(param.value) != PROGRAM_ID_LEN:
        raise InvalidParamType(
            f"program id must be {PROGRAM_ID_LEN} bytes, got {len(param.value)}",
            detail=ParamRequirement.FIRST_PARAM_REQUIRED_ID,
        )
    return param.value


class StepDispatcher:
    """Executes one resolved step against the shared state."""

    def __init__(
        self,
        store: StateStore,
        key_store: KeyStore,
        program_loader: ProgramLoader,
        interpreter: Interpreter,
    ):
        self.store = store
        self.key_store = key_store
        self.program_loader = program_loader
        self.interpreter = interpreter

    def execute(
        self,
        endpoint: Endpoint,
        max_units: int,
        method: str,
        params: list[Parameter],
        response: Optional[Response] = None,
    ) -> Response:
        """Run the step and fill in ``response``.

        Args:
            endpoint: Target endpoint
            max_units: Budget for execute calls; ignored for readonly
            method: Program method, or PROGRAM_CREATE
            params: Resolved parameters
            response: Response to populate (a fresh one for step 0 if omitted)

        Returns:
            The populated response

        Raises:
            InvalidEndpoint, MultiResponseUnsupported, or any collaborator error.
            ``response.result.timestamp`` is set even when raising.
        """
        if response is None:
            response = Response(id=0, endpoint=endpoint, method=method)
        try:
            if endpoint == Endpoint.KEY:
                self._create_key(params, response)
            elif endpoint == Endpoint.EXECUTE:
                if method == PROGRAM_CREATE:
                    self._create_program(params, response)
                else:
                    self._call(params, method, max_units, response)
            elif endpoint == Endpoint.READONLY:
                self._read_only(params, method, response)
            else:
                raise InvalidEndpoint(f"invalid endpoint: {endpoint}")
            return response
        finally:
            response.set_timestamp(int(time.time()))

    def _create_key(self, params: list[Parameter], response: Response) -> None:
        key_name = params[0].text
        try:
            public_key = self.key_store.create_named_key(self.store, key_name)
        except DuplicateKeyName as exc:
            logger.debug("key already exists: %s", key_name)
            public_key = exc.public_key
        address = derive_address(public_key)
        response.set_msg(f"created named key with address {address_to_str(address)}")

    def _create_program(self, params: list[Parameter], response: Response) -> None:
        program_path = params[0].text
        program_id = self.program_loader.create(self.store, program_path)
        if len(program_id) != PROGRAM_ID_LEN:
            raise ProgramLoadError(
                f"program loader returned a {len(program_id)} byte program id", path=program_path
            )
        response.set_tx_id(program_id_to_str(program_id))

    def _call(self, params: list[Parameter], method: str, max_units: int, response: Response) -> None:
        program_id = _program_id(params[0])
        call = self.interpreter.invoke(self.store, program_id, params[1:], method, max_units)
        result = _single_result(call)
        if len(call.call_id) != PROGRAM_ID_LEN:
            raise InterpreterError(
                f"interpreter returned a {len(call.call_id)} byte call id", method=method
            )
        if result:
            response.set_response(result)
        response.set_tx_id(program_id_to_str(call.call_id))
        response.set_balance(call.balance)

    def _read_only(self, params: list[Parameter], method: str, response: Response) -> None:
        program_id = _program_id(params[0])
        call = self.interpreter.invoke(self.store, program_id, params[1:], method, UNLIMITED_UNITS)
        result = _single_result(call)
        if result:
            response.set_response(result)
