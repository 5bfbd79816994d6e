"""Rewrites raw step parameters into engine-ready values.

- ``step_N`` string/id values become the identifier step N produced
- well-formed program IDs pass through (hex text is decoded to raw bytes)
- any other string/id value must be an existing filesystem path
- ed25519 key names become the 33-byte address of the stored key

This is what lets a plan say ``{"type": "id", "value": "step_1"}`` instead of
hard-coding a binary identifier.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from plansim.core.ledger import RunLedger
from plansim.exceptions import (
    InvalidParamType, NamedKeyNotFound, PathNotFound, Unsupported,
    UnresolvedStepReference,
)
from plansim.state.keys import KeyStore, derive_address
from plansim.state.store import StateStore
from plansim.types import (
    Endpoint, Parameter, ParamType, STEP_REF_PREFIX, parse_program_id,
)

logger = logging.getLogger(__name__)

_STEP_INDEX_RE = re.compile(r"[+-]?[0-9]+")
_STEP_REF_BYTES = STEP_REF_PREFIX.encode("ascii")


def _decode_text(param: Parameter, step_index: Optional[int]) -> str:
    """Strict UTF-8 text of a name or path param."""
    try:
        return param.value.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidParamType(
            f"{param.type.value} param is not valid utf-8 text: {param.value!r}",
            step_index=step_index,
        ) from exc


class ParameterResolver:
    """Resolves step references against a RunLedger and key names against a KeyStore."""

    def __init__(self, ledger: RunLedger, key_store: KeyStore):
        self.ledger = ledger
        self.key_store = key_store

    def resolve(
        self,
        store: StateStore,
        params: list[Parameter],
        endpoint: Endpoint,
        step_index: Optional[int] = None,
    ) -> list[Parameter]:
        """Return resolved copies of ``params`` in the same order.

        Args:
            store: Shared run state (read only here)
            params: Raw parameters of the step
            endpoint: Endpoint the step targets
            step_index: Used for error context only

        Raises:
            UnresolvedStepReference, PathNotFound, NamedKeyNotFound,
            Unsupported, InvalidParamType
        """
        resolved: list[Parameter] = []
        for position, param in enumerate(params):
            if param.type in (ParamType.STRING, ParamType.ID):
                resolved.append(self._resolve_identifier(param, step_index))
            elif param.type == ParamType.KEY_ED25519:
                # a key step's first param names the key being created
                if endpoint == Endpoint.KEY and position == 0:
                    _decode_text(param, step_index)
                    resolved.append(param)
                else:
                    resolved.append(self._resolve_named_key(store, param, endpoint, step_index))
            elif param.type == ParamType.KEY_SECP256K1:
                raise Unsupported("secp256k1 keys are not supported", step_index=step_index)
            elif param.type in (ParamType.UINT64, ParamType.BOOL):
                resolved.append(param)
            else:
                raise InvalidParamType(f"invalid param type {param.type}", step_index=step_index)
        return resolved

    def _resolve_identifier(self, param: Parameter, step_index: Optional[int]) -> Parameter:
        if param.value.startswith(_STEP_REF_BYTES):
            text = param.value.decode("utf-8", errors="backslashreplace")
            suffix = text[len(STEP_REF_PREFIX):]
            if not _STEP_INDEX_RE.fullmatch(suffix):
                raise UnresolvedStepReference(
                    f"invalid step reference: {text}", reference=text, step_index=step_index
                )
            identifier = self.ledger.lookup(int(suffix))
            if identifier is None:
                raise UnresolvedStepReference(
                    f"failed to map to id: {text}", reference=text, step_index=step_index
                )
            return Parameter(type=param.type, value=identifier)

        program_id = parse_program_id(param.value)
        if program_id is not None:
            return Parameter(type=param.type, value=program_id)

        text = _decode_text(param, step_index)
        # left for the program loader to open
        if not Path(text).exists():
            raise PathNotFound(f"path does not exist: {text}", path=text, step_index=step_index)
        return param

    def _resolve_named_key(
        self,
        store: StateStore,
        param: Parameter,
        endpoint: Endpoint,
        step_index: Optional[int],
    ) -> Parameter:
        name = _decode_text(param, step_index)
        public_key = self.key_store.get_public_key(store, name)
        if public_key is None:
            if endpoint != Endpoint.KEY:
                raise NamedKeyNotFound(
                    f"named key not found: {name}", key_name=name, step_index=step_index
                )
            return param
        logger.debug("[Resolver] named key %r -> address", name)
        return Parameter(type=param.type, value=derive_address(public_key))
