"""Checks a step's shape against its endpoint's contract before anything runs.

Validation is pure: no store access, no ledger access. Only the first
parameter's type is constrained; the rest are checked during resolution.
"""

from plansim.exceptions import (
    InvalidEndpoint, InvalidParamType, InvalidStep, ParamRequirement,
)
from plansim.types import Endpoint, ParamType, PROGRAM_CREATE, Step

_KEY_TYPES = {ParamType.KEY_ED25519, ParamType.KEY_SECP256K1}


class StepValidator:
    """Verifies the first-parameter requirement for each endpoint."""

    def verify(self, step_index: int, step: Step) -> None:
        """Raise if ``step`` cannot be executed.

        | endpoint | first param |
        |---|---|
        | key | ed25519 or secp256k1 |
        | readonly | id |
        | execute, program_create | string |
        | execute, other method | id |

        Raises:
            InvalidStep: no params
            InvalidParamType: first param has the wrong type
            InvalidEndpoint: unknown endpoint
        """
        if not step.params:
            raise InvalidStep("no params found", step_index=step_index)

        first_type = step.params[0].type

        if step.endpoint == Endpoint.KEY:
            if first_type not in _KEY_TYPES:
                raise InvalidParamType(
                    f"invalid param type {first_type.value}: expected ed25519 or secp256k1",
                    step_index=step_index,
                )
        elif step.endpoint == Endpoint.READONLY:
            if first_type != ParamType.ID:
                raise InvalidParamType(
                    f"invalid param type {first_type.value}",
                    step_index=step_index,
                    detail=ParamRequirement.FIRST_PARAM_REQUIRED_ID,
                )
        elif step.endpoint == Endpoint.EXECUTE:
            if step.method == PROGRAM_CREATE:
                # program path
                if first_type != ParamType.STRING:
                    raise InvalidParamType(
                        f"invalid param type {first_type.value}",
                        step_index=step_index,
                        detail=ParamRequirement.FIRST_PARAM_REQUIRED_STRING,
                    )
            elif first_type != ParamType.ID:
                raise InvalidParamType(
                    f"invalid param type {first_type.value}",
                    step_index=step_index,
                    detail=ParamRequirement.FIRST_PARAM_REQUIRED_ID,
                )
        else:
            raise InvalidEndpoint(f"invalid endpoint: {step.endpoint}", step_index=step_index)
