"""Tests for the stage-labelled error taxonomy."""

import pytest

from pqhelper.core import exceptions
from pqhelper.core.exceptions import PQHelperError

STAGES = {
    "UnsupportedSuite": "suite selection",
    "MalformedKeyRecord": "key import",
    "InvalidPublicKey": "key validation",
    "EmptyOrMissingMessage": "input validation",
    "MalformedEnvelope": "envelope parsing",
    "KeyGenerationError": "key generation",
    "EncapsulationError": "encapsulation",
    "DecapsulationError": "decapsulation",
    "KeyDerivationError": "key derivation",
    "SealingError": "sealing",
    "AuthenticationFailure": "authentication",
}

CALLER_INPUT_ERRORS = {
    "UnsupportedSuite",
    "MalformedKeyRecord",
    "InvalidPublicKey",
    "EmptyOrMissingMessage",
    "MalformedEnvelope",
}


@pytest.mark.parametrize("name, stage", sorted(STAGES.items()))
def test_stage_label_and_message(name: str, stage: str) -> None:
    error = getattr(exceptions, name)("something broke")
    assert isinstance(error, PQHelperError)
    assert error.stage == stage
    assert error.detail == "something broke"
    assert str(error) == f"{stage}: something broke"


@pytest.mark.parametrize("name", sorted(STAGES))
def test_value_error_only_for_caller_input(name: str) -> None:
    assert issubclass(getattr(exceptions, name), ValueError) == (name in CALLER_INPUT_ERRORS)


def test_stage_override_and_default_detail() -> None:
    error = PQHelperError(stage="custom")
    assert str(error) == "custom: operation failed"


def test_all_exports_every_error() -> None:
    assert set(STAGES) | {"PQHelperError"} == set(exceptions.__all__)
