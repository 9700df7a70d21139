import pytest

from acidcat.exceptions import (
    AcidCatError,
    AcidCatErrorNames,
    InvalidArgumentError,
    InvalidRangeError,
    InvalidStateError,
    MalformedNameError,
    MalformedRowError,
    NonRetryableError,
    ParseError,
    TransactionNotFoundError,
    ValidationError,
)


@pytest.mark.parametrize(
    "error,error_name",
    [
        (InvalidStateError, AcidCatErrorNames.INVALID_STATE_ERROR),
        (InvalidRangeError, AcidCatErrorNames.INVALID_RANGE_ERROR),
        (MalformedNameError, AcidCatErrorNames.MALFORMED_NAME_ERROR),
        (InvalidArgumentError, AcidCatErrorNames.INVALID_ARGUMENT_ERROR),
        (MalformedRowError, AcidCatErrorNames.MALFORMED_ROW_ERROR),
        (ParseError, AcidCatErrorNames.PARSE_ERROR),
        (TransactionNotFoundError, AcidCatErrorNames.TRANSACTION_NOT_FOUND_ERROR),
    ],
)
def test_error_names(error, error_name):
    assert error.error_name == error_name.value
    assert issubclass(error, NonRetryableError)
    assert not error.is_retryable


def test_validation_errors():
    for error in (
        InvalidRangeError,
        MalformedNameError,
        InvalidArgumentError,
        MalformedRowError,
        ParseError,
    ):
        assert issubclass(error, ValidationError)
    assert issubclass(ParseError, MalformedRowError)
    assert not issubclass(InvalidStateError, ValidationError)


def test_errors_carry_messages():
    with pytest.raises(AcidCatError, match="write id 3"):
        raise InvalidStateError("Cannot commit write id 3")
