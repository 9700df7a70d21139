from __future__ import annotations
from enum import Enum


class AcidCatErrorNames(str, Enum):

    VALIDATION_ERROR = "ValidationError"

    INVALID_STATE_ERROR = "InvalidStateError"
    INVALID_RANGE_ERROR = "InvalidRangeError"
    MALFORMED_NAME_ERROR = "MalformedNameError"
    INVALID_ARGUMENT_ERROR = "InvalidArgumentError"
    MALFORMED_ROW_ERROR = "MalformedRowError"
    PARSE_ERROR = "ParseError"

    TRANSACTION_NOT_FOUND_ERROR = "TransactionNotFoundError"


class AcidCatError(Exception):
    pass


class NonRetryableError(AcidCatError):
    is_retryable = False


class ValidationError(NonRetryableError):
    error_name = AcidCatErrorNames.VALIDATION_ERROR.value


class InvalidStateError(NonRetryableError):
    """Illegal write transaction state transition."""

    error_name = AcidCatErrorNames.INVALID_STATE_ERROR.value


class InvalidRangeError(ValidationError):
    """Write id range that is negative or has min > max."""

    error_name = AcidCatErrorNames.INVALID_RANGE_ERROR.value


class MalformedNameError(ValidationError):
    """Directory name that does not follow the delta layout."""

    error_name = AcidCatErrorNames.MALFORMED_NAME_ERROR.value


class InvalidArgumentError(ValidationError):
    error_name = AcidCatErrorNames.INVALID_ARGUMENT_ERROR.value


class MalformedRowError(ValidationError):
    """Base dataset row with fewer columns than its schema."""

    error_name = AcidCatErrorNames.MALFORMED_ROW_ERROR.value


class ParseError(MalformedRowError):
    """Base dataset value that is not a strict base-10 integer."""

    error_name = AcidCatErrorNames.PARSE_ERROR.value


class TransactionNotFoundError(NonRetryableError):
    error_name = AcidCatErrorNames.TRANSACTION_NOT_FOUND_ERROR.value
