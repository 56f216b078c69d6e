"""Exception hierarchy for tenantdb.

Every exception carries an ``ErrorKind`` so callers can branch on the
failure without string matching, and an exit code for the CLI.
Validation errors are raised before any statement reaches the database.
"""

from enum import StrEnum

from tenantdb.core.exit_codes import ExitCode


class ErrorKind(StrEnum):
    INVALID_IDENTIFIER = "InvalidIdentifier"
    INVALID_TYPE = "InvalidType"
    INVALID_COLUMN = "InvalidColumn"
    DUPLICATE_COLUMN = "DuplicateColumn"
    DUPLICATE_PRIMARY_KEY = "DuplicatePrimaryKey"
    SCHEMA_NOT_FOUND = "SchemaNotFound"
    DDL_FAILURE = "DdlFailure"
    ENGINE_ERROR = "EngineError"
    CONFIG_ERROR = "ConfigError"


class TenantDbError(Exception):
    """Base exception for all tenantdb errors."""

    kind: ErrorKind = ErrorKind.ENGINE_ERROR
    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InputError(TenantDbError):
    """Caller-supplied names, types or values that cannot be used."""

    exit_code: int = ExitCode.INPUT_ERROR


class InvalidIdentifier(InputError):
    kind = ErrorKind.INVALID_IDENTIFIER


class InvalidType(InputError):
    """Column type outside the allow-list, or a value of the wrong shape."""

    kind = ErrorKind.INVALID_TYPE


class InvalidColumn(InputError):
    kind = ErrorKind.INVALID_COLUMN


class ConflictError(TenantDbError):
    """Schema change that clashes with the live table."""

    exit_code: int = ExitCode.CONFLICT


class DuplicateColumn(ConflictError):
    kind = ErrorKind.DUPLICATE_COLUMN


class DuplicatePrimaryKey(ConflictError):
    kind = ErrorKind.DUPLICATE_PRIMARY_KEY


class SchemaNotFound(TenantDbError):
    """Table absent, or not visible to the connected role."""

    kind = ErrorKind.SCHEMA_NOT_FOUND
    exit_code: int = ExitCode.NOT_FOUND


class DdlFailure(TenantDbError):
    kind = ErrorKind.DDL_FAILURE


class EngineError(TenantDbError):
    """Unexpected driver failure.

    ``message`` is safe to show to callers; ``detail`` keeps the raw
    driver text for logs only.
    """

    kind = ErrorKind.ENGINE_ERROR

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail


class NetworkError(EngineError):
    """Connection failures, unreachable host, exhausted pool."""

    exit_code: int = ExitCode.NETWORK_ERROR


class TimeoutError(NetworkError):
    """Statement timeout."""

    exit_code: int = ExitCode.TIMEOUT


class ConfigError(TenantDbError):
    """Malformed config, missing profile."""

    kind = ErrorKind.CONFIG_ERROR
    exit_code: int = ExitCode.CONFIG_ERROR
