"""Standard exit codes for tenantdb.

Exit codes follow Unix conventions; 8 and 9 cover schema conflicts
and missing tables.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for tenantdb commands."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    OUTPUT_ERROR = 4
    NETWORK_ERROR = 5
    TIMEOUT = 6
    CONFIG_ERROR = 7
    CONFLICT = 8
    NOT_FOUND = 9
