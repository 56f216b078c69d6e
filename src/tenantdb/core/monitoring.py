"""Sentry integration for error tracking and query spans.

Initialized from the resolved configuration; without a DSN the SDK stays
disabled and spans become no-ops.
"""

import sentry_sdk

from tenantdb.__about__ import __version__


def setup_sentry(dsn: str | None, environment: str = "local") -> bool:
    """Initialize Sentry when a DSN is configured. Returns True if enabled."""
    if not dsn:
        return False
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=0.05,
        environment=environment,
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
    return True
