"""tenantdb - runtime schema and record management for tenant databases."""

from tenantdb.__about__ import __version__

__all__ = ["__version__"]
