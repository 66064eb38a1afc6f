"""HTTP surface for configuration commands."""

from good_base.server.app import HealthStatus, create_app

__all__ = ["HealthStatus", "create_app"]
