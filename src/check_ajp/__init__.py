"""check-ajp: AJP13 health check client for application-server containers."""

__version__ = "0.1.0"
