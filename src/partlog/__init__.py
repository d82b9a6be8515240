"""Change-capture audit logging for SQLAlchemy entity models."""

__version__ = "0.1.0"
