"""Health check runner — probe scheduling and compliance reporting."""

__version__ = "0.1.0"
