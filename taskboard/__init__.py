"""taskboard: task and user REST API with assignment integrity."""

__version__ = "1.0.0"
