"""Prowl error hierarchy.

All prowl-specific errors inherit from ProwlError for easy catching.
"""


class ProwlError(Exception):
    """Base error for all prowl operations."""


class ConfigError(ProwlError):
    """Invalid configuration or an unbuildable controller graph."""


class BindError(ProwlError):
    """Request values could not be bound into a request model."""


class ExportError(ProwlError):
    """Error while exporting route metadata."""
