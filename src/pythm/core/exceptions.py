"""Custom exceptions for pythm package."""

from __future__ import annotations


class PyTHMError(Exception):
    """Base exception for all pythm errors."""

    pass


class MeshError(PyTHMError):
    """Error related to mesh construction or mesh input data."""

    pass


class PropertyError(PyTHMError):
    """Error raised when a property vector is requested with the wrong signature.

    The property exists, but its value type, mesh item type or number of
    components does not match the request.
    """

    def __init__(self, message: str, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name


class ConfigurationError(PyTHMError):
    """Error raised for build or project configuration mistakes.

    These are not recoverable at runtime, e.g. an element type without a
    registered local assembler or an unsupported shape function order.
    """

    pass


class ValidationError(PyTHMError):
    """Error raised when mesh validation fails."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
