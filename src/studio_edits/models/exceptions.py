"""Exceptions raised while validating data models."""


class ModelError(Exception):
    """Base exception for data model validation."""


class EditValidationError(ModelError, ValueError):
    """Raised when an edit record is malformed or missing required fields."""
