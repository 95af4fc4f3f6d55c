"""Error taxonomy shared by the store, the services and the HTTP layer."""

from __future__ import annotations


class TemperatureServiceError(Exception):
    """Base class for errors raised by the temperature log core."""


class ValidationError(TemperatureServiceError):
    """A request is missing a required field or carries an unusable value."""


class NotFoundError(TemperatureServiceError):
    """No samples exist for the requested calendar date."""


class StoreError(TemperatureServiceError):
    """The relational store could not be reached or rejected an operation."""
