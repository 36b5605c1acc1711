"""Errors raised by the compliance engine and the trip store."""


class ConfigurationError(ValueError):
    """A jurisdiction rule is invalid (non-positive limits, unknown counting method, bad anchor date)."""


class InvalidTripError(ValueError):
    """A trip cannot be stored or counted (end before start, longer than the single-trip cap)."""
