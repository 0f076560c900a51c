"""Exception raised by color operation data."""

from __future__ import annotations


class OpDataError(ValueError):
    """Invalid operation parameters, unsupported composition or bad direction.

    Subclasses :class:`ValueError` so callers validating user input can catch
    either.
    """
