"""Validation decorators for op data setters.

The decorators check one positional (or keyword) argument of the wrapped
method before it runs and raise :class:`ValueError` / :class:`TypeError` with
a short hint for well known parameters.

Example:
    >>> class ExposureContrastOpData:
    ...     @validate_range(0.0, 1.0, "pivot")
    ...     def set_pivot(self, pivot: float) -> None: ...
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

# Hints appended to error messages, keyed by a substring of the parameter name
_RANGE_HINTS = {
    "gamma": "Use 1.0 for no change; values below 1 brighten, above 1 darken",
    "pivot": "The pivot is a scene-linear value, 0.18 is mid-gray",
    "saturation": "Use 1.0 for no change, 0.0 for grayscale",
    "grid": "Larger grids are more accurate but cost memory (size^3 entries)",
    "dimension": "Larger LUTs are more accurate but cost memory",
}

_POSITIVE_HINTS = {
    "gamma": "A gamma of 1.0 is linear (no change)",
    "power": "A power of 1.0 is linear (no change)",
    "step": "The log exposure step is the code-value change for one stop",
    "base": "Common bases are 2, 10 and e",
}


def _hint(name: str, hints: dict[str, str]) -> str:
    for key, text in hints.items():
        if key in name.lower():
            return f" Hint: {text}."
    return ""


def _get_arg(args: tuple, kwargs: dict, name: str, param_index: int) -> tuple[bool, Any]:
    if name in kwargs:
        return True, kwargs[name]
    if len(args) > param_index:
        return True, args[param_index]
    return False, None


def _check_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError(f"{name} must be a number, got {type(value).__name__}")
    return float(value)


def validate_range(
    min_value: float, max_value: float, name: str, param_index: int = 1
) -> Callable[[F], F]:
    """Require a numeric argument inside ``[min_value, max_value]``.

    :param min_value: Smallest accepted value
    :param max_value: Largest accepted value
    :param name: Argument name (also used for keyword lookup)
    :param param_index: Positional index of the argument (``self`` is 0)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            found, value = _get_arg(args, kwargs, name, param_index)
            if found:
                number = _check_number(name, value)
                if not min_value <= number <= max_value:
                    raise ValueError(
                        f"{name}={value} is outside valid range "
                        f"[{min_value}, {max_value}].{_hint(name, _RANGE_HINTS)}"
                    )
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def validate_positive(name: str, param_index: int = 1) -> Callable[[F], F]:
    """Require a numeric argument strictly greater than zero."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            found, value = _get_arg(args, kwargs, name, param_index)
            if found:
                number = _check_number(name, value)
                if number <= 0.0:
                    raise ValueError(
                        f"{name}={value} must be positive.{_hint(name, _POSITIVE_HINTS)}"
                    )
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def validate_type(
    expected: type | tuple[type, ...], name: str, param_index: int = 1
) -> Callable[[F], F]:
    """Require an argument to be an instance of ``expected``."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            found, value = _get_arg(args, kwargs, name, param_index)
            if found and not isinstance(value, expected):
                if isinstance(expected, tuple):
                    names = ", ".join(t.__name__ for t in expected)
                    raise TypeError(
                        f"{name} must be one of ({names}), got {type(value).__name__}"
                    )
                raise TypeError(
                    f"{name} must be {expected.__name__}, got {type(value).__name__}"
                )
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def validate_choices(choices: Iterable[Any], name: str, param_index: int = 1) -> Callable[[F], F]:
    """Require an argument to be one of ``choices``."""
    allowed = frozenset(choices)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            found, value = _get_arg(args, kwargs, name, param_index)
            if found and value not in allowed:
                options = ", ".join(sorted(str(c) for c in allowed))
                raise ValueError(f'{name}="{value}" is not valid. Choose from: {options}')
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
