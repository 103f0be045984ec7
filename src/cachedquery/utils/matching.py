"""Key matching helpers shared by stores and invalidators."""

import re
from collections.abc import Callable
from typing import Union

KeyPattern = Union[re.Pattern[str], str, Callable[[str], bool]]


class InvalidPatternError(ValueError):
    """Raised when a pattern string is not a valid regular expression."""

    pass


def compile_matcher(pattern: KeyPattern) -> Callable[[str], bool]:
    """Turn a pattern into a key predicate.

    Args:
        pattern: A compiled regex, a regex source string, or a predicate.
            Regexes are applied with ``search`` so anchors behave as written.

    Returns:
        A callable returning True for keys the pattern matches.

    Raises:
        InvalidPatternError: If a string pattern does not compile.
    """
    if isinstance(pattern, re.Pattern):
        return lambda key: pattern.search(key) is not None

    if isinstance(pattern, str):
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise InvalidPatternError(f"Invalid key pattern {pattern!r}: {e}") from e
        return lambda key: compiled.search(key) is not None

    if callable(pattern):
        return pattern

    raise TypeError(f"Unsupported key pattern type: {type(pattern).__name__}")


def describe_pattern(pattern: KeyPattern) -> str:
    """Human-readable form of a pattern for log messages."""
    if isinstance(pattern, re.Pattern):
        return f"/{pattern.pattern}/"
    if isinstance(pattern, str):
        return f"/{pattern}/"
    return getattr(pattern, "__name__", repr(pattern))
