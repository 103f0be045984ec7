"""Cache invalidation decorators for mutation functions.

Mutations wrapped with @invalidates sweep the configured store once
they succeed, so the next subscription for an affected key refetches.
"""

import functools
import inspect
import re
from collections.abc import Callable
from typing import Any, TypeVar

from cachedquery.core.services.invalidation import CacheInvalidator
from cachedquery.utils.matching import KeyPattern

F = TypeVar("F", bound=Callable[..., Any])

# Module-level invalidator reference
_invalidator: CacheInvalidator | None = None


def configure(invalidator: CacheInvalidator) -> None:
    """Configure the invalidator used by decorators.

    Must be called before @invalidates has any effect.

    Args:
        invalidator: The cache invalidator instance to use.

    Example:
        store = InMemoryCacheStore()
        configure(CacheInvalidator(store, event_bus=InMemoryEventBus()))
    """
    global _invalidator
    _invalidator = invalidator


def get_invalidator() -> CacheInvalidator | None:
    """Get the configured invalidator.

    Returns:
        The configured invalidator, or None if not configured.
    """
    return _invalidator


def invalidates(
    *key_patterns: KeyPattern,
    publish: str | None = None,
) -> Callable[[F], F]:
    """Decorator for invalidating cache entries after a mutation.

    Executes the decorated async function and then deletes every key
    matching the patterns. Nothing is invalidated if the function raises.

    Args:
        *key_patterns: Patterns to sweep. String patterns support
            {arg_name} interpolation; the argument's value is regex-escaped.
        publish: Optional event bus topic published after the sweep.

    Returns:
        Decorated function.

    Example:
        @invalidates(r"^user_(?:profile|stats)_{username}$")
        async def update_profile(username: str, data: dict) -> dict:
            return await api.update_profile(username, data)

        @invalidates(patterns.ALL_ASSETS, publish=CATEGORIES_UPDATED)
        async def delete_category(category_id: int) -> None:
            await api.delete_category(category_id)
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = await func(*args, **kwargs)

            if _invalidator is not None:
                arguments = _bind_arguments(signature, args, kwargs)
                resolved = _resolve_patterns(key_patterns, arguments)
                _invalidator.invalidate(*resolved)
                if publish is not None and _invalidator.event_bus is not None:
                    _invalidator.notify(publish)

            return result

        return wrapper  # type: ignore

    return decorator


def _bind_arguments(
    signature: inspect.Signature,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> dict[str, Any]:
    """Map call arguments to parameter names, defaults included."""
    try:
        bound = signature.bind(*args, **kwargs)
    except TypeError:
        return dict(kwargs)
    bound.apply_defaults()
    return dict(bound.arguments)


def _resolve_patterns(
    key_patterns: tuple[KeyPattern, ...],
    arguments: dict[str, Any],
) -> list[KeyPattern]:
    """Resolve string patterns with argument interpolation.

    Args:
        key_patterns: Patterns, string ones with optional {arg} placeholders.
        arguments: Call arguments by parameter name.

    Returns:
        List of resolved patterns.
    """
    resolved: list[KeyPattern] = []
    for pattern in key_patterns:
        if isinstance(pattern, str):
            resolved.append(_interpolate_string(pattern, arguments))
        else:
            resolved.append(pattern)
    return resolved


def _interpolate_string(template: str, arguments: dict[str, Any]) -> str:
    """Interpolate {arg_name} placeholders in a regex source.

    Placeholders without a matching argument, such as quantifiers like
    ``{2}``, are kept as written.
    """
    placeholder = r"\{(\w+)\}"

    def replacer(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in arguments:
            return re.escape(str(arguments[name]))
        return match.group(0)

    return re.sub(placeholder, replacer, template)
