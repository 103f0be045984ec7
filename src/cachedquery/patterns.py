"""Invalidation patterns.

Compiled regexes and regex factories matching every cache key of a
scope, as produced by :mod:`cachedquery.keys`. Use them after a
mutation to sweep now-stale entries:

    store.invalidate(patterns.user_profile("alice"))

Identifiers are escaped and anchored, so ``user_profile("bob")`` never
matches keys that belong to ``bobby``.
"""

import re
from typing import Any

from cachedquery.utils.matching import KeyPattern, compile_matcher

# Asset listing, detail and search keys
ALL_ASSETS = re.compile(r"^(?:assets_list|asset_detail|asset_search)_")

ALL_CATEGORIES = re.compile(r"^(?:categories_all$|category_)")

ALL_TAGS = re.compile(r"^tags_all$")

ALL_FORUM = re.compile(r"^forum_")

ALL_NOTIFICATIONS = re.compile(r"^notifications_")

ALL_VRCHAT = re.compile(r"^vrchat_(?:profile|friends)_")


def _literal(value: Any) -> str:
    return re.escape(str(value))


def assets_by_category(
    category_id: Any,
    filter_field: str = "categoryId",
) -> re.Pattern[str]:
    """Match asset pages scoped to one category.

    Covers the category's own asset pages and asset-list pages whose
    filters carry ``filter_field`` equal to ``category_id`` (as a JSON
    string or number).

    Args:
        category_id: The category identifier.
        filter_field: Filter name holding the category in list keys.

    Returns:
        A compiled pattern.
    """
    cid = _literal(category_id)
    field = re.escape(f'"{filter_field}":')
    return re.compile(
        rf"^(?:category_{cid}_assets_p\d+_"
        rf'|assets_list_p\d+_.*{field}(?:"{cid}"|{cid})[,}}])'
    )


def user_profile(username: str) -> re.Pattern[str]:
    """Match a user's profile, stats and avatars keys."""
    return re.compile(rf"^user_(?:profile|stats|avatars)_{_literal(username)}$")


def user_library(user_id: Any) -> re.Pattern[str]:
    """Match every page of a user's own assets and favorites."""
    return re.compile(rf"^user_(?:assets|favorites)_{_literal(user_id)}_p\d+_")


def notifications_for(user_id: Any) -> re.Pattern[str]:
    return re.compile(rf"^notifications_{_literal(user_id)}$")


def forum_category(category: str) -> re.Pattern[str]:
    """Match every page of one forum category's post listing."""
    return re.compile(rf"^forum_posts_{_literal(category)}_p\d+$")


def vrchat(vrchat_id: str) -> re.Pattern[str]:
    """Match a VRChat account's profile and friends keys."""
    return re.compile(rf"^vrchat_(?:profile|friends)_{_literal(vrchat_id)}$")


def matches(pattern: KeyPattern, key: str) -> bool:
    """Check if a key falls inside a pattern's scope."""
    return compile_matcher(pattern)(key)
