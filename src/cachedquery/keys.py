"""Cache key generation.

Pure functions mapping resource identifiers, pages and filters to
deterministic cache keys. Filters are serialized canonically, so
``{"a": 1, "b": 2}`` and ``{"b": 2, "a": 1}`` share a key.

Example:
    from cachedquery import keys

    keys.assets_list(page=2, filters={"sort": "new"})
    # 'assets_list_p2_{"sort":"new"}'
"""

from collections.abc import Mapping
from typing import Any

from cachedquery.utils.serialization import canonical_json

Filters = Mapping[str, Any] | None


# Assets


def assets_list(page: int = 1, filters: Filters = None) -> str:
    """Key for a page of the asset listing."""
    return f"assets_list_p{page}_{canonical_json(filters)}"


def asset_detail(asset_id: Any) -> str:
    """Key for a single asset."""
    return f"asset_detail_{asset_id}"


def asset_search(query: str, page: int = 1) -> str:
    """Key for a page of asset search results."""
    return f"asset_search_{query}_p{page}"


# User


def user_profile(username: str) -> str:
    """Key for a user's public profile."""
    return f"user_profile_{username}"


def user_stats(username: str) -> str:
    """Key for a user's statistics."""
    return f"user_stats_{username}"


def user_avatars(user_id: Any) -> str:
    """Key for a user's avatars."""
    return f"user_avatars_{user_id}"


def user_assets(user_id: Any, page: int = 1, filters: Filters = None) -> str:
    """Key for a page of a user's own assets."""
    return f"user_assets_{user_id}_p{page}_{canonical_json(filters)}"


def user_favorites(user_id: Any, page: int = 1, filters: Filters = None) -> str:
    """Key for a page of a user's bookmarked assets."""
    return f"user_favorites_{user_id}_p{page}_{canonical_json(filters)}"


# Categories


def categories() -> str:
    return "categories_all"


def category_detail(category_id: Any) -> str:
    return f"category_detail_{category_id}"


def category_assets(category_id: Any, page: int = 1, filters: Filters = None) -> str:
    """Key for a page of assets in one category."""
    return f"category_{category_id}_assets_p{page}_{canonical_json(filters)}"


def tags() -> str:
    return "tags_all"


# Forum


def forum_posts(category: str = "all", page: int = 1) -> str:
    return f"forum_posts_{category}_p{page}"


def forum_post_detail(post_id: Any) -> str:
    return f"forum_post_detail_{post_id}"


def notifications(user_id: Any) -> str:
    return f"notifications_{user_id}"


# VRChat


def vrchat_profile(vrchat_id: str) -> str:
    return f"vrchat_profile_{vrchat_id}"


def vrchat_friends(vrchat_id: str) -> str:
    return f"vrchat_friends_{vrchat_id}"
