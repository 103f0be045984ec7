"""TTL policy per resource type.

Frequently mutated listings get short TTLs, near-static catalog data
gets long ones. The table is data; call sites may always pass an
explicit TTL instead.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from types import MappingProxyType


class ResourceType(str, Enum):
    """Resource categories with their own freshness requirements."""

    # Assets
    ASSETS_LIST = "ASSETS_LIST"
    ASSET_DETAIL = "ASSET_DETAIL"
    ASSET_SEARCH = "ASSET_SEARCH"

    # User & profile
    USER_PROFILE = "USER_PROFILE"
    USER_STATS = "USER_STATS"
    USER_AVATARS = "USER_AVATARS"
    USER_ASSETS = "USER_ASSETS"
    USER_FAVORITES = "USER_FAVORITES"

    # Categories
    CATEGORIES = "CATEGORIES"
    CATEGORY_ASSETS = "CATEGORY_ASSETS"
    TAGS = "TAGS"

    # Forum
    FORUM_POSTS = "FORUM_POSTS"
    FORUM_POST_DETAIL = "FORUM_POST_DETAIL"

    NOTIFICATIONS = "NOTIFICATIONS"

    # VRChat (external API)
    VRCHAT_PROFILE = "VRCHAT_PROFILE"
    VRCHAT_FRIENDS = "VRCHAT_FRIENDS"

    DEFAULT = "DEFAULT"


DEFAULT_TTLS: Mapping[ResourceType, timedelta] = MappingProxyType(
    {
        ResourceType.ASSETS_LIST: timedelta(minutes=2),
        ResourceType.ASSET_DETAIL: timedelta(minutes=5),
        ResourceType.ASSET_SEARCH: timedelta(minutes=1),
        ResourceType.USER_PROFILE: timedelta(minutes=3),
        ResourceType.USER_STATS: timedelta(minutes=3),
        ResourceType.USER_AVATARS: timedelta(minutes=3),
        ResourceType.USER_ASSETS: timedelta(minutes=3),
        ResourceType.USER_FAVORITES: timedelta(minutes=3),
        ResourceType.CATEGORIES: timedelta(minutes=30),
        ResourceType.CATEGORY_ASSETS: timedelta(minutes=2),
        ResourceType.TAGS: timedelta(minutes=30),
        ResourceType.FORUM_POSTS: timedelta(minutes=5),
        ResourceType.FORUM_POST_DETAIL: timedelta(minutes=5),
        ResourceType.NOTIFICATIONS: timedelta(minutes=1),
        ResourceType.VRCHAT_PROFILE: timedelta(minutes=10),
        ResourceType.VRCHAT_FRIENDS: timedelta(minutes=10),
        ResourceType.DEFAULT: timedelta(minutes=5),
    }
)


@dataclass(frozen=True)
class TTLPolicy:
    """Lookup table from resource type to TTL.

    Example:
        fast = {ResourceType.NOTIFICATIONS: timedelta(seconds=20)}
        policy = TTLPolicy(overrides=fast)
        policy.ttl_for(ResourceType.ASSETS_LIST)  # timedelta(minutes=2)
        policy.ttl_for("NOTIFICATIONS")           # timedelta(seconds=20)
    """

    overrides: Mapping[ResourceType, timedelta] = field(default_factory=dict)

    def ttl_for(
        self,
        resource: ResourceType | str,
        override: timedelta | None = None,
    ) -> timedelta:
        """Return the TTL for a resource type.

        Args:
            resource: A ResourceType or its string value.
            override: Call-site TTL that wins over the table.

        Returns:
            The TTL to use. Unknown resources get the DEFAULT TTL.
        """
        if override is not None:
            return override

        try:
            resource_type = ResourceType(resource)
        except ValueError:
            resource_type = ResourceType.DEFAULT

        if resource_type in self.overrides:
            return self.overrides[resource_type]
        return DEFAULT_TTLS.get(resource_type, DEFAULT_TTLS[ResourceType.DEFAULT])

    def with_overrides(
        self,
        overrides: Mapping[ResourceType, timedelta],
    ) -> "TTLPolicy":
        """Return a new policy with additional overrides applied."""
        merged = {**self.overrides, **overrides}
        return TTLPolicy(overrides=merged)
