"""Tests for invalidation patterns."""

import pytest

from cachedquery import InvalidPatternError, keys, patterns


class TestScopePatterns:
    """Tests for the fixed scope patterns."""

    @pytest.mark.parametrize(
        "key",
        [
            keys.assets_list(),
            keys.assets_list(3, {"sort": "new"}),
            keys.asset_detail(1),
            keys.asset_search("hat"),
        ],
    )
    def test_all_assets_matches(self, key: str) -> None:
        """Test that ALL_ASSETS covers every asset key."""
        assert patterns.matches(patterns.ALL_ASSETS, key)

    @pytest.mark.parametrize(
        "key",
        [
            keys.user_assets(1),
            keys.category_assets(5),
            keys.tags(),
            keys.categories(),
        ],
    )
    def test_all_assets_ignores_other_scopes(self, key: str) -> None:
        """Test that ALL_ASSETS leaves unrelated keys alone."""
        assert not patterns.matches(patterns.ALL_ASSETS, key)

    def test_all_categories(self) -> None:
        """Test the category scope."""
        assert patterns.matches(patterns.ALL_CATEGORIES, keys.categories())
        assert patterns.matches(patterns.ALL_CATEGORIES, keys.category_detail(5))
        assert patterns.matches(patterns.ALL_CATEGORIES, keys.category_assets(5))
        assert not patterns.matches(patterns.ALL_CATEGORIES, keys.tags())
        assert not patterns.matches(patterns.ALL_CATEGORIES, "categories_allx")

    def test_other_scopes(self) -> None:
        """Test the remaining fixed scopes."""
        assert patterns.matches(patterns.ALL_TAGS, keys.tags())
        assert patterns.matches(patterns.ALL_FORUM, keys.forum_posts("news", 2))
        assert patterns.matches(patterns.ALL_FORUM, keys.forum_post_detail(9))
        assert patterns.matches(patterns.ALL_NOTIFICATIONS, keys.notifications(7))
        assert patterns.matches(patterns.ALL_VRCHAT, keys.vrchat_friends("usr_1"))
        assert not patterns.matches(patterns.ALL_VRCHAT, keys.user_profile("vrchat"))


class TestPatternFactories:
    """Tests for the parameterized patterns."""

    def test_user_profile(self) -> None:
        """Test the user profile scope is exact on the username."""
        pattern = patterns.user_profile("bob")

        assert patterns.matches(pattern, keys.user_profile("bob"))
        assert patterns.matches(pattern, keys.user_stats("bob"))
        assert patterns.matches(pattern, keys.user_avatars("bob"))
        assert not patterns.matches(pattern, keys.user_profile("bobby"))
        assert not patterns.matches(pattern, keys.user_profile("alice"))

    def test_identifiers_are_escaped(self) -> None:
        """Test that regex metacharacters in identifiers are literal."""
        pattern = patterns.user_profile("a.b")

        assert patterns.matches(pattern, keys.user_profile("a.b"))
        assert not patterns.matches(pattern, keys.user_profile("axb"))

    def test_assets_by_category(self) -> None:
        """Test the category asset scope with string and numeric ids."""
        pattern = patterns.assets_by_category(5)

        assert patterns.matches(pattern, keys.category_assets(5, 3))
        assert patterns.matches(pattern, keys.assets_list(1, {"categoryId": "5"}))
        assert patterns.matches(
            pattern, keys.assets_list(2, {"categoryId": 5, "sort": "new"})
        )
        assert not patterns.matches(pattern, keys.category_assets(55))
        assert not patterns.matches(pattern, keys.assets_list(1, {"categoryId": "55"}))
        assert not patterns.matches(pattern, keys.assets_list(1))

    def test_assets_by_category_custom_field(self) -> None:
        """Test a different filter field name."""
        pattern = patterns.assets_by_category("hats", filter_field="category")

        assert patterns.matches(pattern, keys.assets_list(1, {"category": "hats"}))
        assert not patterns.matches(
            pattern, keys.assets_list(1, {"categoryId": "hats"})
        )

    def test_user_library(self) -> None:
        """Test the user's own assets and favorites scope."""
        pattern = patterns.user_library(7)

        assert patterns.matches(pattern, keys.user_assets(7, 2))
        assert patterns.matches(pattern, keys.user_favorites(7))
        assert not patterns.matches(pattern, keys.user_assets(77))

    def test_notifications_forum_vrchat(self) -> None:
        """Test the remaining factories."""
        assert patterns.matches(patterns.notifications_for(7), keys.notifications(7))
        assert not patterns.matches(
            patterns.notifications_for(7), keys.notifications(70)
        )
        assert patterns.matches(
            patterns.forum_category("news"), keys.forum_posts("news", 4)
        )
        assert not patterns.matches(
            patterns.forum_category("news"), keys.forum_posts("newsletter")
        )
        assert patterns.matches(patterns.vrchat("usr_1"), keys.vrchat_profile("usr_1"))


class TestMatches:
    """Tests for the matches helper."""

    def test_string_and_predicate(self) -> None:
        """Test matching with regex sources and predicates."""
        assert patterns.matches(r"^tags_", "tags_all")
        assert patterns.matches(lambda key: key.endswith("_all"), "tags_all")

    def test_invalid_regex(self) -> None:
        """Test that a broken regex raises InvalidPatternError."""
        with pytest.raises(InvalidPatternError):
            patterns.matches("[", "tags_all")
