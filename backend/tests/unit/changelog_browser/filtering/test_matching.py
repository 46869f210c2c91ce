import itertools

import pytest

from changelog_browser.configs.constants import ALL_CATEGORIES
from changelog_browser.configs.constants import Category
from changelog_browser.filtering.matching import CardSnapshot
from changelog_browser.filtering.matching import compute_item_visibility
from changelog_browser.filtering.matching import compute_visible_page
from changelog_browser.filtering.matching import decode_categories
from changelog_browser.filtering.matching import get_matching_indices
from changelog_browser.filtering.matching import ItemSnapshot
from changelog_browser.filtering.matching import release_matches
from changelog_browser.filtering.view_state import ViewState
from changelog_browser.releases.models import Release


def snapshots(releases: list[Release]) -> list[CardSnapshot]:
    return [CardSnapshot.from_release(release) for release in releases]


def versions(releases: list[Release], indices: tuple[int, ...] | list[int]) -> list[str]:
    return [releases[index].version for index in indices]


class TestReleaseMatches:
    def test_no_filters_match_everything(self, sample_releases: list[Release]) -> None:
        cards = snapshots(sample_releases)

        assert get_matching_indices(cards, ViewState()) == [0, 1, 2, 3]

    def test_category_only(self, sample_releases: list[Release]) -> None:
        cards = snapshots(sample_releases)
        matching = get_matching_indices(cards, ViewState(category="feature"))

        assert versions(sample_releases, matching) == ["v2.1.0", "v2.0.0"]

    def test_search_matches_item_text(self, sample_releases: list[Release]) -> None:
        cards = snapshots(sample_releases)
        matching = get_matching_indices(cards, ViewState(query="FIXED"))

        assert versions(sample_releases, matching) == ["v2.1.0", "v1.9.0-beta.1"]

    def test_search_matches_version(self, sample_releases: list[Release]) -> None:
        cards = snapshots(sample_releases)
        matching = get_matching_indices(cards, ViewState(query="2.0"))

        assert versions(sample_releases, matching) == ["v2.0.5", "v2.0.0"]

    def test_both_filters_need_one_item_matching_both(
        self, sample_releases: list[Release]
    ) -> None:
        cards = snapshots(sample_releases)
        # v1.9.0-beta.1 has a bug fix, but its bug fix does not mention "crash"
        matching = get_matching_indices(cards, ViewState(category="bug-fix", query="crash"))

        assert versions(sample_releases, matching) == ["v2.1.0"]

    def test_both_filters_version_hit_needs_category_on_release(
        self, sample_releases: list[Release]
    ) -> None:
        cards = snapshots(sample_releases)
        # Both v2.0.x versions contain "2.0"; only v2.0.5 has a security change
        matching = get_matching_indices(cards, ViewState(category="security", query="2.0"))

        assert versions(sample_releases, matching) == ["v2.0.5"]

    def test_version_hit_does_not_need_item_overlap(self) -> None:
        # Release-level categories say "security" even though no item does.
        # The version shortcut trusts the release-level list.
        card = CardSnapshot(
            version="v3.0.0",
            categories=frozenset({"security"}),
            items=(ItemSnapshot(category="feature", text="new login flow"),),
        )

        assert release_matches(card, ViewState(category="security", query="3.0"))
        assert not release_matches(card, ViewState(category="security", query="login"))

    def test_no_match(self, sample_releases: list[Release]) -> None:
        cards = snapshots(sample_releases)

        assert get_matching_indices(cards, ViewState(query="zzz")) == []


class TestVisiblePage:
    def test_first_batch(self, many_releases: list[Release]) -> None:
        page = compute_visible_page(snapshots(many_releases), ViewState())

        assert len(page.matching) == 25
        assert page.visible == tuple(range(10))
        assert page.remaining == 15

    def test_load_more_extends_page(self, many_releases: list[Release]) -> None:
        state = ViewState().load_more().load_more()
        page = compute_visible_page(snapshots(many_releases), state)

        assert len(page.visible) == 25
        assert page.remaining == 0

    def test_page_is_prefix_of_matching(self, many_releases: list[Release]) -> None:
        page = compute_visible_page(snapshots(many_releases), ViewState(category="performance"))

        # every third release has a performance item
        assert len(page.matching) == 9
        assert page.visible == page.matching[:10]
        assert page.remaining == 0

    @pytest.mark.parametrize(
        "category, query",
        itertools.product(
            [ALL_CATEGORIES] + [category.value for category in Category],
            ["", "fixed", "1.0.1", "v1.0.2", "sync 1", "zzz"],
        ),
    )
    def test_visible_cards_satisfy_predicate(
        self, many_releases: list[Release], category: str, query: str
    ) -> None:
        cards = snapshots(many_releases)
        state = ViewState(category=category, query=query)
        page = compute_visible_page(cards, state)

        assert all(release_matches(cards[index], state) for index in page.visible)
        assert len(page.visible) <= state.visible_count
        hidden = set(range(len(cards))) - set(page.visible)
        assert all(
            not release_matches(cards[index], state) or index in page.matching[10:]
            for index in hidden
        )


class TestItemVisibility:
    def test_and_of_category_and_search(self, sample_releases: list[Release]) -> None:
        card = CardSnapshot.from_release(sample_releases[0])
        visibility = compute_item_visibility(card, ViewState(category="bug-fix", query="crash"))

        assert visibility.visible == (False, True, False)
        assert visibility.visible_categories == frozenset({"bug-fix"})
        assert not visibility.used_version_fallback

    def test_no_filters_show_all(self, sample_releases: list[Release]) -> None:
        card = CardSnapshot.from_release(sample_releases[0])
        visibility = compute_item_visibility(card, ViewState())

        assert visibility.visible == (True, True, True)
        assert visibility.visible_count == 3

    def test_version_only_hit_falls_back_to_all_items(
        self, sample_releases: list[Release]
    ) -> None:
        card = CardSnapshot.from_release(sample_releases[1])  # v2.0.5
        visibility = compute_item_visibility(card, ViewState(query="2.0.5"))

        assert visibility.visible == (True, True)
        assert visibility.used_version_fallback

    def test_version_only_hit_falls_back_to_category_items(
        self, sample_releases: list[Release]
    ) -> None:
        card = CardSnapshot.from_release(sample_releases[1])  # v2.0.5
        visibility = compute_item_visibility(card, ViewState(category="security", query="2.0"))

        assert visibility.visible == (False, True)
        assert visibility.visible_categories == frozenset({"security"})

    def test_no_fallback_without_version_hit(self, sample_releases: list[Release]) -> None:
        card = CardSnapshot.from_release(sample_releases[1])
        visibility = compute_item_visibility(card, ViewState(query="unrelated"))

        assert visibility.visible_count == 0
        assert not visibility.used_version_fallback

    def test_matched_releases_never_render_empty(self, many_releases: list[Release]) -> None:
        cards = snapshots(many_releases)
        for category in [ALL_CATEGORIES] + [category.value for category in Category]:
            for query in ["", "v1.0.1", "1.0.2", "fixed bug", "sync"]:
                state = ViewState(category=category, query=query)
                for index in get_matching_indices(cards, state):
                    assert compute_item_visibility(cards[index], state).visible_count > 0


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('["feature", "bug-fix"]', frozenset({"feature", "bug-fix"})),
        ("[]", frozenset()),
        (None, frozenset()),
        ("", frozenset()),
        ("{not json", frozenset()),
        ('{"feature": true}', frozenset()),
        ('["feature", 3]', frozenset({"feature"})),
    ],
)
def test_decode_categories(raw: str | None, expected: frozenset[str]) -> None:
    assert decode_categories(raw) == expected
