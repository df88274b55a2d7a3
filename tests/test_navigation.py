"""Unit tests for trekprep.navigation — page transitions and stable selections."""

import pytest

from trekprep.engine.errors import TrekPrepNavigationError, TrekPrepNotFoundError
from trekprep.navigation import Navigator, Page

BASES = ["Uttarakhand", "Ladakh", "Himachal"]
LISTINGS = {
    None: ["Markha Valley Trek", "Hampta Pass Trek", "Nubra Valley Trek"],
    "Ladakh": ["Markha Valley Trek", "Nubra Valley Trek"],
    "Himachal": ["Hampta Pass Trek"],
    "Uttarakhand": [],
}


@pytest.fixture
def listings():
    return {k: list(v) for k, v in LISTINGS.items()}


@pytest.fixture
def nav(listings):
    return Navigator(BASES, lambda base: listings[base])


class TestForward:

    def test_initial_state(self, nav):
        assert nav.page == Page.BASE
        assert nav.to_dict() == {"page": "base", "base_name": None, "trek_name": None, "category": None}

    def test_drill_down(self, nav):
        nav.select_base("Ladakh")
        assert nav.page == Page.SELECTION
        assert nav.base_index == 1
        nav.select_trek("Nubra Valley Trek")
        assert nav.page == Page.DETAIL
        assert nav.trek_index == 1
        nav.select_category("Kitchen")
        assert nav.page == Page.TASKS
        assert nav.category_index == 3

    def test_view_all_bases(self, nav):
        nav.view_all_bases()
        assert nav.page == Page.SELECTION
        assert nav.base_name is None
        assert nav.visible_treks() == LISTINGS[None]

    def test_trek_must_be_listed_for_filter(self, nav):
        nav.select_base("Himachal")
        with pytest.raises(TrekPrepNotFoundError):
            nav.select_trek("Markha Valley Trek")

    def test_unknown_base_and_category(self, nav):
        with pytest.raises(TrekPrepNotFoundError):
            nav.select_base("Atlantis")
        nav.view_all_bases()
        nav.select_trek("Markha Valley Trek")
        with pytest.raises(TrekPrepNotFoundError):
            nav.select_category("Snacks")

    @pytest.mark.parametrize("action", [
        lambda n: n.select_trek("Markha Valley Trek"),
        lambda n: n.select_category("Permits"),
    ])
    def test_no_skipping_levels(self, nav, action):
        with pytest.raises(TrekPrepNavigationError) as exc:
            action(nav)
        assert exc.value.page == "base"


class TestBack:

    def test_pops_one_level(self, nav):
        nav.select_base("Ladakh")
        nav.select_trek("Markha Valley Trek")
        nav.select_category("Permits")

        assert nav.back() == Page.DETAIL
        assert nav.category is None
        assert nav.back() == Page.SELECTION
        assert nav.base_name == "Ladakh"
        assert nav.back() == Page.BASE
        assert nav.base_name is None

    def test_back_from_base_is_illegal(self, nav):
        with pytest.raises(TrekPrepNavigationError):
            nav.back()

    def test_return_to_base_from_tasks(self, nav):
        nav.select_base("Ladakh")
        nav.select_trek("Markha Valley Trek")
        nav.select_category("Permits")
        nav.return_to(Page.BASE)
        assert nav.page == Page.BASE
        assert nav.base_name is None and nav.category is None

    def test_return_to_selection_keeps_base(self, nav):
        nav.select_base("Ladakh")
        nav.select_trek("Markha Valley Trek")
        nav.return_to("selection")
        assert nav.page == Page.SELECTION
        assert nav.base_name == "Ladakh"

    def test_return_to_cannot_go_down(self, nav):
        nav.select_base("Ladakh")
        with pytest.raises(TrekPrepNavigationError):
            nav.return_to(Page.DETAIL)
        with pytest.raises(TrekPrepNavigationError):
            nav.return_to(Page.SELECTION)


class TestStableSelection:

    def test_index_follows_entity_after_filter_change(self, nav):
        nav.view_all_bases()
        nav.select_trek("Nubra Valley Trek")
        assert nav.trek_index == 2
        nav.back()
        nav.back()
        nav.select_base("Ladakh")
        # same trek, different position in the narrower listing
        assert nav.trek_name == "Nubra Valley Trek"
        assert nav.trek_index == 1

    def test_trek_cleared_when_filter_hides_it(self, nav):
        nav.view_all_bases()
        nav.select_trek("Hampta Pass Trek")
        nav.back()
        nav.back()
        nav.select_base("Ladakh")
        assert nav.trek_name is None
        assert nav.trek_index is None

    def test_revalidate_after_listing_shrinks(self, nav, listings):
        nav.select_base("Ladakh")
        nav.select_trek("Nubra Valley Trek")
        nav.select_category("Permits")
        listings["Ladakh"].remove("Nubra Valley Trek")
        nav.revalidate()
        assert nav.page == Page.SELECTION
        assert nav.trek_name is None and nav.category is None
