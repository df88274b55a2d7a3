"""
TrekPrep Navigation — the Base → Trek → Category drill-down.

Pages:
    base       initial; nothing selected
    selection  a base chosen (or "all bases"); lists the treks of that filter
    detail     a trek chosen; shows its category progress
    tasks      a category chosen; shows its tasks by section

Selections are held as names, never as positions in a filtered list. The
position a page needs for display is looked up on demand, and a trek that is
no longer in the filtered listing is dropped whenever the filter changes.

Forward moves go exactly one level down. ``back()`` pops one level, and
``return_to()`` jumps straight up to base or selection.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from trekprep.engine.errors import TrekPrepNavigationError, TrekPrepNotFoundError
from trekprep.records.enums import CATEGORY_NAMES

logger = logging.getLogger("trekprep.navigation")


class Page(str, Enum):
    BASE = "base"
    SELECTION = "selection"
    DETAIL = "detail"
    TASKS = "tasks"


_DEPTH = {Page.BASE: 0, Page.SELECTION: 1, Page.DETAIL: 2, Page.TASKS: 3}

# base filter (None = all bases) -> trek names listed for that filter, in display order
TrekLister = Callable[[Optional[str]], List[str]]


class Navigator:
    """
    Page state plus the selected base / trek / category.

    ``trek_lister`` supplies the filtered trek listing, so trek selections are
    always checked against what the selection page actually shows.
    """

    def __init__(self, base_names: Sequence[str], trek_lister: TrekLister):
        self._base_names = list(base_names)
        self._trek_lister = trek_lister
        self.page: Page = Page.BASE
        self.base_name: Optional[str] = None
        self.trek_name: Optional[str] = None
        self.category: Optional[str] = None

    # -----------------------------------------------------------------------
    # Forward transitions
    # -----------------------------------------------------------------------

    def select_base(self, base_name: str) -> None:
        self._require(Page.BASE, "select a base")
        if base_name not in self._base_names:
            raise TrekPrepNotFoundError(f"Unknown base: {base_name}", base_name=base_name)
        self._enter_selection(base_name)

    def view_all_bases(self) -> None:
        self._require(Page.BASE, "view all bases")
        self._enter_selection(None)

    def select_trek(self, trek_name: str) -> None:
        self._require(Page.SELECTION, "select a trek")
        if trek_name not in self.visible_treks():
            raise TrekPrepNotFoundError(
                f"Trek '{trek_name}' is not listed for base {self.base_name or '(all)'}",
                trek_name=trek_name,
            )
        self.trek_name = trek_name
        self.category = None
        self._move(Page.DETAIL)

    def select_category(self, category: str) -> None:
        self._require(Page.DETAIL, "select a category")
        if category not in CATEGORY_NAMES:
            raise TrekPrepNotFoundError(f"Unknown category: {category}", trek_name=self.trek_name)
        self.category = category
        self._move(Page.TASKS)

    # -----------------------------------------------------------------------
    # Backward transitions
    # -----------------------------------------------------------------------

    def back(self) -> Page:
        """Pop exactly one level. Leaving selection clears the base filter."""
        if self.page == Page.TASKS:
            self.category = None
            self._move(Page.DETAIL)
        elif self.page == Page.DETAIL:
            self._move(Page.SELECTION)
        elif self.page == Page.SELECTION:
            self.base_name = None
            self._move(Page.BASE)
        else:
            raise TrekPrepNavigationError("Already at the base page", page=self.page.value)
        return self.page

    def return_to(self, page: Page) -> None:
        """Jump up to ``base`` or ``selection`` from a deeper page."""
        page = Page(page)
        if page not in (Page.BASE, Page.SELECTION) or _DEPTH[page] >= _DEPTH[self.page]:
            raise TrekPrepNavigationError(
                f"Cannot return to {page.value} from {self.page.value}",
                page=self.page.value,
            )
        self.category = None
        if page == Page.BASE:
            self.base_name = None
        self._move(page)

    # -----------------------------------------------------------------------
    # Derived state
    # -----------------------------------------------------------------------

    def visible_treks(self) -> List[str]:
        return self._trek_lister(self.base_name)

    @property
    def base_index(self) -> Optional[int]:
        if self.base_name is None:
            return None
        return self._base_names.index(self.base_name)

    @property
    def trek_index(self) -> Optional[int]:
        """Position of the selected trek in the current filtered listing."""
        if self.trek_name is None:
            return None
        listing = self.visible_treks()
        return listing.index(self.trek_name) if self.trek_name in listing else None

    @property
    def category_index(self) -> Optional[int]:
        if self.category is None:
            return None
        return CATEGORY_NAMES.index(self.category)

    def revalidate(self) -> None:
        """Drop a trek selection the current filter no longer lists (e.g. after a reload)."""
        if self.trek_name is None or self.trek_name in self.visible_treks():
            return
        logger.debug(f"Trek '{self.trek_name}' no longer listed for base {self.base_name or '(all)'}; clearing")
        self.trek_name = None
        self.category = None
        if _DEPTH[self.page] > _DEPTH[Page.SELECTION]:
            self._move(Page.SELECTION)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "page": self.page.value,
            "base_name": self.base_name,
            "trek_name": self.trek_name,
            "category": self.category,
        }

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _enter_selection(self, base_name: Optional[str]) -> None:
        self.base_name = base_name
        self.category = None
        self._move(Page.SELECTION)
        self.revalidate()

    def _require(self, page: Page, action: str) -> None:
        if self.page != page:
            raise TrekPrepNavigationError(
                f"Cannot {action} from the {self.page.value} page",
                page=self.page.value,
            )

    def _move(self, page: Page) -> None:
        logger.debug(f"Navigate {self.page.value} -> {page.value}")
        self.page = page
