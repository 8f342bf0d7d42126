# backend/catalog_service/catalog/view.py
"""
Derives the visible page of the catalog from the full product list.

Everything here is pure: ``visible_page(products, state)`` filters by search
term, then by price bracket, sorts, and slices one page. ``ViewState`` is
immutable and changes only through its transition methods, which reset the
page to 1 whenever a filter or the sort order changes.
"""

import unicodedata
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional, Sequence

PAGE_SIZE = 8


class PriceBracket(str, Enum):
    UNDER_50 = "0-50"
    FROM_50_TO_100 = "50-100"
    FROM_100_TO_200 = "100-200"
    FROM_200 = "200+"

    @property
    def bounds(self):
        """Half-open (low, high) range; high is None for the open top bracket."""
        return _BRACKET_BOUNDS[self]

    def contains(self, price) -> bool:
        low, high = self.bounds
        return price >= low and (high is None or price < high)

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["PriceBracket"]:
        """Maps a query-string value to a bracket; anything unknown means no filter."""
        try:
            return cls(value)
        except ValueError:
            return None


_BRACKET_BOUNDS = {
    PriceBracket.UNDER_50: (0, 50),
    PriceBracket.FROM_50_TO_100: (50, 100),
    PriceBracket.FROM_100_TO_200: (100, 200),
    PriceBracket.FROM_200: (200, None),
}


class SortOption(str, Enum):
    NEWEST = "newest"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    NAME = "name"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortOption":
        try:
            return cls(value)
        except ValueError:
            return cls.NEWEST


def _field(product: Any, name: str):
    # products arrive either as ORM/pydantic objects or as API dicts
    if isinstance(product, dict):
        return product.get(name)
    return getattr(product, name)


def _price(product: Any) -> Decimal:
    return Decimal(str(_field(product, "price")))


def _created_at(product: Any) -> datetime:
    value = _field(product, "created_at")
    if value is None and isinstance(product, dict):
        value = product.get("createdAt")
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value


def name_collation_key(name: str):
    """
    Sort key that orders names the way a human-facing locale compare does:
    accents and case are ignored first, then used to break ties.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    # lowercase before uppercase on case-only ties
    return (base.casefold(), name.casefold(), name.swapcase())


def matches_search(product: Any, term: str) -> bool:
    if not term:
        return True
    needle = term.casefold()
    return (
        needle in (_field(product, "name") or "").casefold()
        or needle in (_field(product, "description") or "").casefold()
    )


def filter_products(
    products: Sequence[Any], search: str = "", bracket: Optional[PriceBracket] = None
) -> List[Any]:
    filtered = [p for p in products if matches_search(p, search)]
    if bracket is not None:
        filtered = [p for p in filtered if bracket.contains(_price(p))]
    return filtered


def sort_products(products: Sequence[Any], option: SortOption = SortOption.NEWEST) -> List[Any]:
    if option is SortOption.PRICE_LOW:
        return sorted(products, key=_price)
    if option is SortOption.PRICE_HIGH:
        return sorted(products, key=_price, reverse=True)
    if option is SortOption.NAME:
        return sorted(products, key=lambda p: name_collation_key(_field(p, "name")))
    return sorted(products, key=_created_at, reverse=True)


def total_pages_for(item_count: int, page_size: int = PAGE_SIZE) -> int:
    return -(-item_count // page_size)


@dataclass(frozen=True)
class ViewState:
    search: str = ""
    price_bracket: Optional[PriceBracket] = None
    sort: SortOption = SortOption.NEWEST
    page: int = 1

    def with_search(self, term: str) -> "ViewState":
        return replace(self, search=term or "", page=1)

    def with_price_bracket(self, bracket: Optional[PriceBracket]) -> "ViewState":
        return replace(self, price_bracket=bracket, page=1)

    def with_sort(self, option: SortOption) -> "ViewState":
        return replace(self, sort=option, page=1)

    def go_to_page(self, page: int, total_pages: int) -> "ViewState":
        """Moves to ``page`` if it exists; otherwise the state is returned unchanged."""
        if page < 1 or page > max(total_pages, 1):
            return self
        return replace(self, page=page)

    def next_page(self, total_pages: int) -> "ViewState":
        return self.go_to_page(self.page + 1, total_pages)

    def previous_page(self, total_pages: int) -> "ViewState":
        return self.go_to_page(self.page - 1, total_pages)

    @classmethod
    def from_query(cls, search=None, price=None, sort=None, page=None) -> "ViewState":
        """Builds a state from raw query parameters, falling back to defaults."""
        try:
            page_number = int(page) if page else 1
        except (TypeError, ValueError):
            page_number = 1
        return cls(
            search=search or "",
            price_bracket=PriceBracket.parse(price),
            sort=SortOption.parse(sort),
            page=max(page_number, 1),
        )


@dataclass(frozen=True)
class Page:
    items: List[Any]
    number: int
    total_pages: int
    total_items: int

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages

    @property
    def page_numbers(self) -> List[int]:
        return list(range(1, self.total_pages + 1))


def paginate(items: Sequence[Any], page: int, page_size: int = PAGE_SIZE) -> Page:
    total_pages = total_pages_for(len(items), page_size)
    number = min(max(page, 1), max(total_pages, 1))
    start = (number - 1) * page_size
    return Page(
        items=list(items[start : start + page_size]),
        number=number,
        total_pages=total_pages,
        total_items=len(items),
    )


def visible_page(products: Sequence[Any], state: ViewState, page_size: int = PAGE_SIZE) -> Page:
    filtered = filter_products(products, state.search, state.price_bracket)
    return paginate(sort_products(filtered, state.sort), state.page, page_size)
