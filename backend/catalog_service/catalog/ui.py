# backend/catalog_service/catalog/ui.py
"""
Catalog UI controller.

Holds the view state of a single catalog session, loads the full product list
through the Catalog API and drives create/edit/delete. Every user action is a
method; rendering layers read ``page``, ``products``, ``form``,
``pending_delete`` and ``notification``.
"""

import logging
import math
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, List, Optional

from .client import CatalogAPIError, CatalogClient
from .schemas import ProductResponse
from .view import Page, PriceBracket, SortOption, ViewState, visible_page

logger = logging.getLogger(__name__)

NOTIFICATION_SECONDS = 3.0


class View(str, Enum):
    LISTING = "listing"
    DETAIL = "detail"
    ADMIN = "admin"


@dataclass(frozen=True)
class Notification:
    message: str
    kind: str  # "success" or "error"
    expires_at: float


@dataclass
class ProductForm:
    """Shared create/edit form. An empty ``id`` means create."""

    id: str = ""
    name: str = ""
    description: str = ""
    price: str = ""
    image: str = ""
    submitting: bool = field(default=False, compare=False)

    @classmethod
    def from_product(cls, product: ProductResponse) -> "ProductForm":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=str(product.price),
            image=product.image or "",
        )

    @property
    def is_edit(self) -> bool:
        return bool(self.id)

    def payload(self) -> dict:
        try:
            price = float(self.price)
        except ValueError:
            price = None
        if price is None or not math.isfinite(price):
            # sent as typed; the API rejects it
            price = self.price
        return {
            "name": self.name,
            "description": self.description,
            "price": price,
            "image": self.image or None,
        }


class CatalogUI:
    def __init__(
        self,
        client: CatalogClient,
        clock: Callable[[], float] = time.monotonic,
        notification_seconds: float = NOTIFICATION_SECONDS,
    ):
        self.client = client
        self.clock = clock
        self.notification_seconds = notification_seconds

        self.state = ViewState()
        self.products: List[ProductResponse] = []
        self.view = View.LISTING
        self.selected: Optional[ProductResponse] = None
        self.form: Optional[ProductForm] = None
        self.pending_delete: Optional[ProductResponse] = None
        self.deleting = False
        self._notification: Optional[Notification] = None

    # --- notifications ---

    def notify(self, message: str, kind: str = "success"):
        self._notification = Notification(
            message, kind, self.clock() + self.notification_seconds
        )

    @property
    def notification(self) -> Optional[Notification]:
        if self._notification and self.clock() >= self._notification.expires_at:
            self._notification = None
        return self._notification

    # --- loading and the visible page ---

    def load_products(self) -> bool:
        try:
            self.products = self.client.list_products()
        except CatalogAPIError as e:
            logger.error(f"Catalog UI: Failed to load products: {e.message}")
            self.notify("Failed to load products", "error")
            return False
        return True

    @property
    def page(self) -> Page:
        return visible_page(self.products, self.state)

    # --- view parameters ---

    def set_search(self, term: str):
        self.state = self.state.with_search(term)

    def set_price_bracket(self, bracket: Optional[PriceBracket]):
        self.state = self.state.with_price_bracket(bracket)

    def set_sort(self, option: SortOption):
        self.state = self.state.with_sort(option)

    def go_to_page(self, number: int):
        self.state = self.state.go_to_page(number, self.page.total_pages)

    def next_page(self):
        self.state = self.state.next_page(self.page.total_pages)

    def previous_page(self):
        self.state = self.state.previous_page(self.page.total_pages)

    # --- navigation ---

    def show_listing(self):
        self.view = View.LISTING
        self.selected = None

    def show_detail(self, product: ProductResponse):
        self.view = View.DETAIL
        self.selected = product

    def show_admin(self):
        self.view = View.ADMIN
        self.selected = None

    # --- create / edit ---

    def open_create_form(self):
        self.form = ProductForm()

    def open_edit_form(self, product: ProductResponse):
        self.form = ProductForm.from_product(product)

    def update_form(self, **fields):
        if self.form is not None:
            self.form = replace(self.form, **fields)

    def close_form(self):
        self.form = None

    def submit_form(self) -> bool:
        """
        Saves the form. Ignored while a submit is already in flight. On failure
        the form stays open so the user can retry.
        """
        form = self.form
        if form is None or form.submitting:
            return False

        form.submitting = True
        try:
            if form.is_edit:
                saved = self.client.update_product(form.id, form.payload())
            else:
                saved = self.client.create_product(form.payload())
        except CatalogAPIError as e:
            logger.warning(f"Catalog UI: Saving product failed: {e.message}")
            self.notify("Failed to save product", "error")
            return False
        finally:
            form.submitting = False

        self.notify(
            "Product updated successfully!" if form.is_edit else "Product created successfully!"
        )
        self.form = None
        if self.selected is not None and self.selected.id == saved.id:
            self.selected = saved
        self.load_products()
        return True

    # --- delete ---

    def request_delete(self, product: ProductResponse):
        self.pending_delete = product

    def cancel_delete(self):
        self.pending_delete = None

    def confirm_delete(self) -> bool:
        product = self.pending_delete
        if product is None or self.deleting:
            return False

        self.deleting = True
        try:
            self.client.delete_product(product.id)
        except CatalogAPIError as e:
            logger.warning(f"Catalog UI: Deleting product {product.id} failed: {e.message}")
            self.notify("Failed to delete product", "error")
            return False
        finally:
            self.deleting = False

        self.notify("Product deleted successfully!")
        self.pending_delete = None
        if self.selected is not None and self.selected.id == product.id:
            self.show_listing()
        self.load_products()
        return True
