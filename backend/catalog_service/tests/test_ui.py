# backend/catalog_service/tests/test_ui.py

from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from catalog.client import CatalogAPIError, CatalogClient
from catalog.ui import CatalogUI, ProductForm, View
from catalog.view import PriceBracket, SortOption


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ui(client: TestClient, db_session_for_test, clock):
    catalog_ui = CatalogUI(CatalogClient(http_client=client), clock=clock)
    catalog_ui.load_products()
    return catalog_ui


def test_load_products_starts_on_empty_listing(ui: CatalogUI):
    assert ui.products == []
    assert ui.view is View.LISTING
    assert ui.page.items == []
    assert ui.notification is None


def test_create_through_form(ui: CatalogUI):
    ui.open_create_form()
    ui.update_form(name="Tee", description="Soft cotton", price="19.99")
    assert ui.submit_form() is True

    assert ui.form is None
    assert [p.name for p in ui.products] == ["Tee"]
    assert ui.products[0].price == 19.99
    assert ui.notification.message == "Product created successfully!"
    assert ui.notification.kind == "success"


def test_failed_create_keeps_form_open(ui: CatalogUI):
    ui.open_create_form()
    ui.update_form(name="Tee", description="", price="19.99")
    assert ui.submit_form() is False

    assert ui.form is not None
    assert ui.form.submitting is False
    assert ui.notification.kind == "error"
    assert ui.notification.message == "Failed to save product"
    assert ui.products == []


@pytest.mark.parametrize("price", ["cheap", "inf", "nan", "1e999"])
def test_unparsable_price_is_rejected_by_api(ui: CatalogUI, price):
    ui.open_create_form()
    ui.update_form(name="Tee", description="Soft", price=price)
    assert ui.submit_form() is False
    assert ui.form is not None
    assert ui.form.price == price
    assert ui.notification.message == "Failed to save product"
    assert ui.products == []


def test_edit_uses_update(ui: CatalogUI, make_product):
    created = make_product(name="Old", image="http://example.com/a.png")
    ui.load_products()
    product = ui.products[0]

    ui.open_edit_form(product)
    assert ui.form.id == created["id"]
    assert ui.form.image == "http://example.com/a.png"
    ui.update_form(name="New", image="")
    assert ui.submit_form() is True

    assert ui.products[0].id == created["id"]
    assert ui.products[0].name == "New"
    # an emptied image field clears the image
    assert ui.products[0].image is None
    assert ui.notification.message == "Product updated successfully!"


def test_submit_ignored_while_in_flight(ui: CatalogUI):
    ui.client = MagicMock()
    ui.open_create_form()
    ui.form.submitting = True
    assert ui.submit_form() is False
    ui.client.create_product.assert_not_called()


def test_delete_requires_confirmation(ui: CatalogUI, make_product):
    make_product()
    ui.load_products()
    assert ui.confirm_delete() is False

    ui.request_delete(ui.products[0])
    ui.cancel_delete()
    assert ui.confirm_delete() is False
    assert len(ui.products) == 1


def test_delete_from_detail_returns_to_listing(ui: CatalogUI, make_product):
    make_product(name="Keep")
    make_product(name="Remove")
    ui.load_products()
    doomed = next(p for p in ui.products if p.name == "Remove")

    ui.show_detail(doomed)
    ui.request_delete(doomed)
    assert ui.confirm_delete() is True

    assert ui.view is View.LISTING
    assert ui.selected is None
    assert ui.pending_delete is None
    assert [p.name for p in ui.products] == ["Keep"]
    assert ui.notification.message == "Product deleted successfully!"


def test_delete_other_product_keeps_detail_view(ui: CatalogUI, make_product):
    make_product(name="Viewed")
    make_product(name="Other")
    ui.load_products()
    viewed = next(p for p in ui.products if p.name == "Viewed")
    other = next(p for p in ui.products if p.name == "Other")

    ui.show_detail(viewed)
    ui.request_delete(other)
    assert ui.confirm_delete() is True
    assert ui.view is View.DETAIL
    assert ui.selected.id == viewed.id


def test_delete_missing_product_reports_error(ui: CatalogUI, make_product):
    make_product()
    ui.load_products()
    product = ui.products[0]
    ui.client.delete_product(product.id)

    ui.request_delete(product)
    assert ui.confirm_delete() is False
    assert ui.notification.kind == "error"
    assert ui.pending_delete is product


def test_notification_expires_and_is_superseded(ui: CatalogUI, clock: FakeClock):
    ui.notify("first")
    clock.now += 2
    ui.notify("second", "error")
    clock.now += 2
    assert ui.notification.message == "second"
    clock.now += 1
    assert ui.notification is None


def test_filter_changes_reset_page(ui: CatalogUI, make_product):
    for i in range(17):
        make_product(name=f"Tee {i}", price=str(10 + i))
    ui.load_products()

    ui.go_to_page(3)
    assert ui.page.number == 3
    assert len(ui.page.items) == 1

    ui.go_to_page(4)
    assert ui.state.page == 3

    ui.set_sort(SortOption.PRICE_LOW)
    assert ui.state.page == 1
    ui.next_page()
    ui.set_price_bracket(PriceBracket.UNDER_50)
    assert ui.state.page == 1
    ui.next_page()
    ui.set_search("tee 1")
    assert ui.state.page == 1
    assert ui.page.total_items == 8  # Tee 1, Tee 10..16


def test_load_failure_shows_error(clock):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    http_client = httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://catalog")
    ui = CatalogUI(CatalogClient(http_client=http_client), clock=clock)
    assert ui.load_products() is False
    assert ui.notification.message == "Failed to load products"


def test_client_surfaces_server_error_message():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(500, json={"error": "Failed to fetch products"})
    )
    client = CatalogClient(http_client=httpx.Client(transport=transport, base_url="http://catalog"))
    with pytest.raises(CatalogAPIError) as excinfo:
        client.list_products()
    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "Failed to fetch products"


def test_product_form_payload():
    form = ProductForm(name="Hat", description="Warm", price="12.5", image="")
    assert form.payload() == {"name": "Hat", "description": "Warm", "price": 12.5, "image": None}
    assert not form.is_edit
