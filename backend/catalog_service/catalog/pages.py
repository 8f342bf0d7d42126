# backend/catalog_service/catalog/pages.py

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from .db import get_db
from .models import Product, products_newest_first
from .view import PriceBracket, SortOption, ViewState, visible_page

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["money"] = lambda value: f"${float(value):,.2f}"

router = APIRouter(tags=["pages"])

BRACKET_LABELS = {
    PriceBracket.UNDER_50: "Under $50",
    PriceBracket.FROM_50_TO_100: "$50 - $100",
    PriceBracket.FROM_100_TO_200: "$100 - $200",
    PriceBracket.FROM_200: "$200+",
}
SORT_LABELS = {
    SortOption.NEWEST: "Newest",
    SortOption.PRICE_LOW: "Price: Low to High",
    SortOption.PRICE_HIGH: "Price: High to Low",
    SortOption.NAME: "Name",
}


def _page_query(state: ViewState, number: int) -> str:
    params = {"page": str(number), "sort": state.sort.value}
    if state.search:
        params["search"] = state.search
    if state.price_bracket:
        params["price"] = state.price_bracket.value
    return urlencode(params)


# Listing page
@router.get("/", response_class=HTMLResponse)
def catalog_page(
    request: Request,
    search: Optional[str] = None,
    price: Optional[str] = None,
    sort: Optional[str] = None,
    page: Optional[str] = None,
    db: Session = Depends(get_db),
):
    state = ViewState.from_query(search=search, price=price, sort=sort, page=page)
    current = visible_page(products_newest_first(db), state)
    return templates.TemplateResponse(
        request,
        "catalog.html",
        {
            "state": state,
            "page": current,
            "brackets": BRACKET_LABELS,
            "sorts": SORT_LABELS,
            "page_query": lambda number: _page_query(state, number),
        },
    )


# Product detail page
@router.get("/catalog/{product_id}", response_class=HTMLResponse)
def product_page(request: Request, product_id: str, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        logger.warning(f"Catalog Service: Detail page requested for missing product {product_id}.")
        return templates.TemplateResponse(
            request, "not_found.html", {"product_id": product_id}, status_code=404
        )
    return templates.TemplateResponse(request, "product.html", {"product": product})


# Administrative table: every product, no filters
@router.get("/admin", response_class=HTMLResponse)
def admin_page(request: Request, db: Session = Depends(get_db)):
    return templates.TemplateResponse(
        request, "admin.html", {"products": products_newest_first(db)}
    )
