# backend/catalog_service/catalog/main.py

import logging
import os
import sys
import time
from typing import List

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import pages
from .db import Base, engine, get_db
from .models import Product, products_newest_first, utcnow
from .schemas import (
    DeleteResponse,
    ErrorResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)

# --- Standard Logging Configuration ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# Suppress noisy logs from third-party libraries for cleaner output
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("uvicorn.error").setLevel(logging.INFO)

DB_CONNECT_MAX_RETRIES = int(os.getenv("DB_CONNECT_MAX_RETRIES", "10"))
DB_CONNECT_RETRY_DELAY_SECONDS = int(os.getenv("DB_CONNECT_RETRY_DELAY_SECONDS", "5"))

NOT_FOUND_MESSAGE = "Product not found"
REQUIRED_FIELDS_MESSAGE = "Name, description, and price are required"

# --- FastAPI Application Setup ---
app = FastAPI(
    title="Catalog Service API",
    description="Lists, creates, edits and deletes clothing products for the storefront catalog.",
    version="1.0.0",
)

# Enable CORS (for frontend dev/testing)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Use specific origins in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pages.router)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# --- Error Payloads ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as {"error": <message>}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    logger.warning(
        f"Catalog Service: Rejected {request.method} {request.url.path}: {message}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": message}
    )


# --- FastAPI Event Handlers ---
@app.on_event("startup")
async def startup_event():
    for i in range(DB_CONNECT_MAX_RETRIES):
        try:
            logger.info(
                f"Catalog Service: Attempting to connect to the database and create tables (attempt {i+1}/{DB_CONNECT_MAX_RETRIES})..."
            )
            Base.metadata.create_all(bind=engine)
            logger.info(
                "Catalog Service: Successfully connected to the database and ensured tables exist."
            )
            break
        except OperationalError as e:
            logger.warning(f"Catalog Service: Failed to connect to the database: {e}")
            if i < DB_CONNECT_MAX_RETRIES - 1:
                logger.info(
                    f"Catalog Service: Retrying in {DB_CONNECT_RETRY_DELAY_SECONDS} seconds..."
                )
                time.sleep(DB_CONNECT_RETRY_DELAY_SECONDS)
            else:
                logger.critical(
                    f"Catalog Service: Failed to connect to the database after {DB_CONNECT_MAX_RETRIES} attempts. Exiting application."
                )
                sys.exit(1)
        except Exception as e:
            logger.critical(
                f"Catalog Service: An unexpected error occurred during database startup: {e}",
                exc_info=True,
            )
            sys.exit(1)


# --- Health Check Endpoint ---
@app.get("/health", status_code=status.HTTP_200_OK, summary="Health check endpoint")
async def health_check():
    return {"status": "ok", "service": "catalog-service"}


def _get_or_404(db: Session, product_id: str, failure_detail: str) -> Product:
    try:
        product = db.query(Product).filter(Product.id == product_id).first()
    except Exception as e:
        logger.error(
            f"Catalog Service: Error fetching product {product_id}: {e}", exc_info=True
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_detail
        )
    if not product:
        logger.warning(f"Catalog Service: Product with ID {product_id} not found.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    return product


@app.get(
    "/products",
    response_model=List[ProductResponse],
    responses=ERROR_RESPONSES,
    summary="Retrieve every product, newest first",
)
def list_products(db: Session = Depends(get_db)):
    """
    Returns the full catalog. Filtering, sorting and pagination happen in the
    view layer, so there are no query parameters here.
    """
    logger.info("Catalog Service: Listing all products")
    try:
        products = products_newest_first(db)
    except Exception as e:
        logger.error(f"Catalog Service: Error listing products: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch products",
        )
    logger.info(f"Catalog Service: Retrieved {len(products)} products.")
    return products


@app.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
    summary="Retrieve a single product by ID",
)
def get_product(product_id: str, db: Session = Depends(get_db)):
    logger.info(f"Catalog Service: Fetching product with ID: {product_id}")
    return _get_or_404(db, product_id, "Failed to fetch product")


@app.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create a new product",
)
def create_product(product: ProductCreate, db: Session = Depends(get_db)):
    """
    Creates a new product. Name, description and price are required; price
    may be sent as a number or a numeric string.
    """
    if product.missing_required():
        logger.warning("Catalog Service: Create rejected, required field missing.")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=REQUIRED_FIELDS_MESSAGE
        )

    logger.info(f"Catalog Service: Creating product: {product.name}")
    try:
        db_product = Product(
            name=product.name,
            description=product.description,
            price=product.price,
            image=product.image or None,
        )
        db.add(db_product)
        db.commit()
        db.refresh(db_product)
        logger.info(
            f"Catalog Service: Product '{db_product.name}' (ID: {db_product.id}) created successfully."
        )
        return db_product
    except Exception as e:
        db.rollback()
        logger.error(f"Catalog Service: Error creating product: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create product",
        )


@app.put(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
    summary="Update an existing product by ID",
)
def update_product(product_id: str, product: ProductUpdate, db: Session = Depends(get_db)):
    update_data = product.changes()
    logger.info(
        f"Catalog Service: Updating product with ID: {product_id} with fields: {sorted(update_data)}"
    )
    db_product = _get_or_404(db, product_id, "Failed to update product")

    for key, value in update_data.items():
        setattr(db_product, key, value)
    # refreshed even when no column changed
    db_product.updated_at = utcnow()

    try:
        db.add(db_product)
        db.commit()
        db.refresh(db_product)
        logger.info(f"Catalog Service: Product {product_id} updated successfully.")
        return db_product
    except Exception as e:
        db.rollback()
        logger.error(
            f"Catalog Service: Error updating product {product_id}: {e}", exc_info=True
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update product",
        )


@app.delete(
    "/products/{product_id}",
    response_model=DeleteResponse,
    responses=ERROR_RESPONSES,
    summary="Delete a product by ID",
)
def delete_product(product_id: str, db: Session = Depends(get_db)):
    """
    Deletes a product record. There is no soft delete.
    Does NOT delete the externally hosted image.
    """
    logger.info(f"Catalog Service: Attempting to delete product with ID: {product_id}")
    product = _get_or_404(db, product_id, "Failed to delete product")
    name = product.name

    try:
        db.delete(product)
        db.commit()
        logger.info(
            f"Catalog Service: Product {product_id} deleted successfully. Name: {name}"
        )
    except Exception as e:
        db.rollback()
        logger.error(
            f"Catalog Service: Error deleting product {product_id}: {e}", exc_info=True
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete product",
        )
    return {"message": "Product deleted successfully"}


if __name__ == "__main__":
    uvicorn.run("catalog.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
