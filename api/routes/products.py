"""
api/routes/products.py -- Product CRUD routes.

Routes:
  GET    /products               -- list all products
  POST   /products               -- create product (id assigned by the store)
  GET    /products/{product_id}  -- product detail
  PUT    /products/{product_id}  -- full replace of all mutable fields
  DELETE /products/{product_id}  -- remove product

Each handler performs exactly one ProductStore call. Handlers are plain `def`
so Starlette runs them in its thread pool; the store's reader/writer lock
makes that safe.

Input is passed through as given: categoryId is not checked against the
category list and attribute keys are not checked against the category's
attribute options.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.limiter import READ_LIMIT, WRITE_LIMIT, limiter
from api.models import ErrorDetail, ProductIn, ProductResponse
from auth.dependencies import get_current_admin
from catalog.store import NotFound, ProductStore

logger = logging.getLogger("lampshop.api.products")

# All product routes require a valid bearer token.
# Router-level dependency applies to every route registered on this router,
# so individual handlers don't each need to repeat Depends(get_current_admin).
router = APIRouter(dependencies=[Depends(get_current_admin)])


def _product_not_found(product_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(
            code="product_not_found",
            message=f"Product {product_id} not found.",
        ).model_dump(),
    )


@limiter.limit(READ_LIMIT)
@router.get("/products", response_model=list[ProductResponse])
def list_products(request: Request) -> list[ProductResponse]:
    products: ProductStore = request.app.state.products
    return [ProductResponse.from_domain(p) for p in products.list_all()]


@limiter.limit(WRITE_LIMIT)
@router.post("/products", response_model=ProductResponse, status_code=201)
def create_product(request: Request, body: ProductIn) -> ProductResponse:
    """Create a product. The response carries the assigned id and timestamps."""
    products: ProductStore = request.app.state.products
    created = products.create(body.to_domain())
    logger.info("Product %d (%s) created by %s", created.id, created.sku, request.state.admin)
    return ProductResponse.from_domain(created)


@limiter.limit(READ_LIMIT)
@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(request: Request, product_id: int) -> ProductResponse:
    products: ProductStore = request.app.state.products
    try:
        product = products.get_by_id(product_id)
    except NotFound:
        raise _product_not_found(product_id) from None
    return ProductResponse.from_domain(product)


@limiter.limit(WRITE_LIMIT)
@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(request: Request, product_id: int, body: ProductIn) -> ProductResponse:
    """Replace every mutable field of a product.

    Omitted fields are reset to their defaults, not kept. id and createdAt
    never change; updatedAt is refreshed.
    """
    products: ProductStore = request.app.state.products
    try:
        updated = products.update(product_id, body.to_domain())
    except NotFound:
        raise _product_not_found(product_id) from None
    logger.info("Product %d updated by %s", product_id, request.state.admin)
    return ProductResponse.from_domain(updated)


@limiter.limit(WRITE_LIMIT)
@router.delete("/products/{product_id}", status_code=204)
def delete_product(request: Request, product_id: int) -> Response:
    products: ProductStore = request.app.state.products
    try:
        products.delete(product_id)
    except NotFound:
        raise _product_not_found(product_id) from None
    logger.info("Product %d deleted by %s", product_id, request.state.admin)
    return Response(status_code=204)
