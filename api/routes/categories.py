"""
api/routes/categories.py -- Category and attribute reference data.

Routes:
  GET /categories                   -- all categories
  GET /categories/{category_id}/attributes -- attribute options for one category

Both are public: the product form needs them to build its dropdown and
attribute inputs. Data comes from app.state.catalog (catalog/reference.py).
"""

from fastapi import APIRouter, HTTPException, Request

from api.models import AttributeOptionResponse, CategoryResponse, ErrorDetail
from catalog.reference import AttributesNotFound, CategoryCatalog

# Auth policy:
# - GET /categories, GET /categories/{id}/attributes: public -- read-only reference data
router = APIRouter()


@router.get("/categories", response_model=list[CategoryResponse])
def list_categories(request: Request) -> list[CategoryResponse]:
    catalog: CategoryCatalog = request.app.state.catalog
    return [CategoryResponse.from_domain(c) for c in catalog.list_categories()]


@router.get("/categories/{category_id}/attributes", response_model=list[AttributeOptionResponse])
def get_attribute_options(request: Request, category_id: str) -> list[AttributeOptionResponse]:
    """Return the attribute inputs a product in this category may carry."""
    catalog: CategoryCatalog = request.app.state.catalog
    try:
        options = catalog.get_attribute_options(category_id)
    except AttributesNotFound as exc:
        raise HTTPException(
            status_code=404,
            detail=ErrorDetail(
                code="attributes_not_found",
                message=f"No attributes for category {category_id[:50]!r}.",
            ).model_dump(),
        ) from exc
    return [AttributeOptionResponse.from_domain(o) for o in options]
