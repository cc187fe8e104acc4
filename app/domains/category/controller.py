"""Category API controller with FastAPI endpoints."""

from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import (
    get_current_user,
    get_db,
    get_identity,
    get_or_create_current_user,
)
from app.domains.category.service import CategoryService
from app.schemas.base import ResponseSchema
from app.schemas.category import CategoryCreate, CategoryUpdate
from models import User

router = APIRouter(
    prefix="/api/categories",
    tags=["categories"],
    dependencies=[Depends(get_identity)],  # Global token validation for all routes
)


@router.get("", response_model=ResponseSchema)
async def get_categories(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the caller's categories with schedules and task counts."""
    categories = await CategoryService(db).get_categories(current_user.id)

    return ResponseSchema(
        status="success",
        message="Categories retrieved successfully",
        data=[c.model_dump(mode="json") for c in categories],
    )


@router.post("", response_model=ResponseSchema, status_code=201)
async def create_category(
    category_data: CategoryCreate,
    current_user: User = Depends(get_or_create_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new category."""
    category = await CategoryService(db).create_category(category_data, current_user.id)

    return ResponseSchema(
        status="success",
        message="Category created successfully",
        data=category.model_dump(mode="json"),
    )


@router.get("/{category_id}", response_model=ResponseSchema)
async def get_category(
    category_id: UUID = Path(..., description="Category ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific category."""
    category = await CategoryService(db).get_category(category_id, current_user.id)

    return ResponseSchema(
        status="success",
        message="Category retrieved successfully",
        data=category.model_dump(mode="json"),
    )


@router.put("/{category_id}", response_model=ResponseSchema)
async def update_category(
    category_id: UUID = Path(..., description="Category ID"),
    category_data: CategoryUpdate = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a category and replace its schedules."""
    category = await CategoryService(db).update_category(
        category_id, category_data, current_user.id
    )

    return ResponseSchema(
        status="success",
        message="Category updated successfully",
        data=category.model_dump(mode="json"),
    )


@router.delete("/{category_id}", response_model=ResponseSchema)
async def delete_category(
    category_id: UUID = Path(..., description="Category ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a category without tasks."""
    await CategoryService(db).delete_category(category_id, current_user.id)

    return ResponseSchema(status="success", message="Category deleted successfully", data=None)
