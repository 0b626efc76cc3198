# trip_categories/trip_categories.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from auth.dependencies import Identity, get_admin_identity
from core.cleanup import run_best_effort
from core.errors import ApiError, InvalidArgument, NotFound, downstream, success
from core.forms import require_length
from database.dependencies import get_image_storage, get_trip_category_repository
from database.repositories import TripCategoryRepository
from models.trip_category import TripCategoryDraft
from storage.object_storage import ImageStorage, generate_unique_filename, read_images

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/trip-categories", tags=["trip-categories"])


@router.post("", status_code=201)
async def create_trip_category(
    name: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    admin: Identity = Depends(get_admin_identity),
    categories: TripCategoryRepository = Depends(get_trip_category_repository),
    storage: ImageStorage = Depends(get_image_storage),
):
    images = await read_images([image] if image else [])
    if not name or not images:
        raise InvalidArgument("Category name and image are required")
    name = require_length(name, "Category name", 2, 50)

    with downstream("Failed to create trip category"):
        category = await categories.create(TripCategoryDraft(name=name))

    upload = images[0]
    path = f"trip-categories/{category.id}/{generate_unique_filename(upload.filename)}"
    try:
        image_url = await storage.upload_image(upload.data, path, upload.content_type)
    except ApiError:
        await run_best_effort(categories.delete(category.id), f"remove trip category {category.id} after failed upload")
        raise

    with downstream("Failed to create trip category"):
        category = await categories.update(category.id, {"image_url": image_url})

    logger.info(f"Trip category created: {category.name} ({category.id})")
    return success(category, "Trip category created successfully", status_code=201)


@router.get("")
async def list_trip_categories(categories: TripCategoryRepository = Depends(get_trip_category_repository)):
    with downstream("Failed to fetch trip categories"):
        rows = await categories.list()
    return success(rows, f"Found {len(rows)} trip categories")


@router.get("/{category_id}")
async def get_trip_category(category_id: str, categories: TripCategoryRepository = Depends(get_trip_category_repository)):
    with downstream("Failed to fetch trip category"):
        category = await categories.get(category_id)
    if category is None:
        raise NotFound("Trip category not found")
    return success(category)


@router.put("/{category_id}")
async def update_trip_category(
    category_id: str,
    name: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    admin: Identity = Depends(get_admin_identity),
    categories: TripCategoryRepository = Depends(get_trip_category_repository),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Rename and/or replace the image; the superseded image is removed best effort."""
    with downstream("Failed to update trip category"):
        category = await categories.get(category_id)
    if category is None:
        raise NotFound("Trip category not found")

    changes = {}
    if name:
        changes["name"] = require_length(name, "Category name", 2, 50)

    images = await read_images([image] if image else [])
    if images:
        upload = images[0]
        path = f"trip-categories/{category_id}/{generate_unique_filename(upload.filename)}"
        changes["image_url"] = await storage.upload_image(upload.data, path, upload.content_type)

    with downstream("Failed to update trip category"):
        updated = await categories.update(category_id, changes)
    if updated is None:
        raise NotFound("Trip category not found")

    if images and category.image_url:
        await run_best_effort(storage.delete_image(category.image_url), f"delete old image of trip category {category_id}")

    logger.info(f"Trip category updated: {category_id}")
    return success(updated, "Trip category updated successfully")


@router.delete("/{category_id}")
async def delete_trip_category(
    category_id: str,
    admin: Identity = Depends(get_admin_identity),
    categories: TripCategoryRepository = Depends(get_trip_category_repository),
    storage: ImageStorage = Depends(get_image_storage),
):
    with downstream("Failed to delete trip category"):
        category = await categories.get(category_id)
        if category is None:
            raise NotFound("Trip category not found")
        await categories.delete(category_id)

    if category.image_url:
        await run_best_effort(storage.delete_image(category.image_url), f"delete image of trip category {category_id}")

    logger.info(f"Trip category deleted: {category_id}")
    return success(message="Trip category deleted successfully")
