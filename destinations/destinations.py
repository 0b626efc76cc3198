# destinations/destinations.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from auth.dependencies import Identity, get_admin_identity
from core.cleanup import run_best_effort
from core.errors import ApiError, InvalidArgument, NotFound, downstream, success
from core.forms import require_length
from database.dependencies import get_destination_repository, get_image_storage, get_trip_category_repository
from database.repositories import DestinationRepository, TripCategoryRepository
from models.destination import DestinationDraft
from models.trip_category import TripCategory
from storage.object_storage import ImageStorage, generate_unique_filename, read_images

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/destinations", tags=["destinations"])


async def _require_category(category_id: str, categories: TripCategoryRepository) -> TripCategory:
    with downstream("Failed to verify trip category"):
        category = await categories.get(category_id)
    if category is None:
        raise InvalidArgument("Invalid trip category ID")
    return category


@router.post("", status_code=201)
async def create_destination(
    place_name: Optional[str] = Form(None, alias="placeName"),
    city: Optional[str] = Form(None),
    trip_category_id: Optional[str] = Form(None, alias="tripCategoryId"),
    image: Optional[UploadFile] = File(None),
    admin: Identity = Depends(get_admin_identity),
    destinations: DestinationRepository = Depends(get_destination_repository),
    categories: TripCategoryRepository = Depends(get_trip_category_repository),
    storage: ImageStorage = Depends(get_image_storage),
):
    if not place_name or not city or not trip_category_id or image is None:
        raise InvalidArgument("All fields are required: placeName, city, tripCategoryId, image")
    place_name = require_length(place_name, "Place name", 2, 100)
    city = require_length(city, "City name", 2, 50)
    category = await _require_category(trip_category_id, categories)
    images = await read_images([image])
    if not images:
        raise InvalidArgument("All fields are required: placeName, city, tripCategoryId, image")

    with downstream("Failed to create destination"):
        destination = await destinations.create(DestinationDraft(
            place_name=place_name,
            city=city,
            trip_category_id=category.id,
            trip_category_name=category.name,
        ))

    upload = images[0]
    path = f"destinations/{destination.id}/{generate_unique_filename(upload.filename)}"
    try:
        image_url = await storage.upload_image(upload.data, path, upload.content_type)
    except ApiError:
        await run_best_effort(destinations.delete(destination.id), f"remove destination {destination.id} after failed upload")
        raise

    with downstream("Failed to create destination"):
        destination = await destinations.update(destination.id, {"image_url": image_url})

    logger.info(f"Destination created: {destination.place_name} ({destination.id})")
    return success(destination, "Destination created successfully", status_code=201)


@router.get("")
async def list_destinations(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    city: Optional[str] = Query(None),
    destinations: DestinationRepository = Depends(get_destination_repository),
):
    with downstream("Failed to fetch destinations"):
        rows = await destinations.list(category_id=category_id, city=city)
    return success(rows, f"Found {len(rows)} destinations")


@router.get("/{destination_id}")
async def get_destination(destination_id: str, destinations: DestinationRepository = Depends(get_destination_repository)):
    with downstream("Failed to fetch destination"):
        destination = await destinations.get(destination_id)
    if destination is None:
        raise NotFound("Destination not found")
    return success(destination)


@router.put("/{destination_id}")
async def update_destination(
    destination_id: str,
    place_name: Optional[str] = Form(None, alias="placeName"),
    city: Optional[str] = Form(None),
    trip_category_id: Optional[str] = Form(None, alias="tripCategoryId"),
    image: Optional[UploadFile] = File(None),
    admin: Identity = Depends(get_admin_identity),
    destinations: DestinationRepository = Depends(get_destination_repository),
    categories: TripCategoryRepository = Depends(get_trip_category_repository),
    storage: ImageStorage = Depends(get_image_storage),
):
    with downstream("Failed to update destination"):
        destination = await destinations.get(destination_id)
    if destination is None:
        raise NotFound("Destination not found")

    changes = {}
    if place_name:
        changes["place_name"] = require_length(place_name, "Place name", 2, 100)
    if city:
        changes["city"] = require_length(city, "City name", 2, 50)
    if trip_category_id:
        category = await _require_category(trip_category_id, categories)
        changes["trip_category_id"] = category.id
        changes["trip_category_name"] = category.name

    images = await read_images([image] if image else [])
    if images:
        upload = images[0]
        path = f"destinations/{destination_id}/{generate_unique_filename(upload.filename)}"
        changes["image_url"] = await storage.upload_image(upload.data, path, upload.content_type)

    with downstream("Failed to update destination"):
        updated = await destinations.update(destination_id, changes)
    if updated is None:
        raise NotFound("Destination not found")

    if images and destination.image_url:
        await run_best_effort(storage.delete_image(destination.image_url), f"delete old image of destination {destination_id}")

    logger.info(f"Destination updated: {destination_id}")
    return success(updated, "Destination updated successfully")


@router.delete("/{destination_id}")
async def delete_destination(
    destination_id: str,
    admin: Identity = Depends(get_admin_identity),
    destinations: DestinationRepository = Depends(get_destination_repository),
    storage: ImageStorage = Depends(get_image_storage),
):
    with downstream("Failed to delete destination"):
        destination = await destinations.get(destination_id)
        if destination is None:
            raise NotFound("Destination not found")
        await destinations.delete(destination_id)

    if destination.image_url:
        await run_best_effort(storage.delete_image(destination.image_url), f"delete image of destination {destination_id}")

    logger.info(f"Destination deleted: {destination_id}")
    return success(message="Destination deleted successfully")
