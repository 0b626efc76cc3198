# tour_packages/tour_packages.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from auth.dependencies import Identity, get_admin_identity
from core.cleanup import run_best_effort
from core.errors import ApiError, InvalidArgument, NotFound, downstream, success
from core.forms import parse_json_list, require_length
from database.dependencies import get_image_storage, get_tour_package_repository, get_trip_category_repository
from database.repositories import TourPackageRepository, TripCategoryRepository
from models.tour_package import TourPackageDraft
from models.trip_category import TripCategory
from storage.object_storage import ImageStorage, read_images

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/tour-packages", tags=["tour-packages"])

REQUIRED_FIELDS_MESSAGE = "Required fields: placeName, city, priceRange, tripCategoryId, overview"


async def _require_category(category_id: str, categories: TripCategoryRepository) -> TripCategory:
    with downstream("Failed to verify trip category"):
        category = await categories.get(category_id)
    if category is None:
        raise InvalidArgument("Invalid trip category ID")
    return category


# --- Endpoints ---

@router.post("", status_code=201)
async def create_tour_package(
    place_name: Optional[str] = Form(None, alias="placeName"),
    city: Optional[str] = Form(None),
    price_range: Optional[str] = Form(None, alias="priceRange"),
    trip_category_id: Optional[str] = Form(None, alias="tripCategoryId"),
    overview: Optional[str] = Form(None),
    tour_highlights: Optional[str] = Form(None, alias="tourHighlights"),
    images: Optional[List[UploadFile]] = File(None),
    admin: Identity = Depends(get_admin_identity),
    packages: TourPackageRepository = Depends(get_tour_package_repository),
    categories: TripCategoryRepository = Depends(get_trip_category_repository),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Creates a package and uploads all of its images concurrently."""
    if not all((place_name, city, price_range, trip_category_id, overview)):
        raise InvalidArgument(REQUIRED_FIELDS_MESSAGE)

    highlights = parse_json_list(tour_highlights, "Tour highlights")
    uploads = await read_images(images or [])
    if not uploads:
        raise InvalidArgument("At least one image is required")

    place_name = require_length(place_name, "Place name", 2, 100)
    overview = require_length(overview, "Overview", 10, 2000)
    category = await _require_category(trip_category_id, categories)

    with downstream("Failed to create tour package"):
        package = await packages.create(TourPackageDraft(
            place_name=place_name,
            city=city.strip(),
            price_range=price_range.strip(),
            trip_category_id=category.id,
            trip_category_name=category.name,
            overview=overview,
            tour_highlights=highlights,
        ))

    try:
        image_urls = await storage.upload_images(uploads, f"tour-packages/{package.id}")
    except ApiError:
        await run_best_effort(packages.delete(package.id), f"remove tour package {package.id} after failed upload")
        raise

    with downstream("Failed to create tour package"):
        package = await packages.update(package.id, {"image_urls": image_urls})

    logger.info(f"Tour package created: {package.place_name} ({package.id}, {len(image_urls)} images)")
    return success(package, "Tour package created successfully", status_code=201)


@router.get("")
async def list_tour_packages(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    city: Optional[str] = Query(None),
    packages: TourPackageRepository = Depends(get_tour_package_repository),
):
    with downstream("Failed to fetch tour packages"):
        rows = await packages.list(category_id=category_id, city=city)
    return success(rows, f"Found {len(rows)} tour packages")


@router.get("/{package_id}")
async def get_tour_package(package_id: str, packages: TourPackageRepository = Depends(get_tour_package_repository)):
    with downstream("Failed to fetch tour package"):
        package = await packages.get(package_id)
    if package is None:
        raise NotFound("Tour package not found")
    return success(package)


@router.put("/{package_id}")
async def update_tour_package(
    package_id: str,
    place_name: Optional[str] = Form(None, alias="placeName"),
    city: Optional[str] = Form(None),
    price_range: Optional[str] = Form(None, alias="priceRange"),
    trip_category_id: Optional[str] = Form(None, alias="tripCategoryId"),
    overview: Optional[str] = Form(None),
    tour_highlights: Optional[str] = Form(None, alias="tourHighlights"),
    images_to_remove: Optional[str] = Form(None, alias="imagesToRemove"),
    new_images: Optional[List[UploadFile]] = File(None, alias="newImages"),
    admin: Identity = Depends(get_admin_identity),
    packages: TourPackageRepository = Depends(get_tour_package_repository),
    categories: TripCategoryRepository = Depends(get_trip_category_repository),
    storage: ImageStorage = Depends(get_image_storage),
):
    """
    Partial update. Images listed in `imagesToRemove` are dropped from the
    package even if deleting them from storage fails; `newImages` are
    uploaded concurrently and appended.
    """
    with downstream("Failed to update tour package"):
        package = await packages.get(package_id)
    if package is None:
        raise NotFound("Tour package not found")

    changes = {}
    if place_name:
        changes["place_name"] = require_length(place_name, "Place name", 2, 100)
    if city:
        changes["city"] = city.strip()
    if price_range:
        changes["price_range"] = price_range.strip()
    if overview:
        changes["overview"] = require_length(overview, "Overview", 10, 2000)
    if tour_highlights:
        changes["tour_highlights"] = parse_json_list(tour_highlights, "Tour highlights")
    if trip_category_id:
        category = await _require_category(trip_category_id, categories)
        changes["trip_category_id"] = category.id
        changes["trip_category_name"] = category.name

    to_remove = parse_json_list(images_to_remove, "Images to remove")
    uploads = await read_images(new_images or [])

    image_urls = list(package.image_urls)
    if to_remove:
        await storage.delete_images(to_remove)
        image_urls = [url for url in image_urls if url not in to_remove]
    if uploads:
        image_urls.extend(await storage.upload_images(uploads, f"tour-packages/{package_id}"))
    if to_remove or uploads:
        changes["image_urls"] = image_urls

    with downstream("Failed to update tour package"):
        updated = await packages.update(package_id, changes)
    if updated is None:
        raise NotFound("Tour package not found")

    logger.info(f"Tour package updated: {package_id}")
    return success(updated, "Tour package updated successfully")


@router.delete("/{package_id}")
async def delete_tour_package(
    package_id: str,
    admin: Identity = Depends(get_admin_identity),
    packages: TourPackageRepository = Depends(get_tour_package_repository),
    storage: ImageStorage = Depends(get_image_storage),
):
    """Removes the package; bookings that reference it are left as they are."""
    with downstream("Failed to delete tour package"):
        package = await packages.get(package_id)
    if package is None:
        raise NotFound("Tour package not found")

    if package.image_urls:
        await storage.delete_images(package.image_urls)

    with downstream("Failed to delete tour package"):
        await packages.delete(package_id)

    logger.info(f"Tour package deleted: {package_id}")
    return success(message="Tour package deleted successfully")
