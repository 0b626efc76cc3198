# database/dependencies.py
#
# Request-scoped access to the handles created in the app lifespan.

from fastapi import Request

from database.repositories import (
    BookingRepository,
    DestinationRepository,
    MongoBookingRepository,
    MongoDestinationRepository,
    MongoTourPackageRepository,
    MongoTripCategoryRepository,
    MongoUserRepository,
    TourPackageRepository,
    TripCategoryRepository,
    UserRepository,
)
from storage.object_storage import ImageStorage


def get_booking_repository(request: Request) -> BookingRepository:
    return MongoBookingRepository(request.app.mongodb)


def get_tour_package_repository(request: Request) -> TourPackageRepository:
    return MongoTourPackageRepository(request.app.mongodb)


def get_user_repository(request: Request) -> UserRepository:
    return MongoUserRepository(request.app.mongodb)


def get_trip_category_repository(request: Request) -> TripCategoryRepository:
    return MongoTripCategoryRepository(request.app.mongodb)


def get_destination_repository(request: Request) -> DestinationRepository:
    return MongoDestinationRepository(request.app.mongodb)


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.image_storage
