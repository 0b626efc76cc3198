# main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.cleanup import run_best_effort
from core.config import settings
from core.errors import register_exception_handlers
from database.connection import create_client, ensure_indexes, get_database
from storage.object_storage import ImageStorage

# Import routers
from admin.admin_bookings import router as admin_bookings_router
from bookings.bookings import router as bookings_router
from destinations.destinations import router as destinations_router
from tour_packages.tour_packages import router as tour_packages_router
from trip_categories.trip_categories import router as trip_categories_router
from users.users import auth_router, router as users_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.mongodb_client = create_client()
    app.mongodb = get_database(app.mongodb_client)
    app.image_storage = ImageStorage.from_settings()
    await run_best_effort(ensure_indexes(app.mongodb), "ensure database indexes")
    logger.info(f"Connected to database {settings.MONGODB_DB}")
    yield
    app.mongodb_client.close()
    logger.info("Database connection closed")


app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include all routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(bookings_router)
app.include_router(admin_bookings_router)
app.include_router(trip_categories_router)
app.include_router(destinations_router)
app.include_router(tour_packages_router)


@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} is running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
