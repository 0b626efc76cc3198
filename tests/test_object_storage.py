import asyncio
import logging
import re

import pytest

from core.errors import Internal, InvalidArgument
from storage.object_storage import (
    ImageUpload,
    generate_unique_filename,
    get_file_extension,
    is_valid_image_type,
    validate_image,
)

from conftest import PUBLIC_BASE


def test_extension_checks():
    assert get_file_extension("Beach.JPG") == "jpg"
    assert get_file_extension("noext") == ""
    assert is_valid_image_type("photo.webp")
    assert not is_valid_image_type("notes.pdf")


def test_validate_image():
    validate_image("ok.png", 1024)
    with pytest.raises(InvalidArgument, match="Invalid image type for doc.gif"):
        validate_image("doc.gif", 10)
    with pytest.raises(InvalidArgument, match="Image big.jpg exceeds 5MB limit"):
        validate_image("big.jpg", 5 * 1024 * 1024 + 1, max_size=5 * 1024 * 1024)


def test_unique_filename_keeps_extension():
    name = generate_unique_filename("Holiday Pic.jpeg")
    assert re.fullmatch(r"\d+-[a-z0-9]{6}\.jpeg", name)
    assert generate_unique_filename("x.png") != generate_unique_filename("x.png")


def test_path_from_url(storage):
    assert storage.path_from_url(f"{PUBLIC_BASE}/trip-categories/1/a%20b.jpg") == "trip-categories/1/a b.jpg"
    with pytest.raises(InvalidArgument):
        storage.path_from_url("https://elsewhere.example/a.jpg")


def test_upload_images_returns_urls_in_order(storage, s3):
    images = [ImageUpload("one.jpg", b"1", "image/jpeg"), ImageUpload("two.png", b"2", "image/png")]

    urls = asyncio.run(storage.upload_images(images, "tour-packages/p1"))

    assert len(urls) == 2
    assert urls[0].endswith(".jpg") and urls[1].endswith(".png")
    assert all(url.startswith(f"{PUBLIC_BASE}/tour-packages/p1/") for url in urls)
    assert len(s3.objects) == 2


def test_upload_failure_is_internal(storage, s3):
    s3.fail_uploads = True
    with pytest.raises(Internal, match="Failed to upload image"):
        asyncio.run(storage.upload_image(b"x", "a/b.jpg"))


def test_delete_missing_image_only_warns(storage, caplog):
    with caplog.at_level(logging.WARNING):
        asyncio.run(storage.delete_image(f"{PUBLIC_BASE}/gone.jpg"))
    assert "Image not found in storage" in caplog.text


def test_delete_images_reports_failures_without_raising(storage, s3):
    url = asyncio.run(storage.upload_image(b"x", "keep/a.jpg"))
    s3.fail_deletes = True

    failed = asyncio.run(storage.delete_images([url, "", "https://elsewhere.example/b.jpg"]))

    assert failed == [url, "https://elsewhere.example/b.jpg"]
    assert "keep/a.jpg" in s3.objects
