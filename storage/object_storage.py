# storage/object_storage.py: S3/MinIO storage for catalogue images

import asyncio
import logging
import mimetypes
import secrets
import string
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional
from urllib.parse import unquote

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from core.config import settings
from core.errors import Internal, InvalidArgument

logger = logging.getLogger(__name__)

VALID_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp")

_ALPHABET = string.ascii_lowercase + string.digits


@dataclass
class ImageUpload:
    filename: str
    data: bytes
    content_type: Optional[str] = None


# ---------- helpers ----------

def get_file_extension(filename: str) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def is_valid_image_type(filename: str) -> bool:
    return get_file_extension(filename) in VALID_IMAGE_EXTENSIONS


def validate_image(filename: str, size: int, max_size: Optional[int] = None) -> None:
    """Raise InvalidArgument for a non-image extension or an oversized file."""
    limit = max_size if max_size is not None else settings.MAX_IMAGE_SIZE
    if not is_valid_image_type(filename):
        raise InvalidArgument(f"Invalid image type for {filename}. Only JPG, PNG, and WEBP are allowed")
    if size > limit:
        raise InvalidArgument(f"Image {filename} exceeds {limit / 1024 / 1024:.0f}MB limit")


def generate_unique_filename(original_filename: str) -> str:
    """`<millis>-<random6>.<ext>`, keeping the original extension."""
    ext = get_file_extension(original_filename)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    name = f"{int(time.time() * 1000)}-{suffix}"
    return f"{name}.{ext}" if ext else name


async def read_images(files: Iterable[UploadFile], max_size: Optional[int] = None) -> List[ImageUpload]:
    """Read and validate uploaded images. Empty file parts are skipped."""
    images = []
    for file in files or []:
        if file is None or not file.filename:
            continue
        data = await file.read()
        if not data:
            continue
        validate_image(file.filename, len(data), max_size)
        images.append(ImageUpload(filename=file.filename, data=data, content_type=file.content_type))
    return images


# ---------- storage ----------

class ImageStorage:
    """Public image bucket. Blocking boto3 calls run in the thread pool."""

    def __init__(self, client, bucket_name: str, public_base: str):
        self.client = client
        self.bucket_name = bucket_name
        self.public_base = public_base.rstrip("/")

    @classmethod
    def from_settings(cls) -> "ImageStorage":
        client = boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.S3_ACCESS_KEY or None,
            aws_secret_access_key=settings.S3_SECRET_KEY or None,
            region_name=settings.S3_REGION,
            config=BotoConfig(signature_version="s3v4", s3={"addressing_style": "path"}),
        )
        return cls(client, settings.S3_BUCKET_NAME, settings.S3_PUBLIC_BASE)

    def url_for(self, path: str) -> str:
        return f"{self.public_base}/{path}"

    def path_from_url(self, url: str) -> str:
        prefix = f"{self.public_base}/"
        if not url or not url.startswith(prefix):
            raise InvalidArgument(f"Invalid storage URL: {url}")
        return unquote(url[len(prefix):].split("?", 1)[0])

    async def upload_image(self, data: bytes, path: str, content_type: Optional[str] = None) -> str:
        content_type = content_type or mimetypes.guess_type(path)[0] or "application/octet-stream"
        try:
            await run_in_threadpool(
                self.client.put_object,
                Bucket=self.bucket_name,
                Key=path,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.exception(f"Error uploading image to {path}")
            raise Internal("Failed to upload image") from e
        logger.info(f"Uploaded image {path} ({len(data)} bytes)")
        return self.url_for(path)

    async def upload_images(self, images: List[ImageUpload], base_path: str) -> List[str]:
        """Upload all images concurrently and return their URLs in input order."""
        uploads = [
            self.upload_image(image.data, f"{base_path}/{generate_unique_filename(image.filename)}",
                              image.content_type)
            for image in images
        ]
        return list(await asyncio.gather(*uploads))

    async def delete_image(self, url: str) -> None:
        path = self.path_from_url(url)
        try:
            await run_in_threadpool(self.client.delete_object, Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                logger.warning(f"Image not found in storage: {url}")
                return
            logger.exception(f"Error deleting image {url}")
            raise Internal("Failed to delete image") from e
        except BotoCoreError as e:
            logger.exception(f"Error deleting image {url}")
            raise Internal("Failed to delete image") from e

    async def delete_images(self, urls: Iterable[str]) -> List[str]:
        """
        Delete images concurrently. Individual failures are logged and skipped;
        returns the URLs that could not be deleted.
        """
        urls = [url for url in urls if url]
        results = await asyncio.gather(*(self.delete_image(url) for url in urls), return_exceptions=True)
        failed = []
        for url, result in zip(urls, results):
            if isinstance(result, Exception):
                logger.warning(f"Failed to delete image {url}: {result}")
                failed.append(url)
        return failed
