# backend/utils/image_storage.py
import hashlib
import logging
import time
from typing import Optional

import httpx
from fastapi import Request

from config import Settings
from utils.errors import ImageUploadError

logger = logging.getLogger(__name__)

CLOUDINARY_API_URL = "https://api.cloudinary.com/v1_1"


class CloudinaryUploader:
    """Signed uploads to Cloudinary; returns the hosted ``secure_url``."""

    def __init__(self, settings: Settings, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cloud_name = settings.CLOUDINARY_CLOUD_NAME
        self.api_key = settings.CLOUDINARY_API_KEY
        self.api_secret = settings.CLOUDINARY_API_SECRET
        self.folder = settings.CLOUDINARY_FOLDER
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _signature(self, params: dict) -> str:
        # Cloudinary signs the alphabetically sorted params followed by the secret
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()

    async def upload(self, image: str) -> str:
        if not self.configured:
            raise ImageUploadError("Image storage is not configured")

        params = {"folder": self.folder, "timestamp": int(time.time())}
        data = {
            **params,
            "file": image,
            "api_key": self.api_key,
            "signature": self._signature(params),
        }
        url = f"{CLOUDINARY_API_URL}/{self.cloud_name}/image/upload"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(url, data=data)
                response.raise_for_status()
                secure_url = response.json().get("secure_url")
            except (httpx.RequestError, httpx.HTTPStatusError, ValueError) as e:
                logger.error("Cloudinary upload failed: %s", e)
                raise ImageUploadError() from e

        if not secure_url:
            logger.error("Cloudinary response carried no secure_url")
            raise ImageUploadError()
        return secure_url


def get_image_uploader(request: Request) -> CloudinaryUploader:
    return request.app.state.image_uploader
