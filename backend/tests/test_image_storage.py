import asyncio
import hashlib
from urllib.parse import parse_qs

import httpx
import pytest

from config import Settings
from utils.errors import ImageUploadError
from utils.image_storage import CloudinaryUploader


def _settings(**overrides):
    values = dict(
        _env_file=None,
        SECRET_KEY="s",
        CLOUDINARY_CLOUD_NAME="demo",
        CLOUDINARY_API_KEY="key",
        CLOUDINARY_API_SECRET="shh",
    )
    values.update(overrides)
    return Settings(**values)


def test_upload_signs_request_and_returns_secure_url():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["form"] = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        return httpx.Response(200, json={"secure_url": "https://res.cloudinary.com/demo/x.png"})

    uploader = CloudinaryUploader(_settings(), transport=httpx.MockTransport(handler))
    url = asyncio.run(uploader.upload("https://example.org/x.png"))

    assert url == "https://res.cloudinary.com/demo/x.png"
    assert seen["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
    form = seen["form"]
    assert form["file"] == "https://example.org/x.png"
    assert form["api_key"] == "key"
    assert form["folder"] == "products"
    expected = hashlib.sha1(f"folder=products&timestamp={form['timestamp']}shh".encode()).hexdigest()
    assert form["signature"] == expected


@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"error": {"message": "boom"}}),
    httpx.Response(200, json={"public_id": "x"}),
])
def test_upload_failures_raise(response):
    uploader = CloudinaryUploader(_settings(), transport=httpx.MockTransport(lambda request: response))

    with pytest.raises(ImageUploadError):
        asyncio.run(uploader.upload("https://example.org/x.png"))


def test_network_error_raises():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    uploader = CloudinaryUploader(_settings(), transport=httpx.MockTransport(handler))
    with pytest.raises(ImageUploadError):
        asyncio.run(uploader.upload("https://example.org/x.png"))


def test_unconfigured_storage_refuses_upload():
    uploader = CloudinaryUploader(_settings(CLOUDINARY_API_SECRET=None))

    assert not uploader.configured
    with pytest.raises(ImageUploadError):
        asyncio.run(uploader.upload("https://example.org/x.png"))
