import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from utils.errors import ImageUploadError
from utils.image_storage import get_image_uploader


class FakeUploader:
    """Stands in for Cloudinary; records uploads and can be told to fail."""

    def __init__(self):
        self.uploads = []
        self.fail = False

    async def upload(self, image: str) -> str:
        if self.fail:
            raise ImageUploadError()
        self.uploads.append(image)
        return f"https://res.cloudinary.com/demo/image/upload/products/{len(self.uploads)}.jpg"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        SECRET_KEY="test-secret",
        DATABASE_URL="sqlite:///:memory:",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def app(settings, uploader):
    app = create_app(settings)
    app.dependency_overrides[get_image_uploader] = lambda: uploader
    yield app
    app.state.engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


def signup_and_login(client, email, password="secret123", role="customer"):
    res = client.post("/auth/signup", json={"email": email, "password": password, "role": role})
    assert res.status_code == 201, res.text
    res = client.post("/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return signup_and_login(client, "admin@shop.com", role="admin")


@pytest.fixture
def customer_headers(client):
    return signup_and_login(client, "alice@shop.com")


@pytest.fixture
def category(client, admin_headers):
    res = client.post("/categories", json={"name": "Electronics"}, headers=admin_headers)
    assert res.status_code == 201, res.text
    return res.json()


@pytest.fixture
def make_product(client, admin_headers, category):
    def _make(name="Widget", price=10.0, stock=5, **extra):
        payload = {
            "name": name,
            "description": f"{name} description",
            "price": price,
            "stock": stock,
            "category_id": category["id"],
            **extra,
        }
        res = client.post("/products", json=payload, headers=admin_headers)
        assert res.status_code == 201, res.text
        return res.json()
    return _make
