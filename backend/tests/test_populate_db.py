from models.category import Category
from models.product import Product
from models.users import User
from populate_db import STARTER_CATALOG, populate
from utils.hashing import verify_password


def test_populate_is_idempotent(db):
    first = populate(db, "Root@Shop.com", "changeme")
    second = populate(db, "root@shop.com", "changeme")

    expected_products = sum(len(v) for v in STARTER_CATALOG.values())
    assert first == {"users": 1, "categories": len(STARTER_CATALOG), "products": expected_products}
    assert second == {"users": 0, "categories": 0, "products": 0}

    admin = db.query(User).one()
    assert admin.email == "root@shop.com"
    assert admin.role == "admin"
    assert verify_password("changeme", admin.password_hash)
    assert db.query(Category).count() == len(STARTER_CATALOG)
    assert db.query(Product).count() == expected_products
