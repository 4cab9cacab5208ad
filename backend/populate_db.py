"""Seeds an admin account and a starter catalog.

Usage: ``python populate_db.py admin@shop.com secret123``
"""
import sys

from dotenv import load_dotenv
from sqlalchemy.orm import Session

from config import Settings
from database import build_engine, build_session_factory, init_db
from models.category import Category
from models.product import Product
from models.users import User
from utils.hashing import get_password_hash

# Configuration
STARTER_CATALOG = {
    "Electronics": [
        ("Wireless Mouse", "Two-button mouse with USB receiver", 19.99, 120),
        ("Mechanical Keyboard", "Tenkeyless board with brown switches", 89.00, 40),
    ],
    "Books": [
        ("Python Tricks", "A buffet of Python features", 29.50, 60),
    ],
    "Home": [
        ("Desk Lamp", "LED lamp with adjustable arm", 34.90, 25),
    ],
}
# End Configuration


def populate(session: Session, admin_email: str, admin_password: str) -> dict:
    """Idempotent: existing rows are left as they are."""
    created = {"users": 0, "categories": 0, "products": 0}

    email = admin_email.strip().lower()
    if not session.query(User).filter(User.email == email).first():
        session.add(User(email=email, password_hash=get_password_hash(admin_password), role="admin"))
        created["users"] += 1

    for category_name, products in STARTER_CATALOG.items():
        category = session.query(Category).filter(Category.name == category_name).first()
        if not category:
            category = Category(name=category_name)
            session.add(category)
            session.flush()
            created["categories"] += 1

        for name, description, price, stock in products:
            exists = session.query(Product).filter(
                Product.name == name, Product.category_id == category.id
            ).first()
            if exists:
                continue
            session.add(Product(name=name, description=description, price=price,
                                stock=stock, category_id=category.id))
            created["products"] += 1

    session.commit()
    return created


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 2:
        print("Usage: python populate_db.py <admin_email> <admin_password>")
        return 1

    load_dotenv()
    engine = build_engine(Settings().DATABASE_URL)
    init_db(engine)
    session = build_session_factory(engine)()
    try:
        created = populate(session, argv[0], argv[1])
    finally:
        session.close()

    print(f"Created {created['users']} users, {created['categories']} categories, {created['products']} products.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
