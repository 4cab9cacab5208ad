# backend/models/product.py
from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base

# Model Product
# A sellable catalog entry. Price and stock are guarded by check constraints,
# the image lives in external storage and only its URL is kept here.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)

    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)

    # Optional URL of the uploaded product image.
    image_url = Column(String, nullable=True)

    category = relationship("Category", back_populates="products")
