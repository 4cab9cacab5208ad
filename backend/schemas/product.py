from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Payload for creating or fully replacing a product
class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    category_id: int
    # Remote URL or data URI, pushed to image storage before the product is written
    image: Optional[str] = None

    @field_validator("name", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class ProductOut(ORMBase):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    category_id: int
    image_url: Optional[str] = None


# Paginated response for the filtered product listing
class ProductListPage(BaseModel):
    products: List[ProductOut]
    total_count: int
    current_page: int
    total_pages: int


class ProductDeleted(BaseModel):
    message: str
    product: ProductOut
