# bakery_ledger/models.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

U32_MAX = 2**32 - 1
# ids live in SQLite INTEGER columns
MAX_PRODUCT_ID = 2**63 - 1
MAX_NAME_LENGTH = 128


class Category(str, Enum):
    BAKERY = "Bakery"
    CAKE = "Cake"
    COOKIES = "Cookies"


# Used when a payload or a stored record leaves the category out.
DEFAULT_CATEGORY = Category.BAKERY


class Product(BaseModel):
    id: int = Field(ge=0, le=MAX_PRODUCT_ID)
    name: str
    category: Category = DEFAULT_CATEGORY
    quantity: int = Field(ge=0, le=U32_MAX)
    created_at: int = Field(ge=0, description="Nanoseconds since the Unix epoch")
    updated_at: Optional[int] = Field(default=None, ge=0)


class ProductPayload(BaseModel):
    name: str
    quantity: int = Field(ge=0, le=U32_MAX)
    category: Category = DEFAULT_CATEGORY


class StockPayload(BaseModel):
    amount: int = Field(ge=0, le=U32_MAX)
