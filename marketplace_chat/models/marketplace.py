"""Favorites and cart rows"""
from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime


class Favorite(BaseModel):
    id: Optional[str] = None
    user_id: str
    item_id: Optional[str] = None
    service_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def target_id(self) -> Optional[str]:
        return self.item_id or self.service_id


class CartItem(BaseModel):
    id: str
    user_id: str
    product_id: str
    quantity: int = Field(1, ge=1)
    updated_at: Optional[datetime] = None
