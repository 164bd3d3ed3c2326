"""Cart Service"""
import logging
from typing import Optional
from datetime import datetime, timezone
from supabase import AsyncClient

from marketplace_chat.config import settings
from marketplace_chat.core.exceptions import ValidationError
from marketplace_chat.models.marketplace import CartItem
from marketplace_chat.models.notification import NotificationVariant
from marketplace_chat.services.notification_service import Notifier

logger = logging.getLogger(__name__)


class CartService:

    def __init__(self, client: AsyncClient, viewer_id: Optional[str], notifier: Optional[Notifier] = None):
        self.client = client
        self.viewer_id = viewer_id
        self.notifier = notifier or Notifier()

    @property
    def table(self):
        return self.client.table(settings.CART_ITEMS_TABLE)

    async def add_to_cart(self, product_id: str, quantity: int = 1) -> Optional[CartItem]:
        """
        Add a product to the viewer's cart, incrementing the row if it is already there.

        Returns:
            The stored cart row, or None if nothing was written
        """
        if not self.viewer_id:
            self.notifier.notify(
                "Atenção", "Faça login para adicionar ao carrinho.", NotificationVariant.DESTRUCTIVE
            )
            return None

        if quantity < 1:
            self.notifier.notify_validation(ValidationError("Quantidade inválida"))
            return None

        try:
            existing = await (
                self.table
                .select("id, quantity")
                .eq("user_id", self.viewer_id)
                .eq("product_id", product_id)
                .limit(1)
                .execute()
            )

            if existing.data:
                row = existing.data[0]
                response = await (
                    self.table
                    .update({
                        "quantity": row["quantity"] + quantity,
                        "updated_at": datetime.now(timezone.utc).isoformat(),
                    })
                    .eq("id", row["id"])
                    .execute()
                )
            else:
                response = await self.table.insert({
                    "user_id": self.viewer_id,
                    "product_id": product_id,
                    "quantity": quantity,
                }).execute()

        except Exception as e:
            self.notifier.notify_error("Não foi possível atualizar o carrinho", e)
            return None

        if not response.data:
            self.notifier.notify_error("Não foi possível atualizar o carrinho")
            return None

        item = CartItem(**response.data[0])
        logger.info(f"Cart of user {self.viewer_id}: product {product_id} x{item.quantity}")
        return item

    async def count_items(self) -> int:
        """Number of distinct products in the viewer's cart (0 on failure)"""
        if not self.viewer_id:
            return 0

        try:
            response = await (
                self.table
                .select("id", count="exact")
                .eq("user_id", self.viewer_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error counting cart items for user {self.viewer_id}: {e}")
            return 0

        return response.count or 0
