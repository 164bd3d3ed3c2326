"""
Favorites Service

Per-viewer favorite listings (products or services).
"""
import logging
from typing import Optional, Set
from supabase import AsyncClient

from marketplace_chat.config import settings
from marketplace_chat.models.marketplace import Favorite
from marketplace_chat.models.notification import NotificationVariant
from marketplace_chat.services.notification_service import Notifier

logger = logging.getLogger(__name__)


class FavoritesService:
    """Favorites of one viewer, cached as a set of listing ids"""

    def __init__(self, client: AsyncClient, viewer_id: Optional[str], notifier: Optional[Notifier] = None):
        self.client = client
        self.viewer_id = viewer_id
        self.notifier = notifier or Notifier()
        self.favorites: Set[str] = set()

    @property
    def table(self):
        return self.client.table(settings.FAVORITES_TABLE)

    async def load_favorites(self) -> Set[str]:
        """Reload the viewer's favorite ids. Keeps the previous set on failure."""
        if not self.viewer_id:
            self.favorites = set()
            return self.favorites

        try:
            response = await self.table.select("item_id, service_id").eq("user_id", self.viewer_id).execute()
        except Exception as e:
            logger.error(f"Error fetching favorites for user {self.viewer_id}: {e}")
            return self.favorites

        rows = [Favorite(user_id=self.viewer_id, **row) for row in response.data or []]
        self.favorites = {row.target_id for row in rows if row.target_id}
        return self.favorites

    def is_favorite(self, listing_id: str) -> bool:
        return listing_id in self.favorites

    async def toggle_favorite(
        self,
        item_id: Optional[str] = None,
        service_id: Optional[str] = None
    ) -> Optional[bool]:
        """
        Add or remove a product/service from the viewer's favorites.

        Args:
            item_id: Product UUID
            service_id: Service UUID (used when item_id is not given)

        Returns:
            New favorite state, or None if nothing was written
        """
        if not self.viewer_id:
            self.notifier.notify(
                "Atenção", "Faça login para salvar favoritos.", NotificationVariant.DESTRUCTIVE
            )
            return None

        target_id = item_id or service_id
        if not target_id:
            return None

        try:
            if self.is_favorite(target_id):
                await (
                    self.table
                    .delete()
                    .eq("user_id", self.viewer_id)
                    .or_(f"item_id.eq.{target_id},service_id.eq.{target_id}")
                    .execute()
                )
                self.favorites.discard(target_id)
                self.notifier.notify("Removido", "Removido dos favoritos.")
                return False

            row = {"user_id": self.viewer_id}
            if item_id:
                row["item_id"] = item_id
            else:
                row["service_id"] = service_id
            await self.table.insert(row).execute()
            self.favorites.add(target_id)
            self.notifier.notify("Adicionado", "Salvo nos favoritos!")
            return True

        except Exception as e:
            self.notifier.notify_error("Não foi possível atualizar os favoritos.", e)
            return None
