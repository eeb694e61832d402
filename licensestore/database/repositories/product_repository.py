# ==============================================================================
# PRODUCT REPOSITORY - Catalog Reads and Stock Decrement
# ==============================================================================

from __future__ import annotations

from typing import Iterable, List

from sqlalchemy import select, update

from licensestore.database.repositories.base_repository import BaseRepository
from licensestore.domain_models.product import Product


class ProductRepository(BaseRepository[Product]):
    """Catalog lookups and the guarded stock decrement."""

    model = Product

    async def get_active(self, ids: Iterable[str]) -> List[Product]:
        """Fetch active products for ``ids`` with one query."""
        ids = list(ids)
        if not ids:
            return []
        result = await self._session.execute(
            select(Product).where(Product.id.in_(ids), Product.is_active.is_(True))
        )
        return list(result.scalars().all())

    async def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """
        Take ``quantity`` units from a tracked product.

        Matches only when enough stock remains, so stock can never go
        negative. Unlimited products (-1) never match.

        Returns:
            True if the stock was decremented
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .returning(Product.id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None
