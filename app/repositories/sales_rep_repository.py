from typing import Iterable, Optional, Set
from uuid import UUID

from sqlalchemy import select

from app.models.sales_rep import SalesRep
from app.repositories.base import BaseRepository


class SalesRepRepository(BaseRepository):
    """Read-only registry over the ``sales_reps`` table.

    The routing engine uses it to drop inactive representatives even
    when their rules or allocations are still flagged active.
    """

    async def get_by_id(self, rep_id: UUID) -> Optional[SalesRep]:
        """Return a single representative by primary key, or ``None``."""
        result = await self._db.execute(select(SalesRep).where(SalesRep.id == rep_id))
        return result.scalar_one_or_none()

    async def is_active(self, rep_id: UUID) -> bool:
        """Return ``True`` if the representative exists and is active."""
        result = await self._db.execute(
            select(SalesRep.is_active).where(SalesRep.id == rep_id)
        )
        return bool(result.scalar_one_or_none())

    async def filter_active(self, rep_ids: Iterable[UUID]) -> Set[UUID]:
        """Return the subset of *rep_ids* that belong to active representatives."""
        ids = list(set(rep_ids))
        if not ids:
            return set()
        result = await self._db.execute(
            select(SalesRep.id).where(SalesRep.id.in_(ids), SalesRep.is_active.is_(True))
        )
        return set(result.scalars().all())
