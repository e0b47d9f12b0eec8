"""
Tasting service for journal CRUD.
"""

from typing import Optional
from datetime import datetime, timezone
import structlog

from config import get_supabase_client
from models.base import PaginationParams
from models.tasting import (
    TastingCreate,
    TastingUpdate,
    TastingResponse,
)
from exceptions import DatabaseError, TastingNotFoundError

logger = structlog.get_logger(__name__)

# Tasting with vintage, wine and producer embedded
FULL_TASTING_QUERY = (
    "*, vintage:vintages!vintage_id(*, wine:wines!wine_id(*, producer:producers!producer_id(*)))"
)


class TastingService:
    """
    Service for the tasting journal.

    Handles:
    - Paginated journal listing
    - Map listing (tastings with coordinates)
    - Create, partial update and delete
    """

    def __init__(self, client=None):
        self.db = client or get_supabase_client()
        self.table = "tastings"

    def get_user_tastings(
        self,
        user_id: str,
        page: int = 1,
        page_size: int = 12
    ) -> list[TastingResponse]:
        """
        Get one page of a user's tastings, newest tasted first.

        Args:
            user_id: Owner
            page: Page number (1-indexed)
            page_size: Items per page

        Returns:
            List of TastingResponse
        """
        params = PaginationParams(page=page, page_size=page_size)

        logger.debug(
            "getting_tastings",
            user_id=user_id,
            page=page,
            page_size=page_size
        )

        try:
            result = (
                self.db.table(self.table)
                .select(FULL_TASTING_QUERY)
                .eq("user_id", user_id)
                .order("tasted_at", desc=True)
                .range(params.offset, params.range_end)
                .execute()
            )
        except Exception as e:
            logger.error("tastings_get_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

        return [self._row_to_response(row) for row in result.data or []]

    def get_tastings_for_map(self, user_id: str, limit: int = 100) -> list[TastingResponse]:
        """Get tastings that carry coordinates, newest first."""
        try:
            result = (
                self.db.table(self.table)
                .select(FULL_TASTING_QUERY)
                .eq("user_id", user_id)
                .not_.is_("location_latitude", "null")
                .not_.is_("location_longitude", "null")
                .order("tasted_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error("map_tastings_get_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

        tastings = [self._row_to_response(row) for row in result.data or []]
        return [t for t in tastings if t.has_location]

    def get_by_id(self, tasting_id: str, user_id: str) -> TastingResponse:
        """
        Get one of the user's tastings by ID.

        Raises:
            TastingNotFoundError: If the user has no such tasting
        """
        try:
            result = (
                self.db.table(self.table)
                .select(FULL_TASTING_QUERY)
                .eq("id", tasting_id)
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            logger.error("tasting_get_failed", tasting_id=tasting_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise TastingNotFoundError(tasting_id)

        return self._row_to_response(result.data[0])

    def create(self, user_id: str, data: TastingCreate) -> TastingResponse:
        """
        Create a tasting.

        Args:
            user_id: Owner
            data: Tasting fields; tasted_at defaults to now

        Returns:
            Created TastingResponse
        """
        record = data.model_dump(mode="json", exclude_none=True)
        record["user_id"] = user_id
        record.setdefault("tasted_at", datetime.now(timezone.utc).isoformat())

        logger.info(
            "creating_tasting",
            user_id=user_id,
            vintage_id=data.vintage_id
        )

        try:
            result = self.db.table(self.table).insert(record).execute()
        except Exception as e:
            logger.error("tasting_create_failed", user_id=user_id, error=str(e))
            raise DatabaseError("insert", str(e))

        if not result.data:
            raise DatabaseError("insert", "No data returned from insert")

        row = result.data[0]
        logger.info("tasting_created", tasting_id=row.get("id"))

        return self._row_to_response(row)

    def update(self, tasting_id: str, user_id: str, data: TastingUpdate) -> TastingResponse:
        """
        Update a tasting. Only fields that were set are written.

        Raises:
            TastingNotFoundError: If the user has no such tasting
        """
        changes = data.model_dump(mode="json", exclude_unset=True)

        if not changes:
            return self.get_by_id(tasting_id, user_id)

        try:
            result = (
                self.db.table(self.table)
                .update(changes)
                .eq("id", tasting_id)
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            logger.error("tasting_update_failed", tasting_id=tasting_id, error=str(e))
            raise DatabaseError("update", str(e))

        if not result.data:
            raise TastingNotFoundError(tasting_id)

        logger.info(
            "tasting_updated",
            tasting_id=tasting_id,
            fields=sorted(changes)
        )

        return self._row_to_response(result.data[0])

    def delete(self, tasting_id: str, user_id: str) -> bool:
        """
        Delete a tasting.

        Returns:
            True when deleted

        Raises:
            TastingNotFoundError: If the user has no such tasting
        """
        try:
            result = (
                self.db.table(self.table)
                .delete()
                .eq("id", tasting_id)
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            logger.error("tasting_delete_failed", tasting_id=tasting_id, error=str(e))
            raise DatabaseError("delete", str(e))

        if not result.data:
            raise TastingNotFoundError(tasting_id)

        logger.info("tasting_deleted", tasting_id=tasting_id)
        return True

    def _row_to_response(self, row: dict) -> TastingResponse:
        """Convert database row to response model."""
        return TastingResponse.model_validate(row)


# Singleton instance
_tasting_service: Optional[TastingService] = None


def get_tasting_service() -> TastingService:
    """Get or create TastingService instance."""
    global _tasting_service
    if _tasting_service is None:
        _tasting_service = TastingService()
    return _tasting_service
