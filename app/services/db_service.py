from supabase import create_async_client, AsyncClient
from app.core.config import settings
from app.core.exceptions import StoreUnavailableError
import logging
from datetime import datetime, timezone
from typing import List, Optional

logger = logging.getLogger("app")

EVENTS = "events"
SEMINAR_BOOKINGS = "seminar_bookings"
TIMETABLES = "timetables"
EVENT_REQUESTS = "event_requests"

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

class DBService:
    """
    Thin async adapter over the Supabase tables that hold events, seminar hall
    bookings, timetable entries and event proposals.
    Reads degrade to empty data on failure; writes raise.
    """
    _instance = None
    _client: AsyncClient = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(DBService, cls).__new__(cls)
            # The async client is created lazily on first use
        return cls._instance

    async def get_client(self):
        if not self._client:
            try:
                if settings.SUPABASE_URL and settings.SUPABASE_KEY:
                    self._client = await create_async_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
                    logger.info("✅ Supabase Async client initialized")
                else:
                    logger.warning("⚠️ Supabase credentials missing, returning empty data")
            except Exception as e:
                logger.error(f"❌ Failed to initialize Supabase Async: {e}")
        return self._client

    def reset(self):
        """Drops the cached client so the next call opens one on the current event loop."""
        self._client = None

    async def _require_client(self, operation: str):
        client = await self.get_client()
        if not client:
            raise StoreUnavailableError("Booking store is not available", detail=f"Cannot perform: {operation}")
        return client

    # --- Reads ---

    async def list_events_on(self, day: str) -> List[dict]:
        client = await self.get_client()
        if not client:
            return []
        try:
            response = await client.table(EVENTS).select("*").eq('date', day).execute()
            return response.data or []
        except Exception as e:
            logger.error(f"❌ DB Error (list_events_on {day}): {e}")
            return []

    async def list_upcoming_events(self, from_day: str) -> List[dict]:
        client = await self.get_client()
        if not client:
            return []
        try:
            response = await client.table(EVENTS)\
                .select("*")\
                .eq('status', 'upcoming')\
                .gte('date', from_day)\
                .order('date', desc=False)\
                .execute()
            return response.data or []
        except Exception as e:
            logger.error(f"❌ DB Error (list_upcoming_events): {e}")
            return []

    async def list_seminar_bookings(self, day: Optional[str] = None, from_day: Optional[str] = None) -> List[dict]:
        """
        Seminar hall bookings for one day, from a day onwards, or all of them (newest date first).
        """
        client = await self.get_client()
        if not client:
            return []
        try:
            query = client.table(SEMINAR_BOOKINGS).select("*")
            if day:
                query = query.eq('date', day)
            elif from_day:
                query = query.gte('date', from_day)
            response = await query.order('date', desc=True).execute()
            return response.data or []
        except Exception as e:
            logger.error(f"❌ DB Error (list_seminar_bookings): {e}")
            return []

    async def list_timetable(self, day_of_week: Optional[int] = None, course: Optional[str] = None,
                             year: Optional[str] = None, division: Optional[str] = None) -> List[dict]:
        client = await self.get_client()
        if not client:
            return []
        try:
            query = client.table(TIMETABLES).select("*")
            if day_of_week is not None:
                query = query.eq('dayOfWeek', day_of_week)
            if course:
                query = query.eq('course', course)
            if year:
                query = query.eq('year', year)
            if division:
                query = query.eq('division', division)
            response = await query.execute()
            return response.data or []
        except Exception as e:
            logger.error(f"❌ DB Error (list_timetable): {e}")
            return []

    async def get_proposal(self, proposal_id: str) -> Optional[dict]:
        client = await self.get_client()
        if not client:
            return None
        try:
            response = await client.table(EVENT_REQUESTS).select("*").eq('id', proposal_id).limit(1).execute()
            if response.data:
                return response.data[0]
        except Exception as e:
            logger.error(f"❌ DB Error (get_proposal {proposal_id}): {e}")
        return None

    # --- Writes ---

    async def insert(self, table: str, row: dict) -> dict:
        client = await self._require_client(f"insert into {table}")
        stamped = {**row, 'createdAt': _now_iso(), 'updatedAt': _now_iso()}
        try:
            response = await client.table(table).insert(stamped).execute()
        except Exception as e:
            logger.error(f"❌ DB Error (insert into {table}): {e}")
            raise
        created = response.data[0] if response.data else stamped
        logger.info(f"🆕 Row {created.get('id')} created in {table}")
        return created

    async def update(self, table: str, row_id: str, changes: dict) -> Optional[dict]:
        client = await self._require_client(f"update {table}")
        stamped = {**changes, 'updatedAt': _now_iso()}
        try:
            response = await client.table(table).update(stamped).eq('id', row_id).execute()
        except Exception as e:
            logger.error(f"❌ DB Error (update {table} {row_id}): {e}")
            raise
        if not response.data:
            return None
        logger.info(f"✏️ Row {row_id} updated in {table}")
        return response.data[0]

    async def delete(self, table: str, row_id: str) -> bool:
        client = await self._require_client(f"delete from {table}")
        try:
            response = await client.table(table).delete().eq('id', row_id).execute()
        except Exception as e:
            logger.error(f"❌ DB Error (delete from {table} {row_id}): {e}")
            raise
        deleted = bool(response.data)
        if deleted:
            logger.info(f"🗑️ Row {row_id} deleted from {table}")
        return deleted

db_service = DBService()
