import asyncio
import logging
from app.config import settings
from app.database.supabase_client import get_supabase
from app.modules.rooms.service import RoomService

logger = logging.getLogger(__name__)


async def purge_expired_rooms() -> bool:
    """Run the cleanup RPC once."""
    try:
        supabase = get_supabase()
        purged = RoomService(supabase).cleanup_expired_rooms()
        if purged:
            logger.debug("Expired rooms purged")
        return purged
    except Exception as e:
        logger.error(f"Error in room reaper: {str(e)}")
        return False


async def room_reaper_loop():
    """Background task that periodically purges expired rooms"""
    while True:
        try:
            await purge_expired_rooms()
        except Exception as e:
            logger.error(f"Error in room reaper loop: {str(e)}")

        await asyncio.sleep(settings.room_reaper_interval_seconds)
