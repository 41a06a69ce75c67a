from fastapi import HTTPException, Header
from app.core.config import settings
from app.core.logger import logger

async def verify_secret_token(x_secret_token: str = Header(None)):
    """
    Guards the write endpoints (timetable edits, seminar bookings, proposal decisions).
    The admin frontend sends the shared secret in the X-Secret-Token header.
    """
    if not settings.SECRET_KEY:
        # No key configured, local development
        return True

    if x_secret_token != settings.SECRET_KEY:
        logger.warning("🔒 Rejected write request with a missing or invalid secret token")
        raise HTTPException(status_code=403, detail="Invalid secret token")
    return True
