"""Assignment reference number generation."""

import random
import string
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_CODE_LENGTH = 6


def format_reference_number(moment: datetime, code: str, prefix: str | None = None) -> str:
    """Build a reference number like ``REF-04122025-A12B3C``."""
    return f"{prefix or settings.reference_prefix}-{moment.strftime('%d%m%Y')}-{code}"


async def generate_reference_number(db: AsyncSession, now: datetime | None = None) -> str:
    """Generate a unique assignment reference number in format REF-DDMMYYYY-XXXXXX.

    Args:
        db: Database session for uniqueness check
        now: Timestamp the date part is taken from (defaults to now, UTC)

    Returns:
        str: Unique reference number like 'REF-04122025-A12B3C'
    """
    from app.models.assignment import Assignment

    moment = now or datetime.now(UTC)
    while True:
        code = "".join(random.choices(REFERENCE_ALPHABET, k=REFERENCE_CODE_LENGTH))
        reference_number = format_reference_number(moment, code)

        result = await db.execute(
            select(Assignment.id).where(Assignment.reference_number == reference_number)
        )
        if result.scalar_one_or_none() is None:
            return reference_number
