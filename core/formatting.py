"""
Derived, read-only text shown alongside comments.

Both helpers are pure: they never touch the database and are recomputed
on every read (the age of a comment changes with the clock).
"""

import logging
import os
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)

SHORTTEXT_LENGTH = 20
SHORTTEXT_SUFFIX = "..."

AGE_TEMPLATES = {
    "fr": "Créé il y a {days} jours {hours} heures et {minutes} minutes",
    "en": "Created {days} days {hours} hours and {minutes} minutes ago",
}
DEFAULT_AGE_LOCALE = "fr"

AGE_LOCALE = os.getenv("AGE_LOCALE", DEFAULT_AGE_LOCALE).lower()

if AGE_LOCALE not in AGE_TEMPLATES:
    logger.warning(
        f"Unknown AGE_LOCALE '{AGE_LOCALE}', falling back to '{DEFAULT_AGE_LOCALE}'"
    )
    AGE_LOCALE = DEFAULT_AGE_LOCALE


def shorten_text(text: Optional[str]) -> str:
    """
    Return the text unchanged when it is shorter than 20 characters,
    otherwise its first 20 characters followed by "...".
    """
    if text is None:
        return ""

    if len(text) < SHORTTEXT_LENGTH:
        return text

    return text[:SHORTTEXT_LENGTH] + SHORTTEXT_SUFFIX


def as_utc(value: datetime) -> datetime:
    """Naive datetimes (SQLite returns them) are assumed to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_age(
    created_at: datetime,
    now: Optional[datetime] = None,
    locale: Optional[str] = None,
) -> str:
    """
    Format the time elapsed since created_at.

    Days are the total number of whole days; hours and minutes are the
    components of what remains, not totals. A created_at in the future
    gives the same output as the equivalent past distance.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    template = AGE_TEMPLATES.get(locale or AGE_LOCALE, AGE_TEMPLATES[DEFAULT_AGE_LOCALE])

    delta = abs(as_utc(now) - as_utc(created_at))
    hours, remainder = divmod(delta.seconds, 3600)
    minutes = remainder // 60

    return template.format(days=delta.days, hours=hours, minutes=minutes)
