"""Display labels for distances and report ages."""

from datetime import UTC, datetime

from defrost.core.geo import FEET_PER_METER, meters_to_miles


def format_distance(meters: float) -> str:
    """Feet below a tenth of a mile, otherwise miles with one decimal."""
    miles = meters_to_miles(meters)
    if miles < 0.1:
        return f"{int(meters * FEET_PER_METER)}_FT"
    return f"{miles:.1f}_MI"


def _plural(count: int, unit: str) -> str:
    return f"{count}_{unit}{'' if count == 1 else 'S'}_AGO"


def time_ago(created_at: datetime, now: datetime | None = None) -> str:
    """Coarse age label, e.g. ``5_MINS_AGO`` or ``1_DAY_AGO``."""
    now = now or datetime.now(UTC)
    # SQLite hands back naive datetimes; they are stored as UTC
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)

    seconds = (now - created_at).total_seconds()
    days = int(seconds / 86400)
    hours = int(seconds / 3600)
    minutes = int(seconds / 60)

    if days > 0:
        return _plural(days, "DAY")
    if hours > 0:
        return _plural(hours, "HR")
    return _plural(minutes, "MIN")
