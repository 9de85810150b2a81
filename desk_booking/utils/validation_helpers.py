import re
from datetime import date, datetime, time, timedelta
from dateutil import tz
from dateutil.parser import isoparse
from desk_booking.errors import ValidationError

FULL_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def resolve_timezone(name: str):
    zone = tz.gettz(name)
    if zone is None:
        raise ValueError(f"Unknown timezone: {name}")
    return zone


def is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def parse_booking_date(value, zone) -> datetime:
    """
    Parse a booking date into an aware datetime in ``zone``.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and extended
    ISO 8601 timestamps. Reduced forms such as ``2025`` or ``2025-10`` are rejected.
    Naive values are read as wall-clock time in ``zone``.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time.min)
    elif isinstance(value, str):
        value = value.strip()
        if not FULL_DATE.match(value):
            raise ValidationError("invalid date")
        try:
            moment = isoparse(value)
        except (ValueError, OverflowError):
            raise ValidationError("invalid date")
    else:
        raise ValidationError("invalid date")

    if moment.tzinfo is None:
        return moment.replace(tzinfo=zone)
    return moment.astimezone(zone)


def day_bounds(moment: datetime, zone):
    """
    Return ``(start, end, date_key)`` for the calendar day containing ``moment``.

    ``start`` and ``end`` are naive UTC datetimes bounding the half-open day
    interval ``[start, end)`` in ``zone``.
    """
    day = moment.astimezone(zone).date()
    # Midnight is skipped on DST days in some zones; use the first real instant.
    start = tz.resolve_imaginary(datetime.combine(day, time.min).replace(tzinfo=zone))
    end = tz.resolve_imaginary(datetime.combine(day + timedelta(days=1), time.min).replace(tzinfo=zone))
    return to_utc_naive(start), to_utc_naive(end), day.isoformat()


def to_utc_naive(moment: datetime) -> datetime:
    return moment.astimezone(tz.UTC).replace(tzinfo=None)


def utcnow() -> datetime:
    return datetime.now(tz.UTC).replace(tzinfo=None)


def from_utc_naive(moment: datetime) -> datetime:
    return moment.replace(tzinfo=tz.UTC)
