from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal('0.01')


def to_decimal(value):
    """Convert a JSON number/string to Decimal without float noise"""
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(amount):
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount):
    """Dollars -> integer cents"""
    return int((to_decimal(amount) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def parse_timestamp(value):
    """Parse an ISO timestamp from the backend (accepts a trailing Z)"""
    if isinstance(value, datetime):
        return value
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    return datetime.fromisoformat(value)


def format_currency(amount):
    """Format amount as US dollars, e.g. $1,234.50"""
    amount = round2(amount)
    sign = '-' if amount < 0 else ''
    return f'{sign}${abs(amount):,.2f}'


def format_date(value):
    d = parse_timestamp(value)
    return f'{d:%B} {d.day}, {d.year}'


def format_time(value):
    d = parse_timestamp(value)
    hour = d.hour % 12 or 12
    return f'{hour}:{d:%M} {"AM" if d.hour < 12 else "PM"}'


def format_datetime(value):
    return f'{format_date(value)} at {format_time(value)}'


def _ordinal(day):
    if 10 <= day % 100 <= 20:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(day % 10, 'th')
    return f'{day}{suffix}'


def _date_with_ordinal(d):
    return f'{d:%B} {_ordinal(d.day)}'


def format_special_date_range(start, end):
    """
    Render the pickup window of a special.
    Same day:  "December 4th 4:00 PM - 7:00 PM"
    Multi-day: "December 4th 4:00 PM - December 5th 7:00 PM"
    """
    start_date = parse_timestamp(start)
    end_date = parse_timestamp(end)

    if start_date.date() == end_date.date():
        return f'{_date_with_ordinal(start_date)} {format_time(start_date)} - {format_time(end_date)}'
    return (f'{_date_with_ordinal(start_date)} {format_time(start_date)} - '
            f'{_date_with_ordinal(end_date)} {format_time(end_date)}')
