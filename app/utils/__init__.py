from app.utils.errors import BakeryError, ValidationError, NotFound, ModeConflict
from app.utils.validators import validate_email, validate_phone, validate_quantity
from app.utils.formatting import format_currency, format_date, format_time
from app.utils.rate_limiter import single_flight

__all__ = [
    'BakeryError',
    'ValidationError',
    'NotFound',
    'ModeConflict',
    'validate_email',
    'validate_phone',
    'validate_quantity',
    'format_currency',
    'format_date',
    'format_time',
    'single_flight'
]
