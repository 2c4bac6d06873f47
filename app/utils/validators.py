import re
from email_validator import validate_email as validate_email_addr, EmailNotValidError


def validate_email(email):
    """Validate email format"""
    if not email or not isinstance(email, str):
        return False, "Email is required"
    try:
        validate_email_addr(email, check_deliverability=False)
        return True, None
    except EmailNotValidError as e:
        return False, str(e)


def validate_phone(phone):
    """Validate phone number format (basic validation)"""
    if not phone:
        return False, "Phone number is required"
    # 7 digit local numbers up to 15 digit international ones; +, spaces, dashes, dots and parentheses allowed
    pattern = r'^\+?\d{7,15}$'
    if re.match(pattern, re.sub(r'[\s().-]', '', phone)):
        return True, None
    return False, "Invalid phone number format"


def validate_quantity(value):
    """Parse a quantity from request data"""
    try:
        return True, int(value)
    except (TypeError, ValueError):
        return False, "Quantity must be a whole number"
