# Request payload validation helpers
import re

from errors import ValidationError

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def validate_email(email):
    return bool(EMAIL_RE.match(email or ''))


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(data, fields, message='All fields are required.'):
    if any(is_blank(data.get(field)) for field in fields):
        raise ValidationError(message)


def require_content(content, message):
    if is_blank(content):
        raise ValidationError(message)
    return content


def parse_id(value, message):
    """Accept ids sent as numbers or numeric strings."""
    if isinstance(value, bool):
        raise ValidationError(message)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(message)
