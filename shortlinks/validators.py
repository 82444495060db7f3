import re
from urllib.parse import urlsplit

from shortlinks.codec import is_valid_alphabet
from shortlinks.errors import ValidationError

MAX_URL_LENGTH = 2048

URL_RE = re.compile(r"https?://[-\w.]+(?::\d+)?(?:[/?#][^\s]*)?", re.IGNORECASE)


def validate_long_url(value) -> str:
    if not value:
        raise ValidationError("longUrl is required")
    if not isinstance(value, str):
        raise ValidationError("longUrl must be a string")
    if len(value) > MAX_URL_LENGTH:
        raise ValidationError(
            f"URL is too long. Maximum length is {MAX_URL_LENGTH} characters"
        )

    try:
        parts = urlsplit(value)
        parts.port  # raises on a malformed port
    except ValueError:
        raise ValidationError("Invalid URL format. URL must start with http:// or https://")
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname \
            or not URL_RE.fullmatch(value):
        raise ValidationError("Invalid URL format. URL must start with http:// or https://")
    return value


def validate_short_code(value) -> str:
    if not is_valid_alphabet(value):
        raise ValidationError("Invalid short URL format")
    return value
