import secrets
import string

from shortlinks.errors import InvalidEncoding

# Order is persisted: codes in the table were produced with this exact alphabet.
ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
BASE = len(ALPHABET)

_INDEX = {char: i for i, char in enumerate(ALPHABET)}

# Placeholder codes start with a symbol outside ALPHABET, so they never resolve.
PENDING_PREFIX = "~"


def encode(number: int) -> str:
    """Encode a row id as a base-62 short code (no padding).

    Negative numbers are encoded by absolute value.
    """
    number = abs(number)
    if number == 0:
        return ALPHABET[0]

    chars = []
    while number:
        number, rem = divmod(number, BASE)
        chars.append(ALPHABET[rem])
    return "".join(reversed(chars))


def decode(code: str) -> int:
    """Decode a base-62 short code back into its row id.

    Raises InvalidEncoding for empty input or any symbol outside ALPHABET.
    Non-canonical codes such as "00a" are accepted.
    """
    if not code or not isinstance(code, str):
        raise InvalidEncoding("Invalid Base62 string")

    value = 0
    for char in code:
        index = _INDEX.get(char)
        if index is None:
            raise InvalidEncoding(f"Invalid character '{char}' in Base62 string")
        value = value * BASE + index
    return value


def is_valid_alphabet(code) -> bool:
    if not code or not isinstance(code, str):
        return False
    return all(char in _INDEX for char in code)


def pending_code() -> str:
    # unique per row so concurrent inserts don't collide on the short_code index
    return PENDING_PREFIX + secrets.token_hex(7)
