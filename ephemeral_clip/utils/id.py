import re
import secrets

SECRET_ID_BYTES = 16
SECRET_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_secret_id() -> str:
    """Generate a 128-bit random secret identifier as 32 lowercase hex chars.

    No uniqueness check is made against existing keys; at 2^-128 per pair
    collisions are not a practical concern.
    """
    return secrets.token_hex(SECRET_ID_BYTES)


def is_valid_secret_id(value: object) -> bool:
    return isinstance(value, str) and SECRET_ID_PATTERN.fullmatch(value) is not None
