import re
import secrets
import string
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from extensions import db
from metislap.errors import ConflictError, ValidationError

ROOM_CODE_LENGTH = 6
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


def utcnow():
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def random_room_code() -> str:
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def normalize_room_code(code) -> str:
    return (code or "").strip().upper()


def normalize_guess(text) -> str:
    """'  Ice Cream ' -> 'icecream'."""
    return re.sub(r"\s+", "", (text or "").lower().strip())


def commit_unique(msg):
    """Commit, turning a uniqueness violation into the conflict a pre-check would raise."""
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(msg)


def parse_int(value, field):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer.")
