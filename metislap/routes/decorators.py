from functools import wraps

from flask import current_app, g, request, session

from extensions import db
from metislap.errors import AuthError, ForbiddenError, ValidationError
from metislap.models import Instructor
from metislap.services.room_service import participant_by_token
from metislap.services.utils import parse_int


def instructor_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        instructor_id = session.get("instructor_id")
        instructor = db.session.get(Instructor, instructor_id) if instructor_id else None
        if not instructor:
            session.pop("instructor_id", None)
            raise AuthError("Login required.")
        if not instructor.is_approved:
            raise ForbiddenError("Your account has not been approved.")
        g.instructor = instructor
        return f(*args, **kwargs)
    return wrapped


def admin_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        if not session.get("is_admin"):
            raise AuthError("Administrator login required.")
        return f(*args, **kwargs)
    return wrapped


def json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def current_participant(data=None):
    """Participant identified by participant_token in the body or the query string."""
    token = (data or {}).get("participant_token") or request.args.get("participant_token")
    return participant_by_token(token)


def required_int(source, field):
    value = source.get(field)
    if value is None or value == "":
        raise ValidationError(f"{field} is required.")
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer.")
    return parse_int(value, field)


def poll_interval():
    return current_app.config.get("POLL_INTERVAL_SECONDS", 3)


def session_instructor():
    """The logged-in approved instructor, or None for participants and guests."""
    instructor_id = session.get("instructor_id")
    instructor = db.session.get(Instructor, instructor_id) if instructor_id else None
    return instructor if instructor and instructor.is_approved else None
