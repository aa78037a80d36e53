import hmac
import logging

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db
from metislap.errors import AuthError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from metislap.models import Instructor
from metislap.models.instructor import APPROVAL_STATUSES, APPROVED, PENDING, REJECTED
from metislap.services.log_service import record_event
from metislap.services.utils import commit_unique, utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
DUPLICATE_EMAIL = "An instructor with this email already exists."


def _clean(value):
    return value.strip() if isinstance(value, str) else ""


def register_instructor(data):
    email = _clean(data.get("email")).lower()
    password = data.get("password")
    name = _clean(data.get("name"))

    if not email or "@" not in email:
        raise ValidationError("A valid email is required.")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if not name:
        raise ValidationError("Name is required.")
    if Instructor.query.filter_by(email=email).first():
        raise ConflictError(DUPLICATE_EMAIL)

    instructor = Instructor(
        email=email,
        password_hash=generate_password_hash(password),
        name=name,
        organization=_clean(data.get("organization")) or None,
        phone=_clean(data.get("phone")) or None,
        approval_status=PENDING,
    )
    db.session.add(instructor)
    commit_unique(DUPLICATE_EMAIL)
    logger.info("Instructor %s registered, awaiting approval", email)
    return instructor


def authenticate_instructor(email, password):
    email = _clean(email).lower()
    instructor = Instructor.query.filter_by(email=email).first() if email else None
    if not instructor or not isinstance(password, str) \
            or not check_password_hash(instructor.password_hash, password):
        raise AuthError("Invalid email or password.")
    if instructor.approval_status == PENDING:
        raise ForbiddenError("Your account is waiting for administrator approval.")
    if instructor.approval_status == REJECTED:
        reason = instructor.rejection_reason or "no reason given"
        raise ForbiddenError(f"Your account was rejected: {reason}")

    instructor.last_login = utcnow()
    db.session.commit()
    return instructor


def authenticate_admin(email, password):
    expected_email = current_app.config.get("ADMIN_EMAIL", "")
    expected_password = current_app.config.get("ADMIN_PASSWORD", "")
    if not isinstance(email, str) or not isinstance(password, str):
        raise AuthError("Invalid administrator credentials.")
    email_ok = hmac.compare_digest(email.strip().lower(), expected_email.lower())
    password_ok = hmac.compare_digest(password, expected_password)
    if not (email_ok and password_ok):
        raise AuthError("Invalid administrator credentials.")
    return expected_email


def list_instructors(status=None):
    query = Instructor.query
    if status:
        if status not in APPROVAL_STATUSES:
            raise ValidationError("Invalid approval status.")
        query = query.filter_by(approval_status=status)
    return query.order_by(Instructor.created_at.desc(), Instructor.id.desc()).all()


def get_instructor(instructor_id):
    instructor = db.session.get(Instructor, instructor_id)
    if not instructor:
        raise NotFoundError("Instructor not found.")
    return instructor


def set_approval(instructor_id, status, reason=None):
    if status not in (APPROVED, REJECTED):
        raise ValidationError("status must be 'approved' or 'rejected'.")
    instructor = get_instructor(instructor_id)

    instructor.approval_status = status
    if status == APPROVED:
        instructor.approved_at = utcnow()
        instructor.rejection_reason = None
    else:
        instructor.approved_at = None
        instructor.rejection_reason = _clean(reason) or None

    record_event("admin", f"Instructor {instructor.email} {status}")
    db.session.commit()
    return instructor
