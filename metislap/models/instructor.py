from extensions import db
from metislap.services.utils import utcnow

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
APPROVAL_STATUSES = (PENDING, APPROVED, REJECTED)


class Instructor(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(200), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    organization = db.Column(db.String(200), nullable=True)
    phone = db.Column(db.String(40), nullable=True)

    approval_status = db.Column(db.String(20), default=PENDING, nullable=False)
    approved_at = db.Column(db.DateTime, nullable=True)
    rejection_reason = db.Column(db.String(500), nullable=True)

    last_login = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    rooms = db.relationship("Room", back_populates="instructor", cascade="all, delete-orphan")

    @property
    def is_approved(self):
        return self.approval_status == APPROVED

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "organization": self.organization,
            "phone": self.phone,
            "approval_status": self.approval_status,
            "rejection_reason": self.rejection_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
