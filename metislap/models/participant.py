import secrets

from extensions import db
from metislap.services.utils import utcnow


def new_token():
    return secrets.token_urlsafe(24)


class Participant(db.Model):
    """
    A nickname within one room. The token is issued at join time and must
    accompany every game action; the nickname is only a display name.
    """
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey("room.id", ondelete="CASCADE"), nullable=False)
    nickname = db.Column(db.String(20), nullable=False)
    token = db.Column(db.String(64), unique=True, nullable=False, default=new_token)
    score = db.Column(db.Integer, default=0, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    joined_at = db.Column(db.DateTime, default=utcnow)
    left_at = db.Column(db.DateTime, nullable=True)

    room = db.relationship("Room", back_populates="participants")

    __table_args__ = (
        # A returning nickname reactivates its old row, so one row per nickname is enough.
        db.UniqueConstraint("room_id", "nickname", name="uq_participant_room_nickname"),
        db.Index("ix_participant_room", "room_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "nickname": self.nickname,
            "score": self.score,
            "is_active": self.is_active,
            "joined_at": self.joined_at.isoformat() if self.joined_at else None,
        }
