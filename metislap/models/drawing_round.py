from extensions import db
from metislap.services.utils import utcnow

DRAWING = "drawing"
FINISHED = "finished"


class DrawingRound(db.Model):
    """
    One drawer/word assignment. drawing_data holds the latest canvas
    snapshot sent by the drawer; each upload replaces the previous one.
    """
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey("room.id", ondelete="CASCADE"), nullable=False)
    word_id = db.Column(db.Integer, db.ForeignKey("drawing_word.id", ondelete="CASCADE"), nullable=False)
    drawer_id = db.Column(db.Integer, db.ForeignKey("participant.id", ondelete="CASCADE"), nullable=False)
    round_num = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), default=DRAWING, nullable=False)
    drawing_data = db.Column(db.Text, nullable=True)
    started_at = db.Column(db.DateTime, default=utcnow)
    ended_at = db.Column(db.DateTime, nullable=True)

    room = db.relationship("Room", back_populates="rounds")
    word = db.relationship("DrawingWord")
    drawer = db.relationship("Participant")
    guesses = db.relationship(
        "DrawingGuess", back_populates="round", cascade="all, delete-orphan",
        order_by="DrawingGuess.guessed_at",
    )

    __table_args__ = (
        db.UniqueConstraint("room_id", "round_num", name="uq_round_room_num"),
        db.Index("ix_round_room", "room_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "round_num": self.round_num,
            "status": self.status,
            "drawer_id": self.drawer_id,
            "drawing_data": self.drawing_data,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
        }
