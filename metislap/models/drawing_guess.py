from extensions import db
from metislap.services.utils import utcnow


class DrawingGuess(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    round_id = db.Column(db.Integer, db.ForeignKey("drawing_round.id", ondelete="CASCADE"), nullable=False)
    participant_id = db.Column(db.Integer, db.ForeignKey("participant.id", ondelete="CASCADE"), nullable=False)
    guess_text = db.Column(db.String(200), nullable=False)
    is_correct = db.Column(db.Boolean, default=False, nullable=False)
    points_earned = db.Column(db.Integer, default=0, nullable=False)
    guessed_at = db.Column(db.DateTime, default=utcnow)

    round = db.relationship("DrawingRound", back_populates="guesses")
    participant = db.relationship("Participant")

    __table_args__ = (
        # Wrong guesses may repeat; only one correct guess per participant per round.
        db.Index(
            "uq_guess_round_participant_correct",
            round_id, participant_id,
            unique=True,
            sqlite_where=is_correct == db.true(),
            postgresql_where=is_correct == db.true(),
        ),
        db.Index("ix_guess_round", "round_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "guess_text": self.guess_text,
            "is_correct": self.is_correct,
            "points_earned": self.points_earned,
            "guessed_at": self.guessed_at.isoformat() if self.guessed_at else None,
            "participant": {
                "id": self.participant_id,
                "nickname": self.participant.nickname if self.participant else None,
            },
        }
