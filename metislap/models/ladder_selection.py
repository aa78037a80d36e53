from extensions import db
from metislap.services.utils import utcnow


class LadderSelection(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey("room.id", ondelete="CASCADE"), nullable=False)
    participant_id = db.Column(db.Integer, db.ForeignKey("participant.id", ondelete="CASCADE"), nullable=False)
    start_position = db.Column(db.Integer, nullable=False)
    result_position = db.Column(db.Integer, nullable=True)
    is_revealed = db.Column(db.Boolean, default=False, nullable=False)
    selected_at = db.Column(db.DateTime, default=utcnow)

    room = db.relationship("Room", back_populates="ladder_selections")
    participant = db.relationship("Participant")

    __table_args__ = (
        db.UniqueConstraint("room_id", "participant_id", name="uq_selection_room_participant"),
        db.UniqueConstraint("room_id", "start_position", name="uq_selection_room_position"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "participant_id": self.participant_id,
            "nickname": self.participant.nickname if self.participant else None,
            "start_position": self.start_position,
            "result_position": self.result_position,
            "is_revealed": self.is_revealed,
        }
