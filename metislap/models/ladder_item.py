from extensions import db
from metislap.services.utils import utcnow


class LadderItem(db.Model):
    """Result label at the bottom of the ladder; position is 0-based."""
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey("room.id", ondelete="CASCADE"), nullable=False)
    item_text = db.Column(db.String(200), nullable=False)
    position = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    room = db.relationship("Room", back_populates="ladder_items")

    __table_args__ = (
        db.UniqueConstraint("room_id", "position", name="uq_ladder_item_room_position"),
        db.Index("ix_ladder_item_room", "room_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "room_id": self.room_id,
            "item_text": self.item_text,
            "position": self.position,
        }
