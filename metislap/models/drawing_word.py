from extensions import db


class DrawingWord(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey("room.id", ondelete="CASCADE"), nullable=False)
    word = db.Column(db.String(100), nullable=False)
    hint = db.Column(db.String(200), nullable=True)
    order_num = db.Column(db.Integer, nullable=False)

    room = db.relationship("Room", back_populates="words")

    __table_args__ = (
        db.UniqueConstraint("room_id", "order_num", name="uq_word_room_order"),
        db.Index("ix_word_room", "room_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "room_id": self.room_id,
            "word": self.word,
            "hint": self.hint,
            "order_num": self.order_num,
        }
