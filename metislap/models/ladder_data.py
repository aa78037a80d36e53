import json

from extensions import db
from metislap.services.utils import utcnow


class LadderData(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey("room.id", ondelete="CASCADE"), nullable=False, unique=True)
    lines_count = db.Column(db.Integer, nullable=False)
    rows = db.Column(db.Integer, nullable=False, default=10)
    horizontal_lines = db.Column(db.Text, default="[]")
    created_at = db.Column(db.DateTime, default=utcnow)

    room = db.relationship("Room", back_populates="ladder_data")

    def get_lines(self):
        try:
            return json.loads(self.horizontal_lines) if self.horizontal_lines else []
        except ValueError:
            return []

    def set_lines(self, lines):
        self.horizontal_lines = json.dumps(lines) if lines else "[]"

    def to_dict(self):
        return {
            "id": self.id,
            "room_id": self.room_id,
            "lines_count": self.lines_count,
            "rows": self.rows,
            "horizontal_lines": self.get_lines(),
        }
