import json

from extensions import db

MULTIPLE_CHOICE = "multiple_choice"
TRUE_FALSE = "true_false"
QUESTION_TYPES = (MULTIPLE_CHOICE, TRUE_FALSE)
TRUE_FALSE_OPTIONS = ["O", "X"]


class QuizQuestion(db.Model):
    """Quiz question; order_num is 1-based and contiguous within a room."""
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey("room.id", ondelete="CASCADE"), nullable=False)
    question_text = db.Column(db.String(500), nullable=False)
    question_type = db.Column(db.String(20), default=MULTIPLE_CHOICE, nullable=False)
    options = db.Column(db.String(2000), default="[]")
    correct_answer = db.Column(db.String(500), nullable=False)
    time_limit = db.Column(db.Integer, default=30)
    points = db.Column(db.Integer, default=100)
    order_num = db.Column(db.Integer, nullable=False)

    room = db.relationship("Room", back_populates="questions")
    answers = db.relationship("QuizAnswer", back_populates="question", cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint("room_id", "order_num", name="uq_question_room_order"),
        db.Index("ix_question_room", "room_id"),
    )

    def get_options(self):
        try:
            return json.loads(self.options) if self.options else []
        except ValueError:
            return []

    def set_options(self, options):
        self.options = json.dumps(options) if options else "[]"

    def to_dict(self, include_answer=True):
        data = {
            "id": self.id,
            "room_id": self.room_id,
            "question_text": self.question_text,
            "question_type": self.question_type,
            "options": self.get_options(),
            "time_limit": self.time_limit,
            "points": self.points,
            "order_num": self.order_num,
        }
        if include_answer:
            data["correct_answer"] = self.correct_answer
        return data
