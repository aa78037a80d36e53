from extensions import db
from metislap.services.utils import utcnow


class QuizAnswer(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_question.id", ondelete="CASCADE"), nullable=False)
    participant_id = db.Column(db.Integer, db.ForeignKey("participant.id", ondelete="CASCADE"), nullable=False)

    selected_answer = db.Column(db.String(500), nullable=False)
    is_correct = db.Column(db.Boolean, default=False, nullable=False)
    answer_time_ms = db.Column(db.Integer, nullable=True)
    points_earned = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    question = db.relationship("QuizQuestion", back_populates="answers")
    participant = db.relationship("Participant")

    __table_args__ = (
        db.UniqueConstraint("question_id", "participant_id", name="uq_answer_question_participant"),
        db.Index("ix_answer_question", "question_id"),
        db.Index("ix_answer_participant", "participant_id"),
    )
