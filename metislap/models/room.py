from extensions import db
from metislap.services.utils import utcnow

QUIZ = "quiz"
DRAWING = "drawing"
LADDER = "ladder"
GAME_TYPES = (QUIZ, DRAWING, LADDER)

WAITING = "waiting"
IN_PROGRESS = "in_progress"
FINISHED = "finished"
STATUSES = (WAITING, IN_PROGRESS, FINISHED)


class Room(db.Model):
    """
    One game instance, joined by participants through its 6-character code.
    Progress pointers are game-type specific:
    - quiz: current_question_index (1-based order index)
    - drawing: current_round_index (1-based round number)
    - ladder: the LadderData row
    """
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(6), unique=True, nullable=False)
    instructor_id = db.Column(db.Integer, db.ForeignKey("instructor.id", ondelete="CASCADE"), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    game_type = db.Column(db.String(20), nullable=False)
    max_participants = db.Column(db.Integer, default=30, nullable=False)
    status = db.Column(db.String(20), default=WAITING, nullable=False)

    current_question_index = db.Column(db.Integer, nullable=True)
    current_round_index = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    started_at = db.Column(db.DateTime, nullable=True)
    ended_at = db.Column(db.DateTime, nullable=True)

    instructor = db.relationship("Instructor", back_populates="rooms")
    participants = db.relationship(
        "Participant", back_populates="room", cascade="all, delete-orphan",
        order_by="Participant.joined_at",
    )
    questions = db.relationship(
        "QuizQuestion", back_populates="room", cascade="all, delete-orphan",
        order_by="QuizQuestion.order_num",
    )
    words = db.relationship(
        "DrawingWord", back_populates="room", cascade="all, delete-orphan",
        order_by="DrawingWord.order_num",
    )
    rounds = db.relationship(
        "DrawingRound", back_populates="room", cascade="all, delete-orphan",
        order_by="DrawingRound.round_num",
    )
    ladder_items = db.relationship(
        "LadderItem", back_populates="room", cascade="all, delete-orphan",
        order_by="LadderItem.position",
    )
    ladder_data = db.relationship(
        "LadderData", uselist=False, back_populates="room", cascade="all, delete-orphan",
    )
    ladder_selections = db.relationship(
        "LadderSelection", back_populates="room", cascade="all, delete-orphan",
        order_by="LadderSelection.start_position",
    )

    __table_args__ = (
        db.Index("ix_room_instructor", "instructor_id"),
        db.Index("ix_room_status", "status"),
    )

    def active_participant_count(self):
        from metislap.models.participant import Participant
        return Participant.query.filter_by(room_id=self.id, is_active=True).count()

    def to_dict(self):
        return {
            "id": self.id,
            "room_code": self.code,
            "room_name": self.name,
            "game_type": self.game_type,
            "max_participants": self.max_participants,
            "status": self.status,
            "current_question_index": self.current_question_index,
            "current_round_index": self.current_round_index,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
        }
