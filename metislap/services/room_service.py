"""Rooms, participants and the room lifecycle shared by every game type."""

import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from extensions import db
from metislap.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from metislap.models import Participant, Room
from metislap.models.participant import new_token
from metislap.models.room import DRAWING, FINISHED, GAME_TYPES, IN_PROGRESS, LADDER, QUIZ, STATUSES, WAITING
from metislap.services.drawing_service import DrawingEngine
from metislap.services.ladder_service import LadderEngine
from metislap.services.log_service import record_event
from metislap.services.quiz_service import QuizEngine
from metislap.services.utils import commit_unique, normalize_room_code, random_room_code, utcnow

logger = logging.getLogger(__name__)

START = "start"
ADVANCE = "advance"
END = "end"
RESET = "reset"

TRANSITIONS = {
    (WAITING, START): IN_PROGRESS,
    (IN_PROGRESS, ADVANCE): IN_PROGRESS,
    (IN_PROGRESS, END): FINISHED,
    (IN_PROGRESS, RESET): WAITING,
    (FINISHED, RESET): WAITING,
}

_REJECTIONS = {
    START: "Only a waiting room can be started.",
    ADVANCE: "The game is not in progress.",
    END: "The game is not in progress.",
    RESET: "The room is already waiting.",
}

ENGINES = {
    QUIZ: QuizEngine(),
    DRAWING: DrawingEngine(),
    LADDER: LadderEngine(),
}

NICKNAME_MIN = 2
NICKNAME_MAX = 20
CODE_ATTEMPTS = 20


def transition(status, action):
    """Pure room state machine: (status, action) -> new status."""
    try:
        return TRANSITIONS[(status, action)]
    except KeyError:
        if action not in _REJECTIONS:
            raise ValidationError(f"Unknown action: {action}")
        raise ConflictError(_REJECTIONS[action])


def get_engine(game_type):
    try:
        return ENGINES[game_type]
    except KeyError:
        raise ValidationError(f"Unknown game type: {game_type}")


# ---------------------------
# LIFECYCLE
# ---------------------------
def start_game(room, **options):
    new_status = transition(room.status, START)
    get_engine(room.game_type).start(room, **options)

    room.status = new_status
    room.started_at = utcnow()
    room.ended_at = None
    record_event("room", f"Room {room.code} started ({room.game_type})")
    db.session.commit()
    return room


def advance_game(room, **options):
    transition(room.status, ADVANCE)
    engine = get_engine(room.game_type)
    if not engine.advance(room, **options):
        _finish(room, engine)
        record_event("room", f"Room {room.code} finished after its last step")
    db.session.commit()
    return room


def end_game(room):
    transition(room.status, END)
    _finish(room, get_engine(room.game_type))
    record_event("room", f"Room {room.code} ended")
    db.session.commit()
    return room


def reset_room(room):
    room.status = transition(room.status, RESET)
    get_engine(room.game_type).reset(room)
    room.current_question_index = None
    room.current_round_index = None
    room.started_at = None
    room.ended_at = None
    record_event("room", f"Room {room.code} reset to waiting")
    db.session.commit()
    return room


def _finish(room, engine):
    engine.finish(room)
    room.status = transition(room.status, END)
    room.ended_at = utcnow()


# ---------------------------
# ROOMS
# ---------------------------
def _unique_code():
    for _ in range(CODE_ATTEMPTS):
        code = random_room_code()
        if not Room.query.filter_by(code=code).first():
            return code
    raise ConflictError("Could not allocate a free room code, try again.")


def create_room(instructor, name, game_type, max_participants=None):
    name = (name or "").strip()
    if not name:
        raise ValidationError("Room name is required.")
    if game_type not in GAME_TYPES:
        raise ValidationError("Invalid game type.")
    if max_participants is None:
        max_participants = current_app.config.get("DEFAULT_MAX_PARTICIPANTS", 30)
    max_participants = _validate_capacity(max_participants)

    for _ in range(CODE_ATTEMPTS):
        room = Room(
            code=_unique_code(),
            instructor_id=instructor.id,
            name=name,
            game_type=game_type,
            max_participants=max_participants,
            status=WAITING,
        )
        db.session.add(room)
        try:
            db.session.flush()
        except IntegrityError:
            # Code claimed by a concurrent create.
            db.session.rollback()
            continue
        record_event("room", f"Room {room.code} created by instructor {instructor.id}")
        db.session.commit()
        return room
    raise ConflictError("Could not allocate a free room code, try again.")


def _validate_capacity(value):
    if isinstance(value, bool):
        raise ValidationError("max_participants must be an integer.")
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError("max_participants must be an integer.")
    if value < 1:
        raise ValidationError("max_participants must be at least 1.")
    return value


def list_rooms(instructor, status=None):
    query = Room.query.filter_by(instructor_id=instructor.id)
    if status:
        if status not in STATUSES:
            raise ValidationError("Invalid room status.")
        query = query.filter_by(status=status)
    return query.order_by(Room.created_at.desc(), Room.id.desc()).all()


def get_room(room_id):
    room = db.session.get(Room, room_id)
    if not room:
        raise NotFoundError("Room not found.")
    return room


def get_owned_room(room_id, instructor):
    room = get_room(room_id)
    if room.instructor_id != instructor.id:
        raise ForbiddenError("You do not own this room.")
    return room


def update_room(room, data):
    if "room_name" in data:
        name = (data.get("room_name") or "").strip()
        if not name:
            raise ValidationError("Room name is required.")
        room.name = name
    if "max_participants" in data:
        room.max_participants = _validate_capacity(data.get("max_participants"))
    db.session.commit()
    return room


def delete_room(room):
    if room.status == IN_PROGRESS:
        raise ConflictError("A game in progress cannot be deleted; end it first.")
    code = room.code
    db.session.delete(room)
    record_event("room", f"Room {code} deleted")
    db.session.commit()


def room_summary(room):
    data = room.to_dict()
    data["participant_count"] = room.active_participant_count()
    return data


# ---------------------------
# PARTICIPANTS
# ---------------------------
def find_room_by_code(code, include_finished=False):
    code = normalize_room_code(code)
    if not code:
        raise ValidationError("Room code is required.")
    room = Room.query.filter_by(code=code).first()
    if not room:
        raise NotFoundError("No room with that code.")
    if room.status == FINISHED and not include_finished:
        raise ConflictError("This game has already finished.")
    return room


def join_room(code, nickname):
    nickname = (nickname or "").strip() if isinstance(nickname, str) else ""
    if not NICKNAME_MIN <= len(nickname) <= NICKNAME_MAX:
        raise ValidationError(f"Nickname must be {NICKNAME_MIN} to {NICKNAME_MAX} characters.")

    room = find_room_by_code(code)

    existing = Participant.query.filter_by(room_id=room.id, nickname=nickname).first()
    if existing and existing.is_active:
        raise ConflictError("Nickname already in use in this room.")

    if room.active_participant_count() >= room.max_participants:
        raise ConflictError("The room is full.")

    if existing:
        existing.is_active = True
        existing.left_at = None
        existing.joined_at = utcnow()
        existing.token = new_token()
        participant = existing
    else:
        participant = Participant(room_id=room.id, nickname=nickname, score=0, is_active=True)
        db.session.add(participant)

    commit_unique("Nickname already in use in this room.")
    logger.info("%s joined room %s", nickname, room.code)
    return participant, room


def leave_room(participant):
    if not participant.is_active:
        raise ConflictError("This participant has already left.")
    participant.is_active = False
    participant.left_at = utcnow()
    db.session.commit()
    return participant


def participant_by_token(token):
    if not token or not isinstance(token, str):
        raise ValidationError("participant_token is required.")
    participant = Participant.query.filter_by(token=token).first()
    if not participant:
        raise NotFoundError("Participant not found.")
    return participant


def list_participants(room):
    return Participant.query.filter_by(room_id=room.id)\
        .order_by(Participant.joined_at, Participant.id).all()
