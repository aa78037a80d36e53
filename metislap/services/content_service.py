"""Ordered game content: quiz questions, drawing words and ladder items."""

from sqlalchemy import func

from extensions import db
from metislap.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from metislap.models import DrawingRound, DrawingWord, LadderItem, QuizQuestion
from metislap.models.quiz_question import MULTIPLE_CHOICE, QUESTION_TYPES, TRUE_FALSE, TRUE_FALSE_OPTIONS
from metislap.models.room import WAITING
from metislap.services.utils import parse_int


def ensure_editable(room, instructor, game_type):
    if room.instructor_id != instructor.id:
        raise ForbiddenError("You do not own this room.")
    if room.game_type != game_type:
        raise ValidationError(f"This room is not a {game_type} room.")
    if room.status != WAITING:
        raise ConflictError("Content can only be changed while the room is waiting.")


def _get_next_position(model, column, room_id, start=1):
    max_pos = db.session.query(func.max(column)) \
        .filter(model.room_id == room_id) \
        .scalar()
    return start if max_pos is None else max_pos + 1


def _renumber(rows, attr, start=1):
    """Close gaps left by a delete, one row at a time so the unique order never collides."""
    for expected, row in enumerate(rows, start=start):
        if getattr(row, attr) != expected:
            setattr(row, attr, expected)
            db.session.flush()


def _required_text(data, field, max_len):
    value = data.get(field)
    value = value.strip() if isinstance(value, str) else ""
    if not value:
        raise ValidationError(f"{field} is required.")
    if len(value) > max_len:
        raise ValidationError(f"{field} must be at most {max_len} characters.")
    return value


def _positive_int(data, field, default):
    value = data.get(field, default)
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer.")
    value = parse_int(value, field)
    if value < 0:
        raise ValidationError(f"{field} must not be negative.")
    return value


# ---------------------------
# QUIZ QUESTIONS
# ---------------------------
def _question_fields(data, current=None):
    question_type = data.get("question_type", current.question_type if current else MULTIPLE_CHOICE)
    if question_type not in QUESTION_TYPES:
        raise ValidationError("Invalid question type.")

    if question_type == TRUE_FALSE:
        options = list(TRUE_FALSE_OPTIONS)
    else:
        options = data.get("options", current.get_options() if current else None)
        if not isinstance(options, list) or not all(isinstance(o, str) and o.strip() for o in options):
            raise ValidationError("options must be a list of non-empty strings.")
        options = [o.strip() for o in options]
        if len(options) < 2:
            raise ValidationError("A multiple choice question needs at least 2 options.")

    correct = data.get("correct_answer", current.correct_answer if current else None)
    if not isinstance(correct, str) or correct not in options:
        raise ValidationError("correct_answer must be one of the options.")

    return question_type, options, correct


def add_question(room, data):
    text = _required_text(data, "question_text", 500)
    question_type, options, correct = _question_fields(data)

    question = QuizQuestion(
        room_id=room.id,
        question_text=text,
        question_type=question_type,
        correct_answer=correct,
        time_limit=_positive_int(data, "time_limit", 30),
        points=_positive_int(data, "points", 100),
        order_num=_get_next_position(QuizQuestion, QuizQuestion.order_num, room.id),
    )
    question.set_options(options)
    db.session.add(question)
    db.session.commit()
    return question


def update_question(question, data):
    if "question_text" in data:
        question.question_text = _required_text(data, "question_text", 500)
    question_type, options, correct = _question_fields(data, current=question)
    question.question_type = question_type
    question.set_options(options)
    question.correct_answer = correct
    if "time_limit" in data:
        question.time_limit = _positive_int(data, "time_limit", 30)
    if "points" in data:
        question.points = _positive_int(data, "points", 100)
    db.session.commit()
    return question


def delete_question(question):
    room_id = question.room_id
    db.session.delete(question)
    db.session.flush()
    rest = QuizQuestion.query.filter_by(room_id=room_id).order_by(QuizQuestion.order_num).all()
    _renumber(rest, "order_num")
    db.session.commit()


def list_questions(room):
    return QuizQuestion.query.filter_by(room_id=room.id).order_by(QuizQuestion.order_num).all()


def get_question(question_id):
    question = db.session.get(QuizQuestion, question_id)
    if not question:
        raise NotFoundError("Question not found.")
    return question


# ---------------------------
# DRAWING WORDS
# ---------------------------
def _optional_hint(data):
    hint = data.get("hint")
    if hint is None:
        return None
    if not isinstance(hint, str):
        raise ValidationError("hint must be a string.")
    return hint.strip()[:200] or None


def add_word(room, data):
    word = DrawingWord(
        room_id=room.id,
        word=_required_text(data, "word", 100),
        hint=_optional_hint(data),
        order_num=_get_next_position(DrawingWord, DrawingWord.order_num, room.id),
    )
    db.session.add(word)
    db.session.commit()
    return word


def update_word(word, data):
    if "word" in data:
        word.word = _required_text(data, "word", 100)
    if "hint" in data:
        word.hint = _optional_hint(data)
    db.session.commit()
    return word


def delete_word(word):
    room_id = word.room_id
    # Rounds of an earlier run still point at the word.
    for r in DrawingRound.query.filter_by(word_id=word.id).all():
        db.session.delete(r)
    db.session.delete(word)
    db.session.flush()
    rest = DrawingWord.query.filter_by(room_id=room_id).order_by(DrawingWord.order_num).all()
    _renumber(rest, "order_num")
    db.session.commit()


def list_words(room):
    return DrawingWord.query.filter_by(room_id=room.id).order_by(DrawingWord.order_num).all()


def get_word(word_id):
    word = db.session.get(DrawingWord, word_id)
    if not word:
        raise NotFoundError("Word not found.")
    return word


# ---------------------------
# LADDER ITEMS
# ---------------------------
def add_item(room, data):
    item = LadderItem(
        room_id=room.id,
        item_text=_required_text(data, "item_text", 200),
        position=_get_next_position(LadderItem, LadderItem.position, room.id, start=0),
    )
    db.session.add(item)
    db.session.commit()
    return item


def update_item(item, data):
    item.item_text = _required_text(data, "item_text", 200)
    db.session.commit()
    return item


def delete_item(item):
    room_id = item.room_id
    db.session.delete(item)
    db.session.flush()
    rest = LadderItem.query.filter_by(room_id=room_id).order_by(LadderItem.position).all()
    _renumber(rest, "position", start=0)
    db.session.commit()


def list_items(room):
    return LadderItem.query.filter_by(room_id=room.id).order_by(LadderItem.position).all()


def get_item(item_id):
    item = db.session.get(LadderItem, item_id)
    if not item:
        raise NotFoundError("Ladder item not found.")
    return item

