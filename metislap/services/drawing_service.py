"""Drawing engine: one instructor-chosen drawer per round, everyone else guesses."""

import logging

from sqlalchemy.exc import IntegrityError

from extensions import db
from metislap.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from metislap.models import DrawingGuess, DrawingRound, DrawingWord, Participant
from metislap.models.drawing_round import DRAWING, FINISHED
from metislap.models.room import DRAWING as DRAWING_GAME, IN_PROGRESS
from metislap.services.game_engine import GameEngine
from metislap.services.utils import normalize_guess, utcnow

logger = logging.getLogger(__name__)

DRAWER_BONUS = 30
FIRST_GUESS_POINTS = 100
RANK_STEP = 20
MIN_GUESS_POINTS = 20

ALREADY_CORRECT = "You have already guessed this word."


def rank_points(rank):
    """Points for the Nth correct guesser (1-based): 100, 80, 60, 40, 20, 20, ..."""
    return max(FIRST_GUESS_POINTS - (rank - 1) * RANK_STEP, MIN_GUESS_POINTS)


def _room_words(room):
    return DrawingWord.query.filter_by(room_id=room.id).order_by(DrawingWord.order_num).all()


def _require_drawer(room, drawer_id):
    if drawer_id is None:
        raise ValidationError("Choose who draws this round (drawer_id).")
    drawer = db.session.get(Participant, drawer_id)
    if not drawer or drawer.room_id != room.id:
        raise NotFoundError("Drawer not found in this room.")
    if not drawer.is_active:
        raise ValidationError("The chosen drawer has left the room.")
    return drawer


def _open_rounds(room):
    return DrawingRound.query.filter_by(room_id=room.id, status=DRAWING).all()


def _close_open_rounds(room):
    for r in _open_rounds(room):
        r.status = FINISHED
        r.ended_at = utcnow()


class DrawingEngine(GameEngine):
    game_type = DRAWING_GAME

    def start(self, room, drawer_id=None, **options):
        words = _room_words(room)
        if not words:
            raise ValidationError("No drawing words: add at least one word before starting.")
        drawer = _require_drawer(room, drawer_id)

        for old in DrawingRound.query.filter_by(room_id=room.id).all():
            db.session.delete(old)
        db.session.flush()

        start_round(room, 0, drawer, words=words)
        room.current_round_index = 1

    def advance(self, room, drawer_id=None, **options):
        words = _room_words(room)
        next_index = (room.current_round_index or 0) + 1
        if next_index > len(words):
            _close_open_rounds(room)
            return False

        drawer = _require_drawer(room, drawer_id)
        _close_open_rounds(room)
        db.session.flush()
        start_round(room, next_index - 1, drawer, words=words)
        room.current_round_index = next_index
        return True

    def finish(self, room):
        _close_open_rounds(room)
        room.current_round_index = None


def start_round(room, word_index, drawer, words=None):
    """Create the round for the word at word_index (0-based); round numbers are 1-based."""
    words = words if words is not None else _room_words(room)
    if not 0 <= word_index < len(words):
        raise NotFoundError("No drawing word at that position.")
    if _open_rounds(room):
        raise ConflictError("Another round is still in progress.")

    new_round = DrawingRound(
        room_id=room.id,
        word_id=words[word_index].id,
        drawer_id=drawer.id,
        round_num=word_index + 1,
        status=DRAWING,
        started_at=utcnow(),
    )
    db.session.add(new_round)
    db.session.flush()
    logger.info("Room %s round %s started, drawer %s", room.id, new_round.round_num, drawer.id)
    return new_round


def current_round(room):
    if room.status != IN_PROGRESS or not room.current_round_index:
        return None
    return DrawingRound.query.filter_by(room_id=room.id, round_num=room.current_round_index).first()


def submit_snapshot(drawing_round, participant, snapshot):
    if participant.id != drawing_round.drawer_id:
        raise ForbiddenError("Only the drawer can draw in this round.")
    if drawing_round.status != DRAWING:
        raise ConflictError("This round is no longer accepting drawings.")
    if not isinstance(snapshot, str) or not snapshot:
        raise ValidationError("drawing_data must be a non-empty string.")

    drawing_round.drawing_data = snapshot
    db.session.commit()


def _has_correct_guess(drawing_round, participant):
    return DrawingGuess.query.filter_by(
        round_id=drawing_round.id,
        participant_id=participant.id,
        is_correct=True
    ).first() is not None


def submit_guess(drawing_round, participant, guess_text):
    if participant.room_id != drawing_round.room_id:
        raise ForbiddenError("This participant is not part of the round's room.")
    if not participant.is_active:
        raise ForbiddenError("Inactive participant.")
    if participant.id == drawing_round.drawer_id:
        raise ForbiddenError("The drawer cannot guess.")
    if drawing_round.status != DRAWING:
        raise ConflictError("Guessing is closed for this round.")

    guess_text = (guess_text or "").strip() if isinstance(guess_text, str) else ""
    if not guess_text:
        raise ValidationError("guess_text is required.")

    if _has_correct_guess(drawing_round, participant):
        raise ConflictError(ALREADY_CORRECT)

    word = drawing_round.word.word
    is_correct = normalize_guess(word) == normalize_guess(guess_text)

    points = 0
    if is_correct:
        # Count-then-insert: simultaneous correct guesses may share a rank.
        correct_before = DrawingGuess.query.filter_by(round_id=drawing_round.id, is_correct=True).count()
        points = rank_points(correct_before + 1)

    guess = DrawingGuess(
        round_id=drawing_round.id,
        participant_id=participant.id,
        guess_text=guess_text,
        is_correct=is_correct,
        points_earned=points,
        guessed_at=utcnow(),
    )
    db.session.add(guess)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(ALREADY_CORRECT)

    if is_correct:
        participant.score = Participant.score + points
        drawer = drawing_round.drawer
        drawer.score = Participant.score + DRAWER_BONUS

    db.session.commit()

    return {
        "guess": {"id": guess.id, "is_correct": is_correct, "points_earned": points},
        "correct_answer": word if is_correct else None,
    }


def round_state(room, viewer=None, reveal_word=False):
    """
    Polling read model. The word is only included for the drawer, for the
    instructor (reveal_word) and once the round is over; the hint is public.
    """
    total_rounds = DrawingWord.query.filter_by(room_id=room.id).count()
    state = {
        "room": {
            "id": room.id,
            "status": room.status,
            "current_round_index": room.current_round_index,
        },
        "total_rounds": total_rounds,
        "current_round": None,
        "current_word": None,
        "drawer": None,
    }

    r = current_round(room)
    if not r:
        return state

    show_word = reveal_word or r.status == FINISHED or (viewer is not None and viewer.id == r.drawer_id)
    state["current_round"] = r.to_dict()
    state["current_word"] = {
        "id": r.word.id,
        "word": r.word.word if show_word else None,
        "hint": r.word.hint,
        "length": len(normalize_guess(r.word.word)),
    }
    state["drawer"] = {"id": r.drawer.id, "nickname": r.drawer.nickname}
    return state


def round_guesses(drawing_round):
    guesses = DrawingGuess.query.filter_by(round_id=drawing_round.id)\
        .order_by(DrawingGuess.guessed_at, DrawingGuess.id).all()
    correct = [g for g in guesses if g.is_correct]
    return {
        "guesses": [g.to_dict() for g in guesses],
        "stats": {
            "total_guesses": len(guesses),
            "correct_count": len(correct),
        },
    }


def get_round(round_id):
    r = db.session.get(DrawingRound, round_id)
    if not r:
        raise NotFoundError("Round not found.")
    return r
