"""Ladder engine: random connector graph, deterministic path walk, pick-then-reveal."""

import logging
import random

from flask import current_app
from sqlalchemy.exc import IntegrityError

from extensions import db
from metislap.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from metislap.models import LadderData, LadderItem, LadderSelection
from metislap.models.room import IN_PROGRESS, LADDER
from metislap.services.game_engine import GameEngine

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 10
DEFAULT_DENSITY = 0.4
MIN_ITEMS = 2

ALREADY_SELECTED = "You have already selected a starting position."
POSITION_TAKEN = "Position taken: another participant already chose this starting position."


def generate_ladder(lines_count, rows=DEFAULT_ROWS, density=DEFAULT_DENSITY, rng=None):
    """
    Return connectors as [{"row": r, "from_col": c}], each joining column c
    to c + 1 on row r. A connector is skipped when one already leaves c - 1
    on the same row, so no column is touched twice in a row.
    """
    rng = rng or random
    lines = []
    taken = set()
    for row in range(rows):
        for col in range(lines_count - 1):
            if rng.random() < density and (row, col - 1) not in taken:
                taken.add((row, col))
                lines.append({"row": row, "from_col": col})
    return lines


def resolve_path(start, lines, rows=DEFAULT_ROWS):
    """Walk down from start: a connector to the right wins over one from the left."""
    connectors = {(line["row"], line["from_col"]) for line in lines}
    col = start
    for row in range(rows):
        if (row, col) in connectors:
            col += 1
        elif (row, col - 1) in connectors:
            col -= 1
    return col


def _clear_ladder(room):
    LadderSelection.query.filter_by(room_id=room.id).delete(synchronize_session="fetch")
    LadderData.query.filter_by(room_id=room.id).delete(synchronize_session="fetch")
    db.session.flush()
    db.session.expire(room, ["ladder_data", "ladder_selections"])


class LadderEngine(GameEngine):
    game_type = LADDER

    def start(self, room, **options):
        lines_count = LadderItem.query.filter_by(room_id=room.id).count()
        if lines_count < MIN_ITEMS:
            raise ValidationError(f"At least {MIN_ITEMS} ladder items are required to start.")

        _clear_ladder(room)

        rows = current_app.config.get("LADDER_ROWS", DEFAULT_ROWS)
        density = current_app.config.get("LADDER_DENSITY", DEFAULT_DENSITY)
        data = LadderData(room_id=room.id, lines_count=lines_count, rows=rows)
        data.set_lines(generate_ladder(lines_count, rows=rows, density=density))
        db.session.add(data)
        db.session.flush()
        logger.info("Room %s ladder generated: %s lines, %s connectors",
                    room.id, lines_count, len(data.get_lines()))

    def advance(self, room, **options):
        raise ConflictError("The ladder game has no next step; reveal results or end the game.")

    def reset(self, room):
        _clear_ladder(room)


def _selection_of(room, participant):
    return LadderSelection.query.filter_by(room_id=room.id, participant_id=participant.id).first()


def _position_taken(room, start_position):
    return LadderSelection.query.filter_by(room_id=room.id, start_position=start_position).first() is not None


def select_start(room, participant, start_position):
    if participant.room_id != room.id:
        raise ForbiddenError("This participant is not part of the room.")
    if not participant.is_active:
        raise ForbiddenError("Inactive participant.")
    if room.status != IN_PROGRESS:
        raise ConflictError("The game is not in progress.")

    data = LadderData.query.filter_by(room_id=room.id).first()
    if not data:
        raise ConflictError("The ladder has not been generated yet.")
    if isinstance(start_position, bool) or not isinstance(start_position, int):
        raise ValidationError("start_position must be an integer.")
    if not 0 <= start_position < data.lines_count:
        raise ValidationError("Invalid starting position.")

    if _selection_of(room, participant):
        raise ConflictError(ALREADY_SELECTED)
    if _position_taken(room, start_position):
        raise ConflictError(POSITION_TAKEN)

    selection = LadderSelection(
        room_id=room.id,
        participant_id=participant.id,
        start_position=start_position,
    )
    db.session.add(selection)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        # Lost a race: report whichever constraint the winner claimed.
        if _selection_of(room, participant):
            raise ConflictError(ALREADY_SELECTED)
        raise ConflictError(POSITION_TAKEN)
    return selection


def reveal(room, participant_id):
    selection = LadderSelection.query.filter_by(room_id=room.id, participant_id=participant_id).first()
    if not selection:
        raise NotFoundError("This participant has not selected a starting position.")
    if selection.is_revealed:
        raise ConflictError("This result has already been revealed.")

    data = LadderData.query.filter_by(room_id=room.id).first()
    if not data:
        raise NotFoundError("Ladder data not found.")

    result = resolve_path(selection.start_position, data.get_lines(), rows=data.rows)
    selection.result_position = result
    selection.is_revealed = True
    db.session.commit()

    item = LadderItem.query.filter_by(room_id=room.id, position=result).first()
    return {
        "result_position": result,
        "item_text": item.item_text if item else None,
    }


def game_state(room):
    data = LadderData.query.filter_by(room_id=room.id).first()
    selections = LadderSelection.query.filter_by(room_id=room.id)\
        .order_by(LadderSelection.start_position).all()
    items = LadderItem.query.filter_by(room_id=room.id).order_by(LadderItem.position).all()
    return {
        "ladder_data": data.to_dict() if data else None,
        "selections": [s.to_dict() for s in selections],
        "items": [i.to_dict() for i in items],
    }
