from flask import Blueprint, g, jsonify, request

from metislap.errors import ForbiddenError
from metislap.models.room import DRAWING
from metislap.routes.decorators import (
    current_participant, instructor_required, json_body, poll_interval,
    required_int, session_instructor,
)
from metislap.services import content_service, drawing_service, room_service

drawing_bp = Blueprint("drawing", __name__)


def _editable_word(word_id):
    word = content_service.get_word(word_id)
    room = room_service.get_owned_room(word.room_id, g.instructor)
    content_service.ensure_editable(room, g.instructor, DRAWING)
    return word


def _is_owner(room):
    instructor = session_instructor()
    return bool(instructor and instructor.id == room.instructor_id)


# -------------------
# WORDS
# -------------------
@drawing_bp.route("/words", methods=["GET"])
def list_words():
    room = room_service.get_room(required_int(request.args, "room_id"))
    if not _is_owner(room):
        raise ForbiddenError("Only the room owner can see the word list.")
    words = content_service.list_words(room)
    return jsonify({"status": "ok", "words": [w.to_dict() for w in words]})


@drawing_bp.route("/words", methods=["POST"])
@instructor_required
def add_word():
    data = json_body()
    room = room_service.get_owned_room(required_int(data, "room_id"), g.instructor)
    content_service.ensure_editable(room, g.instructor, DRAWING)
    word = content_service.add_word(room, data)
    return jsonify({"status": "ok", "word": word.to_dict()}), 201


@drawing_bp.route("/words/<int:word_id>", methods=["PATCH"])
@instructor_required
def update_word(word_id):
    word = content_service.update_word(_editable_word(word_id), json_body())
    return jsonify({"status": "ok", "word": word.to_dict()})


@drawing_bp.route("/words/<int:word_id>", methods=["DELETE"])
@instructor_required
def delete_word(word_id):
    content_service.delete_word(_editable_word(word_id))
    return jsonify({"status": "ok"})


# -------------------
# ROUNDS
# -------------------
@drawing_bp.route("/round")
def round_state():
    room = room_service.get_room(required_int(request.args, "room_id"))
    viewer = None
    if request.args.get("participant_token"):
        viewer = current_participant()
    state = drawing_service.round_state(room, viewer=viewer, reveal_word=_is_owner(room))
    return jsonify({"status": "ok", "poll_interval": poll_interval(), **state})


@drawing_bp.route("/draw", methods=["GET"])
def get_drawing():
    drawing_round = drawing_service.get_round(required_int(request.args, "round_id"))
    return jsonify({
        "status": "ok",
        "poll_interval": poll_interval(),
        "round_id": drawing_round.id,
        "round_status": drawing_round.status,
        "drawing_data": drawing_round.drawing_data,
    })


@drawing_bp.route("/draw", methods=["POST"])
def submit_drawing():
    data = json_body()
    participant = current_participant(data)
    drawing_round = drawing_service.get_round(required_int(data, "round_id"))
    drawing_service.submit_snapshot(drawing_round, participant, data.get("drawing_data"))
    return jsonify({"status": "ok"})


@drawing_bp.route("/guess", methods=["GET"])
def list_guesses():
    drawing_round = drawing_service.get_round(required_int(request.args, "round_id"))
    return jsonify({"status": "ok", "poll_interval": poll_interval(), **drawing_service.round_guesses(drawing_round)})


@drawing_bp.route("/guess", methods=["POST"])
def guess():
    data = json_body()
    participant = current_participant(data)
    drawing_round = drawing_service.get_round(required_int(data, "round_id"))
    result = drawing_service.submit_guess(drawing_round, participant, data.get("guess_text"))
    return jsonify({"status": "ok", **result}), 201
