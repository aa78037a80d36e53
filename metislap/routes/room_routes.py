from flask import Blueprint, g, jsonify, request

from metislap.routes.decorators import current_participant, instructor_required, json_body
from metislap.services import room_service
from metislap.services.utils import parse_int

room_bp = Blueprint("rooms", __name__)


# -------------------
# INSTRUCTOR: ROOMS
# -------------------
@room_bp.route("/rooms", methods=["GET"])
@instructor_required
def list_rooms():
    rooms = room_service.list_rooms(g.instructor, request.args.get("status"))
    return jsonify({"status": "ok", "rooms": [room_service.room_summary(r) for r in rooms]})


@room_bp.route("/rooms", methods=["POST"])
@instructor_required
def create_room():
    data = json_body()
    room = room_service.create_room(
        g.instructor,
        data.get("room_name"),
        data.get("game_type"),
        data.get("max_participants"),
    )
    return jsonify({"status": "ok", "room": room_service.room_summary(room)}), 201


@room_bp.route("/rooms/<int:room_id>", methods=["GET"])
@instructor_required
def get_room(room_id):
    room = room_service.get_owned_room(room_id, g.instructor)
    return jsonify({"status": "ok", "room": room_service.room_summary(room)})


@room_bp.route("/rooms/<int:room_id>", methods=["PATCH"])
@instructor_required
def update_room(room_id):
    room = room_service.get_owned_room(room_id, g.instructor)
    room = room_service.update_room(room, json_body())
    return jsonify({"status": "ok", "room": room_service.room_summary(room)})


@room_bp.route("/rooms/<int:room_id>", methods=["DELETE"])
@instructor_required
def delete_room(room_id):
    room = room_service.get_owned_room(room_id, g.instructor)
    room_service.delete_room(room)
    return jsonify({"status": "ok"})


@room_bp.route("/rooms/<int:room_id>/participants")
@instructor_required
def participants(room_id):
    room = room_service.get_owned_room(room_id, g.instructor)
    rows = room_service.list_participants(room)
    return jsonify({
        "status": "ok",
        "participants": [p.to_dict() for p in rows],
        "active_count": sum(1 for p in rows if p.is_active),
    })


# -------------------
# INSTRUCTOR: LIFECYCLE
# -------------------
@room_bp.route("/rooms/<int:room_id>/start", methods=["POST"])
@instructor_required
def start(room_id):
    room = room_service.get_owned_room(room_id, g.instructor)
    data = json_body()
    options = {}
    if data.get("drawer_id") is not None:
        options["drawer_id"] = parse_int(data.get("drawer_id"), "drawer_id")
    room = room_service.start_game(room, **options)
    return jsonify({"status": "ok", "room": room.to_dict()})


@room_bp.route("/rooms/<int:room_id>/advance", methods=["POST"])
@instructor_required
def advance(room_id):
    room = room_service.get_owned_room(room_id, g.instructor)
    data = json_body()
    options = {}
    if data.get("drawer_id") is not None:
        options["drawer_id"] = parse_int(data.get("drawer_id"), "drawer_id")
    room = room_service.advance_game(room, **options)
    return jsonify({"status": "ok", "room": room.to_dict()})


@room_bp.route("/rooms/<int:room_id>/end", methods=["POST"])
@instructor_required
def end(room_id):
    room = room_service.get_owned_room(room_id, g.instructor)
    room = room_service.end_game(room)
    return jsonify({"status": "ok", "room": room.to_dict()})


@room_bp.route("/rooms/<int:room_id>/reset", methods=["POST"])
@instructor_required
def reset(room_id):
    room = room_service.get_owned_room(room_id, g.instructor)
    room = room_service.reset_room(room)
    return jsonify({"status": "ok", "room": room.to_dict()})


# -------------------
# PARTICIPANTS
# -------------------
@room_bp.route("/join", methods=["GET"])
def lookup():
    include_finished = request.args.get("include_finished", "").lower() in ("1", "true", "yes")
    room = room_service.find_room_by_code(request.args.get("code"), include_finished=include_finished)
    return jsonify({"status": "ok", "room": room_service.room_summary(room)})


@room_bp.route("/join", methods=["POST"])
def join():
    data = json_body()
    participant, room = room_service.join_room(data.get("room_code"), data.get("nickname"))
    payload = participant.to_dict()
    payload["participant_token"] = participant.token
    return jsonify({
        "status": "ok",
        "participant": payload,
        "room": room_service.room_summary(room),
    }), 201


@room_bp.route("/leave", methods=["POST"])
def leave():
    participant = current_participant(json_body())
    room_service.leave_room(participant)
    return jsonify({"status": "ok"})
