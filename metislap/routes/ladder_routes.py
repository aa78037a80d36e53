from flask import Blueprint, g, jsonify, request

from metislap.models.room import LADDER
from metislap.routes.decorators import (
    current_participant, instructor_required, json_body, poll_interval, required_int,
)
from metislap.services import content_service, ladder_service, room_service

ladder_bp = Blueprint("ladder", __name__)


def _editable_item(item_id):
    item = content_service.get_item(item_id)
    room = room_service.get_owned_room(item.room_id, g.instructor)
    content_service.ensure_editable(room, g.instructor, LADDER)
    return item


# -------------------
# ITEMS
# -------------------
@ladder_bp.route("/items", methods=["GET"])
def list_items():
    room = room_service.get_room(required_int(request.args, "room_id"))
    items = content_service.list_items(room)
    return jsonify({"status": "ok", "items": [i.to_dict() for i in items]})


@ladder_bp.route("/items", methods=["POST"])
@instructor_required
def add_item():
    data = json_body()
    room = room_service.get_owned_room(required_int(data, "room_id"), g.instructor)
    content_service.ensure_editable(room, g.instructor, LADDER)
    item = content_service.add_item(room, data)
    return jsonify({"status": "ok", "item": item.to_dict()}), 201


@ladder_bp.route("/items/<int:item_id>", methods=["PATCH"])
@instructor_required
def update_item(item_id):
    item = content_service.update_item(_editable_item(item_id), json_body())
    return jsonify({"status": "ok", "item": item.to_dict()})


@ladder_bp.route("/items/<int:item_id>", methods=["DELETE"])
@instructor_required
def delete_item(item_id):
    content_service.delete_item(_editable_item(item_id))
    return jsonify({"status": "ok"})


# -------------------
# GAME
# -------------------
@ladder_bp.route("/game")
def game():
    room = room_service.get_room(required_int(request.args, "room_id"))
    state = ladder_service.game_state(room)
    return jsonify({
        "status": "ok",
        "poll_interval": poll_interval(),
        "room_status": room.status,
        **state,
    })


@ladder_bp.route("/select", methods=["POST"])
def select():
    data = json_body()
    participant = current_participant(data)
    selection = ladder_service.select_start(participant.room, participant, data.get("start_position"))
    return jsonify({"status": "ok", "selection": selection.to_dict()}), 201


@ladder_bp.route("/reveal", methods=["POST"])
@instructor_required
def reveal():
    data = json_body()
    room = room_service.get_owned_room(required_int(data, "room_id"), g.instructor)
    result = ladder_service.reveal(room, required_int(data, "participant_id"))
    return jsonify({"status": "ok", **result})
