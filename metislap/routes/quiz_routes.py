from flask import Blueprint, g, jsonify, request

from metislap.errors import ValidationError
from metislap.models.room import QUIZ
from metislap.routes.decorators import (
    current_participant, instructor_required, json_body, poll_interval,
    required_int, session_instructor,
)
from metislap.services import content_service, quiz_service, room_service

quiz_bp = Blueprint("quiz", __name__)


def _editable_question(question_id):
    question = content_service.get_question(question_id)
    room = room_service.get_owned_room(question.room_id, g.instructor)
    content_service.ensure_editable(room, g.instructor, QUIZ)
    return question


# -------------------
# QUESTIONS
# -------------------
@quiz_bp.route("/questions", methods=["GET"])
def list_questions():
    room = room_service.get_room(required_int(request.args, "room_id"))
    instructor = session_instructor()
    include_answer = bool(instructor and instructor.id == room.instructor_id)
    questions = content_service.list_questions(room)
    return jsonify({
        "status": "ok",
        "questions": [q.to_dict(include_answer=include_answer) for q in questions],
    })


@quiz_bp.route("/questions", methods=["POST"])
@instructor_required
def add_question():
    data = json_body()
    room = room_service.get_owned_room(required_int(data, "room_id"), g.instructor)
    content_service.ensure_editable(room, g.instructor, QUIZ)
    question = content_service.add_question(room, data)
    return jsonify({"status": "ok", "question": question.to_dict()}), 201


@quiz_bp.route("/questions/<int:question_id>", methods=["GET"])
@instructor_required
def get_question(question_id):
    question = content_service.get_question(question_id)
    room_service.get_owned_room(question.room_id, g.instructor)
    return jsonify({"status": "ok", "question": question.to_dict()})


@quiz_bp.route("/questions/<int:question_id>", methods=["PATCH"])
@instructor_required
def update_question(question_id):
    question = content_service.update_question(_editable_question(question_id), json_body())
    return jsonify({"status": "ok", "question": question.to_dict()})


@quiz_bp.route("/questions/<int:question_id>", methods=["DELETE"])
@instructor_required
def delete_question(question_id):
    content_service.delete_question(_editable_question(question_id))
    return jsonify({"status": "ok"})


# -------------------
# PLAY
# -------------------
@quiz_bp.route("/answer", methods=["POST"])
def answer():
    data = json_body()
    participant = current_participant(data)
    question = content_service.get_question(required_int(data, "question_id"))

    answer_time_ms = data.get("answer_time_ms")
    if answer_time_ms is not None:
        if isinstance(answer_time_ms, bool) or not isinstance(answer_time_ms, (int, float)) or answer_time_ms < 0:
            raise ValidationError("answer_time_ms must be a non-negative number.")
        answer_time_ms = int(answer_time_ms)

    result = quiz_service.submit_answer(question, participant, data.get("selected_answer"), answer_time_ms)
    return jsonify({"status": "ok", "answer": result}), 201


@quiz_bp.route("/answers")
@instructor_required
def answers():
    question = content_service.get_question(required_int(request.args, "question_id"))
    room_service.get_owned_room(question.room_id, g.instructor)
    results = quiz_service.question_results(question)
    return jsonify({"status": "ok", **results})


@quiz_bp.route("/status")
def status():
    room = room_service.get_room(required_int(request.args, "room_id"))
    state = quiz_service.status(room)
    return jsonify({"status": "ok", "poll_interval": poll_interval(), **state})


@quiz_bp.route("/progress")
def progress():
    participant = current_participant()
    state = quiz_service.progress(participant.room, participant)
    return jsonify({
        "status": "ok",
        "poll_interval": poll_interval(),
        "room_status": participant.room.status,
        **state,
    })


@quiz_bp.route("/room_progress")
@instructor_required
def room_progress():
    room = room_service.get_owned_room(required_int(request.args, "room_id"), g.instructor)
    return jsonify({"status": "ok", "poll_interval": poll_interval(), **quiz_service.room_progress(room)})
