from flask import Blueprint, g, jsonify, session

from metislap.routes.decorators import instructor_required, json_body
from metislap.services.auth_service import authenticate_instructor, register_instructor

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
def register():
    instructor = register_instructor(json_body())
    return jsonify({
        "status": "ok",
        "msg": "Registration received. An administrator will review your account.",
        "instructor": instructor.to_dict(),
    }), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = json_body()
    instructor = authenticate_instructor(data.get("email"), data.get("password"))
    session.clear()
    session["instructor_id"] = instructor.id
    return jsonify({"status": "ok", "instructor": instructor.to_dict()})


@auth_bp.route("/logout", methods=["POST"])
def logout():
    session.pop("instructor_id", None)
    return jsonify({"status": "ok"})


@auth_bp.route("/me")
@instructor_required
def me():
    return jsonify({"status": "ok", "instructor": g.instructor.to_dict()})
