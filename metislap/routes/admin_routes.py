from flask import Blueprint, jsonify, request, session

from metislap.routes.decorators import admin_required, json_body
from metislap.services.auth_service import authenticate_admin, list_instructors, set_approval
from metislap.services.log_service import recent_events
from metislap.services.utils import parse_int

admin_bp = Blueprint("admin", __name__)


# -------------------
# LOGIN
# -------------------
@admin_bp.route("/login", methods=["POST"])
def login():
    data = json_body()
    email = authenticate_admin(data.get("email"), data.get("password"))
    session["is_admin"] = True
    return jsonify({"status": "ok", "admin": {"email": email}})


@admin_bp.route("/logout", methods=["POST"])
def logout():
    session.pop("is_admin", None)
    return jsonify({"status": "ok"})


# -------------------
# INSTRUCTOR APPROVAL
# -------------------
@admin_bp.route("/instructors")
@admin_required
def instructors():
    rows = list_instructors(request.args.get("status"))
    return jsonify({"status": "ok", "instructors": [i.to_dict() for i in rows]})


@admin_bp.route("/instructors/<int:instructor_id>/approve", methods=["POST"])
@admin_required
def approve(instructor_id):
    data = json_body()
    instructor = set_approval(instructor_id, data.get("status"), data.get("rejection_reason"))
    return jsonify({"status": "ok", "instructor": instructor.to_dict()})


# -------------------
# SYSTEM LOG
# -------------------
@admin_bp.route("/logs")
@admin_required
def logs():
    limit = parse_int(request.args.get("limit", 100), "limit")
    limit = max(1, min(limit, 1000))
    entries = recent_events(limit)
    return jsonify({
        "status": "ok",
        "logs": [
            {
                "id": e.id,
                "source": e.source,
                "message": e.message,
                "created_at": e.created_at.isoformat() if e.created_at else None,
            }
            for e in entries
        ],
    })
