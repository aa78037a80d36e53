import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import Config
from extensions import db
from metislap.errors import GameError
from metislap.logging_config import configure_logging
from metislap.routes import register_routes

logger = logging.getLogger("metislap.app")

HTTP_KINDS = {
    400: "validation",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
}


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    register_routes(app)
    _register_error_handlers(app)

    with app.app_context():
        from metislap import models  # noqa: F401 - register tables
        db.create_all()

    return app


def _register_error_handlers(app):
    @app.errorhandler(GameError)
    def handle_game_error(err):
        db.session.rollback()
        logger.info("%s: %s", err.kind, err.msg)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        db.session.rollback()
        return jsonify({
            "status": "error",
            "kind": HTTP_KINDS.get(err.code, "error"),
            "msg": err.description,
        }), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        db.session.rollback()
        logger.exception("Unhandled error")
        return jsonify({"status": "error", "kind": "internal", "msg": "Internal server error."}), 500


if __name__ == "__main__":
    app = create_app()
    print("METISLAP READY ON 0.0.0.0:5000")
    app.run(host="0.0.0.0", port=5000, debug=True)
