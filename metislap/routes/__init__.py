from .auth_routes import auth_bp
from .admin_routes import admin_bp
from .room_routes import room_bp
from .quiz_routes import quiz_bp
from .drawing_routes import drawing_bp
from .ladder_routes import ladder_bp

def register_routes(app):
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_blueprint(room_bp, url_prefix="/api")
    app.register_blueprint(quiz_bp, url_prefix="/api/quiz")
    app.register_blueprint(drawing_bp, url_prefix="/api/drawing")
    app.register_blueprint(ladder_bp, url_prefix="/api/ladder")
