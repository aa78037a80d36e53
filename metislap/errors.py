class GameError(Exception):
    """Base error returned to clients as a structured failure."""

    kind = "error"
    status_code = 400

    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg

    def to_dict(self):
        return {"status": "error", "kind": self.kind, "msg": self.msg}


class ValidationError(GameError):
    kind = "validation"
    status_code = 400


class AuthError(GameError):
    kind = "unauthorized"
    status_code = 401


class ForbiddenError(GameError):
    kind = "forbidden"
    status_code = 403


class NotFoundError(GameError):
    kind = "not_found"
    status_code = 404


class ConflictError(GameError):
    kind = "conflict"
    status_code = 409
