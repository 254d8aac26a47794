# Overview: Request decorators for API routes.

from functools import wraps

from flask import current_app, jsonify

from .errors import EngineError


def api_errors(action: str):
    """
    Convert service errors into JSON responses.

    EngineError -> {"error", "error_type", "details"} with its own status.
    Anything else is logged with a traceback and answered with a plain 500.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except EngineError as e:
                return jsonify(e.to_dict()), e.status_code
            except Exception:
                current_app.logger.exception("Failed to %s", action)
                return jsonify({"error": "Internal server error", "error_type": "InternalError", "details": {}}), 500
        return decorated_function
    return decorator
