import hmac
from functools import wraps
from flask import request, jsonify, current_app

def require_api_key(fn):
    """Mutating markup routes need the X-API-KEY header to match API_KEY."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        expected = current_app.config.get("API_KEY")
        provided = request.headers.get("X-API-KEY") or ""
        if not expected or not hmac.compare_digest(provided, expected):
            return jsonify({"error": "Unauthorized"}), 401
        return fn(*args, **kwargs)
    return wrapper
