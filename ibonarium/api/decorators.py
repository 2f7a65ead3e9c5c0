from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from flask import jsonify

from ibonarium.utils.errors import StoreClosedError


def handle_store_closed(func: Callable[..., Any]):
    """
    Decorator: convert StoreClosedError into HTTP 503.

    Contract:
    - Only catches StoreClosedError (lab already shut down)
    - Returns JSON {error}
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StoreClosedError:
            return jsonify({"error": "lab is shut down"}), 503

    return wrapper
