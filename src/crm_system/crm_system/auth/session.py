from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import current_app, g, session

from ..core.exceptions import AuthenticationError
from .gate import Caller


def remember(caller: Caller) -> None:
    session.clear()
    session.permanent = True
    session["user_id"] = caller.user_id


def forget() -> None:
    session.clear()


def current_caller() -> Optional[Caller]:
    """Caller for this request, None when anonymous.

    Role and name are re-read from the user store once per request, so a deleted,
    suspended or demoted user loses access on their next request.
    """
    if "caller" not in g:
        g.caller = _load_caller()
    return g.caller


def _load_caller() -> Optional[Caller]:
    if "user_id" not in session:
        return None
    try:
        user_id = int(session["user_id"])
    except (TypeError, ValueError):
        session.clear()
        return None

    container = current_app.extensions["crm_container"]
    caller = container.auth_service.session_caller(user_id)
    if caller is None:
        session.clear()
    return caller


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_caller() is None:
            raise AuthenticationError("Not authorized to access this route")
        return view(*args, **kwargs)

    return wrapper
