from __future__ import annotations

from flask import Flask

from ..common.responses import json_body, ok
from ..container import Container
from ..users.serializers import user_to_dict
from .session import current_caller, forget, login_required, remember


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        body = json_body()
        caller = container.auth_service.authenticate(body.get("email", ""), body.get("password", ""))
        remember(caller)
        user = container.auth_service.current_user(caller)
        return ok(user_to_dict(user))

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        forget()
        return ok(message="Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me():
        user = container.auth_service.current_user(current_caller())
        return ok(user_to_dict(user))
