from __future__ import annotations

from flask import Flask

from ..common.http import admin_required, json_body, make_bearer_required, result_response
from ..container import Container


def register(app: Flask, container: Container) -> None:
    bearer_required = make_bearer_required(container.tokens)
    auth = container.auth_service

    @app.route("/api/auth/create-default-admin", methods=["POST"], endpoint="create_default_admin")
    def create_default_admin():
        return result_response(auth.create_default_admin(), lambda user: {"user": user.to_dict()})

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        body = json_body()
        return result_response(auth.login(body.get("email"), body.get("password")), lambda p: p.to_dict())

    @app.route("/api/auth/create-user", methods=["POST"], endpoint="create_user")
    def create_user():
        body = json_body()
        result = auth.create_user(body.get("email"), body.get("password"), body.get("name"))
        return result_response(result, lambda user: {"user": user.to_dict()})

    @app.route("/api/auth/forgot-password-otp", methods=["POST"], endpoint="forgot_password_otp")
    def forgot_password_otp():
        body = json_body()
        return result_response(auth.request_password_reset(body.get("email"), body.get("length")))

    @app.route("/api/auth/password-reset", methods=["POST"], endpoint="password_reset")
    def password_reset():
        body = json_body()
        return result_response(auth.reset_password(body.get("email"), body.get("otp"), body.get("password")))

    @app.route("/api/users/all", methods=["GET"], endpoint="list_users")
    @bearer_required
    @admin_required
    def list_users():
        return result_response(container.user_service.list_users(), lambda users: [u.to_dict() for u in users])
