"""HTTP views for login, signup-token issuing and signup, plus the app factory."""

from __future__ import annotations

import functools
import json
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable

from flask import Flask, Response, jsonify, make_response, request

from .models import Role, SessionStore, SignupTokenStore, User, UserStore
from .security import check_password, hash_password

logger = logging.getLogger(__name__)

SESSION_COOKIE = "sessid"
SESSION_MAX_AGE = 3600
SIGNUP_TOKEN_LIFETIME = timedelta(hours=6)


class _BindError(ValueError):
    """The request body does not match the expected JSON shape."""


def _bind_json(fields: Iterable[str], required: Iterable[str] = ()) -> dict[str, str]:
    try:
        payload = json.loads(request.get_data(as_text=True)) or {}
    except json.JSONDecodeError as exc:
        raise _BindError(str(exc)) from exc
    if not isinstance(payload, dict):
        raise _BindError("request body must be a JSON object")

    values = {key: "" if payload.get(key) is None else payload[key] for key in fields}
    for key, value in values.items():
        if not isinstance(value, str):
            raise _BindError(f"field '{key}' must be a string")
    missing = [key for key in required if not values[key]]
    if missing:
        raise _BindError(
            "\n".join(f"field '{key}' failed on the 'required' check" for key in missing)
        )
    return values


def _session_response(status: int, sess_id: str) -> Response:
    response = make_response("", status)
    response.set_cookie(
        SESSION_COOKIE,
        sess_id,
        max_age=SESSION_MAX_AGE,
        path="/",
        domain=os.environ.get("DOMAIN") or None,
        secure=os.environ.get("IS_HTTPS") == "TRUE",
        httponly=True,
    )
    return response


def _error(status: int, message: str) -> tuple[Response, int]:
    return jsonify({"error": message}), status


def require_roles(
    session_store: SessionStore, allowed_roles: Iterable[Role] | None
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Let only sessions with one of ``allowed_roles`` reach the view (401/403 otherwise)."""
    if allowed_roles is None:
        raise ValueError("allowed_roles must not be None")
    allowed = frozenset(Role(role) for role in allowed_roles)

    def decorator(view: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(view)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            sess_id = request.cookies.get(SESSION_COOKIE)
            if sess_id is None:
                return "", 401
            try:
                session = session_store.get_session(sess_id)
            except Exception:
                return "", 401
            if session.role not in allowed:
                return "", 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def login_view(user_store: UserStore, session_store: SessionStore) -> Callable[[], Any]:
    """Build the view that checks credentials and opens a session."""

    def login() -> Any:
        try:
            body = _bind_json(("email", "pwd"))
        except _BindError:
            return "", 400
        try:
            user = user_store.get_user_by_email(body["email"])
        except Exception as exc:
            logger.info("Error getting user: %s", exc)
            return "", 401
        if not check_password(user.pwd, body["pwd"]):
            return "", 401
        session = session_store.create_session(user.id, user.role)
        return _session_response(200, session.sess_id)

    return login


def create_signup_token_view(token_store: SignupTokenStore) -> Callable[[], Any]:
    """Build the view that issues a signup token for an e-mail or phone."""

    def create_signup_token() -> Any:
        try:
            body = _bind_json(("email", "phone", "role"), required=("role",))
            try:
                role = Role(body["role"])
            except ValueError as exc:
                raise _BindError(f"invalid role '{body['role']}'") from exc
        except _BindError as exc:
            return _error(400, str(exc))

        if not body["email"] and not body["phone"]:
            return _error(400, "Please provide either email, or phone")
        try:
            tok = token_store.create_signup_token(
                body["phone"], body["email"], role, SIGNUP_TOKEN_LIFETIME
            )
        except Exception as exc:
            logger.error("Error creating signup token: %s", exc)
            return _error(500, "Internal error")
        return jsonify({"tokStr": tok.tok_str}), 201

    return create_signup_token


def signup_view(
    user_store: UserStore, token_store: SignupTokenStore, session_store: SessionStore
) -> Callable[[], Any]:
    """Build the view that turns a signup token into an account and a session."""

    def signup() -> Any:
        try:
            body = _bind_json(
                ("name", "pwd", "tokStr", "email", "phone"),
                required=("name", "pwd", "tokStr"),
            )
        except _BindError as exc:
            return _error(400, str(exc))
        try:
            tok = token_store.get_signup_token(body["tokStr"])
        except Exception:
            return "", 401
        try:
            hashed = hash_password(body["pwd"])
        except ValueError as exc:
            logger.error("Error occurred while hashing pwd: %s", exc)
            return _error(500, "Internal error")

        email = tok.email or body["email"]
        if not email:
            return _error(400, "Email not provided.")
        phone = tok.phone or body["phone"]
        if not phone:
            return _error(400, "Phone not provided")

        user = User(
            name=body["name"],
            email=email,
            phone=phone,
            pwd=hashed,
            role=tok.role,
            created_at=datetime.now(timezone.utc),
        )
        try:
            created = user_store.create_user(user)
        except Exception as exc:
            logger.error("Error creating user: %s", exc)
            return _error(500, "Internal error")
        try:
            session = session_store.create_session(created.id, created.role)
        except Exception as exc:
            logger.error("Error creating session: %s", exc)
            return _error(500, "Internal error")
        return _session_response(201, session.sess_id)

    return signup


def create_app(
    user_store: UserStore,
    session_store: SessionStore,
    signup_token_store: SignupTokenStore,
) -> Flask:
    """Assemble the Flask application with all authentication routes."""
    app = Flask(__name__)
    app.add_url_rule(
        "/login", "login", login_view(user_store, session_store), methods=["POST"]
    )
    app.add_url_rule(
        "/signup-token",
        "signup_token",
        require_roles(session_store, {Role.SYSADMIN})(
            create_signup_token_view(signup_token_store)
        ),
        methods=["POST"],
    )
    app.add_url_rule(
        "/signup",
        "signup",
        signup_view(user_store, signup_token_store, session_store),
        methods=["POST"],
    )
    return app