"""Process entry point: connects to MongoDB, bootstraps an admin and serves HTTP."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import threading
import time
from socketserver import ThreadingMixIn
from typing import Mapping
from wsgiref.simple_server import WSGIServer, make_server

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .handlers import create_app
from .models import Role, User
from .security import hash_password
from .stores import MongoSessionStore, MongoSignupTokenStore, MongoUserStore

logger = logging.getLogger(__name__)

DATABASE_NAME = "cogniflight"
LISTEN_PORT = 8080
_PING_RETRY_SECONDS = 2
_SHUTDOWN_TIMEOUT_SECONDS = 5


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


def bootstrap_admin(
    user_store: MongoUserStore, environ: Mapping[str, str]
) -> User | None:
    """Create a sysadmin from BOOTSTRAP_* settings when no users exist yet.

    Returns the created user, or None when users already exist or a setting
    is missing.
    """
    if user_store.collection.find_one({}) is not None:
        return None

    logger.info("No users in the database. Checking for bootstrap credentials...")
    name = environ.get("BOOTSTRAP_USERNAME", "")
    email = environ.get("BOOTSTRAP_EMAIL", "")
    phone = environ.get("BOOTSTRAP_PHONE", "")
    plain = environ.get("BOOTSTRAP_PWD", "")

    hashed = hash_password(plain)
    if not (name and email and phone and plain):
        return None

    created = user_store.create_user(
        User(name=name, role=Role.SYSADMIN, email=email, phone=phone, pwd=hashed)
    )
    logger.info("Bootstrap user created successfully")
    return created


def _bootstrap_when_ready(
    client: MongoClient, user_store: MongoUserStore, environ: Mapping[str, str]
) -> None:
    while True:
        try:
            client.admin.command("ping")
        except PyMongoError as exc:
            logger.warning("[MongoDB] Not reachable: %s", exc)
            time.sleep(_PING_RETRY_SECONDS)
            continue
        logger.info("[MongoDB] Connection established!")
        break
    try:
        bootstrap_admin(user_store, environ)
    except Exception as exc:
        logger.error("Failed to bootstrap admin user: %s", exc)


def _debug_mode(environ: Mapping[str, str]) -> bool:
    return environ.get("APP_MODE", "debug") == "debug"


def main(argv: list[str] | None = None) -> None:
    """Run the authentication API server until interrupted."""
    parser = argparse.ArgumentParser(
        prog="cogniflight",
        description="Serve the login and signup API on port 8080.",
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    environ = os.environ

    try:
        client: MongoClient = MongoClient(
            environ.get("MONGO_URI", ""), serverSelectionTimeoutMS=10_000
        )
    except (PyMongoError, ValueError, TypeError) as exc:
        raise SystemExit(f"MongoDB init failed: {exc}") from exc

    database = client[DATABASE_NAME]
    user_store = MongoUserStore(database["users"])
    session_store = MongoSessionStore(database["sessions"])
    token_store = MongoSignupTokenStore(database["signup_tokens"])

    threading.Thread(
        target=_bootstrap_when_ready,
        args=(client, user_store, environ),
        daemon=True,
    ).start()

    app = create_app(user_store, session_store, token_store)
    try:
        server = make_server(
            "", LISTEN_PORT, app, server_class=_ThreadingWSGIServer
        )
    except OSError as exc:
        raise SystemExit(f"Server error: {exc}") from exc

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())

    serving = threading.Thread(target=server.serve_forever, daemon=True)
    serving.start()
    debug = _debug_mode(environ)
    if debug:
        print(f"Server running on http://localhost:{LISTEN_PORT}")

    while not stop.wait(0.5):
        pass

    if debug:
        print("Shutting down server...")
    server.shutdown()
    serving.join(timeout=_SHUTDOWN_TIMEOUT_SECONDS)
    server.server_close()
    client.close()
    if debug:
        print("Server gracefully stopped.")