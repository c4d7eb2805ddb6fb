"""MongoDB-backed implementations of the store interfaces."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from bson import ObjectId
from pymongo.collection import Collection

from .models import (
    Role,
    Session,
    SessionNotFoundError,
    SignupToken,
    SignupTokenNotFoundError,
    User,
    UserNotFoundError,
)
from .security import generate_token


@dataclass(frozen=True)
class MongoUserStore:
    """Users kept in a MongoDB collection."""

    collection: Collection

    def get_user_by_email(self, email: str) -> User:
        document = self.collection.find_one({"email": email})
        if document is None:
            raise UserNotFoundError()
        return User.from_document(document)

    def create_user(self, user: User) -> User:
        result = self.collection.insert_one(user.to_document())
        return replace(user, id=result.inserted_id)


@dataclass(frozen=True)
class MongoSessionStore:
    """Sessions kept in a MongoDB collection."""

    collection: Collection

    def get_session(self, sess_id: str) -> Session:
        document = self.collection.find_one({"sess_id": sess_id})
        if document is None:
            raise SessionNotFoundError()
        return Session.from_document(document)

    def create_session(self, user_id: ObjectId, role: Role) -> Session:
        session = Session(
            sess_id=generate_token(),
            user_id=user_id,
            role=Role(role),
            created_at=datetime.now(timezone.utc),
        )
        result = self.collection.insert_one(session.to_document())
        return replace(session, id=result.inserted_id)


@dataclass(frozen=True)
class MongoSignupTokenStore:
    """Signup tokens kept in a MongoDB collection."""

    collection: Collection

    def get_signup_token(self, tok_str: str) -> SignupToken:
        document = self.collection.find_one({"tokStr": tok_str})
        if document is None:
            raise SignupTokenNotFoundError()
        return SignupToken.from_document(document)

    def create_signup_token(
        self, phone: str, email: str, role: Role, expiry: timedelta
    ) -> SignupToken:
        now = datetime.now(timezone.utc)
        tok = SignupToken(
            tok_str=generate_token(),
            email=email,
            phone=phone,
            role=Role(role),
            created_at=now,
            expires=now + expiry,
        )
        result = self.collection.insert_one(tok.to_document())
        return replace(tok, id=result.inserted_id)