"""Domain records, their MongoDB document mapping, and the store interfaces."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Mapping, Protocol, runtime_checkable

from bson import ObjectId

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def _as_utc(value: datetime | None) -> datetime:
    if value is None:
        return ZERO_TIME
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _with_id(record_id: ObjectId | None, fields: dict[str, Any]) -> dict[str, Any]:
    return ({"_id": record_id} if record_id is not None else {}) | fields


class Role(str, Enum):
    """Roles a user or session can carry."""

    PILOT = "pilot"
    ATC = "atc"
    SYSADMIN = "sysadmin"

    def __str__(self) -> str:
        return self.value


@dataclass
class PilotInfo:
    """Biometric data kept for pilots."""

    face_embeddings: list[list[float]] = field(default_factory=list)
    baseline: dict[str, Any] = field(default_factory=dict)

    def to_document(self) -> dict[str, Any]:
        return {
            "faceEmbeddings": [list(row) for row in self.face_embeddings],
            "baseline": dict(self.baseline),
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> PilotInfo:
        return cls(
            [[float(v) for v in row] for row in document.get("faceEmbeddings") or []],
            dict(document.get("baseline") or {}),
        )


@dataclass
class User:
    """A registered user account."""

    name: str
    email: str
    phone: str
    pwd: str
    role: Role
    id: ObjectId | None = None
    profile_image: ObjectId | None = None
    pilot_info: PilotInfo | None = None
    created_at: datetime = ZERO_TIME

    def to_document(self) -> dict[str, Any]:
        document = _with_id(
            self.id,
            {
                "name": self.name,
                "email": self.email,
                "phone": self.phone,
                "pwd": self.pwd,
                "role": Role(self.role).value,
            },
        )
        if self.profile_image is not None:
            document["profileImage"] = self.profile_image
        if self.pilot_info is not None:
            document["pilotInfo"] = self.pilot_info.to_document()
        document["createdAt"] = self.created_at
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> User:
        pilot_info = document.get("pilotInfo")
        return cls(
            id=document.get("_id"),
            name=document.get("name", ""),
            email=document.get("email", ""),
            phone=document.get("phone", ""),
            pwd=document.get("pwd", ""),
            role=Role(document.get("role")),
            profile_image=document.get("profileImage"),
            pilot_info=None if pilot_info is None else PilotInfo.from_document(pilot_info),
            created_at=_as_utc(document.get("createdAt")),
        )


@dataclass
class Session:
    """A login session identified by an opaque session id."""

    sess_id: str
    user_id: ObjectId
    role: Role
    created_at: datetime
    id: ObjectId | None = None

    def to_document(self) -> dict[str, Any]:
        return _with_id(
            self.id,
            {
                "sess_id": self.sess_id,
                "userID": self.user_id,
                "role": Role(self.role).value,
                "createdAt": self.created_at,
            },
        )

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Session:
        return cls(
            id=document.get("_id"),
            sess_id=document.get("sess_id", ""),
            user_id=document.get("userID"),
            role=Role(document.get("role")),
            created_at=_as_utc(document.get("createdAt")),
        )


@dataclass
class SignupToken:
    """An invitation to create an account with a given role."""

    tok_str: str
    email: str
    phone: str
    role: Role
    created_at: datetime
    expires: datetime
    id: ObjectId | None = None

    def to_document(self) -> dict[str, Any]:
        return _with_id(
            self.id,
            {
                "tokStr": self.tok_str,
                "email": self.email,
                "phone": self.phone,
                "role": Role(self.role).value,
                "createdAt": self.created_at,
                "expires": self.expires,
            },
        )

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> SignupToken:
        return cls(
            id=document.get("_id"),
            tok_str=document.get("tokStr", ""),
            email=document.get("email", ""),
            phone=document.get("phone", ""),
            role=Role(document.get("role")),
            created_at=_as_utc(document.get("createdAt")),
            expires=_as_utc(document.get("expires")),
        )


class _NotFoundError(LookupError):
    default_message = "Record does not exist"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class UserNotFoundError(_NotFoundError):
    default_message = "User does not exist"


class SessionNotFoundError(_NotFoundError):
    default_message = "Session does not exist"


class SignupTokenNotFoundError(_NotFoundError):
    default_message = "Signup token does not exist"


@runtime_checkable
class UserStore(Protocol):
    def get_user_by_email(self, email: str) -> User: ...

    def create_user(self, user: User) -> User: ...


@runtime_checkable
class SessionStore(Protocol):
    def create_session(self, user_id: ObjectId, role: Role) -> Session: ...

    def get_session(self, sess_id: str) -> Session: ...


@runtime_checkable
class SignupTokenStore(Protocol):
    def create_signup_token(
        self, phone: str, email: str, role: Role, expiry: timedelta
    ) -> SignupToken: ...

    def get_signup_token(self, tok_str: str) -> SignupToken: ...