from types import SimpleNamespace

import pytest
from bson import ObjectId

from cogniflight.models import Role
from cogniflight.security import check_password
from cogniflight.server import bootstrap_admin, main
from cogniflight.stores import MongoUserStore


class FakeCollection:
    def __init__(self, documents=None):
        self.documents = list(documents or [])

    def find_one(self, query):
        for document in self.documents:
            if all(document.get(key) == value for key, value in query.items()):
                return document
        return None

    def insert_one(self, document):
        stored = dict(document)
        stored.setdefault("_id", ObjectId())
        self.documents.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])


def _environ():
    password = "password"
    return {
        "BOOTSTRAP_USERNAME": "admin",
        "BOOTSTRAP_EMAIL": "admin@example.com",
        "BOOTSTRAP_PHONE": "000",
        "BOOTSTRAP_PWD": password,
    }


def test_bootstrap_creates_sysadmin_when_empty():
    collection = FakeCollection()
    created = bootstrap_admin(MongoUserStore(collection), _environ())
    assert created.role == Role.SYSADMIN
    assert created.name == "admin"
    assert created.email == "admin@example.com"
    password = "password"
    assert check_password(created.pwd, password)
    assert len(collection.documents) == 1
    stored = collection.documents[0]
    assert stored["role"] == "sysadmin"
    assert stored["_id"] == created.id


def test_bootstrap_skips_when_users_exist():
    collection = FakeCollection([{"_id": ObjectId(), "email": "x@example.com"}])
    assert bootstrap_admin(MongoUserStore(collection), _environ()) is None
    assert len(collection.documents) == 1


@pytest.mark.parametrize(
    "missing",
    ["BOOTSTRAP_USERNAME", "BOOTSTRAP_EMAIL", "BOOTSTRAP_PHONE", "BOOTSTRAP_PWD"],
)
def test_bootstrap_skips_when_setting_missing(missing):
    environ = _environ()
    del environ[missing]
    collection = FakeCollection()
    assert bootstrap_admin(MongoUserStore(collection), environ) is None
    assert collection.documents == []


def test_bootstrap_rejects_overlong_password():
    environ = _environ()
    environ["BOOTSTRAP_PWD"] = "password" * 10
    collection = FakeCollection()
    with pytest.raises(ValueError):
        bootstrap_admin(MongoUserStore(collection), environ)
    assert collection.documents == []


def test_main_help_exits_cleanly():
    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0


def test_main_rejects_unknown_argument():
    with pytest.raises(SystemExit) as exc_info:
        main(["--bogus"])
    assert exc_info.value.code == 2