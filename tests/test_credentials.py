import pytest

from casetrack.exceptions import ConflictError, InvalidCredentials, NotFound, SelfRoleChange, ValidationError
from casetrack.models.log import Log
from casetrack.models.users import User
from casetrack.services import credentials

ROUNDS = 4


def test_first_user_is_admin_then_users(db):
    first = credentials.register(db, "alice", "secret1", rounds=ROUNDS)
    second = credentials.register(db, "bob", "secret2", rounds=ROUNDS)
    third = credentials.register(db, "carol", "secret3", rounds=ROUNDS)

    assert first.role == "admin"
    assert second.role == "user"
    assert third.role == "user"


def test_password_is_hashed(db):
    user = credentials.register(db, "alice", "secret1", rounds=ROUNDS)
    assert user.password_hash != "secret1"
    assert user.password_hash.startswith("$2")


def test_explicit_role_overrides_default(db):
    credentials.register(db, "alice", "secret1", rounds=ROUNDS)
    user = credentials.register(db, "bob", "secret2", role="admin", rounds=ROUNDS)
    assert user.role == "admin"


def test_duplicate_username_conflicts(db):
    credentials.register(db, "alice", "secret1", rounds=ROUNDS)
    with pytest.raises(ConflictError):
        credentials.register(db, "alice", "another-password", rounds=ROUNDS)
    assert db.query(User).count() == 1


def test_username_is_trimmed(db):
    user = credentials.register(db, "  alice  ", "secret1", rounds=ROUNDS)
    assert user.username == "alice"
    with pytest.raises(ConflictError):
        credentials.register(db, "alice", "secret1", rounds=ROUNDS)


@pytest.mark.parametrize("username,password,field", [
    ("al", "secret1", "username"),
    ("a" * 31, "secret1", "username"),
    ("alice", "12345", "password"),
])
def test_registration_validation(db, username, password, field):
    with pytest.raises(ValidationError) as exc_info:
        credentials.register(db, username, password, rounds=ROUNDS)
    assert [e["field"] for e in exc_info.value.errors] == [field]
    assert db.query(User).count() == 0


def test_validation_reports_every_bad_field(db):
    with pytest.raises(ValidationError) as exc_info:
        credentials.register(db, "ab", "123", rounds=ROUNDS)
    assert {e["field"] for e in exc_info.value.errors} == {"username", "password"}


def test_verify_accepts_correct_password(db):
    created = credentials.register(db, "alice", "secret1", rounds=ROUNDS)
    user = credentials.verify(db, "alice", "secret1")
    assert user.id == created.id


def test_verify_failures_are_indistinguishable(db):
    credentials.register(db, "alice", "secret1", rounds=ROUNDS)

    with pytest.raises(InvalidCredentials) as wrong_password:
        credentials.verify(db, "alice", "wrong-password")
    with pytest.raises(InvalidCredentials) as unknown_user:
        credentials.verify(db, "nobody", "secret1")

    assert type(wrong_password.value) is type(unknown_user.value)
    assert wrong_password.value.detail == unknown_user.value.detail
    assert wrong_password.value.status_code == unknown_user.value.status_code


def test_unknown_user_burns_configured_cost(db, monkeypatch):
    seen = []
    monkeypatch.setattr(credentials, "dummy_verify", seen.append)

    with pytest.raises(InvalidCredentials):
        credentials.verify(db, "nobody", "secret1", rounds=12)

    assert seen == [12]


def test_verify_is_case_sensitive(db):
    credentials.register(db, "alice", "secret1", rounds=ROUNDS)
    with pytest.raises(InvalidCredentials):
        credentials.verify(db, "Alice", "secret1")


def test_set_role_on_self_is_rejected(db):
    admin = credentials.register(db, "alice", "secret1", rounds=ROUNDS)

    with pytest.raises(SelfRoleChange):
        credentials.set_role(db, admin.id, admin.id, "user")

    db.refresh(admin)
    assert admin.role == "admin"


def test_set_role_promotes_and_logs(db):
    admin = credentials.register(db, "alice", "secret1", rounds=ROUNDS)
    bob = credentials.register(db, "bob", "secret2", rounds=ROUNDS)

    updated = credentials.set_role(db, admin.id, bob.id, "admin", ip="10.0.0.1")

    assert updated.role == "admin"
    entry = db.query(Log).filter(Log.action == "ROLE_CHANGE").one()
    assert entry.user_id == admin.id
    assert entry.ip == "10.0.0.1"
    assert entry.meta == {"target_id": bob.id, "old": "user", "new": "admin"}


def test_set_role_unknown_user(db):
    admin = credentials.register(db, "alice", "secret1", rounds=ROUNDS)
    with pytest.raises(NotFound):
        credentials.set_role(db, admin.id, "does-not-exist", "admin")


def test_set_role_rejects_unknown_role(db):
    admin = credentials.register(db, "alice", "secret1", rounds=ROUNDS)
    bob = credentials.register(db, "bob", "secret2", rounds=ROUNDS)
    with pytest.raises(ValidationError):
        credentials.set_role(db, admin.id, bob.id, "superuser")
    db.refresh(bob)
    assert bob.role == "user"


def test_list_all_newest_first(db):
    credentials.register(db, "alice", "secret1", rounds=ROUNDS)
    credentials.register(db, "bob", "secret2", rounds=ROUNDS)
    assert [u.username for u in credentials.list_all(db)] == ["bob", "alice"]
