import json
import threading

import pytest

from botsuite.core.exceptions import ResourceNotFoundError
from botsuite.services.credential_store import CredentialStore, is_hashed


@pytest.mark.parametrize("content", [
    None,
    b"",
    b"{not json",
    b"[]",
    b'{"users": "nope"}',
    b"\xff\xfe\x00garbage",
])
def test_unreadable_store_is_empty(tmp_path, content):
    path = tmp_path / "users.json"
    if content is not None:
        path.write_bytes(content)
    store = CredentialStore(str(path))
    assert store.load() == {"users": []}
    assert store.authenticate("a", "right") is None


def test_authenticate_plaintext(store):
    assert store.authenticate("a", "right")["uid"] == "a"
    assert store.authenticate("a", "wrong") is None
    assert store.authenticate("A", "right") is None


def test_plaintext_rejected_when_disabled(users_file):
    store = CredentialStore(str(users_file), allow_plaintext=False)
    assert store.authenticate("a", "right") is None
    assert store.authenticate("bob", "hunter2")["uid"] == "bob"


def test_wrong_pair_rejected_among_many_users(tmp_path):
    path = tmp_path / "users.json"
    users = [{"uid": f"u{i}", "password": f"p{i}", "nickname": ""} for i in range(50)]
    path.write_text(json.dumps({"users": users}))
    store = CredentialStore(str(path))

    assert store.authenticate("u1", "p2") is None
    assert store.authenticate("u1", "p1") is not None


def test_update_nickname_persists(store, users_file):
    user = store.update_nickname("a", "Al")
    assert user["nickname"] == "Al"

    on_disk = json.loads(users_file.read_text())
    assert on_disk["users"][0] == {"uid": "a", "password": "right", "nickname": "Al"}
    assert list(users_file.parent.glob(".users.json.*")) == []


def test_update_nickname_unknown_user(store, users_file):
    before = users_file.read_text()
    with pytest.raises(ResourceNotFoundError):
        store.update_nickname("ghost", "Boo")
    assert users_file.read_text() == before


def test_concurrent_nickname_updates_are_not_lost(tmp_path):
    path = tmp_path / "users.json"
    users = [{"uid": f"u{i}", "password": "pw", "nickname": ""} for i in range(20)]
    path.write_text(json.dumps({"users": users}))
    store = CredentialStore(str(path))

    threads = [
        threading.Thread(target=store.update_nickname, args=(f"u{i}", f"nick{i}"))
        for i in range(20)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    saved = {u["uid"]: u["nickname"] for u in store.load()["users"]}
    assert saved == {f"u{i}": f"nick{i}" for i in range(20)}


def test_upsert_user_hashes_password(tmp_path):
    store = CredentialStore(str(tmp_path / "nested" / "users.json"), allow_plaintext=False)
    store.upsert_user("carol", "pa55", nickname="Caz")

    record = store.find_user("carol")
    assert is_hashed(record["password"])
    assert record["nickname"] == "Caz"
    assert store.authenticate("carol", "pa55") is not None

    store.upsert_user("carol", "new-pass")
    assert store.find_user("carol")["nickname"] == "Caz"
    assert store.authenticate("carol", "pa55") is None


def test_rehash_plaintext(store):
    assert store.rehash_plaintext() == 1
    assert is_hashed(store.find_user("a")["password"])
    assert store.authenticate("a", "right") is not None
    assert store.rehash_plaintext() == 0


@pytest.mark.parametrize("stored", [1234, None, ["right"], {"hash": "right"}])
def test_non_string_password_never_matches(tmp_path, stored):
    path = tmp_path / "users.json"
    path.write_text(json.dumps({"users": [{"uid": "n", "password": stored, "nickname": ""}]}))
    store = CredentialStore(str(path))

    assert store.authenticate("n", "1234") is None
    assert store.authenticate("n", "right") is None
    assert store.rehash_plaintext() == 0
