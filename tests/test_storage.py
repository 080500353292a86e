import os
import tempfile

import pytest
from argon2 import PasswordHasher

from vaultguard.errors import RemoteFailure, Unauthorized, ValidationError
from vaultguard.storage import (
    LocalAuthenticator, LocalVaultStore, atomic_write_bytes, read_json_bytes,
    validate_master_password,
)

MASTER = "CorrectHorse!23"
FAST_HASHER = PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def vault_path():
    with tempfile.TemporaryDirectory() as td:
        yield os.path.join(td, "vault.json")


@pytest.fixture
def auth(vault_path):
    a = LocalAuthenticator(vault_path, hasher=FAST_HASHER)
    a.setup_master_password(MASTER)
    return a


def test_master_password_rules():
    for bad, reason in (
        ("Short1!", "12 characters"),
        ("alllowercase1!", "uppercase"),
        ("ALLUPPERCASE1!", "lowercase"),
        ("NoDigitsHere!!", "number"),
        ("NoSpecials1234", "special"),
    ):
        with pytest.raises(ValidationError, match=reason):
            validate_master_password(bad)
    validate_master_password(MASTER)


@pytest.mark.asyncio
async def test_verify(auth, vault_path):
    assert await auth.verify(MASTER) is True
    assert await auth.verify("wrongpass") is False
    with open(vault_path, "rb") as f:
        raw = f.read()
    # only the hash is stored
    assert MASTER.encode() not in raw


def test_setup_only_once(auth):
    with pytest.raises(ValidationError):
        auth.setup_master_password("AnotherMaster!99")


@pytest.mark.asyncio
async def test_no_master_password_is_unauthorized(vault_path):
    store = LocalVaultStore(vault_path)
    with pytest.raises(Unauthorized):
        await store.list()
    with pytest.raises(Unauthorized):
        await LocalAuthenticator(vault_path).verify("anything")


@pytest.mark.asyncio
async def test_create_list_remove(auth, vault_path):
    store = LocalVaultStore(vault_path)
    rec = await store.create({
        "name": "ex", "accountName": "u", "password": "p", "category": "application",
    })
    assert rec.created_at is not None and rec.created_at == rec.updated_at
    records = await store.list()
    assert [r.name for r in records] == ["ex"]
    await store.remove(rec.id)
    assert await store.list() == []


@pytest.mark.asyncio
async def test_update_appends_history(auth, vault_path):
    store = LocalVaultStore(vault_path)
    rec = await store.create({"name": "Router", "password": "first", "category": "device"})
    await store.update(rec.id, "second")
    updated = await store.update(rec.id, "third")
    assert updated.password == "third"
    assert updated.created_at == rec.created_at
    history = await store.history(rec.id)
    assert [h.value for h in history] == ["second", "first"]
    assert all(h.password_id == rec.id for h in history)


@pytest.mark.asyncio
async def test_get_stamps_last_viewed(auth, vault_path):
    store = LocalVaultStore(vault_path)
    rec = await store.create({"name": "ex", "accountName": "u", "password": "p"})
    assert rec.last_viewed is None
    seen = await store.get(rec.id)
    assert seen.last_viewed is not None
    assert (await store.list())[0].last_viewed == seen.last_viewed


@pytest.mark.asyncio
async def test_unknown_id(auth, vault_path):
    store = LocalVaultStore(vault_path)
    try:
        await store.update("missing", "x")
        raised = False
    except RemoteFailure as e:
        raised = e.status == 404
    assert raised


@pytest.mark.asyncio
async def test_corrupted_file(vault_path):
    atomic_write_bytes(vault_path, b"{not json")
    with pytest.raises(RemoteFailure):
        await LocalVaultStore(vault_path).list()


def test_atomic_write_leaves_no_tmp(vault_path):
    atomic_write_bytes(vault_path, b'{"a": 1}')
    assert not os.path.exists(vault_path + ".tmp")
    with open(vault_path, "rb") as f:
        assert read_json_bytes(f.read()) == {"a": 1}
