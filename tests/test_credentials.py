import os
import stat

from orderpad.services.credentials import (
    FileCredentialStore,
    InMemoryCredentialStore,
    resolve_credential,
)


async def test_file_store_round_trip(tmp_path):
    store = FileCredentialStore(tmp_path / "secrets" / "credentials.json")

    assert await store.get_credential() is None
    await store.save_credential("sk-first")
    await store.save_credential("sk-second")

    assert await store.get_credential() == "sk-second"
    assert not (tmp_path / "secrets" / "credentials.json.tmp").exists()


async def test_file_store_is_owner_only(tmp_path):
    path = tmp_path / "credentials.json"
    store = FileCredentialStore(path)

    await store.save_credential("sk-secret")

    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600


async def test_file_store_delete_is_idempotent(tmp_path):
    store = FileCredentialStore(tmp_path / "credentials.json")
    await store.save_credential("sk-secret")

    await store.delete_credential()
    await store.delete_credential()

    assert await store.get_credential() is None


async def test_file_store_treats_corrupt_file_as_empty(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text("{not json", encoding="utf-8")

    assert await FileCredentialStore(path).get_credential() is None


async def test_in_memory_store():
    store = InMemoryCredentialStore(initial="sk-seed")

    assert await store.get_credential() == "sk-seed"
    await store.save_credential("sk-new")
    assert await store.get_credential() == "sk-new"
    await store.delete_credential()
    assert await store.get_credential() is None


async def test_resolve_prefers_stored_key(settings_env):
    settings_env.setenv("OPENAI_API_KEY", "sk-from-env")

    assert await resolve_credential(InMemoryCredentialStore("sk-stored")) == "sk-stored"


async def test_resolve_falls_back_to_environment(settings_env):
    settings_env.setenv("OPENAI_API_KEY", "sk-from-env")

    assert await resolve_credential(InMemoryCredentialStore()) == "sk-from-env"


async def test_resolve_without_any_key(settings_env):
    settings_env.delenv("OPENAI_API_KEY", raising=False)

    assert await resolve_credential(InMemoryCredentialStore()) is None
