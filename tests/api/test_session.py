"""Tests for session management."""

import time
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
import pytest_asyncio

import api.session as session_module
from api.session import (
    SessionSigner,
    InMemorySessionStore,
    create_session,
    extract_session_id,
    get_session,
    get_session_signer,
    get_session_store,
    update_session,
)
from config import config
from core.game import BlackjackGame


def later(seconds):
    """Patch the store's clock forward."""
    moment = datetime.now() + timedelta(seconds=seconds)
    return patch.object(session_module, "datetime", **{"now.return_value": moment})


class TestSessionSigner:
    """Tests for SessionSigner class."""

    def test_round_trip(self):
        """Test that a signed token unsigns to the original ID."""
        signer = SessionSigner(secret_key="test-secret")

        token = signer.sign("table-7")

        assert token != "table-7"
        assert signer.unsign(token, max_age=3600) == "table-7"

    @pytest.mark.parametrize("token", ["invalid-token-data", "", "table-7.forged.sig"])
    def test_garbage_rejected(self, token):
        """Test that malformed tokens give None."""
        assert SessionSigner(secret_key="test-secret").unsign(token, max_age=3600) is None

    def test_wrong_secret_rejected(self):
        """Test that a token from another key is refused."""
        token = SessionSigner(secret_key="secret-one").sign("table-7")

        assert SessionSigner(secret_key="secret-two").unsign(token, max_age=3600) is None

    def test_expired_token_rejected(self):
        """Test that an old token is refused."""
        signer = SessionSigner(secret_key="test-secret")
        token = signer.sign("table-7")

        original_time = time.time
        with patch("time.time", lambda: original_time() + 7200):
            assert signer.unsign(token, max_age=3600) is None


class TestInMemorySessionStore:
    """Tests for InMemorySessionStore class."""

    @pytest_asyncio.fixture
    async def store(self):
        """Create a fresh session store."""
        return InMemorySessionStore()

    @pytest.mark.asyncio
    async def test_holds_live_game(self, store):
        """Test the store hands back the very same engine object."""
        game = BlackjackGame()
        await store.set("table-7", {"game": game}, ttl=3600)

        data = await store.get("table-7")

        assert data["game"] is game
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_unknown_session(self, store):
        """Test that an unknown ID gives None."""
        assert await store.get("nonexistent-session") is None

    @pytest.mark.asyncio
    async def test_delete(self, store):
        """Test deleting a session, twice."""
        await store.set("table-7", {}, ttl=3600)

        await store.delete("table-7")
        await store.delete("table-7")

        assert await store.get("table-7") is None

    @pytest.mark.asyncio
    async def test_expiry(self, store):
        """Test that a session past its TTL is gone once read."""
        await store.set("table-7", {"hands": 1}, ttl=60)

        with later(120):
            assert await store.get("table-7") is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_cleanup_expired(self, store):
        """Test cleanup only drops expired sessions."""
        await store.set("short-1", {}, ttl=60)
        await store.set("short-2", {}, ttl=60)
        await store.set("long", {}, ttl=3600)

        with later(120):
            assert await store.cleanup_expired() == 2

        assert len(store) == 1
        assert await store.get("long") == {}

    def test_new_token_is_signed(self, store):
        """Test fresh tokens resolve to a UUID."""
        raw = extract_session_id(store.new_token())

        assert raw is not None
        assert len(raw) == 36 and raw.count("-") == 4


class TestModuleFunctions:
    """Tests for module-level session functions."""

    @pytest.fixture(autouse=True)
    def fresh_store(self):
        session_module._session_store = None
        yield
        session_module._session_store = None

    def test_store_is_singleton(self):
        """Test that the same store is reused."""
        assert get_session_store() is get_session_store()
        assert isinstance(get_session_store(), InMemorySessionStore)

    def test_signer_is_singleton(self):
        """Test that the same signer is reused."""
        assert get_session_signer() is get_session_signer()

    @pytest.mark.asyncio
    async def test_session_lifecycle(self):
        """Test create, read and update through the module API."""
        session_id = await create_session({"round": 1})

        assert extract_session_id(session_id) is not None
        assert await get_session(session_id) == {"round": 1}

        await update_session(session_id, {"round": 2})
        assert await get_session(session_id) == {"round": 2}

    @pytest.mark.asyncio
    async def test_abandoned_sessions_pruned_on_create(self):
        """Test opening a session evicts games nobody came back for."""
        abandoned = await create_session({"game": BlackjackGame()})
        store = get_session_store()

        with later(config.session_ttl + 60):
            fresh = await create_session({"game": BlackjackGame()})

        assert len(store) == 1
        assert await get_session(abandoned) is None
        assert await get_session(fresh) is not None

    def test_extract_session_id_invalid(self):
        """Test that a forged token does not resolve."""
        assert extract_session_id("invalid-token") is None
