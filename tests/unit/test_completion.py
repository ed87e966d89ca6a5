"""Tests for the post-completion hook."""

import asyncio

import pytest

from t3chat.api.models import Message
from t3chat.core.completion import CompletionHook, fallback_chat_title
from t3chat.core.exceptions import PersistenceError
from t3chat.persistence import InMemoryPersistence


class FailingPersistence(InMemoryPersistence):
    async def create_chat_if_not_exists(self, *args, **kwargs):
        raise PersistenceError("backend down")


def _user(content: str) -> Message:
    return Message(role="user", content=content)


class TestFallbackChatTitle:
    """Tests for the heuristic title."""

    def test_meaningful_words(self):
        assert fallback_chat_title("what is the capital of France?") == "What the capital France"

    def test_empty(self):
        assert fallback_chat_title("") == "New Conversation"
        assert fallback_chat_title("   ") == "New Conversation"

    def test_only_short_words(self):
        assert fallback_chat_title("hi yo") == "hi yo"

    def test_only_punctuation(self):
        assert fallback_chat_title("?!") == "New Conversation"

    def test_truncated(self):
        title = fallback_chat_title("supercalifragilistic expialidocious antidisestablishmentarianism pneumonoultramicroscopic")
        assert len(title) == 50
        assert title.endswith("...")


class TestCompletionHook:
    """Tests for CompletionHook."""

    @pytest.fixture
    def persistence(self) -> InMemoryPersistence:
        return InMemoryPersistence()

    @pytest.fixture
    def hook(self, provider_registry, persistence, settings) -> CompletionHook:
        return CompletionHook(provider_registry, persistence, settings)

    def test_applies_only_to_first_exchange(self):
        one = [_user("q")]
        two = [_user("q"), Message(role="assistant", content="a"), _user("q2")]

        assert CompletionHook.applies(one, "c1", "answer")
        assert not CompletionHook.applies(two, "c1", "answer")
        assert not CompletionHook.applies(one, None, "answer")
        assert not CompletionHook.applies(one, "c1", "")

    @pytest.mark.asyncio
    async def test_records_chat_with_model_title(self, hook, persistence, fake_provider):
        fake_provider.complete_handler = lambda prompt, system: '"Capital of France"\n'

        task = hook.schedule([_user("capital of France?")], "c1", "Paris.", user_id="u1")
        await task

        record = persistence.chats["c1"]
        assert record.title == "Capital of France"
        assert record.first_user_message == "capital of France?"
        assert record.assistant_response == "Paris."
        assert record.user_id == "u1"
        assert fake_provider.complete_calls[0]["prompt"].startswith("User: capital of France?\nAssistant: Paris.")

    @pytest.mark.asyncio
    async def test_falls_back_when_title_model_fails(self, hook, persistence, fake_provider):
        def fail(prompt, system):
            raise RuntimeError("model down")

        fake_provider.complete_handler = fail
        await hook.schedule([_user("tell me about pandas dataframes")], "c1", "Sure.")

        assert persistence.chats["c1"].title == "Tell about pandas dataframes"

    @pytest.mark.asyncio
    async def test_persistence_failure_is_swallowed(self, provider_registry, settings):
        hook = CompletionHook(provider_registry, FailingPersistence(), settings)
        await hook.schedule([_user("q")], "c1", "a")

    @pytest.mark.asyncio
    async def test_not_scheduled(self, hook):
        assert hook.schedule([_user("q")], None, "a") is None
        assert hook.pending == 0

    @pytest.mark.asyncio
    async def test_drain(self, hook, persistence, fake_provider):
        release = asyncio.Event()

        async def slow_title(first_user_message, assistant_response):
            await release.wait()
            return "Slow"

        hook.generate_title = slow_title
        hook.schedule([_user("q")], "c1", "a")
        assert hook.pending == 1

        release.set()
        await hook.drain()
        assert persistence.chats["c1"].title == "Slow"
