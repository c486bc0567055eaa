"""Two sessions sharing one in-memory chat server."""
from __future__ import annotations

import pytest

from dealdirect_client.domain.value_objects.enums import ConnectionState
from dealdirect_client.services.chat_session import ChatSession
from tests.conftest import FakeMessageStore, FakeNotifier, FakeRelay, make_conversation


def _tab(relay: FakeRelay, user_id: str, token: str) -> ChatSession:
    store = FakeMessageStore(
        user_id=user_id,
        token=token,
        conversations=[make_conversation(conversation_id="c-1")],
    )
    return ChatSession(
        store,
        lambda: FakeNotifier(relay),
        socket_url="http://chat.test",
        unread_poll_seconds=3600,
        typing_debounce_seconds=0.05,
    )


@pytest.mark.asyncio
async def test_message_sent_in_one_tab_appears_in_the_other(buyer, owner):
    relay = FakeRelay({"tok-a": buyer.id, "tok-b": owner.id})
    tab_a = _tab(relay, buyer.id, "tok-a")
    tab_b = _tab(relay, owner.id, "tok-b")
    try:
        await tab_a.start(buyer)
        await tab_b.start(owner)
        assert tab_b.connection_state == ConnectionState.LIVE

        conversation = make_conversation(conversation_id="c-1")
        await tab_a.open_chat(conversation)
        await tab_b.open_chat(conversation)

        sent = await tab_a.send_message("c-1", "Can I visit on Saturday?")

        assert [m.id for m in tab_b.messages] == [sent.id]
        assert tab_b.messages[0].text == "Can I visit on Saturday?"
        assert [m.id for m in tab_a.messages] == [sent.id]
    finally:
        await tab_a.stop()
        await tab_b.stop()


@pytest.mark.asyncio
async def test_typing_reaches_peer_once_per_burst(buyer, owner):
    relay = FakeRelay({"tok-a": buyer.id, "tok-b": owner.id})
    tab_a = _tab(relay, buyer.id, "tok-a")
    tab_b = _tab(relay, owner.id, "tok-b")
    try:
        await tab_a.start(buyer)
        await tab_b.start(owner)
        conversation = make_conversation(conversation_id="c-1")
        await tab_a.open_chat(conversation)
        await tab_b.open_chat(conversation)

        for _ in range(5):
            await tab_a.notify_typing("c-1")

        assert tab_b.typing is not None
        assert tab_b.typing.user_id == buyer.id

        await tab_a.send_message("c-1", "hi")

        assert tab_b.typing is None
    finally:
        await tab_a.stop()
        await tab_b.stop()


@pytest.mark.asyncio
async def test_invalid_token_is_rejected_by_server(buyer):
    relay = FakeRelay({})
    tab = _tab(relay, buyer.id, "forged")
    try:
        await tab.start(buyer)

        assert tab.connection_state == ConnectionState.UNTRUSTED
    finally:
        await tab.stop()


@pytest.mark.asyncio
async def test_tab_goes_live_once_first_connect_retry_succeeds(buyer):
    relay = FakeRelay({"tok-a": buyer.id})
    notifier = FakeNotifier(relay, fail_connect=True)
    tab = ChatSession(
        FakeMessageStore(user_id=buyer.id, token="tok-a"),
        lambda: notifier,
        socket_url="http://chat.test",
        unread_poll_seconds=3600,
    )
    try:
        await tab.start(buyer)
        assert tab.connection_state == ConnectionState.DISCONNECTED

        await notifier.recover()

        assert notifier.events("authenticate") == [{"token": "tok-a"}]
        assert tab.connection_state == ConnectionState.LIVE
    finally:
        await tab.stop()
