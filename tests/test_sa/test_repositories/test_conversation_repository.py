# tests/test_sa/test_repositories/test_conversation_repository.py

import pytest
from bookswap.sa.repositories.conversation import ConversationRepository, MessageRepository
from bookswap.sa.models import ConversationStatus, MessageKind

@pytest.fixture
def conversation_repo(db_session):
    return ConversationRepository(db_session)

@pytest.fixture
def message_repo(db_session):
    return MessageRepository(db_session)

@pytest.fixture
def conversation(facade, give_away_listing):
    """An accepted give-away with a short exchange of messages."""
    request = facade.create_give_away_request(give_away_listing.id, 2)
    facade.accept_request(request.id, 1)
    conversation = facade.conversations.get_by_request(request.id)
    facade.send_message(conversation.id, 2, "When can I pick it up?")
    facade.send_message(conversation.id, 1, "Tomorrow at noon")
    facade.send_message(conversation.id, 1, "At the front desk")
    return conversation

def test_get_by_request_id(conversation_repo, conversation):
    fetched = conversation_repo.get_by_request_id(conversation.request_id)
    assert fetched.id == conversation.id
    assert conversation_repo.exists_for_request(conversation.request_id)
    assert not conversation_repo.exists_for_request(999)

def test_get_for_user(conversation_repo, conversation):
    assert [c.id for c in conversation_repo.get_for_user(1)] == [conversation.id]
    assert [c.id for c in conversation_repo.get_for_user(2, ConversationStatus.ACTIVE)] == [conversation.id]
    assert conversation_repo.get_for_user(2, ConversationStatus.COMPLETED) == []
    assert conversation_repo.get_for_user(3) == []

def test_messages_oldest_first(message_repo, conversation):
    messages = message_repo.get_by_conversation(conversation.id)
    assert [m.kind for m in messages] == [MessageKind.SYSTEM] + [MessageKind.TEXT] * 3
    assert messages[-1].content == "At the front desk"

def test_recent_newest_first(message_repo, conversation):
    recent = message_repo.get_recent(conversation.id, limit=2)
    assert [m.content for m in recent] == ["At the front desk", "Tomorrow at noon"]
    assert message_repo.get_latest(conversation.id).content == "At the front desk"

def test_count_unread(message_repo, conversation):
    """System messages and the reader's own messages are not unread"""
    assert message_repo.count_unread(conversation.id, 2) == 2
    assert message_repo.count_unread(conversation.id, 1) == 1
    assert message_repo.count_unread_for_user(2) == 2
    assert message_repo.count_unread_for_user(3) == 0
