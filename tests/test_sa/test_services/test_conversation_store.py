# tests/test_sa/test_services/test_conversation_store.py
import pytest
from bookswap.errors import NotFound, Forbidden, InvalidState, ValidationError, Conflict
from bookswap.sa.models import ConversationStatus, MessageKind

OWNER_ID = 1
REQUESTER_ID = 2
OTHER_USER_ID = 3

@pytest.fixture
def accepted(coordinator, give_away_listing):
    """A give-away request accepted without going through the facade"""
    request = coordinator.create_give_away_request(give_away_listing.id, REQUESTER_ID)
    return coordinator.accept_request(request.id, OWNER_ID)

@pytest.fixture
def conversation(conversation_store, accepted):
    return conversation_store.create_for_request(accepted.id)

def test_create_for_request(conversation_store, conversation, accepted):
    assert conversation.status == ConversationStatus.ACTIVE
    assert conversation.participant_a == REQUESTER_ID
    assert conversation.participant_b == OWNER_ID
    assert conversation.listing_id == accepted.listing_id

    messages = conversation_store.messages_for(conversation.id)
    assert len(messages) == 1
    assert messages[0].kind == MessageKind.SYSTEM
    assert messages[0].sender_id is None
    assert messages[0].content == "Give away request accepted! You can now arrange the pickup details."

@pytest.mark.parametrize("mode, duration, expected", [
    ("lend", 5, "Lending request accepted! You can now arrange the pickup and return details."),
    ("swap", None, "Swap request accepted! You can now arrange the book exchange details."),
])
def test_opening_message_follows_request_type(conversation_store, coordinator, make_listing,
                                              offered_listing, mode, duration, expected):
    listing = make_listing(sharing_mode=mode)
    if mode == "lend":
        request = coordinator.create_lend_request(listing.id, REQUESTER_ID, duration)
    else:
        request = coordinator.create_swap_request(listing.id, REQUESTER_ID, offered_listing.id)
    coordinator.accept_request(request.id, OWNER_ID)

    conversation = conversation_store.create_for_request(request.id)
    assert conversation_store.messages_for(conversation.id)[0].content == expected

def test_create_twice(conversation_store, conversation, accepted):
    with pytest.raises(Conflict):
        conversation_store.create_for_request(accepted.id)
    assert len(conversation_store.list_for_user(REQUESTER_ID)) == 1

def test_create_for_pending_request(conversation_store, coordinator, give_away_listing):
    request = coordinator.create_give_away_request(give_away_listing.id, REQUESTER_ID)
    with pytest.raises(InvalidState):
        conversation_store.create_for_request(request.id)
    assert conversation_store.get_by_request(request.id) is None

def test_create_for_missing_request(conversation_store):
    with pytest.raises(NotFound):
        conversation_store.create_for_request(999)

def test_post_message(conversation_store, conversation):
    message = conversation_store.post_message(conversation.id, REQUESTER_ID, "  Is Saturday OK?  ")
    assert message.kind == MessageKind.TEXT
    assert message.sender_id == REQUESTER_ID
    assert message.content == "Is Saturday OK?"

def test_post_message_by_outsider(conversation_store, conversation):
    with pytest.raises(Forbidden):
        conversation_store.post_message(conversation.id, OTHER_USER_ID, "Hello?")

@pytest.mark.parametrize("content", ["", "   ", None])
def test_post_blank_message(conversation_store, conversation, content):
    with pytest.raises(ValidationError):
        conversation_store.post_message(conversation.id, OWNER_ID, content)

def test_post_to_missing_conversation(conversation_store):
    with pytest.raises(NotFound):
        conversation_store.post_message(999, OWNER_ID, "Hi")

def test_close_completed(conversation_store, conversation):
    closed = conversation_store.close(conversation.id, OWNER_ID, ConversationStatus.COMPLETED)
    assert closed.status == ConversationStatus.COMPLETED
    last = conversation_store.latest_message(conversation.id)
    assert last.kind == MessageKind.EXCHANGE_COMPLETED
    assert last.content == "Exchange completed successfully!"

def test_close_cancelled_by_value(conversation_store, conversation):
    conversation_store.close(conversation.id, REQUESTER_ID, "cancelled")
    last = conversation_store.latest_message(conversation.id)
    assert last.kind == MessageKind.EXCHANGE_CANCELLED
    assert last.content == "Exchange was cancelled."

@pytest.mark.parametrize("outcome", [ConversationStatus.ACTIVE, "archived"])
def test_close_with_invalid_outcome(conversation_store, conversation, outcome):
    with pytest.raises(ValidationError):
        conversation_store.close(conversation.id, OWNER_ID, outcome)

def test_close_by_outsider(conversation_store, conversation):
    with pytest.raises(Forbidden):
        conversation_store.close(conversation.id, OTHER_USER_ID, ConversationStatus.CANCELLED)

def test_closed_conversation_is_read_only(conversation_store, conversation):
    conversation_store.close(conversation.id, OWNER_ID, ConversationStatus.COMPLETED)
    with pytest.raises(InvalidState):
        conversation_store.post_message(conversation.id, REQUESTER_ID, "One more thing")
    with pytest.raises(InvalidState):
        conversation_store.close(conversation.id, OWNER_ID, ConversationStatus.CANCELLED)
    # Closed conversations report InvalidState even to outsiders
    with pytest.raises(InvalidState):
        conversation_store.post_message(conversation.id, OTHER_USER_ID, "Hi")

def test_message_order(conversation_store, conversation):
    for i in range(5):
        sender = REQUESTER_ID if i % 2 == 0 else OWNER_ID
        conversation_store.post_message(conversation.id, sender, f"message {i}")

    log = conversation_store.messages_for(conversation.id)
    assert [m.content for m in log[1:]] == [f"message {i}" for i in range(5)]

    recent = conversation_store.recent_messages(conversation.id, limit=3)
    assert [m.content for m in recent] == ["message 4", "message 3", "message 2"]

def test_reads_of_missing_conversation(conversation_store):
    with pytest.raises(NotFound):
        conversation_store.get(999)
    with pytest.raises(NotFound):
        conversation_store.messages_for(999)
    with pytest.raises(NotFound):
        conversation_store.recent_messages(999)

def test_unread_counts(conversation_store, conversation):
    conversation_store.post_message(conversation.id, OWNER_ID, "Pickup at 5?")
    conversation_store.post_message(conversation.id, OWNER_ID, "Or 6?")
    conversation_store.post_message(conversation.id, REQUESTER_ID, "6 works")

    assert conversation_store.unread_count(conversation.id, REQUESTER_ID) == 2
    assert conversation_store.unread_count(conversation.id, OWNER_ID) == 1
    assert conversation_store.total_unread_count(REQUESTER_ID) == 2
    assert conversation_store.total_unread_count(OTHER_USER_ID) == 0

def test_list_for_user(conversation_store, conversation):
    assert [c.id for c in conversation_store.list_for_user(OWNER_ID)] == [conversation.id]
    assert conversation_store.list_for_user(OWNER_ID, ConversationStatus.CANCELLED) == []
    assert conversation_store.list_for_user(OTHER_USER_ID) == []
