# tests/test_sa/test_services/test_listing_store.py
import pytest
from bookswap.errors import NotFound, Forbidden, InvalidState, ValidationError
from bookswap.sa.models import SharingMode, ListingStatus

def test_create_listing(listing_store):
    listing = listing_store.create(
        owner_id=1,
        title="  The Hobbit ",
        author="J.R.R. Tolkien",
        condition="like new",
        sharing_mode=SharingMode.LEND,
        max_lending_days=21,
        genre="Fantasy",
        pickup_location="   ",
    )

    assert listing.id is not None
    assert listing.title == "The Hobbit"
    assert listing.condition == "Like New"
    assert listing.status == ListingStatus.AVAILABLE
    assert listing.max_lending_days == 21
    assert listing.pickup_location is None

def test_create_accepts_mode_by_value(listing_store):
    listing = listing_store.create(1, "Dune", "Frank Herbert", "Good", "swap")
    assert listing.sharing_mode == SharingMode.SWAP

@pytest.mark.parametrize("overrides, message", [
    ({"title": "  "}, "Title is required"),
    ({"author": None}, "Author is required"),
    ({"condition": ""}, "Condition is required"),
    ({"condition": "Mint"}, "Invalid condition"),
    ({"title": "x" * 201}, "Title must be at most 200 characters"),
    ({"sharing_mode": "sell"}, "Unknown sharing mode"),
])
def test_create_validation(listing_store, overrides, message):
    fields = dict(owner_id=1, title="Dune", author="Frank Herbert", condition="Good",
                  sharing_mode=SharingMode.GIVE_AWAY)
    fields.update(overrides)
    with pytest.raises(ValidationError, match=message):
        listing_store.create(**fields)

@pytest.mark.parametrize("mode, max_days", [
    (SharingMode.LEND, None),
    (SharingMode.LEND, 0),
    (SharingMode.LEND, -3),
    (SharingMode.GIVE_AWAY, 7),
    (SharingMode.SWAP, 7),
])
def test_create_max_lending_days_rules(listing_store, mode, max_days):
    with pytest.raises(ValidationError):
        listing_store.create(1, "Dune", "Frank Herbert", "Good", mode, max_lending_days=max_days)

def test_get_missing_listing(listing_store):
    with pytest.raises(NotFound):
        listing_store.get(999)

def test_update_details(listing_store, give_away_listing):
    updated = listing_store.update_details(
        give_away_listing.id, 1, title="New Title", description="Slightly worn", condition="fair", author="  "
    )
    assert updated.title == "New Title"
    assert updated.description == "Slightly worn"
    assert updated.condition == "Fair"
    assert updated.author == "Test Author"

def test_update_details_clears_optional_field(listing_store, make_listing):
    listing = make_listing(genre="Horror")
    assert listing_store.update_details(listing.id, 1, genre="").genre is None

def test_update_details_by_non_owner(listing_store, give_away_listing):
    with pytest.raises(Forbidden):
        listing_store.update_details(give_away_listing.id, 2, title="Mine now")

def test_update_details_rejects_unknown_fields(listing_store, give_away_listing):
    with pytest.raises(ValidationError, match="status"):
        listing_store.update_details(give_away_listing.id, 1, status="swapped")

def test_delete_listing(listing_store, give_away_listing):
    listing_id = give_away_listing.id
    listing_store.delete(listing_id, 1)
    with pytest.raises(NotFound):
        listing_store.get(listing_id)

def test_delete_by_non_owner(listing_store, give_away_listing):
    with pytest.raises(Forbidden):
        listing_store.delete(give_away_listing.id, 2)
    assert listing_store.get(give_away_listing.id) is not None

def test_delete_requested_listing(listing_store, coordinator, give_away_listing):
    coordinator.create_give_away_request(give_away_listing.id, 2)
    with pytest.raises(InvalidState):
        listing_store.delete(give_away_listing.id, 1)

@pytest.mark.parametrize("setter, status", [
    ("set_unavailable", ListingStatus.UNAVAILABLE),
    ("set_exchange_in_progress", ListingStatus.EXCHANGE_IN_PROGRESS),
    ("set_currently_lent_out", ListingStatus.CURRENTLY_LENT_OUT),
    ("set_given_away", ListingStatus.GIVEN_AWAY),
    ("set_swapped", ListingStatus.SWAPPED),
])
def test_status_setters(listing_store, give_away_listing, setter, status):
    listing = getattr(listing_store, setter)(give_away_listing.id)
    assert listing.status == status

def test_setters_are_idempotent(listing_store, give_away_listing):
    """Setting the current status again does not bump the version"""
    listing_store.set_unavailable(give_away_listing.id)
    version = listing_store.get(give_away_listing.id).version
    listing_store.set_unavailable(give_away_listing.id)
    assert listing_store.get(give_away_listing.id).version == version

def test_setters_do_not_validate_transitions(listing_store, give_away_listing):
    listing_store.set_given_away(give_away_listing.id)
    assert listing_store.set_available(give_away_listing.id).status == ListingStatus.AVAILABLE

def test_setter_on_missing_listing(listing_store):
    with pytest.raises(NotFound):
        listing_store.set_available(999)

def test_search(listing_store, make_listing):
    make_listing(title="Dune", author="Frank Herbert")
    make_listing(title="Children of Dune", author="Frank Herbert")
    taken = make_listing(title="Dune Messiah", author="Frank Herbert")
    listing_store.set_unavailable(taken.id)

    assert [l.title for l in listing_store.search("dune")] == ["Children of Dune", "Dune"]
    assert len(listing_store.search("   ")) == 2
    assert listing_store.search("tolkien") == []

def test_stats(listing_store, make_listing):
    make_listing(pickup_location="Main Street Cafe")
    make_listing(sharing_mode=SharingMode.LEND)
    gone = make_listing(pickup_location="Library")
    listing_store.set_given_away(gone.id)

    assert listing_store.stats() == {"available_listings": 2, "listings_with_location": 2}
