# cli/commands/listing.py
import click
from bookswap.sa.models import SharingMode
from bookswap.schemas import Listing as ListingSchema, ListingCreate, ListingStats
from bookswap.services import ListingStore
from ..utils import open_session, echo_model, echo_models, handle_exchange_errors

MODES = [mode.value for mode in SharingMode]

@click.group()
def listing():
    """Listing management commands"""
    pass

@listing.command()
@click.option('--owner', 'owner_id', required=True, type=int, help='Owner user ID')
@click.option('--title', required=True)
@click.option('--author', required=True)
@click.option('--condition', required=True, help='New, Like New, Good, Fair or Poor')
@click.option('--mode', 'sharing_mode', required=True, type=click.Choice(MODES), help='How the book is shared')
@click.option('--max-days', 'max_lending_days', type=int, default=None, help='Longest loan, lend listings only')
@click.option('--genre', default=None)
@click.option('--isbn', default=None)
@click.option('--description', default=None)
@click.option('--pickup', 'pickup_location', default=None, help='Where the book can be picked up')
@handle_exchange_errors
def create(owner_id, **fields):
    """List a book

    Example:
        bookswap listing create --owner 1 --title Dune --author Herbert --condition good --mode lend --max-days 14
    """
    draft = ListingCreate(**fields)
    with open_session() as session:
        created = ListingStore(session).create(owner_id=owner_id, **draft.model_dump())
        echo_model(ListingSchema, created)

@listing.command()
@click.argument('listing_id', type=int)
@handle_exchange_errors
def show(listing_id):
    """Show one listing"""
    with open_session() as session:
        echo_model(ListingSchema, ListingStore(session).get(listing_id))

@listing.command(name='list')
@click.option('--owner', 'owner_id', type=int, default=None, help='Only listings of this owner')
@click.option('--mode', 'sharing_mode', type=click.Choice(MODES), default=None, help='Only this sharing mode')
@click.option('--available-only/--all', default=True, help='Only AVAILABLE listings')
def list_listings(owner_id, sharing_mode, available_only):
    """List books"""
    with open_session() as session:
        store = ListingStore(session)
        if owner_id is not None:
            listings = store.list_by_owner(owner_id, available_only=available_only)
            if sharing_mode:
                listings = [l for l in listings if l.sharing_mode == SharingMode(sharing_mode)]
        else:
            listings = store.list_available(SharingMode(sharing_mode) if sharing_mode else None)
        echo_models(ListingSchema, listings)

@listing.command()
@click.argument('query', required=False, default='')
def search(query):
    """Search available books by title, author or genre"""
    with open_session() as session:
        echo_models(ListingSchema, ListingStore(session).search(query))

@listing.command()
@click.argument('listing_id', type=int)
@click.option('--owner', 'owner_id', required=True, type=int, help='Owner user ID')
@click.option('--title', default=None)
@click.option('--author', default=None)
@click.option('--condition', default=None)
@click.option('--genre', default=None)
@click.option('--isbn', default=None)
@click.option('--description', default=None)
@click.option('--pickup', 'pickup_location', default=None)
@handle_exchange_errors
def update(listing_id, owner_id, **fields):
    """Edit a listing's details"""
    with open_session() as session:
        echo_model(ListingSchema, ListingStore(session).update_details(listing_id, owner_id, **fields))

@listing.command()
@click.argument('listing_id', type=int)
@click.option('--owner', 'owner_id', required=True, type=int, help='Owner user ID')
@handle_exchange_errors
def delete(listing_id, owner_id):
    """Remove an available listing"""
    with open_session() as session:
        ListingStore(session).delete(listing_id, owner_id)
    click.echo(click.style(f"Deleted listing {listing_id}", fg='green'))

@listing.command()
def stats():
    """Show listing counts"""
    with open_session() as session:
        echo_model(ListingStats, ListingStore(session).stats())
