# cli/commands/request.py
import click
from pydantic import TypeAdapter, ValidationError as DraftError
from bookswap.schemas import ExchangeRequest as RequestSchema, RequestCounts, RequestDraft
from bookswap.services import OrchestrationFacade
from ..utils import open_session, echo_model, echo_models, echo_error, handle_exchange_errors

user_option = click.option('--user', 'user_id', required=True, type=int, help='Acting user ID')

@click.group()
def request():
    """Exchange request commands"""
    pass

@request.command(name='give-away')
@click.argument('listing_id', type=int)
@user_option
@click.option('--message', default=None, help='Note to the owner')
@handle_exchange_errors
def give_away(listing_id, user_id, message):
    """Ask for a book that is being given away"""
    with open_session() as session:
        echo_model(RequestSchema, OrchestrationFacade(session).create_give_away_request(listing_id, user_id, message))

@request.command()
@click.argument('listing_id', type=int)
@user_option
@click.option('--days', 'requested_duration_days', required=True, type=int, help='Loan length in days')
@click.option('--message', default=None, help='Note to the owner')
@handle_exchange_errors
def lend(listing_id, user_id, requested_duration_days, message):
    """Ask to borrow a book"""
    with open_session() as session:
        created = OrchestrationFacade(session).create_lend_request(
            listing_id, user_id, requested_duration_days, message
        )
        echo_model(RequestSchema, created)

@request.command()
@click.argument('listing_id', type=int)
@user_option
@click.option('--offer', 'offered_listing_id', required=True, type=int, help='Your swap listing to offer')
@click.option('--message', default=None, help='Note to the owner')
@handle_exchange_errors
def swap(listing_id, user_id, offered_listing_id, message):
    """Offer one of your books in exchange for another"""
    with open_session() as session:
        created = OrchestrationFacade(session).create_swap_request(
            listing_id, user_id, offered_listing_id, message
        )
        echo_model(RequestSchema, created)

@request.command()
@click.argument('draft_json')
@user_option
@handle_exchange_errors
def submit(draft_json, user_id):
    """Create a request from a JSON draft

    Example:
        bookswap request submit --user 2 '{"request_type": "lend", "listing_id": 1, "requested_duration_days": 7}'
    """
    try:
        draft = TypeAdapter(RequestDraft).validate_json(draft_json)
    except DraftError as e:
        echo_error(f"Invalid request draft: {e}")
        raise click.exceptions.Exit(1)
    with open_session() as session:
        echo_model(RequestSchema, OrchestrationFacade(session).submit(user_id, draft))

def _lifecycle_command(name: str, method: str, help_text: str):
    @request.command(name=name, help=help_text)
    @click.argument('request_id', type=int)
    @user_option
    @handle_exchange_errors
    def command(request_id, user_id):
        with open_session() as session:
            facade = OrchestrationFacade(session)
            echo_model(RequestSchema, getattr(facade, method)(request_id, user_id))
    return command

accept = _lifecycle_command('accept', 'accept_request', 'Accept a pending request for your book')
reject = _lifecycle_command('reject', 'reject_request', 'Reject a pending request for your book')
cancel = _lifecycle_command('cancel', 'cancel_request', 'Withdraw your pending request')
complete = _lifecycle_command('complete', 'complete_request', 'Mark an accepted exchange as done')
return_book = _lifecycle_command('return', 'return_lent_book', 'Record that a lent book came back')

@request.command()
@click.argument('request_id', type=int)
@handle_exchange_errors
def show(request_id):
    """Show one request"""
    with open_session() as session:
        echo_model(RequestSchema, OrchestrationFacade(session).coordinator.get(request_id))

@request.command(name='list')
@user_option
@click.option('--received/--sent', default=False, help='Requests received as owner, or sent as requester')
@click.option('--active/--all', default=False, help='Only PENDING and ACCEPTED requests')
def list_requests(user_id, received, active):
    """List a user's requests"""
    with open_session() as session:
        coordinator = OrchestrationFacade(session).coordinator
        if received:
            found = coordinator.list_active_by_owner(user_id) if active else coordinator.list_by_owner(user_id)
        else:
            found = coordinator.list_active_by_requester(user_id) if active else coordinator.list_by_requester(user_id)
        echo_models(RequestSchema, found)

@request.command()
@user_option
def counts(user_id):
    """Show notification counts for a user"""
    with open_session() as session:
        coordinator = OrchestrationFacade(session).coordinator
        echo_model(RequestCounts, {
            "pending_received": coordinator.count_pending_for_owner(user_id),
            "updated_sent": coordinator.count_updated_for_requester(user_id),
        })
