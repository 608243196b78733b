# cli/commands/chat.py
import click
from bookswap.sa.models import ConversationStatus
from bookswap.schemas import ConversationLog, ConversationSummary, Conversation as ConversationSchema, Message as MessageSchema
from bookswap.services import ConversationStore, OrchestrationFacade
from ..utils import open_session, echo_model, echo_models, handle_exchange_errors

user_option = click.option('--user', 'user_id', required=True, type=int, help='Acting user ID')

@click.group()
def chat():
    """Conversation commands"""
    pass

@chat.command()
@click.argument('conversation_id', type=int)
@click.option('--recent', type=int, default=None, help='Only the N most recent messages, newest first')
@handle_exchange_errors
def show(conversation_id, recent):
    """Show a conversation and its messages"""
    with open_session() as session:
        store = ConversationStore(session)
        conversation = store.get(conversation_id)
        if recent:
            messages = store.recent_messages(conversation_id, recent)
        else:
            messages = store.messages_for(conversation_id)
        log = ConversationLog.model_validate(conversation)
        log.messages = [MessageSchema.model_validate(m) for m in messages]
        click.echo(log.model_dump_json(indent=2))

@chat.command(name='for-request')
@click.argument('request_id', type=int)
@handle_exchange_errors
def for_request(request_id):
    """Show the conversation opened for a request"""
    with open_session() as session:
        conversation = ConversationStore(session).get_by_request(request_id)
        if conversation is None:
            click.echo(click.style(f"No conversation for request {request_id}", fg='yellow'))
            return
        echo_model(ConversationSchema, conversation)

@chat.command()
@click.argument('conversation_id', type=int)
@click.argument('content')
@user_option
@handle_exchange_errors
def send(conversation_id, content, user_id):
    """Post a message"""
    with open_session() as session:
        echo_model(MessageSchema, OrchestrationFacade(session).send_message(conversation_id, user_id, content))

@chat.command(name='list')
@user_option
@click.option('--status', type=click.Choice([s.value for s in ConversationStatus]), default=None)
def list_conversations(user_id, status):
    """List a user's conversations with unread counts"""
    with open_session() as session:
        store = ConversationStore(session)
        summaries = []
        for conversation in store.list_for_user(user_id, ConversationStatus(status) if status else None):
            summary = ConversationSummary.model_validate(conversation)
            latest = store.latest_message(conversation.id)
            summary.latest_message = MessageSchema.model_validate(latest) if latest else None
            summary.unread_count = store.unread_count(conversation.id, user_id)
            summaries.append(summary)
        echo_models(ConversationSummary, summaries)

@chat.command()
@user_option
def unread(user_id):
    """Total unread messages across a user's conversations"""
    with open_session() as session:
        click.echo(ConversationStore(session).total_unread_count(user_id))

@chat.command()
@click.argument('conversation_id', type=int)
@user_option
@handle_exchange_errors
def cancel(conversation_id, user_id):
    """Call off the exchange conversation"""
    with open_session() as session:
        echo_model(ConversationSchema, OrchestrationFacade(session).cancel_conversation(conversation_id, user_id))
