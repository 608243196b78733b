# cli/commands/db.py
import click
from bookswap.sa.database import Database

@click.group()
def db():
    """Database management commands"""
    pass

@db.command()
def init():
    """Create all tables"""
    database = Database()
    database.init_db()
    click.echo(click.style("Database initialized at ", fg='blue') +
               click.style(database.connection_string, fg='cyan'))

@db.command()
@click.confirmation_option(prompt='This deletes every listing, request and conversation. Continue?')
def reset():
    """Drop and recreate all tables"""
    database = Database()
    database.drop_db()
    database.init_db()
    click.echo(click.style("Database reset", fg='yellow'))
