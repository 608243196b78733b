# cli/main.py
import click
from .commands.db import db
from .commands.listing import listing
from .commands.request import request
from .commands.chat import chat
from .utils import configure_logging

@click.group()
@click.option('--verbose/--no-verbose', default=False, help='Log lifecycle events')
def cli(verbose: bool):
    """Book exchange CLI"""
    configure_logging(verbose)

cli.add_command(db)
cli.add_command(listing)
cli.add_command(request)
cli.add_command(chat)

def main():
    """Entry point for the CLI"""
    cli()

if __name__ == '__main__':
    main()
