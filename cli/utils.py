import functools
import json
import logging
import os
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Type

import click
from pydantic import BaseModel
from sqlalchemy.orm import Session

from bookswap.errors import ExchangeError
from bookswap.sa.database import Database

def configure_logging(verbose: bool = False) -> None:
    """Set up root logging from BOOKSWAP_LOG_LEVEL, or INFO when verbose"""
    level_name = "INFO" if verbose else os.getenv("BOOKSWAP_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

@contextmanager
def open_session() -> Iterator[Session]:
    """Open a session on the configured database, creating the schema if needed"""
    db = Database()
    db.init_db()
    session = db.get_session()
    try:
        yield session
    finally:
        session.close()

def echo_model(schema: Type[BaseModel], obj: Any) -> None:
    """Print one entity as JSON through its pydantic schema"""
    click.echo(schema.model_validate(obj).model_dump_json(indent=2))

def echo_models(schema: Type[BaseModel], objs: Iterable[Any]) -> None:
    items = [schema.model_validate(obj).model_dump(mode='json') for obj in objs]
    click.echo(json.dumps(items, indent=2))

def echo_error(message: str) -> None:
    click.echo(click.style(f"Error: {message}", fg='red'), err=True)

def handle_exchange_errors(func):
    """Report exchange errors in red and exit with status 1"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ExchangeError as e:
            echo_error(f"{type(e).__name__}: {e}")
            raise click.exceptions.Exit(1)
    return wrapper
