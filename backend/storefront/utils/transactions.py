from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from storefront.errors import TransactionFailed


@contextmanager
def smart_transaction(session: Session) -> Iterator:
    """
    Unit of work for cart and order reads/writes.

    Joins the caller's transaction through a SAVEPOINT when one is open, so a
    failure inside the block only undoes the block's own work. Otherwise the
    block owns a fresh transaction that commits on exit.
    """
    cm = session.begin_nested() if session.in_transaction() else session.begin()
    with cm:
        yield


@contextmanager
def owned_transaction(session: Session) -> Iterator:
    """
    A transaction that must be the outermost one on the session.

    Used where leaving the block is reported as durable (checkout). A
    SAVEPOINT inside somebody else's transaction would only be released, and
    the caller could still roll it back, so an already-open transaction is
    refused with TransactionFailed instead of being joined.
    """
    if session.in_transaction():
        raise TransactionFailed(
            "a transaction is already open on this session",
            {"reason": "nested"},
        )
    with session.begin():
        yield
