# Overview: Service-layer operations for reference numbers; encapsulates sequence allocation.

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError
from ..extensions import db
from ..models import ReferenceSequence


class SequenceRaceError(ConflictError):
    """Another request created the store's first sequence row at the same time."""


def _bump(store: int, document_type: str) -> int | None:
    """Increment an existing sequence row and return the number it handed out."""
    stmt = (
        update(ReferenceSequence)
        .where(
            ReferenceSequence.store == store,
            ReferenceSequence.document_type == document_type,
        )
        .values(next_number=ReferenceSequence.next_number + 1)
    )
    if not db.session.execute(stmt).rowcount:
        return None
    db.session.flush()
    current = (
        db.session.query(ReferenceSequence.next_number)
        .filter_by(store=store, document_type=document_type)
        .scalar()
    )
    return current - 1


def next_reference_number(*, store: int, document_type: str = "RECEIPT", prefix: str = "S", pad: int = 6) -> str:
    """
    Allocate the next reference number for a store, e.g. "S1-000042".

    Runs inside the caller's transaction (flush, no commit): if the caller
    rolls back, the number is released with everything else.

    When two first receipts for a store race, the loser's insert hits the
    unique constraint and SequenceRaceError is raised. Callers run under
    run_with_retry(retry_on=(SequenceRaceError,)), so the whole unit of work
    starts again and finds the winner's row.
    """
    number = _bump(store, document_type)
    if number is None:
        db.session.add(ReferenceSequence(store=store, document_type=document_type, next_number=2))
        try:
            db.session.flush()
        except IntegrityError as e:
            raise SequenceRaceError(
                f"Reference sequence for store {store} was created concurrently",
                details={"store": store, "document_type": document_type},
            ) from e
        number = 1

    return f"{prefix}{store}-{number:0{pad}d}"
