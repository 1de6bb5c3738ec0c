from __future__ import annotations

import functools
from typing import Iterable, Iterator, TypeVar

import pydantic
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clubstats.core.app_logger import get_logger
from clubstats.core.errors import EngineError, UpstreamError

logger = get_logger(__name__)

T = TypeVar("T")

# keeps IN (...) lists under SQLite's bound-parameter limit
IN_CHUNK_SIZE = 500


def chunked(items: Iterable[T], size: int = IN_CHUNK_SIZE) -> Iterator[list[T]]:
    batch: list[T] = []
    for it in items:
        batch.append(it)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


def store_call(fn):
    """Turn store failures into UpstreamError. First argument must be the Session."""

    @functools.wraps(fn)
    def wrapper(db: Session, *args, **kwargs):
        try:
            return fn(db, *args, **kwargs)
        except EngineError:
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("store call %s failed: %s", fn.__name__, e)
            raise UpstreamError(f"Store query failed in {fn.__name__}") from e
        except pydantic.ValidationError as e:
            logger.error("store call %s returned a malformed row: %s", fn.__name__, e)
            raise UpstreamError(f"Store returned a malformed row in {fn.__name__}") from e

    return wrapper


@store_call
def commit(db: Session) -> None:
    db.commit()
