"""
Collision-free slugs and short codes

Candidates are checked against live rows first, then inserted inside a
SAVEPOINT. A unique-constraint violation on the insert means another
request took the candidate in the meantime, so the next candidate is
tried instead of surfacing the database error.
"""

from typing import Awaitable, Callable, Iterable, Iterator, Optional, TypeVar
import re
import secrets
import unicodedata

from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from churchflow.core.config import get_settings
from churchflow.core.errors import AllocationExhausted

logger = structlog.get_logger(__name__)
settings = get_settings()

# No 0/O or 1/I: codes are read aloud and typed at child pickup
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

EntityT = TypeVar("EntityT", bound=SQLModel)


def slugify(value: Optional[str], max_length: Optional[int] = None, fallback: str = "") -> str:
    """Lower-case, collapse non-alphanumeric runs to one hyphen, trim, truncate.

    >>> slugify("Grace Community Church!")
    'grace-community-church'
    """
    max_length = max_length or settings.SLUG_MAX_LENGTH
    ascii_value = unicodedata.normalize("NFKD", value or "").encode("ascii", "ignore").decode("ascii")
    slug = _NON_ALNUM.sub("-", ascii_value.lower()).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or fallback


def slug_candidates(base: str, max_length: Optional[int] = None) -> Iterator[str]:
    """Yield ``base``, ``base-1``, ``base-2``, ...

    Every suffix is applied to the original base, shortened so the whole
    candidate fits in ``max_length``.
    """
    max_length = max_length or settings.SLUG_MAX_LENGTH
    yield base
    counter = 1
    while True:
        suffix = f"-{counter}"
        yield base[: max_length - len(suffix)].rstrip("-") + suffix
        counter += 1


def generate_code(length: Optional[int] = None, alphabet: str = CODE_ALPHABET) -> str:
    """Draw a random short code"""
    length = length or settings.CODE_LENGTH
    return "".join(secrets.choice(alphabet) for _ in range(length))


def code_candidates(attempts: Optional[int] = None, length: Optional[int] = None) -> Iterator[str]:
    """Yield a bounded number of freshly drawn codes"""
    attempts = attempts or settings.CODE_MAX_ATTEMPTS
    for _ in range(attempts):
        yield generate_code(length)


async def persist_unique(
    session: AsyncSession,
    build: Callable[[str], EntityT],
    candidates: Iterable[str],
    exists: Callable[[str], Awaitable[bool]],
    kind: str = "identifier",
) -> EntityT:
    """Persist the entity built from the first candidate that is free.

    ``build`` returns a new row or an existing one with the candidate
    assigned. ``exists`` answers whether a candidate is taken in the
    namespace. The entity is flushed, not committed; the caller owns the
    transaction. A savepoint rollback expires an existing row, so callers
    updating one refresh it after committing.

    Raises:
        AllocationExhausted: every candidate was taken
        IntegrityError: the insert failed for a reason other than the
            candidate being taken
    """
    for candidate in candidates:
        if await exists(candidate):
            continue

        entity = build(candidate)
        try:
            async with session.begin_nested():
                session.add(entity)
                await session.flush()
        except IntegrityError:
            if not await exists(candidate):
                raise
            logger.warning("Identifier taken concurrently, retrying", kind=kind, candidate=candidate)
            continue

        return entity

    logger.error("Identifier allocation exhausted", kind=kind)
    raise AllocationExhausted()
