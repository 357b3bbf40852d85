"""
Church-scoped data access

``ChurchScope`` is the only way routers touch church-owned rows. Every
read and write carries the resolved church id, and a row owned by another
church is reported exactly like a missing one.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar
import uuid

from sqlalchemy import delete, func, update
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from churchflow.core.clock import utcnow
from churchflow.core.errors import NotFound, ValidationFailed
from churchflow.core.tenancy import ChurchContext
from churchflow.models import (
    Attendance,
    CheckIn,
    Communication,
    Donation,
    Event,
    EventRegistration,
    Group,
    GroupMember,
    Member,
    PrayerRequest,
    Volunteer,
)

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)

# Columns that updates never touch
PROTECTED_FIELDS = frozenset({"id", "church_id", "created_at"})


@dataclass(frozen=True)
class Cascade:
    """Dependent rows handled before their parent is deleted"""
    model: Type[SQLModel]
    column: str
    detach: bool = False  # null the reference instead of deleting the row


# Applied in order, inside the parent's transaction
CASCADE_RULES: Dict[Type[SQLModel], Sequence[Cascade]] = {
    Group: (
        Cascade(GroupMember, "group_id"),
        Cascade(Event, "group_id", detach=True),
        Cascade(Communication, "group_id", detach=True),
    ),
    Member: (
        Cascade(GroupMember, "member_id"),
        Cascade(Attendance, "member_id"),
        Cascade(CheckIn, "member_id"),
        Cascade(EventRegistration, "member_id"),
        Cascade(Volunteer, "member_id"),
        Cascade(Donation, "member_id", detach=True),
        Cascade(Group, "leader_id", detach=True),
        Cascade(PrayerRequest, "member_id", detach=True),
    ),
    Event: (
        Cascade(EventRegistration, "event_id"),
        Cascade(Attendance, "event_id"),
        Cascade(CheckIn, "event_id"),
    ),
}


def reject_nulls(model: Type[SQLModel], changes: Dict[str, Any]) -> None:
    """Refuse explicit nulls for NOT NULL columns.

    Raises:
        ValidationFailed: a change sets a non-nullable column to None
    """
    columns = model.__table__.columns
    for key, value in changes.items():
        if value is None and key in columns and not columns[key].nullable:
            raise ValidationFailed(f"{key} cannot be null")


def _church_column(model: Type[SQLModel]):
    column = getattr(model, "church_id", None)
    if column is None:
        raise TypeError(f"{model.__name__} is not church-scoped")
    return column


class ChurchScope:
    """Data access restricted to one church"""

    def __init__(self, session: AsyncSession, context: ChurchContext):
        self.session = session
        self.context = context

    @property
    def church_id(self) -> uuid.UUID:
        return self.context.church_id

    def select(self, model: Type[ModelT]):
        """``select(model)`` already filtered to this church"""
        return select(model).where(_church_column(model) == self.church_id)

    async def find(self, model: Type[ModelT], *criteria) -> Optional[ModelT]:
        result = await self.session.exec(self.select(model).where(*criteria))
        return result.first()

    async def get(self, model: Type[ModelT], entity_id: uuid.UUID, label: Optional[str] = None) -> ModelT:
        """Fetch one row by id.

        Raises:
            NotFound: the row does not exist or belongs to another church
        """
        entity = await self.find(model, model.id == entity_id)
        if entity is None:
            raise NotFound(f"{label or model.__name__} not found")
        return entity

    async def list(
        self,
        model: Type[ModelT],
        *criteria,
        order_by: Iterable[Any] = (),
        offset: int = 0,
        limit: Optional[int] = 100,
    ) -> List[ModelT]:
        query = self.select(model).where(*criteria).order_by(*order_by).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.exec(query)
        return list(result.all())

    async def count(self, model: Type[SQLModel], *criteria) -> int:
        query = (
            select(func.count())
            .select_from(model)
            .where(_church_column(model) == self.church_id, *criteria)
        )
        result = await self.session.exec(query)
        return result.one()

    def add(self, entity: ModelT) -> ModelT:
        """Stage a new row owned by this church"""
        _church_column(type(entity))
        if entity.church_id is None:
            entity.church_id = self.church_id
        elif entity.church_id != self.church_id:
            raise NotFound(f"{type(entity).__name__} not found")
        self.session.add(entity)
        return entity

    async def update(
        self,
        model: Type[ModelT],
        entity_id: uuid.UUID,
        changes: Dict[str, Any],
        label: Optional[str] = None,
    ) -> ModelT:
        """Apply ``changes`` to a row after re-fetching it within this church"""
        entity = await self.get(model, entity_id, label)
        reject_nulls(model, changes)
        for key, value in changes.items():
            if key in PROTECTED_FIELDS or not hasattr(entity, key):
                continue
            setattr(entity, key, value)
        if hasattr(entity, "updated_at"):
            entity.updated_at = utcnow()
        self.session.add(entity)
        return entity

    async def delete(self, model: Type[ModelT], entity_id: uuid.UUID, label: Optional[str] = None) -> ModelT:
        """Delete a row and, first, its dependents.

        Run inside ``atomic()`` so the cascade and the parent go together.
        """
        entity = await self.get(model, entity_id, label)

        for rule in CASCADE_RULES.get(model, ()):
            column = getattr(rule.model, rule.column)
            scoped = (column == entity_id, _church_column(rule.model) == self.church_id)
            if rule.detach:
                await self.session.exec(update(rule.model).where(*scoped).values({rule.column: None}))
            else:
                await self.session.exec(delete(rule.model).where(*scoped))

        await self.session.delete(entity)
        await self.session.flush()
        logger.info("Deleted with dependents", entity_type=model.__name__, entity_id=str(entity_id))
        return entity

    @asynccontextmanager
    async def atomic(self):
        """Commit everything staged in the block, or nothing"""
        try:
            yield self
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
