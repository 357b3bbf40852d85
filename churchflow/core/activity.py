"""
Activity recording

Audit entries are written after the business change has committed, in a
transaction of their own. A failed audit write is logged and swallowed;
it never undoes the change it describes.
"""

from enum import Enum
from typing import Any, Dict, Optional
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from churchflow.core.tenancy import ChurchContext
from churchflow.models.activity_log import ActivityLog

logger = structlog.get_logger(__name__)


class ActivityAction(str, Enum):
    """Kinds of recorded actions"""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CHURCH_CREATED = "CHURCH_CREATED"
    CHECK_OUT = "CHECK_OUT"
    PRAYED = "PRAYED"
    PUSH_SENT = "PUSH_SENT"


class ActivityRecorder:
    """Appends ActivityLog rows for one request"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        context: ChurchContext,
        action: ActivityAction,
        entity_type: str,
        entity_id: Optional[uuid.UUID],
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        entry = ActivityLog(
            church_id=context.church_id,
            user_id=context.user_id,
            action=ActivityAction(action).value,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
        )
        try:
            self.session.add(entry)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to record activity",
                church_id=str(context.church_id),
                action=ActivityAction(action).value,
                entity_type=entity_type,
                entity_id=str(entity_id),
                error=str(e),
            )
