"""
Role gate for sensitive church actions

Ordinary CRUD is open to every user of the church. Only the actions listed
in ``ACTION_ROLES`` consult the caller's role.
"""

from enum import Enum
from typing import Dict, FrozenSet, Set
import structlog

from churchflow.models.church_user import ChurchRole
from churchflow.core.errors import Forbidden

logger = structlog.get_logger(__name__)


class SensitiveAction(str, Enum):
    """Actions restricted to privileged roles"""
    CHURCH_SETTINGS_UPDATE = "church:settings_update"
    PAGE_CREATE = "page:create"
    PUSH_BROADCAST = "push:broadcast"


def roles_at_least(role: ChurchRole) -> FrozenSet[ChurchRole]:
    """``role`` and every role above it in the hierarchy"""
    threshold = ChurchRole(role).rank
    return frozenset(r for r in ChurchRole if r.rank <= threshold)


ADMINISTRATORS: FrozenSet[ChurchRole] = roles_at_least(ChurchRole.ADMIN)

# Allow-list: action -> roles permitted to perform it
ACTION_ROLES: Dict[SensitiveAction, FrozenSet[ChurchRole]] = {
    SensitiveAction.CHURCH_SETTINGS_UPDATE: ADMINISTRATORS,
    SensitiveAction.PAGE_CREATE: ADMINISTRATORS,
    SensitiveAction.PUSH_BROADCAST: ADMINISTRATORS,
}


def get_actions_for_role(role: ChurchRole) -> Set[SensitiveAction]:
    """Sensitive actions a role may perform"""
    return {action for action, roles in ACTION_ROLES.items() if ChurchRole(role) in roles}


def is_allowed(role: ChurchRole, action: SensitiveAction) -> bool:
    """Check a role against the allow-list; unknown actions are denied"""
    return ChurchRole(role) in ACTION_ROLES.get(action, frozenset())


def authorize(role: ChurchRole, action: SensitiveAction) -> None:
    """Raise Forbidden unless ``role`` may perform ``action``"""
    if not is_allowed(role, action):
        logger.info("Sensitive action denied", action=action.value, role=ChurchRole(role).value)
        raise Forbidden(f"Permission required: {action.value}")
