"""
Who may do what.

Every router asks authorize() instead of re-deriving "owner or manager"
checks inline. Rules are keyed by (resource, action); a rule receives the
principal and, where ownership matters, the id of the owning sales person.
"""
import logging
from enum import Enum
from typing import Callable, Optional

from errors import ForbiddenError
from schemas.auth_schema import Principal

logger = logging.getLogger(__name__)


class Resource(str, Enum):
    REPORT = "report"
    COMMENT = "comment"
    CUSTOMER = "customer"
    SALES_PERSON = "sales_person"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


Rule = Callable[[Principal, Optional[int]], bool]


def _anyone(principal: Principal, owner_id: Optional[int]) -> bool:
    return True


def _nobody(principal: Principal, owner_id: Optional[int]) -> bool:
    return False


def _manager(principal: Principal, owner_id: Optional[int]) -> bool:
    return principal.is_manager


def _owner(principal: Principal, owner_id: Optional[int]) -> bool:
    return owner_id is not None and principal.id == owner_id


def _owner_or_manager(principal: Principal, owner_id: Optional[int]) -> bool:
    return principal.is_manager or _owner(principal, owner_id)


RULES: dict[tuple[Resource, Action], Rule] = {
    (Resource.REPORT, Action.READ): _owner_or_manager,
    (Resource.REPORT, Action.CREATE): _anyone,
    # managers read every report but only the author edits it
    (Resource.REPORT, Action.UPDATE): _owner,
    (Resource.REPORT, Action.DELETE): _owner,
    (Resource.COMMENT, Action.READ): _anyone,
    (Resource.COMMENT, Action.CREATE): _manager,
    # comments are append-only
    (Resource.COMMENT, Action.UPDATE): _nobody,
    (Resource.COMMENT, Action.DELETE): _nobody,
    (Resource.CUSTOMER, Action.READ): _anyone,
    (Resource.CUSTOMER, Action.CREATE): _manager,
    (Resource.CUSTOMER, Action.UPDATE): _manager,
    (Resource.CUSTOMER, Action.DELETE): _manager,
    (Resource.SALES_PERSON, Action.READ): _manager,
    (Resource.SALES_PERSON, Action.CREATE): _manager,
    (Resource.SALES_PERSON, Action.UPDATE): _manager,
    (Resource.SALES_PERSON, Action.DELETE): _manager,
}

MESSAGES = {
    Action.READ: "You are not allowed to view this {resource}",
    Action.CREATE: "You are not allowed to create this {resource}",
    Action.UPDATE: "You are not allowed to edit this {resource}",
    Action.DELETE: "You are not allowed to delete this {resource}",
}


def is_allowed(
    principal: Principal,
    resource: Resource,
    action: Action,
    owner_id: Optional[int] = None,
) -> bool:
    rule = RULES.get((resource, action), _nobody)
    return rule(principal, owner_id)


def authorize(
    principal: Principal,
    resource: Resource,
    action: Action,
    owner_id: Optional[int] = None,
) -> None:
    """Raise ForbiddenError unless the principal may perform the action."""
    if is_allowed(principal, resource, action, owner_id):
        return
    logger.info(
        "Denied %s on %s for user %s (owner %s)",
        action.value, resource.value, principal.id, owner_id,
    )
    label = resource.value.replace("_", " ")
    raise ForbiddenError(MESSAGES[action].format(resource=label))
