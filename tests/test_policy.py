import pytest

from errors import ForbiddenError
from schemas.auth_schema import Principal
from security.policy import Action, Resource, authorize, is_allowed

OWNER = Principal(user_id=1, email="yamada@example.com", name="Taro Yamada")
OTHER = Principal(user_id=2, email="suzuki@example.com", name="Hanako Suzuki")
MANAGER = Principal(user_id=3, email="tanaka@example.com", name="Manager Tanaka", is_manager=True)


@pytest.mark.parametrize("principal,action,expected", [
    (OWNER, Action.READ, True),
    (OTHER, Action.READ, False),
    (MANAGER, Action.READ, True),
    (OWNER, Action.UPDATE, True),
    (OTHER, Action.UPDATE, False),
    (MANAGER, Action.UPDATE, False),
    (OWNER, Action.DELETE, True),
    (MANAGER, Action.DELETE, False),
])
def test_report_rules(principal, action, expected):
    assert is_allowed(principal, Resource.REPORT, action, owner_id=OWNER.id) is expected


def test_comment_rules():
    assert is_allowed(OWNER, Resource.COMMENT, Action.READ)
    assert not is_allowed(OWNER, Resource.COMMENT, Action.CREATE)
    assert is_allowed(MANAGER, Resource.COMMENT, Action.CREATE)
    # comments are never edited or removed, not even by managers
    assert not is_allowed(MANAGER, Resource.COMMENT, Action.UPDATE)
    assert not is_allowed(MANAGER, Resource.COMMENT, Action.DELETE)


def test_master_data_rules():
    assert is_allowed(OWNER, Resource.CUSTOMER, Action.READ)
    assert not is_allowed(OWNER, Resource.CUSTOMER, Action.UPDATE)
    assert is_allowed(MANAGER, Resource.CUSTOMER, Action.DELETE)
    assert not is_allowed(OWNER, Resource.SALES_PERSON, Action.READ)
    assert is_allowed(MANAGER, Resource.SALES_PERSON, Action.CREATE)


def test_missing_owner_is_not_ownership():
    assert not is_allowed(OWNER, Resource.REPORT, Action.UPDATE, owner_id=None)


def test_authorize_raises_forbidden():
    with pytest.raises(ForbiddenError) as exc_info:
        authorize(OTHER, Resource.REPORT, Action.UPDATE, owner_id=OWNER.id)

    assert exc_info.value.status_code == 403
    assert exc_info.value.code == "FORBIDDEN"
    assert exc_info.value.message == "You are not allowed to edit this report"


def test_authorize_allows():
    assert authorize(MANAGER, Resource.REPORT, Action.READ, owner_id=OWNER.id) is None
