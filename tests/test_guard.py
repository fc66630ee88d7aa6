import pytest

from src.auth.guard import authorize, can_modify, require_authenticated
from src.errors import Forbidden, Unauthenticated
from src.models.account import Principal

AUTHOR = Principal(id="author-1", username="alice")
OTHER = Principal(id="other-2", username="bob")
ADMIN = Principal(id="admin-3", username="root", is_admin=True)


@pytest.mark.parametrize("principal", [AUTHOR, ADMIN])
def test_author_and_admin_are_allowed(principal):
    assert authorize(principal, AUTHOR.id) is None
    assert can_modify(principal, AUTHOR.id)


def test_other_user_is_forbidden():
    with pytest.raises(Forbidden):
        authorize(OTHER, AUTHOR.id)
    assert not can_modify(OTHER, AUTHOR.id)


def test_missing_principal_is_unauthenticated():
    with pytest.raises(Unauthenticated):
        authorize(None, AUTHOR.id)
    with pytest.raises(Unauthenticated):
        require_authenticated(None)
    assert not can_modify(None, AUTHOR.id)


def test_admin_flag_is_what_matters_not_the_username():
    impostor = Principal(id="x-9", username="admin", is_admin=False)
    with pytest.raises(Forbidden):
        authorize(impostor, AUTHOR.id)


def test_require_authenticated_returns_principal():
    assert require_authenticated(OTHER) is OTHER
