import pytest

from src.domain.entities import AccountRole
from src.domain.policies import is_authorized


@pytest.mark.parametrize(
    "role, required, expected",
    [
        (AccountRole.admin, [AccountRole.admin], True),
        (AccountRole.organizer, [AccountRole.admin], False),
        (AccountRole.organizer, [AccountRole.admin, AccountRole.organizer], True),
        ("participant", ["participant"], True),
        (AccountRole.user, [], True),
        (None, [], False),
        (None, [AccountRole.admin], False),
        ("superuser", [AccountRole.admin], False),
        ("superuser", [], False),
    ],
)
def test_is_authorized(role, required, expected):
    assert is_authorized(role, required) is expected
