import pytest
from trello_client.routes import (
    AvatarSize,
    CardFilter,
    ListFilter,
    MemberFilter,
    Route,
    avatar_url,
)


@pytest.mark.parametrize(
    ("route", "params", "expected"),
    [
        (Route.SEARCH, {}, "search/"),
        (Route.ALL_BOARDS, {}, "members/me/boards/"),
        (Route.BOARD, {"board_id": "b1"}, "boards/b1/"),
        (Route.LISTS, {"board_id": "b1"}, "boards/b1/lists/"),
        (Route.CARDS_FOR_LIST, {"list_id": "L1"}, "lists/L1/cards/"),
        (Route.MEMBER, {"member_id": "m1"}, "members/m1/"),
        (Route.MEMBERS_FOR_CARD, {"card_id": "c1"}, "cards/c1/members/"),
    ],
)
def test_route_paths(route, params, expected):
    assert route.path(**params) == expected


def test_route_declares_required_params():
    assert Route.ALL_BOARDS.params == ()
    assert Route.BOARD.params == ("board_id",)
    assert Route.MEMBERS_FOR_CARD.template == "cards/{card_id}/members/"


def test_route_rejects_missing_param():
    with pytest.raises(ValueError) as exc:
        Route.BOARD.path()
    assert "board_id" in str(exc.value)

    with pytest.raises(ValueError):
        Route.CARDS_FOR_LIST.path(list_id="")


def test_filters_render_wire_values():
    assert str(ListFilter.CLOSED) == "closed"
    assert str(CardFilter.VISIBLE) == "visible"
    assert str(MemberFilter.OWNERS) == "owners"
    assert ListFilter("open") is ListFilter.OPEN
    with pytest.raises(ValueError):
        CardFilter("admins")


def test_avatar_url_sizes():
    assert avatar_url("abc", AvatarSize.SMALL) == (
        "https://trello-avatars.s3.amazonaws.com/abc/30.png"
    )
    assert avatar_url("abc") == "https://trello-avatars.s3.amazonaws.com/abc/170.png"
    with pytest.raises(ValueError):
        avatar_url("")


def test_route_params_are_percent_encoded():
    assert Route.BOARD.path(board_id="a/b?c") == "boards/a%2Fb%3Fc/"
    assert Route.MEMBER.path(member_id="me") == "members/me/"
