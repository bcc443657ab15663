import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError
from trello_client.errors import InvalidDateFormat, MissingKey, TypeMismatch
from trello_client.models import Board, Card, CardList, Label, Member
from trello_client.routes import AvatarSize


def load_fixture(name: str):
    p = Path(__file__).parent / "fixtures" / name
    with open(p, encoding="utf-8") as f:
        return json.load(f)


@pytest.mark.parametrize("record", [Board, CardList, Card])
def test_id_and_name_only_leaves_every_optional_absent(record):
    decoded = record.decode({"id": "x1", "name": "Inbox"})

    assert decoded.id == "x1"
    assert decoded.name == "Inbox"
    for field, value in decoded.model_dump().items():
        if field not in ("id", "name"):
            assert value is None, field


@pytest.mark.parametrize("record", [Board, CardList, Card])
@pytest.mark.parametrize("missing", ["id", "name"])
def test_missing_required_key_is_missing_key(record, missing):
    payload = {"id": "x1", "name": "Inbox"}
    del payload[missing]

    with pytest.raises(MissingKey) as exc:
        record.decode(payload)
    assert exc.value.key == missing


@pytest.mark.parametrize("record", [Board, CardList, Card])
def test_wrong_type_is_type_mismatch_not_missing_key(record):
    with pytest.raises(TypeMismatch) as exc:
        record.decode({"id": 12345, "name": "Inbox"})
    assert exc.value.key == "id"
    assert not isinstance(exc.value, MissingKey)


def test_first_failure_in_field_order_wins():
    with pytest.raises(MissingKey) as exc:
        Card.decode({"closed": "yes"})
    assert exc.value.key == "id"

    with pytest.raises(TypeMismatch) as exc2:
        Card.decode({"id": "c1", "name": "n", "closed": "yes", "due": "bad"})
    assert exc2.value.key == "closed"


def test_empty_board_id_rejected():
    with pytest.raises(TypeMismatch):
        Board.decode({"id": "", "name": "Empty"})


def test_non_object_payload_rejected():
    with pytest.raises(TypeMismatch):
        Board.decode([{"id": "b1", "name": "n"}])


def test_board_fixture_decodes_nested_records():
    board = Board.decode(load_fixture("board.json"))

    assert board.name == "Release Planning"
    assert board.description == "Tracks the 2.0 release"
    assert board.closed is False
    assert board.organization_id == "5739f0a1e1e8b2f1d5a1c0ff"
    assert board.short_url == "https://trello.com/b/AbCd1234"

    assert [lst.name for lst in board.lists] == ["To Do", "Done"]
    assert board.lists[1].position == 8192.5
    assert [lst.name for lst in board.sorted_lists()] == ["Done", "To Do"]

    (card,) = board.cards
    assert card.due_date == datetime(2016, 4, 8, 16, 30, tzinfo=timezone.utc)
    assert card.member_ids == (
        "5739f0a1e1e8b2f1d5a1c301",
        "5739f0a1e1e8b2f1d5a1c302",
    )
    assert [label.color for label in card.labels] == ["green", "red"]
    assert card.labels[1].name == ""


def test_board_with_malformed_list_fails_whole_decode():
    payload = {
        "id": "b1",
        "name": "Board",
        "lists": [{"id": "L1", "name": "To Do"}, {"id": "L2"}],
    }
    with pytest.raises(MissingKey) as exc:
        Board.decode(payload)
    assert exc.value.key == "name"


def test_card_with_malformed_label_fails_whole_card():
    payload = {
        "id": "c1",
        "name": "Card",
        "labels": [{"id": "lb1", "color": "red"}, {"name": "no id"}],
    }
    with pytest.raises(MissingKey) as exc:
        Card.decode(payload)
    assert exc.value.key == "id"


def test_card_due_with_offset():
    card = Card.decode(
        {"id": "c1", "name": "Card", "due": "2016-04-08T12:30:00.000-0400"}
    )
    assert card.due_date == datetime(2016, 4, 8, 16, 30, tzinfo=timezone.utc)


def test_card_without_due_or_null_due():
    assert Card.decode({"id": "c1", "name": "Card"}).due_date is None
    assert Card.decode({"id": "c1", "name": "Card", "due": None}).due_date is None


def test_card_with_unparseable_due_fails():
    with pytest.raises(InvalidDateFormat):
        Card.decode({"id": "c1", "name": "Card", "due": "2016-04-08"})


def test_cards_fixture_preserves_empty_collections():
    first, second = (Card.decode(item) for item in load_fixture("cards.json"))

    assert first.description == "Summarise merged PRs"
    assert first.labels == (
        Label(id="5739f0a1e1e8b2f1d5a1c401", name="docs", color="green"),
    )
    assert second.member_ids == ()
    assert second.labels == ()
    assert second.description is None


def test_label_name_optional():
    label = Label.decode({"id": "lb1", "color": "sky"})
    assert label.name is None
    assert label.color == "sky"


def test_member_fixture_and_avatar_url():
    member = Member.decode(load_fixture("member.json"))

    assert member.username == "adalovelace"
    assert member.full_name == "Ada Lovelace"
    assert member.has_avatar
    assert member.avatar_url(AvatarSize.SMALL) == (
        "https://trello-avatars.s3.amazonaws.com/"
        "a1b2c3d4e5f60718293a4b5c6d7e8f90/30.png"
    )


def test_member_without_avatar_hash():
    member = Member.decode({"id": "m1", "username": "bob", "avatarHash": None})
    assert member.avatar_hash is None
    assert not member.has_avatar
    assert member.avatar_url() is None


def test_member_requires_username():
    with pytest.raises(MissingKey) as exc:
        Member.decode({"id": "m1", "fullName": "Bob"})
    assert exc.value.key == "username"


def test_decoding_is_idempotent():
    payload = load_fixture("board.json")
    assert Board.decode(payload) == Board.decode(payload)


def test_records_are_immutable():
    card = Card.decode({"id": "c1", "name": "Card"})
    with pytest.raises(ValidationError):
        card.name = "Renamed"


def test_card_due_with_trailing_newline_fails():
    with pytest.raises(InvalidDateFormat):
        Card.decode({"id": "c1", "name": "Card", "due": "2016-04-08T16:30:00.000Z\n"})
