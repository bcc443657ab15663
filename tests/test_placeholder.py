import json
from pathlib import Path


def test_fixtures_are_valid_json():
    """Ensure we can load our sample data."""
    fixtures_dir = Path(__file__).parent / "fixtures"

    with open(fixtures_dir / "board.json") as f:
        data = json.load(f)
        assert data["id"]
        assert len(data["lists"]) >= 1

    with open(fixtures_dir / "cards.json") as f:
        data = json.load(f)
        assert isinstance(data, list)
        assert data[0]["due"].endswith("-0400")

    with open(fixtures_dir / "member.json") as f:
        assert json.load(f)["username"] == "adalovelace"
