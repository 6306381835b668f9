"""Sample collection data for importer tests.

The default collection holds 2 decks, 1 model (2 fields, 1 template),
3 notes and 3 cards: a new, a review and a learning card.

Usage:
    from apkg_import.tests.fixtures.sample_data import SAMPLE_DECKS, SAMPLE_NOTES
"""

from typing import Any

DEFAULT_DECK_ID = 1
TEST_DECK_ID = 1234567890123
BASIC_MODEL_ID = 9876543210987


# ==================== Collection metadata ====================


SAMPLE_DECKS: dict[str, dict[str, Any]] = {
    "1": {"id": DEFAULT_DECK_ID, "name": "Default", "desc": ""},
    "1234567890123": {
        "id": TEST_DECK_ID,
        "name": "Test Deck",
        "desc": "A test deck",
    },
}

SAMPLE_MODELS: dict[str, dict[str, Any]] = {
    "9876543210987": {
        "id": BASIC_MODEL_ID,
        "name": "Basic",
        "flds": [{"name": "Front", "ord": 0}, {"name": "Back", "ord": 1}],
        "tmpls": [{"name": "Card 1", "ord": 0, "qfmt": "{{Front}}", "afmt": "{{Back}}"}],
        "css": ".card { font-family: arial; }",
    },
}


# ==================== Notes ====================


SAMPLE_NOTES: list[dict[str, Any]] = [
    {
        "id": 1000000000001,
        "guid": "abc123",
        "mid": BASIC_MODEL_ID,
        "mod": 1600000001,
        "tags": " vocabulary test ",
        "flds": "Hello\x1fWorld",
        "sfld": "Hello",
    },
    {
        "id": 1000000000002,
        "guid": "def456",
        "mid": BASIC_MODEL_ID,
        "mod": 1600000002,
        "tags": " japanese kanji n5 ",
        "flds": "日本語\x1fJapanese",
        "sfld": "日本語",
    },
    {
        "id": 1000000000003,
        "guid": "ghi789",
        "mid": BASIC_MODEL_ID,
        "mod": 1600000003,
        "tags": "",
        "flds": "Question\x1fAnswer",
        "sfld": "Question",
    },
]


# ==================== Cards ====================


def _card(**values: Any) -> dict[str, Any]:
    row = {
        "did": TEST_DECK_ID,
        "ord": 0,
        "type": 0,
        "queue": 0,
        "due": 0,
        "ivl": 0,
        "factor": 0,
        "reps": 0,
        "lapses": 0,
        "left": 0,
        "odue": 0,
        "odid": 0,
        "flags": 0,
    }
    row.update(values)
    return row


SAMPLE_CARDS: list[dict[str, Any]] = [
    # New
    _card(id=2000000000001, nid=1000000000001, mod=1600000001, due=1),
    # Review
    _card(
        id=2000000000002,
        nid=1000000000002,
        mod=1600000002,
        type=2,
        queue=2,
        due=100,
        ivl=30,
        factor=2500,
        reps=5,
        lapses=1,
    ),
    # Learning
    _card(
        id=2000000000003,
        nid=1000000000003,
        mod=1600000003,
        type=1,
        queue=1,
        due=1600100000,
        ivl=1,
        factor=2500,
        reps=1,
        left=1001,
        flags=1,
    ),
]
