"""Typed, immutable representation of a parsed .apkg package.

Identifiers are the source application's 64-bit integers and are scoped to
one package. Relations (note -> model, card -> note, card -> deck) are plain
id values; they are not checked here.
"""

from pydantic import Field

from apkg_import.shared.schemas import BaseSchema


class Deck(BaseSchema):
    """Deck from the collection metadata.

    Attributes:
        id: Deck ID.
        name: Full deck name ("Parent::Child" for nested decks).
        description: Deck description, empty when the source has none.
    """

    id: int
    name: str
    description: str = ""


class Template(BaseSchema):
    """Card template of a note model.

    Format strings are copied verbatim; placeholders are not interpreted.
    """

    name: str
    question_format: str
    answer_format: str


class Model(BaseSchema):
    """Note model (note type).

    Attributes:
        id: Model ID.
        name: Model name.
        fields: Field names, in the order values appear in a note.
        templates: Card templates; a card's template_ordinal indexes this.
        css: Styling shared by the model's templates.
    """

    id: int
    name: str
    fields: tuple[str, ...] = ()
    templates: tuple[Template, ...] = ()
    css: str = ""


class Note(BaseSchema):
    """Note row.

    Attributes:
        id: Note ID.
        guid: Stable identifier kept across re-imports.
        model_id: ID of the note's Model.
        modified: Modification time (epoch seconds).
        fields: Field values, aligned with the model's field names.
        tags: Tags in source order.
        sort_field: Value the source application sorts the note list by.
    """

    id: int
    guid: str
    model_id: int
    modified: int = 0
    fields: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    sort_field: str = ""


class Card(BaseSchema):
    """Card row with its raw scheduling state.

    ``type`` is 0=new, 1=learning, 2=review, 3=relearning. Scheduling values
    are copied as stored; their meaning depends on ``type`` and ``queue``.
    """

    id: int
    note_id: int
    deck_id: int
    template_ordinal: int
    modified: int = 0
    type: int = 0
    queue: int = 0
    due: int = 0
    interval: int = 0
    ease_factor: int = 0
    reps: int = 0
    lapses: int = 0
    remaining_steps: int = 0
    original_due: int = 0
    original_deck_id: int = 0
    flags: int = 0


class Package(BaseSchema):
    """Parsed contents of one .apkg file.

    Attributes:
        decks: Decks in collection metadata order.
        models: Note models in collection metadata order.
        notes: Notes in table order.
        cards: Cards in table order.
        media: Media manifest, archive entry name -> original file name.
    """

    decks: tuple[Deck, ...] = ()
    models: tuple[Model, ...] = ()
    notes: tuple[Note, ...] = ()
    cards: tuple[Card, ...] = ()
    media: dict[str, str] = Field(default_factory=dict)


class PackageSummary(BaseSchema):
    """Entry listing and content counts of a package."""

    entries: tuple[str, ...] = ()
    deck_count: int = 0
    model_count: int = 0
    note_count: int = 0
    card_count: int = 0
    media_count: int = 0

    @classmethod
    def from_package(cls, package: Package, entries: list[str]) -> "PackageSummary":
        """Count the contents of a parsed package.

        Args:
            package: Parsed package.
            entries: Archive entry names.

        Returns:
            PackageSummary for the package.
        """
        return cls(
            entries=tuple(entries),
            deck_count=len(package.decks),
            model_count=len(package.models),
            note_count=len(package.notes),
            card_count=len(package.cards),
            media_count=len(package.media),
        )
