"""Value objects for the learning context."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from cardwise.domain.common.value_object import ValueObject
from cardwise.domain.learning.exceptions import CorruptStateError, InvalidOutcomeError


class CardState(str, Enum):
    """Lifecycle stage of a card for one user."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"

    @classmethod
    def parse(cls, raw: str, flashcard_id: int | None = None) -> "CardState":
        """Parse a stored state, refusing anything unrecognized."""
        try:
            return cls(raw)
        except ValueError:
            raise CorruptStateError(raw, flashcard_id) from None


class ReviewOutcome(str, Enum):
    """How the user rated their recall."""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @property
    def is_correct(self) -> bool:
        return self is not ReviewOutcome.AGAIN

    @classmethod
    def parse(cls, raw: "str | bool | ReviewOutcome") -> "ReviewOutcome":
        """
        Parse an outcome submitted by a client.

        Graded cards send one of again/hard/good/easy. Binary card types
        (true/false, multiple choice) send correct/incorrect or a boolean,
        which map to good/again.

        Raises:
            InvalidOutcomeError: If the value is not recognized
        """
        if isinstance(raw, ReviewOutcome):
            return raw
        if isinstance(raw, bool):
            return cls.GOOD if raw else cls.AGAIN
        if not isinstance(raw, str):
            raise InvalidOutcomeError(raw)

        normalized = raw.strip().lower()
        if normalized == "correct":
            return cls.GOOD
        if normalized == "incorrect":
            return cls.AGAIN
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidOutcomeError(raw) from None


class CardType(str, Enum):
    """Presentation type of a flashcard."""

    BASIC = "basic"
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    FILL_BLANK = "fill_blank"
    CODE_SNIPPET = "code_snippet"


class ScopeKind(str, Enum):
    """What a study session is scoped by."""

    ALL = "all"
    CATEGORY = "category"
    LIST = "list"
    TOPIC = "topic"
    DECK = "deck"
    IMPORTANT = "important"


@dataclass(frozen=True)
class SessionScope(ValueObject):
    """Scope of a study session: a category, named list, topic or deck."""

    kind: ScopeKind
    value: str | None = None

    def __post_init__(self) -> None:
        needs_value = self.kind not in (ScopeKind.ALL, ScopeKind.IMPORTANT)
        if needs_value and not (self.value and self.value.strip()):
            raise ValueError(f"Scope '{self.kind.value}' requires a value")

    @classmethod
    def all_cards(cls) -> "SessionScope":
        return cls(kind=ScopeKind.ALL)


@dataclass(frozen=True)
class PeriodKey(ValueObject):
    """Billing period identifier, one per calendar month (YYYY-MM)."""

    value: str

    @classmethod
    def for_instant(cls, instant: datetime) -> "PeriodKey":
        return cls(f"{instant.year:04d}-{instant.month:02d}")

    def __str__(self) -> str:
        return self.value
