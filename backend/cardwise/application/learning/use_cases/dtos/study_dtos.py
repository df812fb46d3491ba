"""DTOs for study session use cases."""

from dataclasses import dataclass

from cardwise.domain.learning.entities.flashcard import Flashcard
from cardwise.domain.learning.entities.progress_record import ProgressRecord
from cardwise.domain.learning.entities.session_attempt import SessionAttempt


@dataclass
class StudyCard:
    """A card handed to the client, with its progress if it has any."""

    flashcard: Flashcard
    progress: ProgressRecord | None
    # Recently answered correctly, added because too few cards were left
    top_up: bool = False


@dataclass
class StudySession:
    """A finite, re-callable batch of cards for one session."""

    cards: list[StudyCard]
    candidate_count: int
    due_count: int
    suppressed_count: int
    capped: bool = False


@dataclass
class ReviewResult:
    """Outcome of an answered card: the new progress and the logged attempt."""

    progress: ProgressRecord
    attempt: SessionAttempt
