"""DTOs for learning use cases."""

from cardwise.application.learning.use_cases.dtos.study_dtos import (
    ReviewResult,
    StudyCard,
    StudySession,
)

__all__ = ["ReviewResult", "StudyCard", "StudySession"]
