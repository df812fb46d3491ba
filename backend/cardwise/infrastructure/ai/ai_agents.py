from pydantic import BaseModel, Field
from pydantic_ai import Agent

from cardwise.infrastructure.ai.ai_model import get_ai_model


class GeneratedCard(BaseModel):
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    category: str | None = None


class TransformedCard(BaseModel):
    question: str = Field(min_length=1)
    # A list of correct options for multiple choice, text otherwise
    answer: str | list[str]
    options: list[str] = Field(default_factory=list)


def get_generation_agent() -> Agent[None, GeneratedCard]:
    return Agent(
        get_ai_model(),
        output_type=GeneratedCard,
        instructions="""
        You write a single educational flashcard about the topic the user gives you.
        Make the question clear and specific; it must test one idea only.
        The answer should be concise but complete.
        If a context is provided, stay within it.
        Optionally suggest a short category name (e.g. "JavaScript", "Algorithms").
        """,
    )


TARGET_TYPE_INSTRUCTIONS = {
    "basic": "Create a plain question and a concise text answer.",
    "multiple_choice": (
        "Create a multiple choice question with exactly 4 options. "
        "The answer is a list holding the correct option text, copied exactly from options."
    ),
    "true_false": 'Create a true/false statement. The answer is "true" or "false".',
    "fill_blank": "Create a sentence with ___ marking the blank. The answer fills the blank.",
    "code_snippet": (
        "Create a question about a short code snippet inside a fenced code block. "
        "The answer explains what the code does or returns."
    ),
}


def get_transform_agent(target_type: str) -> Agent[None, TransformedCard]:
    return Agent(
        get_ai_model(),
        output_type=TransformedCard,
        instructions=f"""
        You transform flashcards between formats without changing what they test.
        {TARGET_TYPE_INSTRUCTIONS[target_type]}
        """,
    )
