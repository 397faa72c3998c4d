"""ThinkCheck: LLM-backed quizzes, answer evaluation and study notes."""

__version__ = "0.1.0"
