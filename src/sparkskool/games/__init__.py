"""Classroom game generators and live game sessions.

Modules:
- word_search: Grid word search with 8 directions
- crossword: Alternating across/down crossword
- memory: Question/answer concentration game
- word_scramble: Scrambled word guessing
- matching: Term/definition matching
- question_bank: Timed quiz questions from LLM and public quiz APIs
- sessions: Access-code game sessions
"""

__all__ = [
    "word_search",
    "crossword",
    "memory",
    "word_scramble",
    "matching",
    "question_bank",
    "sessions",
]
