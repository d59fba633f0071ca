"""Tennis trivia community backend."""

__version__ = "1.0.0"
