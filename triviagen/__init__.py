"""
triviagen: assemble daily trivia games from an archive of past clues.
"""

__version__ = "1.0.0"
