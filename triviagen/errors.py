"""Exceptions raised by the generation pipeline."""


class TriviaGenError(Exception):
    """Base class for every error the CLI reports to the user."""


class ConfigError(TriviaGenError):
    pass


class ArchiveError(TriviaGenError):
    """The clue archive or the used-clue ledger could not be loaded."""


class GenerationError(TriviaGenError):
    """A fatal failure that aborts the run before anything is persisted."""

    def __init__(self, message: str, state=None):
        super().__init__(message)
        self.state = state


class NotEnoughQuestionsError(GenerationError):
    pass


class NotEnoughFinalsError(GenerationError):
    pass


class InsufficientCategoriesError(GenerationError):
    def __init__(self, message: str, round_index: int, state=None):
        super().__init__(message, state)
        self.round_index = round_index
