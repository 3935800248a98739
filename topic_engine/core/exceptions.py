"""Custom exception classes for the topic scoring engine."""

from typing import Any


class TopicEngineError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Input Errors
class InvalidInputError(TopicEngineError):
    """A caller-supplied record has the wrong shape."""

    def __init__(
        self,
        message: str,
        *,
        collection: str,
        index: int | None = None,
        field: str | None = None,
    ) -> None:
        location = collection if index is None else f"{collection}[{index}]"
        if field:
            location = f"{location}.{field}"
        super().__init__(
            f"Invalid {location}: {message}",
            details={"collection": collection, "index": index, "field": field},
        )


class EmptySeedPhraseError(InvalidInputError):
    """Seed phrase is missing or normalizes to nothing."""

    def __init__(self) -> None:
        super().__init__("seed phrase must be a non-empty string", collection="seed_phrase")


# Configuration Errors
class ScoringConfigError(TopicEngineError):
    """Scoring configuration could not be loaded or validated."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(
            f"Scoring config error ({source}): {message}",
            details={"source": source},
        )


class UnknownScorerError(TopicEngineError):
    """Requested scorer is not registered with the session."""

    def __init__(self, scorer_name: str) -> None:
        super().__init__(f"Scorer not found: {scorer_name}", details={"scorer": scorer_name})
