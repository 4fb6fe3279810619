# errors.py
# User-visible, non-fatal failures of an analysis run.


class CitationCheckError(Exception):
    pass


class EmptyInputError(CitationCheckError):
    def __init__(self, message: str = "Please paste your document text first.") -> None:
        super().__init__(message)


class NoEntitiesFoundError(CitationCheckError):
    def __init__(self, message: str = "No citations or references found.") -> None:
        super().__init__(message)


class MalformedPatternError(CitationCheckError):
    """A search expression built from extracted author text did not compile."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Could not compile search pattern {pattern!r}: {reason}")
        self.pattern = pattern


class StageBusyError(CitationCheckError):
    def __init__(self, stage: int) -> None:
        super().__init__(f"Stage {stage} is already running.")
        self.stage = stage


class AnalysisFailedError(CitationCheckError):
    """Unexpected failure while processing; previous results stay in place."""
