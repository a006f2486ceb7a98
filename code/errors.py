"""
Exceptions raised by the address pipeline stages.

Every stage raises; only the `main()` entry points catch and report.
"""


class PipelineError(Exception):
    """Base class for all pipeline failures."""


class SchemaError(PipelineError):
    """Raised when a required input column is missing or has the wrong type."""

    def __init__(self, table, missing=(), wrong_type=()):
        self.table = table
        self.missing = list(missing)
        self.wrong_type = list(wrong_type)
        problems = []
        if self.missing:
            problems.append(f"missing columns {self.missing}")
        if self.wrong_type:
            problems.append(f"non-text columns {self.wrong_type}")
        super().__init__(f"{table}: {'; '.join(problems)}")


class MalformedDateError(PipelineError):
    """Raised when one or more address dates cannot be parsed into a year."""

    def __init__(self, rows, values):
        self.rows = list(rows)
        self.values = list(values)
        preview = ", ".join(repr(v) for v in self.values[:5])
        super().__init__(
            f"{len(self.rows)} unparseable date(s) at rows {self.rows[:5]}: {preview}"
        )


class EmptyPopulationError(PipelineError):
    """Raised when the population filter leaves no addresses."""

    def __init__(self, min_year, modality, input_rows):
        self.min_year = min_year
        self.modality = modality
        self.input_rows = input_rows
        super().__init__(
            f"No addresses left from {input_rows:,} rows after filtering to "
            f"year >= {min_year} and delivery == {modality!r}"
        )


class LexiconLoadError(PipelineError):
    """
    Raised when the sentiment lexicon is unavailable or malformed.

    The pipeline attaches the pre-join token table as `tokens` so the
    caller can still persist it for diagnosis.
    """

    def __init__(self, source, reason):
        self.source = source
        self.reason = reason
        self.tokens = None
        super().__init__(f"Could not load lexicon {source!s}: {reason}")
