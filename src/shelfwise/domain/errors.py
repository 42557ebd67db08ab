"""Error taxonomy for reconciliation, import and promotion.

Only :class:`ImportParseError` aborts a whole request. Lookup failures and
commit-time races degrade to per-row results inside the pipeline and the
committer.
"""

from __future__ import annotations


class ShelfwiseError(Exception):
    """Base class for domain errors."""


class ImportParseError(ShelfwiseError, ValueError):
    """The import payload cannot be read at all (bad format tag, no data rows)."""


class ImportValidationError(ShelfwiseError, ValueError):
    """An operator-supplied value is malformed."""


class InvalidEntryIdError(ImportValidationError):
    """A unified entry id string cannot be parsed."""


class EntryNotFoundError(ShelfwiseError, LookupError):
    """A unified entry id does not resolve to a stored row."""


class LookupFailure(ShelfwiseError, RuntimeError):
    """A metadata provider could not answer (network, status or payload error)."""


class CommitRaceConflict(ShelfwiseError, RuntimeError):
    """A previewed row turned out to be a duplicate when it was committed."""


class PromotionInvariantViolation(ShelfwiseError, ValueError):
    """Promotion was requested for an entry that already lives in the library."""
