# -*- coding: utf-8 -*-
"""
Exception hierarchy for the migration pipeline.

Every error here is fatal for the run: the processor never retries or skips, it
logs the error, shuts the destination store down in failed state and exits.
Each exception carries the offending raw value or description text.
"""
from typing import Any


class MigrationError(Exception):
    """Base class for unrecoverable migration errors."""


class UnsupportedValueKindError(MigrationError, TypeError):
    """An array property holds elements of a kind the store cannot type."""

    def __init__(self, kind: str, value: Any = None):
        self.kind = kind
        self.value = value
        super().__init__(
            f"Importer does not know how to handle array properties of type: {kind}"
        )


class UnparseableSchemaDescriptionError(MigrationError, ValueError):
    """An index or constraint description matches no known grammar."""

    def __init__(self, description: str, reason: str = "Unknown schema description"):
        self.description = description
        super().__init__(f"{reason}, unable to import: `{description}`")


class StructuralInconsistencyError(MigrationError):
    """The destination store no longer agrees with the source graph."""
