# -*- coding: utf-8 -*-
"""
Schema description parsing for indexes and uniqueness constraints.

The introspection procedures only hand back a human-readable sentence per schema
object, so label and property have to be recovered from the text:

    CONSTRAINT ON ( person:Person ) ASSERT person.email IS UNIQUE
    INDEX ON :Person(name)

Label and property names may contain parentheses, dots, colons or spaces. Both
patterns are anchored at both ends and the groups are resolved by the fixed words
around them, never by excluding punctuation. An index description must also hold
exactly one '(' and one ')'; otherwise a name contains a paren and the split point
is ambiguous, so parsing fails instead of guessing.
"""
# Standard library
import re

# Local
from src.utils.dataclasses import SchemaRule
from src.utils.exceptions import UnparseableSchemaDescriptionError

UNIQUE_CONSTRAINT_PATTERN = re.compile(r"^CONSTRAINT ON \( .+:(.+) \) ASSERT .+\.(.+) IS UNIQUE$")
LABEL_PROPERTY_INDEX_PATTERN = re.compile(r"^INDEX ON :(.+)\((.+)\)$")


def parse_constraint_description(description: str) -> SchemaRule:
    """
    Parse a uniqueness constraint description.

    Args:
        description: e.g. "CONSTRAINT ON ( n:Person ) ASSERT n.email IS UNIQUE"

    Returns:
        SchemaRule(label="Person", property_key="email")

    Raises:
        UnparseableSchemaDescriptionError: description is not a uniqueness constraint
    """
    match = UNIQUE_CONSTRAINT_PATTERN.fullmatch(description)
    if match is None:
        raise UnparseableSchemaDescriptionError(
            description, reason="Unknown constraint description"
        )
    return SchemaRule(label=match.group(1), property_key=match.group(2))


def parse_index_description(description: str) -> SchemaRule:
    """
    Parse a single-property label index description.

    Args:
        description: e.g. "INDEX ON :Person(name)"

    Returns:
        SchemaRule(label="Person", property_key="name")

    Raises:
        UnparseableSchemaDescriptionError: format unknown, or a paren inside a name
    """
    match = LABEL_PROPERTY_INDEX_PATTERN.fullmatch(description)
    if match is None or not has_single_paren_pair(description):
        raise UnparseableSchemaDescriptionError(
            description,
            reason=(
                "Index is either on property/label with paren in the name, "
                "or the description format of this index is unknown"
            ),
        )
    return SchemaRule(label=match.group(1), property_key=match.group(2))


def has_single_paren_pair(description: str) -> bool:
    """True when the text holds exactly one '(' and exactly one ')'."""
    return description.count("(") == 1 and description.count(")") == 1
