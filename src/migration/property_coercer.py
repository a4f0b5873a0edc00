# -*- coding: utf-8 -*-
"""
Property value coercion from driver values to store values.

The live database hands back loosely-typed Python values: scalars, or lists whose
element type is only known by looking at them. The offline store needs every list
as a typed array. This module does that in two steps:

1. classify_value() runs at the reading boundary and turns a raw driver value into
   the PropertyValue tagged variant (ScalarValue or ListValue with its element kind).
2. coerce_value() maps a PropertyValue to the store representation: the scalar
   unchanged, or a numpy array of int64, float64 or bool_. String lists become
   object arrays holding the original str elements.

Only the first list element decides the array type. An empty list becomes an empty
int32 array, since the store cannot hold an array without an element type.

Boolean lists are copied from their first element: [False, True, True] is stored as
[False, False, False]. Existing stores migrated with this tool carry that behaviour,
so it is kept as-is until the owners decide otherwise.

Example:
    >>> value = classify_value([1, 2, 3])
    >>> coerce_value(value)
    array([1, 2, 3])
"""
# Standard library
from typing import Any, Dict, Mapping

# Third-party
import numpy as np

# Local
from src.utils.dataclasses import ListValue, PropertyValue, ScalarValue, ValueKind
from src.utils.exceptions import UnsupportedValueKindError

EMPTY_ARRAY_DTYPE = np.int32


def element_kind_of(element: Any) -> ValueKind:
    """
    Decide the array element kind for a list from one of its elements.

    bool is tested before int because Python booleans are integers.

    Raises:
        UnsupportedValueKindError: element is not text, integral, floating or boolean
    """
    if isinstance(element, str):
        return ValueKind.STRING
    if isinstance(element, bool):
        return ValueKind.BOOLEAN
    if isinstance(element, int):
        return ValueKind.INTEGER
    if isinstance(element, float):
        return ValueKind.FLOAT
    raise UnsupportedValueKindError(type(element).__qualname__, element)


def classify_value(raw: Any) -> PropertyValue:
    """
    Wrap a raw driver value in the PropertyValue variant.

    Args:
        raw: Value as returned by the neo4j driver

    Returns:
        ScalarValue for non-list values, ListValue otherwise

    Raises:
        UnsupportedValueKindError: non-empty list with an unsupported first element
    """
    if not isinstance(raw, (list, tuple)):
        return ScalarValue(raw)

    if len(raw) == 0:
        return ListValue(None, ())

    return ListValue(element_kind_of(raw[0]), tuple(raw))


def classify_properties(raw_properties: Mapping[str, Any]) -> Dict[str, PropertyValue]:
    """Classify every value of a raw property mapping."""
    return {key: classify_value(value) for key, value in raw_properties.items()}


def coerce_value(value: PropertyValue) -> Any:
    """
    Convert a PropertyValue into its store representation.

    Args:
        value: Classified property value

    Returns:
        The scalar unchanged, or a typed numpy array
    """
    if isinstance(value, ScalarValue):
        return value.value

    if len(value) == 0:
        return np.array([], dtype=EMPTY_ARRAY_DTYPE)

    kind = value.element_kind
    if kind is ValueKind.STRING:
        # Object elements keep each string as-is, without padding to the widest one
        return np.array(list(value.values), dtype=object)
    if kind is ValueKind.INTEGER:
        return np.array(value.values, dtype=np.int64)
    if kind is ValueKind.FLOAT:
        return np.array(value.values, dtype=np.float64)
    if kind is ValueKind.BOOLEAN:
        # Every slot takes the first element
        out = np.empty(len(value), dtype=np.bool_)
        for i in range(len(value)):
            out[i] = bool(value.values[0])
        return out

    raise UnsupportedValueKindError(repr(kind), value.values)


def coerce_properties(properties: Mapping[str, PropertyValue]) -> Dict[str, Any]:
    """Coerce every value of a classified property mapping."""
    return {key: coerce_value(value) for key, value in properties.items()}
