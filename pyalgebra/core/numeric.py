"""
Numeric element model.

Every matrix cell and expression literal is one of four kinds, ordered
so that mixed arithmetic promotes to the larger one:

    INTEGER < RATIONAL < REAL < COMPLEX

Rationals are fractions.Fraction and live in object-dtype arrays; the
other kinds map onto native numpy dtypes. The kind is resolved once, when
a matrix is built or a literal is folded, rather than on every access.
"""

from enum import IntEnum
from fractions import Fraction
from numbers import Number
from typing import Any, Iterable

import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import ValidationError


Scalar = int | Fraction | float | complex


class NumberKind(IntEnum):
    """Closed set of element kinds, ordered by promotion rank."""
    INTEGER = 0
    RATIONAL = 1
    REAL = 2
    COMPLEX = 3


_DTYPES: dict[NumberKind, np.dtype] = {
    NumberKind.INTEGER: np.dtype(np.int64),
    NumberKind.RATIONAL: np.dtype(object),
    NumberKind.REAL: np.dtype(np.float64),
    NumberKind.COMPLEX: np.dtype(np.complex128),
}


def kind_of(value: Any) -> NumberKind:
    """
    Classify a scalar.
    
    Raises:
        ValidationError: If value is not a supported number (bool is rejected)
    """
    if isinstance(value, (bool, np.bool_)):
        raise ValidationError(f"boolean {value!r} is not a numeric element")
    if isinstance(value, (int, np.integer)):
        return NumberKind.INTEGER
    if isinstance(value, Fraction):
        return NumberKind.RATIONAL
    if isinstance(value, (float, np.floating)):
        return NumberKind.REAL
    if isinstance(value, (complex, np.complexfloating)):
        return NumberKind.COMPLEX
    raise ValidationError(
        f"unsupported element type {type(value).__name__}: {value!r}"
    )


def kind_of_array(array: NDArray[Any]) -> NumberKind:
    """Classify an array by dtype, inspecting elements only for object arrays."""
    if array.dtype == object:
        if array.size == 0:
            return NumberKind.REAL
        return promote(*(kind_of(v) for v in array.flat))
    if array.dtype == np.bool_:
        raise ValidationError("boolean arrays are not numeric matrices")
    if np.issubdtype(array.dtype, np.integer):
        return NumberKind.INTEGER
    if np.issubdtype(array.dtype, np.floating):
        return NumberKind.REAL
    if np.issubdtype(array.dtype, np.complexfloating):
        return NumberKind.COMPLEX
    raise ValidationError(f"non-numeric dtype {array.dtype}")


def promote(*kinds: NumberKind) -> NumberKind:
    """Smallest kind able to hold every operand."""
    if not kinds:
        return NumberKind.INTEGER
    return NumberKind(max(kinds))


def dtype_for(kind: NumberKind) -> np.dtype:
    return _DTYPES[kind]


def coerce(value: Any, kind: NumberKind) -> Scalar:
    """Convert a scalar to the given kind (never demotes silently)."""
    current = kind_of(value)
    if current > kind:
        raise ValidationError(
            f"cannot demote {current.name} value {value!r} to {kind.name}"
        )
    if kind is NumberKind.INTEGER:
        return int(value)
    if kind is NumberKind.RATIONAL:
        return Fraction(int(value)) if current is NumberKind.INTEGER else value
    if kind is NumberKind.REAL:
        return float(value)
    return complex(value)


def as_array(data: Iterable[Any] | NDArray[Any], kind: NumberKind | None = None) -> NDArray[Any]:
    """
    Build an array whose dtype matches the promoted kind of its elements.
    
    Args:
        data: Nested sequence or array
        kind: Force a kind; defaults to the promoted kind of the data
    """
    try:
        raw = np.asarray(data)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"cannot convert to array: {e}") from e
    
    inferred = kind_of_array(raw)
    target = inferred if kind is None else promote(inferred, kind)
    
    if target is NumberKind.RATIONAL:
        out = np.empty(raw.shape, dtype=object)
        for idx, v in np.ndenumerate(raw):
            out[idx] = coerce(v, NumberKind.RATIONAL)
        return out
    return raw.astype(dtype_for(target))


def normalize_scalar(value: Any) -> Scalar:
    """
    Canonical Python scalar for a result value.
    
    numpy scalars become Python scalars, Fractions with unit denominator
    become ints, and complex values with zero imaginary part become reals.
    """
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, Fraction) and value.denominator == 1:
        return int(value.numerator)
    if isinstance(value, complex) and value.imag == 0:
        return value.real
    return value


def is_number(value: Any) -> bool:
    """True for any supported scalar (bools excluded)."""
    return isinstance(value, Number) and not isinstance(value, (bool, np.bool_))


def is_integral(value: Any) -> bool:
    """True for integer-kind scalars."""
    return is_number(value) and kind_of(value) is NumberKind.INTEGER
