"""
Tests for the PyAlgebra exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via PyAlgebraError)
    - Diagnostic attributes on SingularMatrixError, ConvergenceError,
      ParseError, IndexOutOfRangeError, UnsupportedOperationError
    - Default attribute values (None for optional attributes)
"""

import pytest

from pyalgebra.core.exceptions import (
    ConvergenceError,
    DimensionError,
    IndexOutOfRangeError,
    NotPositiveDefiniteError,
    NumericalError,
    ParseError,
    PyAlgebraError,
    SingularMatrixError,
    UnsupportedOperationError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via PyAlgebraError."""

    def test_dimension_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DimensionError("wrong shape")

    def test_parse_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise ParseError("bad token")

    def test_index_error_is_builtin_index_error(self):
        with pytest.raises(IndexError):
            raise IndexOutOfRangeError("too far", index=5, size=3, axis='row')

    def test_singular_matrix_error_is_numerical_error(self):
        with pytest.raises(NumericalError):
            raise SingularMatrixError("singular")

    def test_not_positive_definite_is_numerical_error(self):
        with pytest.raises(NumericalError):
            raise NotPositiveDefiniteError("not PD")

    def test_convergence_error_is_not_numerical_error(self):
        err = ConvergenceError("did not converge", iterations=100)
        assert isinstance(err, PyAlgebraError)
        assert not isinstance(err, NumericalError)

    def test_unsupported_is_not_implemented_error(self):
        with pytest.raises(NotImplementedError):
            raise UnsupportedOperationError("no rule")

    @pytest.mark.parametrize("cls", [
        ValidationError, DimensionError, NumericalError, SingularMatrixError,
        NotPositiveDefiniteError, ParseError, UnsupportedOperationError,
    ])
    def test_catchable_as_base(self, cls):
        with pytest.raises(PyAlgebraError):
            raise cls("boom")


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestAttributes:

    def test_singular_matrix_defaults(self):
        err = SingularMatrixError("singular")
        assert err.matrix_name is None
        assert err.condition_number is None
        assert err.rank is None
        assert err.expected_rank is None

    def test_singular_matrix_all_fields(self):
        err = SingularMatrixError(
            "singular", matrix_name='A', condition_number=1e17, rank=2, expected_rank=3,
        )
        assert err.matrix_name == 'A'
        assert err.condition_number == 1e17
        assert err.rank == 2
        assert err.expected_rank == 3
        assert str(err) == "singular"

    def test_convergence_fields(self):
        err = ConvergenceError(
            "stalled", iterations=50, final_change=1e-3, reason='max_iterations', threshold=1e-10,
        )
        assert err.iterations == 50
        assert err.final_change == 1e-3
        assert err.reason == 'max_iterations'
        assert err.threshold == 1e-10

    def test_parse_error_fields(self):
        err = ParseError("unexpected ')'", source="(1 + )", position=5, fragment=')')
        assert err.source == "(1 + )"
        assert err.position == 5
        assert err.fragment == ')'

    def test_index_error_fields(self):
        err = IndexOutOfRangeError("out of range", index=-4, size=3, axis='column')
        assert (err.index, err.size, err.axis) == (-4, 3, 'column')

    def test_unsupported_fields(self):
        err = UnsupportedOperationError("cross", operation='cross', operand='Vector(4)')
        assert err.operation == 'cross'
        assert err.operand == 'Vector(4)'
