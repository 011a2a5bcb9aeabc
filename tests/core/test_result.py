"""
Tests for the Result[P] envelope.

Validates:
    - Generic type parameter works with arbitrary payload types
    - Frozen immutability
    - Default warnings and has_warning()
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from pyalgebra.core.result import Result


@dataclass(frozen=True)
class FakeParams:
    value: float


def _result(**overrides):
    fields = dict(
        params=FakeParams(value=1.0),
        info={'method': 'test'},
        timing=None,
        backend_name='direct_test',
    )
    fields.update(overrides)
    return Result(**fields)


class TestResult:

    def test_fields(self):
        result = _result(timing={'total_seconds': 0.01, 'solve': 0.008})
        assert result.params.value == 1.0
        assert result.info['method'] == 'test'
        assert result.timing['solve'] == 0.008
        assert result.backend_name == 'direct_test'

    def test_default_warnings_empty(self):
        assert _result().warnings == ()

    def test_frozen(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.backend_name = 'other'

    def test_has_warning_substring(self):
        result = _result(warnings=("jacobi did not converge in 10 iterations",))
        assert result.has_warning("did not converge")
        assert not result.has_warning("singular")
