"""
Tests for tolerance tiers and default settings.
"""

import pytest

from pyalgebra.core.tolerances import (
    DEFAULT,
    DEFAULT_MAX_ITER,
    DEFAULT_TOL,
    LOOSE,
    SINGULAR_VALUE_FLOOR,
    select_tolerance,
)


class TestSelectTolerance:

    def test_direct_well_conditioned(self):
        assert select_tolerance() is DEFAULT

    @pytest.mark.parametrize("iterative,ill", [(True, False), (False, True), (True, True)])
    def test_loose(self, iterative, ill):
        assert select_tolerance(iterative=iterative, is_ill_conditioned=ill) is LOOSE

    def test_loose_is_looser(self):
        assert LOOSE.rtol > DEFAULT.rtol
        assert LOOSE.atol > DEFAULT.atol


def test_defaults():
    assert DEFAULT_TOL == 1e-10
    assert DEFAULT_MAX_ITER == 1000
    assert 0 < SINGULAR_VALUE_FLOOR < DEFAULT_TOL
