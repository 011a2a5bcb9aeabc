"""
Tests for SolveTimer.

Validates:
    - Phases accumulate under their name next to total_seconds
    - finish() freezes the breakdown
    - Solvers attach the phase breakdown to their result
"""

import pytest

from pyalgebra.core.timing import SolveTimer
from pyalgebra.linear import solve, solve_decomposed


class TestSolveTimer:

    def test_phases_accumulate(self):
        timer = SolveTimer()
        with timer.phase('solve'):
            pass
        with timer.phase('solve'):
            pass
        timing = timer.finish()
        assert set(timing) == {'total_seconds', 'solve'}
        assert timing['solve'] >= 0.0
        assert timing['total_seconds'] >= timing['solve']

    def test_finish_is_idempotent(self):
        timer = SolveTimer()
        first = timer.finish()
        assert timer.finished
        assert timer.finish() == first

    def test_phase_after_finish(self):
        timer = SolveTimer()
        timer.finish()
        with pytest.raises(RuntimeError, match="after finish"):
            with timer.phase('late'):
                pass

    def test_phase_recorded_when_body_raises(self):
        timer = SolveTimer()
        with pytest.raises(ZeroDivisionError):
            with timer.phase('broken'):
                1 / 0
        assert 'broken' in timer.finish()


class TestSolverTiming:

    def test_direct_solve_phases(self):
        sol = solve([[2.0, 1.0], [1.0, 3.0]], [3.0, 5.0])
        assert {'total_seconds', 'condition', 'solve'} <= set(sol.timing)

    def test_decomposed_solve_phases(self):
        sol = solve_decomposed([[4.0, 1.0], [1.0, 3.0]], [1.0, 2.0], check_condition=False)
        assert set(sol.timing) == {'total_seconds', 'decompose', 'substitute'}
