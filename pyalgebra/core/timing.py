"""
Wall-clock timing for solver phases.

solve() and solve_decomposed() open a SolveTimer, wrap each phase
(condition estimate, decomposition, substitution, iteration) in
phase(), and store the frozen breakdown in the Result envelope.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class SolveTimer:
    """
    Phase timer that starts on construction.
    
    Usage:
        timer = SolveTimer()
        with timer.phase('decompose'):
            lu = decompose(A, 'partial_pivot')
        with timer.phase('substitute'):
            x = lu.solve(b)
        timing = timer.finish()
        # {'total_seconds': 0.004, 'decompose': 0.003, 'substitute': 0.001}
    
    A phase entered twice accumulates. After finish() the timer is frozen:
    further phases raise RuntimeError.
    """
    
    def __init__(self):
        self._started = time.perf_counter()
        self._phases: dict[str, float] = {}
        self._timing: dict[str, float] | None = None
    
    @property
    def finished(self) -> bool:
        return self._timing is not None
    
    @contextmanager
    def phase(self, name: str) -> Iterator[None]:
        if self.finished:
            raise RuntimeError(f"SolveTimer: phase {name!r} started after finish()")
        began = time.perf_counter()
        try:
            yield
        finally:
            self._phases[name] = self._phases.get(name, 0.0) + time.perf_counter() - began
    
    def finish(self) -> dict[str, float]:
        """Freeze the timer and return total_seconds plus every phase."""
        if self._timing is None:
            self._timing = {'total_seconds': time.perf_counter() - self._started, **self._phases}
        return dict(self._timing)
