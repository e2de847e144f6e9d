"""
ResultMatrix — type → ctk → dialect → compiler → bool.

Every leaf exists from construction onward and starts out ``False``; a
succeeding cell flips its own leaf to ``True``.  One lock guards the whole
structure.  Writes are bounded by the cell count, so contention is
negligible next to build time.
"""
import copy
import threading
from typing import Dict, Sequence, Tuple

Leaves = Dict[str, Dict[str, Dict[str, Dict[str, bool]]]]


class ResultMatrix:

    def __init__(
        self,
        types: Sequence[str],
        ctks: Sequence[str],
        dialects: Sequence[str],
        compilers: Sequence[str],
    ):
        self.types: Tuple[str, ...] = tuple(types)
        self.ctks: Tuple[str, ...] = tuple(ctks)
        self.dialects: Tuple[str, ...] = tuple(dialects)
        self.compilers: Tuple[str, ...] = tuple(compilers)

        self._lock = threading.Lock()
        self._data: Leaves = {
            t: {
                s: {
                    d: {c: False for c in self.compilers}
                    for d in self.dialects
                }
                for s in self.ctks
            }
            for t in self.types
        }

    def mark_success(self, build_type: str, ctk: str, dialect: str, compiler: str) -> None:
        """
        Flip one leaf to True.

        Raises KeyError if the coordinates were not part of the axes the
        matrix was built from; that is a coding error, never user input.
        """
        with self._lock:
            leaf = self._data[build_type][ctk][dialect]
            if compiler not in leaf:
                raise KeyError(compiler)
            leaf[compiler] = True

    def status(self, build_type: str, ctk: str, dialect: str, compiler: str) -> bool:
        with self._lock:
            return self._data[build_type][ctk][dialect][compiler]

    def as_dict(self) -> Leaves:
        """Deep copy of the nested mapping."""
        with self._lock:
            return copy.deepcopy(self._data)

    def counts(self) -> Tuple[int, int]:
        """(passed, total) over every leaf."""
        with self._lock:
            leaves = [
                ok
                for by_ctk in self._data.values()
                for by_dialect in by_ctk.values()
                for by_compiler in by_dialect.values()
                for ok in by_compiler.values()
            ]
        return sum(leaves), len(leaves)

    @property
    def all_passed(self) -> bool:
        passed, total = self.counts()
        return passed == total
