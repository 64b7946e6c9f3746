"""Diff between two lists of Gmail filters."""

from __future__ import annotations

import difflib
import hashlib
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from gmailctl.filter import Filter, Filters
from gmailctl.munkres import Munkres


@dataclass
class FiltersDiff:
    """Filters added and removed locally with respect to upstream."""

    added: Filters = field(default_factory=Filters)
    removed: Filters = field(default_factory=Filters)

    def empty(self) -> bool:
        """Tell whether nothing changed."""
        return not self.added and not self.removed

    def __str__(self) -> str:
        return "".join(
            difflib.unified_diff(
                _split_lines(str(Filters(self.removed))),
                _split_lines(str(Filters(self.added))),
                "Current",
                "TO BE APPLIED",
                n=5,
            )
        )


def diff(upstream: Iterable[Filter], local: Iterable[Filter]) -> FiltersDiff:
    """Compute the diff between two lists of filters, ignoring their IDs."""
    # Identical filters are dropped up front by hashing, as the reordering
    # below is expensive.
    added, removed = _changed_filters(upstream, local)
    return new_minimal_filters_diff(added, removed)


def new_minimal_filters_diff(
    added: Sequence[Filter], removed: Sequence[Filter]
) -> FiltersDiff:
    """Build a diff where similar added and removed filters sit side by side."""
    added = Filters(added)
    removed = Filters(removed)
    if added and removed:
        added, removed = _reorder_with_hungarian(added, removed)
    return FiltersDiff(added=added, removed=removed)


def _split_lines(s: str) -> list[str]:
    return [part + "\n" for part in s.split("\n")]


def _hash_filter(f: Filter) -> str:
    # Only the contents count, never the ID.
    content = repr((f.action, f.criteria))
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def _hashed_filters(fs: Iterable[Filter]) -> list[tuple[str, Filter]]:
    # Gmail doesn't support duplicates, so they are dropped here.
    unique: dict[str, Filter] = {}
    for f in fs:
        unique[_hash_filter(f)] = f
    return sorted(unique.items(), key=lambda item: item[0])


def _changed_filters(
    upstream: Iterable[Filter], local: Iterable[Filter]
) -> tuple[Filters, Filters]:
    hupstream = _hashed_filters(upstream)
    hlocal = _hashed_filters(local)
    added, removed = Filters(), Filters()

    i = j = 0
    while i < len(hupstream) and j < len(hlocal):
        ups_hash, ups = hupstream[i]
        loc_hash, loc = hlocal[j]
        if ups_hash < loc_hash:
            removed.append(ups)
            i += 1
        elif ups_hash > loc_hash:
            added.append(loc)
            j += 1
        else:
            i += 1
            j += 1

    removed.extend(f for _, f in hupstream[i:])
    added.extend(f for _, f in hlocal[j:])
    return added, removed


def _reorder_with_hungarian(f1: Filters, f2: Filters) -> tuple[Filters, Filters]:
    mapping = _hungarian(_cost_matrix(f1, f2))
    return _reorder_with_mapping(f1, f2, mapping)


def _cost_matrix(fs1: Sequence[Filter], fs2: Sequence[Filter]) -> list[list[float]]:
    ss1 = [_split_lines(str(f)) for f in fs1]
    ss2 = [_split_lines(str(f)) for f in fs2]
    return [[_diff_cost(s1, s2) for s2 in ss2] for s1 in ss1]


def _diff_cost(s1: list[str], s2: list[str]) -> float:
    return 1 - difflib.SequenceMatcher(None, s1, s2).ratio()


def _hungarian(c: list[list[float]]) -> list[int]:
    if not c:
        return []
    solver = Munkres(len(c), len(c[0]))
    solver.set_cost_matrix(c)
    solver.run()
    return solver.links


def _reorder_with_mapping(
    f1: Sequence[Filter], f2: Sequence[Filter], mapping: Sequence[int]
) -> tuple[Filters, Filters]:
    r1, r2 = Filters(), Filters()
    mapped1: set[int] = set()
    mapped2: set[int] = set()

    for i, j in enumerate(mapping):
        if j < 0:
            continue
        r1.append(f1[i])
        r2.append(f2[j])
        mapped1.add(i)
        mapped2.add(j)

    r1.extend(f for i, f in enumerate(f1) if i not in mapped1)
    r2.extend(f for i, f in enumerate(f2) if i not in mapped2)
    return r1, r2