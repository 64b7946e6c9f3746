"""Gmail labels, their validation and their diff."""

from __future__ import annotations

import difflib
import json
from dataclasses import dataclass, field

from gmailctl.filter import Filters


def _quote(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


@dataclass(frozen=True)
class Color:
    """Color of a label."""

    background: str = ""
    text: str = ""


@dataclass
class Label:
    """Information about a Gmail label."""

    id: str = ""
    name: str = ""
    color: Color | None = None

    def __str__(self) -> str:
        parts = [f"{self.name} [{self.id}]" if self.id else self.name]
        if self.color is not None:
            parts.append(f"color: {self.color.background}, {self.color.text}")
        return "; ".join(parts)


class Labels(list):
    """A list of labels."""

    def __str__(self) -> str:
        return "\n".join(str(label) for label in self)

    def validate(self) -> None:
        """Raise ValueError if the labels have problems."""
        seen: set[str] = set()
        for label in self:
            name = label.name
            if not name:
                raise ValueError("invalid label without a name")
            if name.startswith("/"):
                raise ValueError(f"label {_quote(name)} shouldn't start with /")
            if name.endswith("/"):
                raise ValueError(f"label {_quote(name)} shouldn't end with /")
            if name in seen:
                raise ValueError(f"label {_quote(name)} provided multiple times")
            seen.add(name)


def equivalent(upstream: Label, local: Label) -> bool:
    """Tell whether two labels are the same, ignoring ID and unspecified local color."""
    if upstream.name != local.name:
        return False
    if local.color is None:
        return True
    if upstream.color is None:
        return False
    return upstream.color == local.color


@dataclass
class ModifiedLabel:
    """A label in its old and new versions."""

    old: Label
    new: Label


@dataclass
class LabelsDiff:
    """Difference between two lists of labels."""

    modified: list[ModifiedLabel] = field(default_factory=list)
    added: Labels = field(default_factory=Labels)
    removed: Labels = field(default_factory=Labels)

    def empty(self) -> bool:
        """Tell whether nothing changed."""
        return not self.added and not self.removed and not self.modified

    def __str__(self) -> str:
        def cleanup(label: Label) -> Label:
            return Label(name=label.name, color=label.color)

        old = [f"{cleanup(m.old)}\n" for m in self.modified]
        new = [f"{m.new}\n" for m in self.modified]
        old.extend(f"{cleanup(label)}\n" for label in self.removed)
        new.extend(f"{label}\n" for label in self.added)
        return "".join(
            difflib.unified_diff(old, new, "Current", "TO BE APPLIED", n=3)
        )


def diff(upstream: list[Label], local: list[Label]) -> LabelsDiff:
    """Compute the diff between two lists of labels, ignoring IDs."""
    ups = sorted(upstream, key=lambda label: label.name)
    loc = sorted(local, key=lambda label: label.name)
    res = LabelsDiff()
    i = j = 0
    while i < len(ups) and j < len(loc):
        u, lo = ups[i], loc[j]
        if u.name < lo.name:
            res.removed.append(u)
            i += 1
        elif u.name > lo.name:
            res.added.append(lo)
            j += 1
        else:
            if not equivalent(u, lo):
                res.modified.append(ModifiedLabel(old=u, new=lo))
            i += 1
            j += 1
    res.removed.extend(ups[i:])
    res.added.extend(loc[j:])
    return res


def validate(d: LabelsDiff, filters: Filters) -> None:
    """Raise ValueError if applying the diff would remove a label in use."""
    for label in d.removed:
        if filters.has_label(label.name):
            raise ValueError(f"cannot remove label {_quote(label.name)}, used in filter")