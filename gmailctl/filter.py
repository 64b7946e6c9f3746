"""Filters as they exist in Gmail, and their readable rendering."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from gmailctl.gmail import Category


@dataclass(frozen=True)
class Actions:
    """Actions associated with a Gmail filter."""

    add_label: str = ""
    category: Category | None = None
    archive: bool = False
    delete: bool = False
    mark_important: bool = False
    mark_not_important: bool = False
    mark_read: bool = False
    mark_not_spam: bool = False
    star: bool = False
    forward: str = ""

    def empty(self) -> bool:
        """Tell whether no action is specified."""
        return self == Actions()


@dataclass(frozen=True)
class Criteria:
    """Filtering criteria associated with a Gmail filter."""

    from_: str = ""
    to: str = ""
    subject: str = ""
    query: str = ""

    def empty(self) -> bool:
        """Tell whether no criteria is specified."""
        return self == Criteria()

    def to_gmail_search(self) -> str:
        """Return the equivalent query in Gmail search syntax."""
        parts = []
        if self.from_:
            parts.append(f"from:{self.from_}")
        if self.to:
            parts.append(f"to:{self.to}")
        if self.subject:
            parts.append(f"subject:{self.subject}")
        if self.query:
            parts.append(self.query)
        return " ".join(parts)


@dataclass(frozen=True)
class Filter:
    """A filter as created on Gmail; the id is optional."""

    id: str = ""
    action: Actions = field(default_factory=Actions)
    criteria: Criteria = field(default_factory=Criteria)

    def __str__(self) -> str:
        lines = ["* Criteria:\n"]

        def param(name: str, value: str) -> None:
            if value:
                lines.append(f"    {name}: {value}\n")

        def flag(name: str, value: bool) -> None:
            if value:
                lines.append(f"    {name}\n")

        c, a = self.criteria, self.action
        param("from", c.from_)
        param("to", c.to)
        param("subject", c.subject)
        param("query", indent(c.query, 2))

        lines.append("  Actions:\n")
        flag("archive", a.archive)
        flag("delete", a.delete)
        flag("mark as important", a.mark_important)
        flag("never mark as important", a.mark_not_important)
        flag("never mark as spam", a.mark_not_spam)
        flag("mark as read", a.mark_read)
        flag("star", a.star)
        param("categorize as", a.category.value if a.category else "")
        param("apply label", a.add_label)
        param("forward to", a.forward)
        return "".join(lines)

    def has_label(self, name: str) -> bool:
        """Tell whether the filter applies the given label."""
        return self.action.add_label == name


class Filters(list):
    """A list of Gmail filters."""

    def __str__(self) -> str:
        return "\n".join(str(f) for f in self)

    def has_label(self, name: str) -> bool:
        """Tell whether at least one filter applies the given label."""
        return any(f.has_label(name) for f in self)


class _State(enum.Enum):
    OTHER = enum.auto()
    SKIP_SPACES = enum.auto()
    IN_QUOTES = enum.auto()


def indent(query: str, level: int) -> str:
    """Spread a query over indented lines, or return it unchanged if it is simple."""
    indented, needed = _indent_lines(query, level + 1)
    if not needed:
        return query
    return "\n" + indented.rstrip("\n ")


def _indent_lines(query: str, level: int) -> tuple[str, bool]:
    out = ["  " * level]
    needed = False

    def newline(n: int) -> None:
        nonlocal needed
        out.append("\n" + "  " * n)
        needed = True

    state = _State.SKIP_SPACES
    for ch in query:
        if state is _State.IN_QUOTES:
            out.append(ch)
            if ch == '"':
                state = _State.OTHER
            continue
        if ch == " ":
            if state is _State.SKIP_SPACES:
                continue
            newline(level)
        elif ch in "{(":
            out.append(ch)
            level += 1
            newline(level)
            state = _State.SKIP_SPACES
        elif ch in "})":
            newline(level - 1)
            out.append(ch)
            level -= 1
            newline(level)
            state = _State.SKIP_SPACES
        elif ch == ":":
            out.append(ch)
            state = _State.SKIP_SPACES
        elif ch == '"':
            state = _State.IN_QUOTES
            out.append(ch)
        else:
            state = _State.OTHER
            out.append(ch)
    return "".join(out), needed