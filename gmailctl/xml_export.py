"""Export of filters to the Gmail XML (Atom feed) format."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TextIO

from gmailctl.filter import Actions, Criteria, Filter
from gmailctl.gmail import Category, possible_category_values

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'

XMLNS = "http://www.w3.org/2005/Atom"
XMLNS_APPS = "http://schemas.google.com/apps/2006"

PROPERTY_FROM = "from"
PROPERTY_TO = "to"
PROPERTY_SUBJECT = "subject"
PROPERTY_HAS = "hasTheWord"
PROPERTY_MARK_IMPORTANT = "shouldAlwaysMarkAsImportant"
PROPERTY_MARK_NOT_IMPORTANT = "shouldNeverMarkAsImportant"
PROPERTY_APPLY_LABEL = "label"
PROPERTY_APPLY_CATEGORY = "smartLabelToApply"
PROPERTY_DELETE = "shouldTrash"
PROPERTY_ARCHIVE = "shouldArchive"
PROPERTY_MARK_READ = "shouldMarkAsRead"
PROPERTY_MARK_NOT_SPAM = "shouldNeverSpam"
PROPERTY_STAR = "shouldStar"
PROPERTY_FORWARD = "forwardTo"

SMART_LABEL_PERSONAL = "personal"
SMART_LABEL_GROUP = "group"
SMART_LABEL_NOTIFICATION = "notification"
SMART_LABEL_PROMO = "promo"
SMART_LABEL_SOCIAL = "social"

_SMART_LABELS = {
    Category.PERSONAL: SMART_LABEL_PERSONAL,
    Category.SOCIAL: SMART_LABEL_SOCIAL,
    Category.UPDATES: SMART_LABEL_NOTIFICATION,
    Category.FORUMS: SMART_LABEL_GROUP,
    Category.PROMOTIONS: SMART_LABEL_PROMO,
}

_ESCAPES = {
    '"': "&#34;",
    "'": "&#39;",
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\t": "&#x9;",
    "\n": "&#xA;",
    "\r": "&#xD;",
}


@dataclass(frozen=True)
class Author:
    """Author of the exported filters."""

    name: str = ""
    email: str = ""


def _in_char_range(ch: str) -> bool:
    cp = ord(ch)
    return (
        0x20 <= cp <= 0xD7FF
        or 0xE000 <= cp <= 0xFFFD
        or 0x10000 <= cp <= 0x10FFFF
    )


def _escape(s: str) -> str:
    out = []
    for ch in s:
        esc = _ESCAPES.get(ch)
        if esc is not None:
            out.append(esc)
        elif _in_char_range(ch):
            out.append(ch)
        else:
            out.append("\ufffd")
    return "".join(out)


def _format_time(t: datetime) -> str:
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    text = (
        f"{t.year:04d}-{t.month:02d}-{t.day:02d}"
        f"T{t.hour:02d}:{t.minute:02d}:{t.second:02d}"
    )
    if t.microsecond:
        text += "." + f"{t.microsecond:06d}".rstrip("0")
    offset = t.utcoffset()
    if not offset:
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    return text + f"{sign}{total // 3600:02d}:{total % 3600 // 60:02d}"


def _category_to_smart_label(cat: Category | str) -> str:
    try:
        smart = _SMART_LABELS[Category(cat)]
    except (ValueError, KeyError):
        possible = ", ".join(possible_category_values())
        raise ValueError(
            f'unrecognized category "{cat}" (possible values: {possible})'
        ) from None
    return f"^smartlabel_{smart}"


def _local_now() -> datetime:
    return datetime.now().astimezone()


class Exporter:
    """Exports filters to the Gmail XML format."""

    def __init__(self, now: Callable[[], datetime] | None = None) -> None:
        self._now = now if now is not None else _local_now

    def export(self, author: Author, filters: Iterable[Filter], w: TextIO) -> None:
        """Write the filters as a Gmail XML document to w.

        Raises ValueError for an unknown category; nothing is written then.
        """
        entries = [self._entry_lines(f) for f in filters]
        lines = [
            f'<feed xmlns="{XMLNS}" xmlns:apps="{XMLNS_APPS}">',
            "  <title>Mail Filters</title>",
            "  <id>tag:mail.google.com,2008:filters:</id>",
            f"  <updated>{_escape(_format_time(self._now()))}</updated>",
            "  <author>",
            f"    <name>{_escape(author.name)}</name>",
            f"    <email>{_escape(author.email)}</email>",
            "  </author>",
        ]
        for entry in entries:
            lines.extend(entry)
        lines.append("</feed>")
        w.write(XML_HEADER + "\n".join(lines) + "\n")

    def _entry_lines(self, f: Filter) -> list[str]:
        props = _criteria_properties(f.criteria) + _action_properties(f.action)
        lines = [
            "  <entry>",
            '    <category term="filter"></category>',
            "    <title>Mail Filter</title>",
            "    <content></content>",
        ]
        lines.extend(
            f'    <apps:property name="{_escape(name)}" value="{_escape(value)}">'
            "</apps:property>"
            for name, value in props
        )
        lines.append("  </entry>")
        return lines


def _string_props(pairs: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    return [(name, value) for name, value in pairs if value]


def _bool_props(pairs: Iterable[tuple[str, bool]]) -> list[tuple[str, str]]:
    return [(name, "true") for name, value in pairs if value]


def _criteria_properties(c: Criteria) -> list[tuple[str, str]]:
    return _string_props(
        [
            (PROPERTY_FROM, c.from_),
            (PROPERTY_TO, c.to),
            (PROPERTY_SUBJECT, c.subject),
            (PROPERTY_HAS, c.query),
        ]
    )


def _action_properties(a: Actions) -> list[tuple[str, str]]:
    res = _bool_props(
        [
            (PROPERTY_ARCHIVE, a.archive),
            (PROPERTY_DELETE, a.delete),
            (PROPERTY_MARK_IMPORTANT, a.mark_important),
            (PROPERTY_MARK_NOT_IMPORTANT, a.mark_not_important),
            (PROPERTY_MARK_READ, a.mark_read),
            (PROPERTY_MARK_NOT_SPAM, a.mark_not_spam),
            (PROPERTY_STAR, a.star),
        ]
    )
    res += _string_props(
        [(PROPERTY_APPLY_LABEL, a.add_label), (PROPERTY_FORWARD, a.forward)]
    )
    if a.category:
        res.append((PROPERTY_APPLY_CATEGORY, _category_to_smart_label(a.category)))
    return res


def default_exporter() -> Exporter:
    """Return an exporter stamping documents with the current local time."""
    return Exporter()