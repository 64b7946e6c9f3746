"""Conversion between filters and the Gmail API objects."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from gmailctl.errors import combine, with_details
from gmailctl.filter import Actions, Criteria, Filter, Filters
from gmailctl.gmail import Category
from gmailctl.reporting import prettify

LABEL_ID_INBOX = "INBOX"
LABEL_ID_TRASH = "TRASH"
LABEL_ID_IMPORTANT = "IMPORTANT"
LABEL_ID_UNREAD = "UNREAD"
LABEL_ID_SPAM = "SPAM"
LABEL_ID_STAR = "STARRED"

LABEL_ID_CATEGORY_PERSONAL = "CATEGORY_PERSONAL"
LABEL_ID_CATEGORY_SOCIAL = "CATEGORY_SOCIAL"
LABEL_ID_CATEGORY_UPDATES = "CATEGORY_UPDATES"
LABEL_ID_CATEGORY_FORUMS = "CATEGORY_FORUMS"
LABEL_ID_CATEGORY_PROMOTIONS = "CATEGORY_PROMOTIONS"

_CATEGORY_TO_ID = {
    Category.PERSONAL: LABEL_ID_CATEGORY_PERSONAL,
    Category.SOCIAL: LABEL_ID_CATEGORY_SOCIAL,
    Category.UPDATES: LABEL_ID_CATEGORY_UPDATES,
    Category.FORUMS: LABEL_ID_CATEGORY_FORUMS,
    Category.PROMOTIONS: LABEL_ID_CATEGORY_PROMOTIONS,
}
_ID_TO_CATEGORY = {v: k for k, v in _CATEGORY_TO_ID.items()}

KNOWN_CRITERIA_FIELDS = frozenset(
    {
        "exclude_chats",
        "from_",
        "has_attachment",
        "negated_query",
        "query",
        "size",
        "size_comparison",
        "subject",
        "to",
    }
)
KNOWN_ACTION_FIELDS = frozenset({"add_label_ids", "forward", "remove_label_ids"})
UNSUPPORTED_CRITERIA_FIELDS = frozenset({"exclude_chats", "size", "size_comparison"})
UNSUPPORTED_ACTION_FIELDS: frozenset[str] = frozenset()


@dataclass
class GmailLabelColor:
    """Color of a label as seen by the Gmail API."""

    background_color: str = ""
    text_color: str = ""


@dataclass
class GmailLabel:
    """A label as seen by the Gmail API."""

    id: str = ""
    name: str = ""
    color: GmailLabelColor | None = None


@dataclass
class FilterAction:
    """Action part of a Gmail API filter."""

    add_label_ids: list[str] = field(default_factory=list)
    remove_label_ids: list[str] = field(default_factory=list)
    forward: str = ""


@dataclass
class FilterCriteria:
    """Criteria part of a Gmail API filter."""

    from_: str = ""
    to: str = ""
    subject: str = ""
    query: str = ""
    negated_query: str = ""
    has_attachment: bool = False
    exclude_chats: bool = False
    size: int = 0
    size_comparison: str = ""


@dataclass
class GmailFilter:
    """A filter as seen by the Gmail API."""

    id: str = ""
    action: FilterAction | None = None
    criteria: FilterCriteria | None = None


class FilterImportError(Exception):
    """Some filters could not be imported; the valid ones are kept in filters."""

    def __init__(self, filters: Filters, error: BaseException) -> None:
        super().__init__(str(error))
        self.filters = filters
        self.error = error
        self.__cause__ = error


class LabelMap:
    """Maps label names and IDs together."""

    def __init__(self, labels: Iterable[Any] = ()) -> None:
        self._name_to_id: dict[str, str] = {}
        self._id_to_name: dict[str, str] = {}
        for label in labels:
            self.add_label(label.id, label.name)

    def name_to_id(self, name: str) -> str | None:
        """Return the ID of the label with this name, if known."""
        return self._name_to_id.get(name)

    def id_to_name(self, id: str) -> str | None:
        """Return the name of the label with this ID, if known."""
        return self._id_to_name.get(id)

    def add_label(self, id: str, name: str) -> None:
        """Add a label to the mapping."""
        self._name_to_id[name] = id
        self._id_to_name[id] = name


def _quote(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


# Export


def export(filters: Sequence[Filter], lmap: LabelMap) -> list[GmailFilter]:
    """Convert filters into Gmail API filters."""
    res = []
    for i, f in enumerate(filters):
        try:
            res.append(_export_filter(f, lmap))
        except ValueError as err:
            raise with_details(
                ValueError(f"exporting filter #{i}: {err}"),
                f"Filter (internal representation): {prettify(f, False)}",
            ) from err
    return res


def _export_filter(f: Filter, lmap: LabelMap) -> GmailFilter:
    if f.action.empty():
        raise ValueError("no action specified")
    if f.criteria.empty():
        raise ValueError("no criteria specified")
    try:
        action = _export_action(f.action, lmap)
    except ValueError as err:
        raise ValueError(f"in export action: {err}") from err
    criteria = FilterCriteria(
        from_=f.criteria.from_,
        to=f.criteria.to,
        subject=f.criteria.subject,
        query=f.criteria.query,
    )
    return GmailFilter(action=action, criteria=criteria)


def _export_action(action: Actions, lmap: LabelMap) -> FilterAction:
    add: list[str] = []
    remove: list[str] = []
    if action.archive:
        remove.append(LABEL_ID_INBOX)
    if action.delete:
        add.append(LABEL_ID_TRASH)
    if action.mark_important:
        add.append(LABEL_ID_IMPORTANT)
    if action.mark_not_important:
        remove.append(LABEL_ID_IMPORTANT)
    if action.mark_read:
        remove.append(LABEL_ID_UNREAD)
    if action.mark_not_spam:
        remove.append(LABEL_ID_SPAM)
    if action.star:
        add.append(LABEL_ID_STAR)

    if action.category:
        try:
            add.append(_CATEGORY_TO_ID[action.category])
        except KeyError:
            raise ValueError(f"unknown category {_quote(str(action.category))}") from None
    if action.add_label:
        label_id = lmap.name_to_id(action.add_label)
        if label_id is None:
            raise ValueError(f"label {_quote(action.add_label)} not found")
        add.append(label_id)

    return FilterAction(add_label_ids=add, remove_label_ids=remove, forward=action.forward)


# Import


def import_filters(filters: Sequence[GmailFilter], lmap: LabelMap) -> Filters:
    """Convert Gmail API filters into filters.

    Invalid filters are skipped; if any were, FilterImportError is raised
    holding the valid ones and the combined errors.
    """
    res = Filters()
    failures: list[BaseException] = []
    for gf in filters:
        try:
            res.append(_import_filter(gf, lmap))
        except ValueError as err:
            failures.append(ValueError(f"importing filter {_quote(gf.id)}: {err}"))
    error = combine(*failures)
    if error is not None:
        raise FilterImportError(res, error)
    return res


def _import_filter(gf: GmailFilter, lmap: LabelMap) -> Filter:
    try:
        action = _import_action(gf.action, lmap)
    except ValueError as err:
        raise ValueError(f"importing action: {err}") from err
    try:
        criteria = _import_criteria(gf.criteria)
    except ValueError as err:
        raise ValueError(f"importing criteria: {err}") from err
    return Filter(id=gf.id, action=action, criteria=criteria)


def _import_action(action: FilterAction | None, lmap: LabelMap) -> Actions:
    if action is None:
        raise ValueError("empty action")
    try:
        _check_unsupported_fields(action, UNSUPPORTED_ACTION_FIELDS)
    except ValueError as err:
        raise ValueError(f"action: {err}") from err

    values: dict[str, Any] = {}
    for label_id in action.add_label_ids:
        category = _ID_TO_CATEGORY.get(label_id)
        if category is not None:
            if values.get("category") is not None:
                raise ValueError(
                    f"multiple categories: '{category.value}', '{values['category'].value}'"
                )
            values["category"] = category
        elif label_id == LABEL_ID_TRASH:
            values["delete"] = True
        elif label_id == LABEL_ID_IMPORTANT:
            values["mark_important"] = True
        elif label_id == LABEL_ID_STAR:
            values["star"] = True
        else:
            name = lmap.id_to_name(label_id)
            if name is None:
                raise ValueError(f"unknown label ID '{label_id}'")
            values["add_label"] = name

    removals = {
        LABEL_ID_INBOX: "archive",
        LABEL_ID_UNREAD: "mark_read",
        LABEL_ID_IMPORTANT: "mark_not_important",
        LABEL_ID_SPAM: "mark_not_spam",
    }
    for label_id in action.remove_label_ids:
        name = removals.get(label_id)
        if name is None:
            raise ValueError(f"unsupported label to remove {_quote(label_id)}")
        values[name] = True

    values["forward"] = action.forward
    res = Actions(**values)
    if res.empty():
        raise ValueError("empty or unsupported action")
    return res


def _import_criteria(criteria: FilterCriteria | None) -> Criteria:
    if criteria is None:
        raise ValueError("empty criteria")
    try:
        _check_unsupported_fields(criteria, UNSUPPORTED_CRITERIA_FIELDS)
    except ValueError as err:
        raise ValueError(f"criteria: {err}") from err

    query = [criteria.query] if criteria.query else []
    # Terms of a negated query are in OR together, as Gmail does.
    if criteria.negated_query:
        query.append(f"-{{{criteria.negated_query}}}")
    if criteria.has_attachment:
        query.append("has:attachment")

    return Criteria(
        from_=criteria.from_,
        to=criteria.to,
        subject=criteria.subject,
        query=" ".join(query),
    )


def _field_default(f: dataclasses.Field) -> Any:
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()
    return None


def _check_unsupported_fields(obj: Any, unsupported: frozenset[str]) -> None:
    for f in dataclasses.fields(obj):
        if f.name not in unsupported:
            continue
        value = getattr(obj, f.name)
        if value != _field_default(f):
            raise ValueError(f"usage of unsupported field {_quote(f.name)} (value {value})")