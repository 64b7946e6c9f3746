"""An in-memory fake of the Gmail labels and filters service."""

from __future__ import annotations

import copy
import hashlib
import json
import threading

from gmailctl.api import GmailFilter, GmailLabel

DEFAULT_LABELS = frozenset(
    {
        "INBOX",
        "TRASH",
        "IMPORTANT",
        "UNREAD",
        "SPAM",
        "STARRED",
        "CATEGORY_PERSONAL",
        "CATEGORY_SOCIAL",
        "CATEGORY_UPDATES",
        "CATEGORY_FORUMS",
        "CATEGORY_PROMOTIONS",
    }
)

_BAD_REQUEST = 400
_NOT_FOUND = 404


def _quote(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


class StatusError(Exception):
    """A request failure carrying an HTTP status code."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self) -> str:
        return f"{self.message} (status {self.status_code})"


def _hash_filter(f: GmailFilter) -> str:
    # Only criteria and action count, never the ID.
    content = repr((f.criteria, f.action))
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class FakeGmail:
    """Thread-safe in-memory store of labels and filters behaving like Gmail."""

    def __init__(self) -> None:
        self._labels: dict[str, GmailLabel | None] = dict.fromkeys(DEFAULT_LABELS)
        self._label_names: set[str] = set()
        self._label_next_id = 0
        self._filters: dict[str, GmailFilter] = {}
        self._lock = threading.Lock()

    def labels(self) -> list[GmailLabel]:
        """Return the user labels, sorted by ID."""
        with self._lock:
            res = [
                copy.deepcopy(label)
                for label_id, label in self._labels.items()
                if label_id not in DEFAULT_LABELS
            ]
        return sorted(res, key=lambda label: label.id)

    def create_label(self, label: GmailLabel) -> GmailLabel:
        """Store a new label and return it with its assigned ID."""
        with self._lock:
            if label.id:
                raise StatusError(
                    _BAD_REQUEST,
                    f"cannot create label with non empty ID. Got: {_quote(label.id)}",
                )
            if label.name in self._label_names:
                raise StatusError(
                    _BAD_REQUEST,
                    f"label with name {_quote(label.name)} is already present",
                )
            stored = copy.deepcopy(label)
            stored.id = f"ID{self._label_next_id}"
            self._label_next_id += 1
            self._labels[stored.id] = stored
            self._label_names.add(stored.name)
            return copy.deepcopy(stored)

    def delete_label(self, id: str) -> None:
        """Delete the label with the given ID."""
        with self._lock:
            stored = self._stored_label(id)
            self._label_names.discard(stored.name)
            del self._labels[id]

    def update_label(self, label: GmailLabel) -> GmailLabel:
        """Update the name and, when given, the color of an existing label."""
        with self._lock:
            target = self._stored_label(label.id)
            if label.color is not None:
                target.color = copy.deepcopy(label.color)
            if target.name != label.name:
                self._label_names.discard(target.name)
                self._label_names.add(label.name)
                target.name = label.name
            return copy.deepcopy(target)

    def filters(self) -> list[GmailFilter]:
        """Return all filters, sorted by ID."""
        with self._lock:
            res = [copy.deepcopy(f) for f in self._filters.values()]
        return sorted(res, key=lambda f: f.id)

    def create_filter(self, f: GmailFilter) -> GmailFilter:
        """Store a new filter and return it with its content-derived ID."""
        with self._lock:
            if f.criteria is None or f.action is None:
                raise StatusError(_BAD_REQUEST, "filter needs both criteria and action")
            h = _hash_filter(f)
            if h in self._filters:
                raise StatusError(
                    _BAD_REQUEST, f"filter with hash {_quote(h)} already exists"
                )
            for label_id in f.action.add_label_ids:
                if label_id not in self._labels:
                    raise StatusError(_BAD_REQUEST, f"invalid label {_quote(label_id)}")
            stored = copy.deepcopy(f)
            stored.id = h
            self._filters[h] = stored
            return copy.deepcopy(stored)

    def delete_filter(self, id: str) -> None:
        """Delete the filter with the given ID."""
        with self._lock:
            if id not in self._filters:
                raise StatusError(_NOT_FOUND, f"id {_quote(id)} not found")
            del self._filters[id]

    def _stored_label(self, id: str) -> GmailLabel:
        if id not in self._labels:
            raise StatusError(_NOT_FOUND, f"id {_quote(id)} not found")
        stored = self._labels[id]
        if stored is None:
            raise StatusError(_BAD_REQUEST, f"label {_quote(id)} is a system label")
        return stored