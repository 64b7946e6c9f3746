"""Error helpers: annotated causes, attached details and combined errors."""

from __future__ import annotations

from collections.abc import Iterator


def _indent(text: str, prefix: str = "  ") -> str:
    return text.replace("\n", "\n" + prefix)


def _verbose(err: BaseException) -> str:
    formatter = getattr(err, "format_multiline", None)
    if callable(formatter):
        return formatter()
    return str(err)


class AnnotatedError(Exception):
    """A symptom error annotated with the error that caused it."""

    def __init__(self, symptom: BaseException, cause: BaseException) -> None:
        super().__init__(symptom, cause)
        self.symptom = symptom
        self.cause = cause
        self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.cause}: {self.symptom}"


class DetailedError(Exception):
    """An error carrying extra human readable details."""

    def __init__(self, error: BaseException, details: list[str]) -> None:
        super().__init__(error)
        self.error = error
        self.details = list(details)
        self.__cause__ = error

    def __str__(self) -> str:
        return str(self.error)

    def format_multiline(self) -> str:
        """Render the error followed by its notes."""
        parts = [_verbose(self.error)]
        if self.details:
            parts.append("\nNote:")
            parts.extend("\n- " + _indent(d) for d in self.details)
        return "".join(parts)


class MultiError(Exception):
    """Several errors reported together."""

    def __init__(self, errors: list[BaseException]) -> None:
        self.errors = list(errors)
        if not self.errors:
            raise ValueError("a combined error needs at least one error")
        super().__init__(*self.errors)

    def __str__(self) -> str:
        return f"multiple errors ({len(self.errors)}); sample: {self.errors[0]}"

    def __iter__(self) -> Iterator[BaseException]:
        return iter(self.errors)

    def format_multiline(self) -> str:
        """Render every contained error on its own bullet."""
        parts = [f"multiple errors ({len(self.errors)}):"]
        parts.extend("\n- " + _indent(_verbose(e)) for e in self.errors)
        return "".join(parts)


def _find(err: BaseException | None, cls: type) -> BaseException | None:
    if err is None:
        return None
    if isinstance(err, cls):
        return err
    if isinstance(err, MultiError):
        for member in err.errors:
            found = _find(member, cls)
            if found is not None:
                return found
        return None
    if isinstance(err, AnnotatedError):
        found = _find(err.symptom, cls)
        return found if found is not None else _find(err.cause, cls)
    return _find(err.__cause__, cls)


def with_cause(symptom: BaseException, cause: BaseException) -> AnnotatedError:
    """Annotate a symptom error with its cause; both stay discoverable."""
    return AnnotatedError(symptom, cause)


def with_details(err: BaseException | None, *args: str) -> DetailedError | None:
    """Attach details to an error; None stays None."""
    if err is None:
        return None
    return DetailedError(err, list(args))


def details(err: BaseException | None) -> str:
    """Collect the details of every detailed error along the chain."""
    parts: list[str] = []
    found = _find(err, DetailedError)
    while found is not None:
        parts.extend("\n  - " + _indent(d, "    ") for d in found.details)
        found = _find(found.error, DetailedError)
    return "".join(parts)


def combine(*args: BaseException | None) -> BaseException | None:
    """Combine errors, dropping None and flattening one combined error."""
    base: MultiError | None = None
    others: list[BaseException] = []
    for err in args:
        if err is None:
            continue
        if isinstance(err, MultiError):
            base = err
            continue
        others.append(err)

    if base is not None:
        return MultiError(base.errors + others)
    if not others:
        return None
    if len(others) == 1:
        return others[0]
    return MultiError(others)


def errors(err: BaseException | None) -> list[BaseException]:
    """Return the individual errors held by err."""
    if err is None:
        return []
    if isinstance(err, MultiError):
        return list(err.errors)
    return [err]


def is_error(err: BaseException | None, target: object) -> bool:
    """Tell whether err, or anything in its chain, matches target.

    target is either an exception instance or an exception class.
    """
    if err is None:
        return False
    if isinstance(target, type):
        if isinstance(err, target):
            return True
    elif err is target or err == target:
        return True
    if isinstance(err, MultiError):
        return any(is_error(e, target) for e in err.errors)
    if isinstance(err, AnnotatedError):
        return is_error(err.symptom, target) or is_error(err.cause, target)
    return is_error(err.__cause__, target)