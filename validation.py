"""
Form sanitization and validation.

Each form field is described by a `Field`: an ordered chain of sanitizers
(trim, escape, to_date) and checks (length, alphanumeric, iso8601). A form is
a list of fields; `validate` runs all of them and collects every failure
instead of stopping at the first one, so a re-rendered form can show them all.
"""

import re
from collections import namedtuple
from datetime import datetime

from markupsafe import escape as html_escape


FieldError = namedtuple("FieldError", "field message value")

ALPHANUMERIC = re.compile(r"[A-Za-z0-9]+")

DEFAULT_MESSAGE = "Invalid value"


def _as_text(value) -> str:
    return "" if value is None else str(value)


def _trim(value) -> str:
    return _as_text(value).strip()


def _escape(value) -> str:
    return str(html_escape(_as_text(value)))


def is_iso8601(value) -> bool:
    try:
        datetime.fromisoformat(_as_text(value))
    except ValueError:
        return False
    return True


def parse_date(value):
    """
    Parse an ISO-8601 date (or datetime) string into a datetime.date.

    Returns:
        datetime.date or None.
    """
    value = _trim(value)
    if not value:
        return None
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


class Field:
    """
    Chain of sanitizers and checks for a single form field.

    Steps run in the order they were declared. A failing check records its
    message and the chain carries on with the remaining steps.
    """

    def __init__(self, name: str, message: str = DEFAULT_MESSAGE, each: bool = False):
        self.name = name
        self.message = message
        self.each = each
        self.is_optional = False
        self.steps = []

    def _sanitizer(self, func):
        self.steps.append(("sanitize", func, None))
        return self

    def _check(self, func, message):
        self.steps.append(("check", func, message or self.message))
        return self

    def optional(self):
        """Skip the whole chain when the raw value is falsy."""
        self.is_optional = True
        return self

    def trim(self):
        return self._sanitizer(_trim)

    def escape(self):
        return self._sanitizer(_escape)

    def to_date(self):
        return self._sanitizer(parse_date)

    def length(self, min: int = 0, max: int | None = None, message: str | None = None):
        def check(value):
            size = len(_as_text(value))
            return size >= min and (max is None or size <= max)
        return self._check(check, message)

    def alphanumeric(self, message: str | None = None):
        return self._check(lambda v: ALPHANUMERIC.fullmatch(_as_text(v)) is not None, message)

    def iso8601(self, message: str | None = None):
        return self._check(is_iso8601, message)

    def run(self, value):
        """
        Apply the chain to one raw value.

        Returns:
            (normalized value, list of FieldError)
        """
        if self.is_optional and not value:
            return None, []
        if self.each:
            if not isinstance(value, list):
                value = [] if value is None else [value]
            values, errors = [], []
            for item in value:
                item, item_errors = self._run_steps(item)
                values.append(item)
                errors.extend(item_errors)
            return values, errors
        return self._run_steps(value)

    def _run_steps(self, value):
        errors = []
        for kind, func, message in self.steps:
            if kind == "sanitize":
                value = func(value)
            elif not func(value):
                errors.append(FieldError(self.name, message, value))
        return value, errors


class ValidationResult:
    """
    Normalized form values plus the ordered list of failures.
    """

    def __init__(self, values: dict, errors: list):
        self.values = values
        self.errors = errors

    @property
    def ok(self) -> bool:
        return not self.errors

    def __getitem__(self, name):
        return self.values.get(name)

    def error_for(self, name: str):
        """Messages recorded for one field."""
        return [e.message for e in self.errors if e.field == name]


def validate(data, fields) -> ValidationResult:
    """
    Run every field's chain against `data`; never short-circuits.

    Fields not described by a rule pass through untouched.
    """
    values = dict(data)
    errors = []
    for field in fields:
        value, field_errors = field.run(data.get(field.name))
        values[field.name] = value
        errors.extend(field_errors)
    return ValidationResult(values, errors)


def form_data(form) -> dict:
    """
    Flatten a submitted MultiDict: repeated keys become lists.
    """
    data = {}
    for key in form.keys():
        values = form.getlist(key)
        data[key] = values if len(values) > 1 else values[0]
    return data


def coerce_list(data: dict, name: str) -> dict:
    """
    Normalize a multi-valued field to a list before validation:
    absent -> [], scalar -> [scalar], list -> unchanged.
    """
    data = dict(data)
    value = data.get(name)
    if value is None:
        data[name] = []
    elif not isinstance(value, list):
        data[name] = [value]
    return data
