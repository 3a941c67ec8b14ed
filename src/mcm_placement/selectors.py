"""Label selector conversion and evaluation.

Converts a declarative ``LabelSelector`` into a ``Selector`` query predicate,
following the Kubernetes rules for turning a label selector into a list
filter:

- A missing selector, or one with no labels and no expressions, matches
  everything.
- ``In`` and ``NotIn`` need at least one value; ``Exists`` and
  ``DoesNotExist`` take none.
- Keys must be qualified names and values valid label values.

A ``Selector`` can be evaluated against a label set in memory, or rendered
as the string query accepted by the Kubernetes API server.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from mcm_placement.models import LabelSelector, LabelSelectorOperator
from mcm_placement.utils.errors import SelectorConversionError

# Name part of a qualified name, also the format of non-empty label values
_NAME_FMT = r"([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]"
_NAME_RE = re.compile(f"^{_NAME_FMT}$")
_DNS_LABEL_FMT = r"[a-z0-9]([-a-z0-9]*[a-z0-9])?"
_DNS_SUBDOMAIN_RE = re.compile(rf"^{_DNS_LABEL_FMT}(\.{_DNS_LABEL_FMT})*$")

MAX_NAME_LENGTH = 63
MAX_PREFIX_LENGTH = 253


class Operator(str, Enum):
    """Operators of a converted requirement."""

    EQUALS = "="
    IN = "in"
    NOT_IN = "notin"
    EXISTS = "exists"
    DOES_NOT_EXIST = "!"


_SET_OPERATORS = {
    LabelSelectorOperator.IN.value: Operator.IN,
    LabelSelectorOperator.NOT_IN.value: Operator.NOT_IN,
    LabelSelectorOperator.EXISTS.value: Operator.EXISTS,
    LabelSelectorOperator.DOES_NOT_EXIST.value: Operator.DOES_NOT_EXIST,
}


def validate_label_key(key: str) -> None:
    """Check that ``key`` is a qualified name, optionally prefixed.

    Raises:
        SelectorConversionError: If the key is not a valid label key.
    """
    if not key:
        raise SelectorConversionError("label key must not be empty")

    prefix, slash, name = key.rpartition("/")
    if slash:
        if not prefix:
            raise SelectorConversionError(f"invalid label key {key!r}: prefix part must be non-empty")
        if len(prefix) > MAX_PREFIX_LENGTH or not _DNS_SUBDOMAIN_RE.match(prefix):
            raise SelectorConversionError(
                f"invalid label key {key!r}: prefix part must be a DNS subdomain"
            )
    if not name:
        raise SelectorConversionError(f"invalid label key {key!r}: name part must be non-empty")
    if len(name) > MAX_NAME_LENGTH:
        raise SelectorConversionError(
            f"invalid label key {key!r}: name part must be no more than {MAX_NAME_LENGTH} characters"
        )
    if not _NAME_RE.match(name):
        raise SelectorConversionError(
            f"invalid label key {key!r}: name part must consist of alphanumeric characters, "
            "'-', '_' or '.', and must start and end with an alphanumeric character"
        )


def validate_label_value(value: str) -> None:
    """Check that ``value`` is a valid label value (empty is allowed).

    Raises:
        SelectorConversionError: If the value is not a valid label value.
    """
    if not value:
        return
    if len(value) > MAX_NAME_LENGTH:
        raise SelectorConversionError(
            f"invalid label value {value!r}: must be no more than {MAX_NAME_LENGTH} characters"
        )
    if not _NAME_RE.match(value):
        raise SelectorConversionError(
            f"invalid label value {value!r}: must consist of alphanumeric characters, "
            "'-', '_' or '.', and must start and end with an alphanumeric character"
        )


@dataclass(frozen=True)
class Requirement:
    """A validated requirement on a single label key."""

    key: str
    operator: Operator
    values: tuple[str, ...] = ()

    @classmethod
    def create(cls, key: str, operator: Operator, values: list[str] | None = None) -> Requirement:
        """Validate and build a requirement.

        Raises:
            SelectorConversionError: If key, operator arity or values are invalid.
        """
        validate_label_key(key)
        values = list(values or [])

        if operator in (Operator.IN, Operator.NOT_IN):
            if not values:
                raise SelectorConversionError(
                    f"values: must be specified when operator is '{operator.value}' (key {key!r})"
                )
        elif operator in (Operator.EXISTS, Operator.DOES_NOT_EXIST):
            if values:
                raise SelectorConversionError(
                    f"values: may not be specified when operator is '{operator.value}' (key {key!r})"
                )
        elif operator == Operator.EQUALS:
            if len(values) != 1:
                raise SelectorConversionError(
                    f"values: exactly one value is required for equality (key {key!r})"
                )

        for value in values:
            validate_label_value(value)

        return cls(key=key, operator=operator, values=tuple(sorted(set(values))))

    def matches(self, labels: dict[str, str]) -> bool:
        """Evaluate the requirement against a label set."""
        if self.operator == Operator.EXISTS:
            return self.key in labels
        if self.operator == Operator.DOES_NOT_EXIST:
            return self.key not in labels
        if self.operator == Operator.NOT_IN:
            return self.key not in labels or labels[self.key] not in self.values
        # EQUALS and IN
        return self.key in labels and labels[self.key] in self.values

    def __str__(self) -> str:
        if self.operator == Operator.EXISTS:
            return self.key
        if self.operator == Operator.DOES_NOT_EXIST:
            return f"!{self.key}"
        if self.operator == Operator.EQUALS:
            return f"{self.key}={self.values[0]}"
        return f"{self.key} {self.operator.value} ({','.join(self.values)})"


@dataclass(frozen=True)
class Selector:
    """Conjunction of requirements; no requirements matches everything."""

    requirements: tuple[Requirement, ...] = field(default_factory=tuple)

    def empty(self) -> bool:
        """Return True if this selector matches every label set."""
        return not self.requirements

    def matches(self, labels: dict[str, str] | None) -> bool:
        """Return True if every requirement holds for ``labels``."""
        labels = labels or {}
        return all(req.matches(labels) for req in self.requirements)

    def __str__(self) -> str:
        return ",".join(str(req) for req in self.requirements)


def everything() -> Selector:
    """Return a selector matching all label sets."""
    return Selector()


def convert_label_selector(label_selector: LabelSelector | None) -> Selector:
    """Convert a label selector into a query predicate.

    Args:
        label_selector: Selector to convert. ``None`` matches everything.

    Returns:
        Selector with requirements sorted by key.

    Raises:
        SelectorConversionError: If the selector is malformed.
    """
    if label_selector is None:
        return everything()

    requirements: list[Requirement] = []
    for key, value in label_selector.match_labels.items():
        requirements.append(Requirement.create(key, Operator.EQUALS, [value]))

    for expr in label_selector.match_expressions:
        operator = _SET_OPERATORS.get(expr.operator)
        if operator is None:
            raise SelectorConversionError(
                f"{expr.operator!r} is not a valid label selector operator"
            )
        requirements.append(Requirement.create(expr.key, operator, expr.values))

    requirements.sort(key=lambda r: r.key)
    return Selector(requirements=tuple(requirements))
