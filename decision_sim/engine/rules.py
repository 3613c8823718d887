"""
rules
=====

Threshold rules that turn a single numeric input into a binary decision.

Three scenario kinds are supported:

``medical``
    Systolic blood pressure screening.  Readings strictly above 140 mmHg
    are labelled ``"High Risk"``, everything else ``"Healthy"``.

``loan``
    Credit score cutoff.  Scores of 700 or more are ``"Approved"``,
    anything lower is ``"Rejected"``.

``custom``
    A caller supplied threshold, comparison operator and pair of labels,
    e.g. ``speed > 60 -> "Ticket" / "Safe"``.

The evaluator is a pure function of the rule and the input value so the
Monte Carlo runner can call it thousands of times per request without any
shared state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
import operator as _op
from typing import Any, Callable, Dict, Mapping

from .errors import InvalidRequestError


class ScenarioKind(str, Enum):
    """Tagged variant for the supported decision scenarios."""

    MEDICAL = "medical"
    LOAN = "loan"
    CUSTOM = "custom"

    @property
    def input_key(self) -> str:
        """Name of the payload field holding the tracked input value."""

        return _INPUT_KEYS[self]

    @classmethod
    def parse(cls, raw: "str | ScenarioKind | None") -> "ScenarioKind":
        if raw is None:
            return cls.MEDICAL
        if isinstance(raw, ScenarioKind):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError as exc:
            raise InvalidRequestError(
                f"Unknown scenario type '{raw}'",
                context={"scenario_type": raw, "supported": [kind.value for kind in cls]},
            ) from exc


_INPUT_KEYS: Dict[ScenarioKind, str] = {
    ScenarioKind.MEDICAL: "systolicBP",
    ScenarioKind.LOAN: "creditScore",
    ScenarioKind.CUSTOM: "customValue",
}


class ComparisonOperator(str, Enum):
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="

    def compare(self, value: float, threshold: float) -> bool:
        return _COMPARATORS[self](value, threshold)

    @classmethod
    def parse(cls, raw: "str | ComparisonOperator") -> "ComparisonOperator":
        """Parse an operator symbol (``">="``) or name (``"gte"``).

        Unsupported operators are rejected instead of silently evaluating to
        the false label.
        """

        if isinstance(raw, ComparisonOperator):
            return raw
        token = str(raw).strip()
        try:
            return cls(token)
        except ValueError:
            pass
        try:
            return cls[token.upper()]
        except KeyError as exc:
            raise InvalidRequestError(
                f"Unsupported comparison operator '{raw}'",
                context={"operator": raw, "supported": [member.value for member in cls]},
            ) from exc


_COMPARATORS: Dict[ComparisonOperator, Callable[[float, float], bool]] = {
    ComparisonOperator.GT: _op.gt,
    ComparisonOperator.GTE: _op.ge,
    ComparisonOperator.LT: _op.lt,
    ComparisonOperator.LTE: _op.le,
}


@dataclass(frozen=True)
class ScenarioRule:
    """Immutable per-run decision rule."""

    kind: ScenarioKind
    threshold: float
    operator: ComparisonOperator
    true_label: str
    false_label: str

    def __post_init__(self) -> None:
        if not math.isfinite(self.threshold):
            raise InvalidRequestError("Rule threshold must be a finite number", context={"threshold": self.threshold})
        if not self.true_label or not self.false_label:
            raise InvalidRequestError("Rule labels must be non-empty strings")
        if self.true_label == self.false_label:
            raise InvalidRequestError(
                "Rule labels must differ",
                context={"true_label": self.true_label, "false_label": self.false_label},
            )

    @property
    def labels(self) -> tuple[str, str]:
        return (self.true_label, self.false_label)

    def opposite(self, label: str) -> str:
        """Return the label of this rule that is not ``label``."""

        if label == self.true_label:
            return self.false_label
        if label == self.false_label:
            return self.true_label
        raise ValueError(f"Label '{label}' does not belong to the {self.kind.value} rule")

    def describe(self) -> Dict[str, Any]:
        return {
            "scenario": self.kind.value,
            "input_key": self.kind.input_key,
            "threshold": self.threshold,
            "operator": self.operator.value,
            "true_label": self.true_label,
            "false_label": self.false_label,
        }


MEDICAL_RULE = ScenarioRule(
    kind=ScenarioKind.MEDICAL,
    threshold=140.0,
    operator=ComparisonOperator.GT,
    true_label="High Risk",
    false_label="Healthy",
)

LOAN_RULE = ScenarioRule(
    kind=ScenarioKind.LOAN,
    threshold=700.0,
    operator=ComparisonOperator.GTE,
    true_label="Approved",
    false_label="Rejected",
)

BUILTIN_RULES: Dict[ScenarioKind, ScenarioRule] = {
    ScenarioKind.MEDICAL: MEDICAL_RULE,
    ScenarioKind.LOAN: LOAN_RULE,
}


@dataclass(frozen=True)
class Evaluation:
    """Outcome of applying a rule to one input value."""

    decision: str
    tracked_value: float
    threshold: float


def evaluate(rule: ScenarioRule, value: float) -> Evaluation:
    """Apply ``rule`` to ``value`` and return the decision label."""

    holds = rule.operator.compare(value, rule.threshold)
    decision = rule.true_label if holds else rule.false_label
    return Evaluation(decision=decision, tracked_value=value, threshold=rule.threshold)


def custom_rule(
    threshold: Any,
    operator: Any,
    true_label: Any,
    false_label: Any,
) -> ScenarioRule:
    """Build a custom rule from loosely typed payload values."""

    try:
        threshold_value = float(threshold)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError(
            "Custom rule threshold must be numeric",
            context={"threshold": threshold},
        ) from exc
    return ScenarioRule(
        kind=ScenarioKind.CUSTOM,
        threshold=threshold_value,
        operator=ComparisonOperator.parse(operator),
        true_label=str(true_label).strip(),
        false_label=str(false_label).strip(),
    )


_CUSTOM_FIELDS: Dict[str, tuple[str, ...]] = {
    "threshold": ("threshold",),
    "operator": ("operator",),
    "true_label": ("trueLabel", "true_label"),
    "false_label": ("falseLabel", "false_label"),
}


def resolve_rule(kind: ScenarioKind, custom_rules: Mapping[str, Any] | None = None) -> ScenarioRule:
    """Return the rule for ``kind``; custom scenarios require ``custom_rules``."""

    if kind is not ScenarioKind.CUSTOM:
        return BUILTIN_RULES[kind]
    if not custom_rules:
        raise InvalidRequestError(
            "Custom scenarios require customRules",
            context={"missing": ["customRules"]},
        )
    values: Dict[str, Any] = {}
    missing: list[str] = []
    for field_name, keys in _CUSTOM_FIELDS.items():
        found = next((custom_rules[key] for key in keys if custom_rules.get(key) is not None), None)
        if found is None or (isinstance(found, str) and not found.strip()):
            missing.append(keys[0])
        else:
            values[field_name] = found
    if missing:
        raise InvalidRequestError(
            f"customRules is missing required fields: {', '.join(missing)}",
            context={"missing": missing},
        )
    return custom_rule(**values)


__all__ = [
    "BUILTIN_RULES",
    "ComparisonOperator",
    "Evaluation",
    "LOAN_RULE",
    "MEDICAL_RULE",
    "ScenarioKind",
    "ScenarioRule",
    "custom_rule",
    "evaluate",
    "resolve_rule",
]
