"""Ordered rule table mapping an attempt outcome to a fallback decision.

Upstream error taxonomies are not contractually stable, so most rules match
substrings of the upstream error text. That is a known fragility: a provider
rewording its messages moves the failure into the ``unclassified`` bucket,
which still continues to the next candidate.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .outcomes import AttemptOutcome, OutcomeKind


class Decision(str, Enum):
    CONTINUE = "continue"
    STOP_SUCCESS = "stop_success"
    STOP_EXHAUSTED = "stop_exhausted"


class FailureCategory(str, Enum):
    CANDIDATE_NOT_FOUND = "candidate_not_found"
    UPSTREAM_SATURATED = "upstream_saturated"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    UPSTREAM_MALFORMED_RESPONSE = "upstream_malformed_response"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class ClassificationRule:
    category: FailureCategory
    decision: Decision = Decision.CONTINUE
    patterns: Tuple[str, ...] = ()
    codes: Tuple[int, ...] = ()

    def matches(self, outcome: AttemptOutcome) -> bool:
        for code in (outcome.error_code, outcome.status_code):
            if code is None:
                continue
            try:
                if int(code) in self.codes:
                    return True
            except (TypeError, ValueError):
                continue
        text = (outcome.reason or "").lower()
        return any(p in text for p in self.patterns)


RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule(
        FailureCategory.CANDIDATE_NOT_FOUND,
        patterns=("not found", "invalid model", "no endpoints found"),
        codes=(404,),
    ),
    ClassificationRule(
        FailureCategory.UPSTREAM_SATURATED,
        patterns=("overloaded", "rate limit", "capacity"),
        codes=(429,),
    ),
    ClassificationRule(FailureCategory.UPSTREAM_TIMEOUT, patterns=("timeout", "timed out")),
    ClassificationRule(FailureCategory.UPSTREAM_MALFORMED_RESPONSE, patterns=("malformed",)),
)


@dataclass(frozen=True)
class Classification:
    decision: Decision
    category: Optional[FailureCategory] = None


class OutcomeClassifier:
    def __init__(self, rules: Tuple[ClassificationRule, ...] = RULES):
        self.rules = rules

    def classify(self, outcome: AttemptOutcome, has_next: bool = True) -> Classification:
        if outcome.kind is OutcomeKind.SUCCESS:
            return Classification(Decision.STOP_SUCCESS)

        category, decision = FailureCategory.UNCLASSIFIED, Decision.CONTINUE
        for rule in self.rules:
            if rule.matches(outcome):
                category, decision = rule.category, rule.decision
                break

        if decision is Decision.CONTINUE and not has_next:
            decision = Decision.STOP_EXHAUSTED
        return Classification(decision, category)
