"""Checker domain: tag predicates, policies, evaluator, report, ignore filter."""

from actioncheck.checker.evaluator import (
    EvaluationError,
    Violation,
    evaluate,
    evaluate_controller,
)
from actioncheck.checker.ignore import ignore_query, parse_ignore
from actioncheck.checker.policies import (
    ANTIFORGERY,
    AUTHORIZATION,
    DEFAULT_POLICIES,
    POLICY_KEYS,
    Policy,
    PolicyConfigurationError,
    get_policy,
    validate_policies,
)
from actioncheck.checker.report import Report, ReportBuilder
from actioncheck.checker.runner import CheckResult, run_check
from actioncheck.checker.tags import (
    MUTATING_VERB_TAGS,
    PROTECTION_TAGS,
    UnknownTagError,
    has_protection,
    is_mutating_verb,
    protection_tag,
)

__all__ = [
    "ANTIFORGERY",
    "AUTHORIZATION",
    "DEFAULT_POLICIES",
    "MUTATING_VERB_TAGS",
    "POLICY_KEYS",
    "PROTECTION_TAGS",
    "CheckResult",
    "EvaluationError",
    "Policy",
    "PolicyConfigurationError",
    "Report",
    "ReportBuilder",
    "UnknownTagError",
    "Violation",
    "evaluate",
    "evaluate_controller",
    "get_policy",
    "has_protection",
    "ignore_query",
    "is_mutating_verb",
    "parse_ignore",
    "protection_tag",
    "run_check",
    "validate_policies",
]
