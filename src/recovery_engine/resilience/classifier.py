"""
Error Classifier - Map Raw Failures to the Error Taxonomy.

Provides:
    - Ordered rule table of (predicate, type, severity)
    - Exception-class rules for structured errors
    - Transaction step hints when nothing in the message matches

Design Notes:
    - Rules are evaluated top to bottom, first match wins
    - classify() is pure and total: it never raises and always returns
      a mapped (type, severity) pair
    - Network/timeout rules come first so a message mentioning a
      connection is never classified as anything else
"""

from __future__ import annotations

import json
import logging
import re
from asyncio import TimeoutError as AsyncTimeoutError
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from recovery_engine.domain.entities import (
    ErrorSeverity,
    ErrorType,
    InterventionType,
)
from recovery_engine.domain.value_objects import Classification

logger = logging.getLogger(__name__)

DEFAULT_CLASSIFICATION = Classification(
    type=ErrorType.UNKNOWN, severity=ErrorSeverity.MEDIUM
)


@dataclass(frozen=True)
class ClassificationInput:
    """Normalized signal handed to rule predicates."""

    text: str
    original_error: Optional[BaseException] = None
    hints: Mapping[str, Any] = field(default_factory=dict)


Predicate = Callable[[ClassificationInput], bool]


@dataclass(frozen=True)
class ClassificationRule:
    """One row of the classification table."""

    name: str
    predicate: Predicate
    type: ErrorType
    severity: ErrorSeverity

    def matches(self, signal: ClassificationInput) -> bool:
        return self.predicate(signal)


def keyword_rule(
    name: str,
    patterns: Sequence[str],
    error_type: ErrorType,
    severity: ErrorSeverity,
) -> ClassificationRule:
    """Build a rule matching any of the regex patterns against the text."""
    compiled = re.compile("|".join(f"(?:{p})" for p in patterns))
    return ClassificationRule(
        name=name,
        predicate=lambda signal: compiled.search(signal.text) is not None,
        type=error_type,
        severity=severity,
    )


def exception_rule(
    name: str,
    exception_types: Tuple[type, ...],
    error_type: ErrorType,
    severity: ErrorSeverity,
) -> ClassificationRule:
    """Build a rule matching the class of the original exception."""
    return ClassificationRule(
        name=name,
        predicate=lambda signal: isinstance(signal.original_error, exception_types),
        type=error_type,
        severity=severity,
    )


MESSAGE_RULES: List[ClassificationRule] = [
    keyword_rule("timeout", [r"timeout"], ErrorType.TIMEOUT, ErrorSeverity.MEDIUM),
    keyword_rule(
        "network",
        [r"network", r"connection", r"\bfetch", r"offline", r"unreachable"],
        ErrorType.NETWORK,
        ErrorSeverity.MEDIUM,
    ),
    keyword_rule(
        "rate_limit",
        [r"rate.?limit", r"too many requests", r"\b429\b", r"throttl"],
        ErrorType.RATE_LIMIT,
        ErrorSeverity.MEDIUM,
    ),
    keyword_rule(
        "authentication",
        [
            r"permission",
            r"forbidden",
            r"\b40[13]\b",
            r"unauthori[sz]ed",
            r"authentication",
            r"session expired",
            r"\blogin\b",
        ],
        ErrorType.AUTHENTICATION,
        ErrorSeverity.HIGH,
    ),
    keyword_rule(
        "insufficient_funds",
        [r"insufficient"],
        ErrorType.TRANSACTION,
        ErrorSeverity.LOW,
    ),
    keyword_rule(
        "payment",
        [r"declined", r"\bcards?\b", r"payment", r"blockchain", r"broadcast"],
        ErrorType.TRANSACTION,
        ErrorSeverity.MEDIUM,
    ),
    keyword_rule(
        "data_corruption",
        [r"json", r"\bpars(e|ing)\b", r"syntax", r"corrupt", r"checksum"],
        ErrorType.DATA_CORRUPTION,
        ErrorSeverity.HIGH,
    ),
    keyword_rule(
        "service_unavailable",
        [
            r"service unavailable",
            r"\b50[023]\b",
            r"server error",
            r"internal",
            r"maintenance",
        ],
        ErrorType.SERVICE_UNAVAILABLE,
        ErrorSeverity.HIGH,
    ),
    keyword_rule(
        "validation",
        [r"validation", r"invalid", r"\bformat", r"required"],
        ErrorType.VALIDATION,
        ErrorSeverity.MEDIUM,
    ),
    keyword_rule(
        "resource_exhaustion",
        [
            r"maximum call stack",
            r"recursion",
            r"out of memory",
            r"quota.*exceeded",
        ],
        ErrorType.UNKNOWN,
        ErrorSeverity.CRITICAL,
    ),
    keyword_rule(
        "business_logic",
        [
            r"undefined",
            r"\bnull\b",
            r"nonetype",
            r"has no attribute",
            r"is not defined",
            r"\breference",
        ],
        ErrorType.UNKNOWN,
        ErrorSeverity.HIGH,
    ),
]

EXCEPTION_RULES: List[ClassificationRule] = [
    exception_rule(
        "timeout_exception",
        (TimeoutError, AsyncTimeoutError),
        ErrorType.TIMEOUT,
        ErrorSeverity.MEDIUM,
    ),
    exception_rule(
        "connection_exception",
        (ConnectionError,),
        ErrorType.NETWORK,
        ErrorSeverity.MEDIUM,
    ),
    exception_rule(
        "permission_exception",
        (PermissionError,),
        ErrorType.AUTHENTICATION,
        ErrorSeverity.HIGH,
    ),
    exception_rule(
        "decode_exception",
        (json.JSONDecodeError, UnicodeDecodeError),
        ErrorType.DATA_CORRUPTION,
        ErrorSeverity.HIGH,
    ),
]

_DECLINED = Classification(type=ErrorType.TRANSACTION, severity=ErrorSeverity.MEDIUM)
_INSUFFICIENT = Classification(type=ErrorType.TRANSACTION, severity=ErrorSeverity.LOW)
_SERVER = Classification(
    type=ErrorType.SERVICE_UNAVAILABLE, severity=ErrorSeverity.HIGH
)
_BLOCKCHAIN = Classification(type=ErrorType.NETWORK, severity=ErrorSeverity.HIGH)
_RECIPIENT = Classification(type=ErrorType.VALIDATION, severity=ErrorSeverity.MEDIUM)

# transaction_type -> current_step -> classification
TRANSACTION_STEP_HINTS: Dict[str, Dict[str, Classification]] = {
    "add": {
        "Validating payment method": _DECLINED,
        "Processing payment": _DECLINED,
        "Updating your balance": _SERVER,
        "Transaction completed": _SERVER,
    },
    "withdraw": {
        "Verifying available balance": _INSUFFICIENT,
        "Processing withdrawal": _SERVER,
        "Transferring to your account": _BLOCKCHAIN,
        "Transaction completed": _SERVER,
    },
    "send": {
        "Verifying recipient": _RECIPIENT,
        "Processing transfer": _INSUFFICIENT,
        "Updating balances": _SERVER,
        "Transaction completed": _SERVER,
    },
    "buy": {
        "Validating payment method": _DECLINED,
        "Executing trade": _SERVER,
        "Updating portfolio": _SERVER,
        "Transaction completed": _SERVER,
    },
    "sell": {
        "Verifying holdings": _INSUFFICIENT,
        "Executing trade": _SERVER,
        "Updating portfolio": _SERVER,
        "Transaction completed": _SERVER,
    },
}


class ErrorClassifier:
    """
    Classifies raw failures into (type, severity).

    Features:
        - Ordered message rules, then exception-class rules
        - Transaction step hints as a last resort
        - Extensible: custom rules can be inserted ahead of the defaults
    """

    def __init__(
        self,
        message_rules: Optional[Sequence[ClassificationRule]] = None,
        exception_rules: Optional[Sequence[ClassificationRule]] = None,
        step_hints: Optional[Dict[str, Dict[str, Classification]]] = None,
    ) -> None:
        self._message_rules = list(
            MESSAGE_RULES if message_rules is None else message_rules
        )
        self._exception_rules = list(
            EXCEPTION_RULES if exception_rules is None else exception_rules
        )
        self._step_hints = TRANSACTION_STEP_HINTS if step_hints is None else step_hints

    @property
    def rules(self) -> List[ClassificationRule]:
        """All rules in evaluation order."""
        return self._message_rules + self._exception_rules

    def add_rule(self, rule: ClassificationRule, position: int = 0) -> None:
        """Insert a message rule (default: highest priority)."""
        self._message_rules.insert(position, rule)

    def classify(
        self,
        message: Any,
        original_error: Optional[BaseException] = None,
        hints: Optional[Mapping[str, Any]] = None,
    ) -> Classification:
        """
        Classify a failure.

        Args:
            message: Human-readable description (any value, coerced to str)
            original_error: Optional exception object
            hints: Optional context hints (transaction_type, current_step)

        Returns:
            Classification, UNKNOWN/MEDIUM when nothing matches
        """
        signal = ClassificationInput(
            text=_normalize_text(message, original_error),
            original_error=original_error,
            hints=hints if isinstance(hints, Mapping) else {},
        )

        for rule in self.rules:
            try:
                matched = rule.matches(signal)
            except Exception as e:
                logger.warning(f"Classification rule {rule.name} failed: {e}")
                continue
            if matched:
                return Classification(type=rule.type, severity=rule.severity)

        hinted = self._classify_from_hints(signal.hints)
        if hinted is not None:
            return hinted

        return DEFAULT_CLASSIFICATION

    def _classify_from_hints(
        self, hints: Mapping[str, Any]
    ) -> Optional[Classification]:
        transaction_type = hints.get("transaction_type")
        current_step = hints.get("current_step")
        if not transaction_type or not current_step:
            return None
        steps = self._step_hints.get(str(transaction_type).lower())
        if not steps:
            return None
        return steps.get(str(current_step))


def _normalize_text(message: Any, original_error: Optional[BaseException]) -> str:
    parts = []
    if message is not None:
        parts.append(_safe_str(message))
    if original_error is not None:
        parts.append(type(original_error).__name__)
        parts.append(_safe_str(original_error))
    return " ".join(parts).lower()


def _safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


_default_classifier = ErrorClassifier()

_PERMISSION_DENIED = re.compile(r"permission|forbidden|\b403\b")


def classify(
    message: Any,
    original_error: Optional[BaseException] = None,
    hints: Optional[Mapping[str, Any]] = None,
) -> Classification:
    """Classify with the default rule table."""
    return _default_classifier.classify(message, original_error, hints)


def infer_service_type(
    context: Mapping[str, Any],
    error_type: Optional[ErrorType] = None,
) -> str:
    """
    Work out which service a failure belongs to.

    Order: explicit ``service_type``, then the ``endpoint`` path, then the
    error type. Falls back to "unknown".
    """
    service_type = context.get("service_type")
    if service_type:
        return str(service_type)

    endpoint = context.get("endpoint")
    if endpoint:
        endpoint = str(endpoint)
        if "/api/" in endpoint:
            return "api"
        if "/auth/" in endpoint:
            return "auth"

    if error_type in (ErrorType.NETWORK, ErrorType.TIMEOUT):
        return "network"
    if error_type == ErrorType.AUTHENTICATION:
        return "auth"
    if error_type == ErrorType.TRANSACTION:
        return "transaction"
    return "unknown"


def intervention_type_for(
    error_type: ErrorType,
    message: str = "",
) -> InterventionType:
    """Map an error type to the action the user is asked to take."""
    if error_type == ErrorType.AUTHENTICATION:
        if _PERMISSION_DENIED.search(message.lower()):
            return InterventionType.PERMISSION_DENIED
        return InterventionType.LOGIN_REQUIRED
    if error_type == ErrorType.VALIDATION:
        return InterventionType.INPUT_CORRECTION
    return InterventionType.GENERIC_ERROR
