"""
Portfolio API — Declarative Request Validation
===============================================

What:  Rule tables describing, per route, which body fields are accepted and
       how each one is checked and normalized.
Why:   Every route validates the same way; adding a field means adding a row,
       not another if-statement in a handler.
How:   A Rule is (field, required, checks, normalizers). check_payload()
       walks a table, collects every violation and returns the cleaned
       document; validate_payload() raises ValidationError when anything failed.

Evaluation order for one field:
    1. Missing / None / "" → "is required" (required fields) or skipped
    2. Checks run in order; the first failing predicate reports its message
    3. Normalizers run in order (trim, escape, lower-case, number coercion)
    4. A required field that is blank after normalization is reported too

Fields absent from the table are dropped, so clients cannot write `id`,
`createdAt` or `approved` through a request body.
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple

from email_validator import EmailNotValidError, validate_email

from portfolio_api.exceptions import ValidationError

Check = Tuple[Callable[[Any], bool], str]

# BSON stores integers as signed 64-bit values
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Markup-significant characters replaced by their HTML entities
_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
    "\\": "&#x5C;",
    "`": "&#96;",
})


@dataclass(frozen=True)
class Rule:
    field: str
    required: bool = True
    checks: Tuple[Check, ...] = ()
    normalizers: Tuple[Callable[[Any], Any], ...] = ()


# ── Predicates ────────────────────────────────────────────────────────────

def is_string(value: Any) -> bool:
    return isinstance(value, str)


def _parse_number(value: Any):
    """
    Return `value` as an int or float MongoDB can store.

    Raises ValueError for booleans, non-numeric text, NaN/infinity and
    integers outside the signed 64-bit range BSON can encode.
    """
    if isinstance(value, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text)
        except ValueError:
            value = float(text)
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError("integer out of range")
        return value
    if isinstance(value, float) and math.isfinite(value):
        return value
    raise ValueError("not a finite number")


def is_number(value: Any) -> bool:
    try:
        _parse_number(value)
    except ValueError:
        return False
    return True


def is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def is_structured(value: Any) -> bool:
    """Any JSON value but a top-level null; numbers must be finite and fit in 64 bits."""
    if isinstance(value, dict):
        return all(isinstance(key, str) and (item is None or is_structured(item)) for key, item in value.items())
    if isinstance(value, list):
        return all(item is None or is_structured(item) for item in value)
    if isinstance(value, bool):
        return True
    if isinstance(value, int):
        return INT64_MIN <= value <= INT64_MAX
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, str)


def is_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


# ── Normalizers ───────────────────────────────────────────────────────────

def trim(value: str) -> str:
    return value.strip()


def escape(value: str) -> str:
    """Neutralize embedded markup by replacing it with HTML entities."""
    return value.translate(_ESCAPES)


def to_number(value: Any):
    return _parse_number(value)


def normalize_email(value: str) -> str:
    return validate_email(value.strip(), check_deliverability=False).normalized.lower()


def clean_list(value: List[str]) -> List[str]:
    return [item.strip() for item in value if item.strip()]


# ── Rule Builders ─────────────────────────────────────────────────────────

def text(field: str, required: bool = True, sanitize: bool = True) -> Rule:
    normalizers = (trim, escape) if sanitize else (trim,)
    return Rule(field, required, ((is_string, f"{field} must be a string"),), normalizers)


def email(field: str = "email") -> Rule:
    return Rule(field, True, ((is_email, f"{field} must be a valid email address"),), (normalize_email,))


def number(field: str, required: bool = False) -> Rule:
    return Rule(field, required, ((is_number, f"{field} must be a number"),), (to_number,))


def string_list(field: str, required: bool = False) -> Rule:
    return Rule(field, required, ((is_string_list, f"{field} must be a list of strings"),), (clean_list,))


def structured(field: str, required: bool = False) -> Rule:
    return Rule(field, required, ((is_structured, f"{field} must be an object, list, string, number or boolean"),))


# ── Route Tables ──────────────────────────────────────────────────────────

# Creation takes `img` from the uploaded file, so it is not a body field here
PROJECT_CREATE_RULES: Sequence[Rule] = (
    text("title"),
    text("category"),
    text("description", required=False),
    string_list("technologies"),
    structured("client"),
)

PROJECT_UPDATE_RULES: Sequence[Rule] = (
    text("title"),
    text("category"),
    text("img", sanitize=False),
    text("description", required=False),
    string_list("technologies"),
    structured("client"),
)

FEEDBACK_RULES: Sequence[Rule] = (
    text("name"),
    text("role"),
    text("company"),
    email("email"),
    text("subject"),
    text("message"),
)

HIRE_REQUEST_RULES: Sequence[Rule] = (
    text("name"),
    email("email"),
    text("company", required=False),
    text("projectType"),
    text("projectDescription"),
    number("budget"),
    text("timeframe", required=False),
)


# ── Evaluation ────────────────────────────────────────────────────────────

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _error(field: str, message: str) -> Dict[str, Any]:
    return {"field": field, "message": message, "location": "body"}


def check_payload(
    payload: Mapping[str, Any], rules: Sequence[Rule]
) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """
    Apply a rule table to a request body.

    Returns:
        (cleaned, errors): the normalized document restricted to the table's
        fields, and one error entry per violated field.
    """
    cleaned: Dict[str, Any] = {}
    errors: List[Dict[str, Any]] = []

    for rule in rules:
        value = payload.get(rule.field)
        if _is_blank(value):
            if rule.required:
                errors.append(_error(rule.field, f"{rule.field} is required"))
            continue

        failed = next((message for predicate, message in rule.checks if not predicate(value)), None)
        if failed:
            errors.append(_error(rule.field, failed))
            continue

        for normalize in rule.normalizers:
            value = normalize(value)

        if _is_blank(value):
            if rule.required:
                errors.append(_error(rule.field, f"{rule.field} is required"))
            continue
        cleaned[rule.field] = value

    return cleaned, errors


def validate_payload(payload: Mapping[str, Any], rules: Sequence[Rule]) -> Dict[str, Any]:
    """Like check_payload(), but raises ValidationError listing every violation."""
    cleaned, errors = check_payload(payload, rules)
    if errors:
        raise ValidationError(message="Validation failed", errors=errors)
    return cleaned
