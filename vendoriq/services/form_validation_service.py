# vendoriq/services/form_validation_service.py
"""Validation of category-specific custom fields on service requests.

Each category owns an ordered list of field definitions. A submission is
checked field by field: required, then kind, then rules. Only the first
failing check of a field is reported. Values that pass are echoed back
unchanged in ``normalized_values``.
"""
import enum
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%m/%d/%Y", "%d-%m-%Y")


class FieldKind(str, enum.Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"


@dataclass
class FieldDefinition:
    name: str
    label: str
    kind: str
    required: bool = False
    rules: Dict[str, Any] = field(default_factory=dict)
    options: List[Any] = field(default_factory=list)
    active: bool = True

    @classmethod
    def from_model(cls, form_field) -> "FieldDefinition":
        return cls(
            name=form_field.field_name,
            label=form_field.field_label,
            kind=form_field.field_type,
            required=bool(form_field.is_required),
            rules=form_field.validation_rules or {},
            options=form_field.options or [],
            active=bool(form_field.is_active),
        )

    @property
    def field_kind(self) -> Optional[FieldKind]:
        try:
            return FieldKind(self.kind)
        except ValueError:
            return None

    @property
    def option_values(self) -> List[Any]:
        return [opt.get("value", opt) if isinstance(opt, dict) else opt for opt in self.options]


@dataclass
class FieldError:
    field: str
    message: str

    def to_dict(self):
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationOutcome:
    errors: List[FieldError] = field(default_factory=list)
    normalized_values: Dict[str, Any] = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return not self.errors

    @classmethod
    def service_error(cls) -> "ValidationOutcome":
        return cls(errors=[FieldError("general", "Validation service error")])

    def error_list(self) -> List[dict]:
        return [e.to_dict() for e in self.errors]


# ---------------- value helpers ---------------- #
def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _fmt(number: Any) -> str:
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


def parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


# ---------------- kind checks ---------------- #
def _check_number(definition: FieldDefinition, value: Any) -> Optional[str]:
    if parse_number(value) is None:
        return f"{definition.label} must be a valid number"
    return None


def _check_date(definition: FieldDefinition, value: Any) -> Optional[str]:
    if parse_date(value) is None:
        return f"{definition.label} must be a valid date"
    return None


def _check_choice(definition: FieldDefinition, value: Any) -> Optional[str]:
    allowed = definition.option_values
    if allowed and value not in allowed:
        return f"{definition.label} must be one of: {', '.join(_as_text(v) for v in allowed)}"
    return None


def _check_checkbox(definition: FieldDefinition, value: Any) -> Optional[str]:
    if not isinstance(value, bool) and value not in ("true", "false"):
        return f"{definition.label} must be true or false"
    return None


def _check_free_text(definition: FieldDefinition, value: Any) -> Optional[str]:
    return None


KIND_CHECKS: Dict[FieldKind, Callable[[FieldDefinition, Any], Optional[str]]] = {
    FieldKind.TEXT: _check_free_text,
    FieldKind.TEXTAREA: _check_free_text,
    FieldKind.NUMBER: _check_number,
    FieldKind.DATE: _check_date,
    FieldKind.SELECT: _check_choice,
    FieldKind.RADIO: _check_choice,
    FieldKind.CHECKBOX: _check_checkbox,
}


def check_kind(definition: FieldDefinition, value: Any) -> Optional[str]:
    kind = definition.field_kind
    if kind is None:
        logger.debug(f"No kind check for field {definition.name} of type {definition.kind}")
        return None
    return KIND_CHECKS[kind](definition, value)


def _rule_number(rules: Dict[str, Any], key: str) -> Optional[float]:
    """Numeric rule value, accepting numeric strings. Unusable values disable the rule."""
    raw = rules.get(key)
    if raw is None:
        return None
    number = parse_number(raw)
    if number is None:
        logger.warning(f"Ignoring non-numeric {key} rule: {raw!r}")
    return number


def check_rules(definition: FieldDefinition, value: Any) -> Optional[str]:
    """Return the message of the first failing rule, if any."""
    rules = definition.rules or {}
    label = definition.label
    text = _as_text(value)

    min_length = _rule_number(rules, "minLength")
    if min_length is not None and len(text) < min_length:
        return f"{label} must be at least {_fmt(min_length)} characters long"

    max_length = _rule_number(rules, "maxLength")
    if max_length is not None and len(text) > max_length:
        return f"{label} must not exceed {_fmt(max_length)} characters"

    if definition.field_kind is FieldKind.NUMBER:
        number = parse_number(value)
        minimum = _rule_number(rules, "min")
        if minimum is not None and number < minimum:
            return f"{label} must be at least {_fmt(minimum)}"
        maximum = _rule_number(rules, "max")
        if maximum is not None and number > maximum:
            return f"{label} must not exceed {_fmt(maximum)}"

    pattern = rules.get("pattern")
    if pattern:
        try:
            regex = re.compile(pattern)
        except re.error as e:
            logger.warning(f"Ignoring invalid pattern on field {definition.name}: {e}")
            return None
        if not regex.search(text):
            return rules.get("patternMessage") or f"{label} format is invalid"

    return None


def _is_absent(value: Any) -> bool:
    return value is None


def _is_blank(value: Any) -> bool:
    return _is_absent(value) or _as_text(value).strip() == ""


def validate_fields(definitions: List[FieldDefinition], submitted: Dict[str, Any]) -> ValidationOutcome:
    outcome = ValidationOutcome()
    submitted = submitted or {}

    for definition in definitions:
        if not definition.active:
            continue
        value = submitted.get(definition.name)

        if definition.required and _is_blank(value):
            outcome.errors.append(FieldError(definition.name, f"{definition.label} is required"))
            continue

        # Optional and not provided. Empty strings count as not provided,
        # but whitespace-only values are validated as given.
        if _is_absent(value) or value == "":
            continue

        message = check_kind(definition, value) or check_rules(definition, value)
        if message:
            outcome.errors.append(FieldError(definition.name, message))
            continue

        outcome.normalized_values[definition.name] = value

    return outcome


class FormValidationService:
    def __init__(self, repository):
        self.repository = repository

    def validate(self, category_id: int, submitted: Dict[str, Any]) -> ValidationOutcome:
        try:
            definitions = self.repository.list_active_fields(category_id)
        except SQLAlchemyError as e:
            logger.error(f"❌ Could not load form fields for category {category_id}: {e}")
            return ValidationOutcome.service_error()

        try:
            outcome = validate_fields(definitions, submitted)
        except (TypeError, ValueError) as e:
            logger.error(f"❌ Malformed form field configuration for category {category_id}: {e}")
            return ValidationOutcome.service_error()

        if not outcome.accepted:
            logger.info(f"Custom field validation failed for category {category_id}: {len(outcome.errors)} error(s)")
        return outcome
