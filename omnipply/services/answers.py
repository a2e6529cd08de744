"""
Applicant answers against organization-defined question schemas.

Schemas come in several historical shapes: ``{"fields": [...]}`` or a bare
list, with fields identified by ``id``, ``key`` or ``name``. Answers are a
free-form mapping that may be keyed by any of those, or positionally as
``q_0``, ``q_1``, ... when they were stored by order.
"""
import json
import re
from functools import cmp_to_key
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from omnipply.utils.dates import format_date_display, parse_datetime
from omnipply.utils.text import validate_word_limit, word_count_text

EMPTY_DISPLAY = "—"
_POSITIONAL_KEY = re.compile(r"^q_(\d+)$")
_NORMALIZED_ATTRS = ("id", "label", "type", "key", "name", "required", "maxWords", "max_words")


class _NotFound:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()


class SchemaField(BaseModel):
    """A question after normalization; unknown attributes are kept."""

    model_config = ConfigDict(extra="allow")

    id: str
    label: str
    type: str = "text"
    key: Optional[str] = None
    name: Optional[str] = None
    required: bool = False
    options: Optional[List[Any]] = None
    max_words: Optional[int] = None


def _raw_fields(raw: Any) -> List[Mapping[str, Any]]:
    if isinstance(raw, Mapping) and isinstance(raw.get("fields"), list):
        fields = raw["fields"]
    elif isinstance(raw, list):
        fields = raw
    else:
        fields = []
    return [f for f in fields if isinstance(f, Mapping)]


def _first_present(field: Mapping[str, Any], *names: str) -> Optional[Any]:
    for name in names:
        value = field.get(name)
        if value is not None and value != "":
            return value
    return None


def normalize_schema(raw: Any) -> List[SchemaField]:
    """Give every field a string id, label and type."""
    normalized = []
    for i, field in enumerate(_raw_fields(raw)):
        field_id = _first_present(field, "id", "key", "name")
        field_id = f"q_{i}" if field_id is None else str(field_id)
        label = _first_present(field, "label", "name", "key")
        label = field_id if label is None else str(label)
        field_type = str(field.get("type") or "text")
        extra = {k: v for k, v in field.items() if k not in _NORMALIZED_ATTRS and isinstance(k, str)}
        key, name = field.get("key"), field.get("name")
        normalized.append(
            SchemaField(
                **extra,
                id=field_id,
                label=label,
                type=field_type,
                key=str(key) if key is not None else None,
                name=str(name) if name is not None else None,
                required=bool(field.get("required")),
                max_words=field.get("maxWords") or field.get("max_words"),
            )
        )
    return normalized


def _compare_answer_keys(a: str, b: str) -> int:
    ma, mb = _POSITIONAL_KEY.match(a), _POSITIONAL_KEY.match(b)
    if ma and mb:
        return int(ma.group(1)) - int(mb.group(1))
    return (a > b) - (a < b)


def ordered_answer_keys(answers: Mapping[str, Any]) -> List[str]:
    """Answer keys with ``q_10`` after ``q_2``; everything else lexicographic."""
    return sorted(answers.keys(), key=cmp_to_key(_compare_answer_keys))


def get_answer_for_field(field: SchemaField, index: int, answers: Any) -> Any:
    """
    Find the answer for ``field``: by normalized id, then by raw key/name,
    then by position among the ordered answer keys. Returns ``NOT_FOUND``
    when none of these match.
    """
    if not isinstance(answers, Mapping):
        return NOT_FOUND

    if field.id in answers:
        return answers[field.id]

    for candidate in (field.key, field.name):
        if candidate and candidate in answers:
            return answers[candidate]

    keys = ordered_answer_keys(answers)
    if 0 <= index < len(keys):
        return answers[keys[index]]
    return NOT_FOUND


def _join(values: List[Any]) -> str:
    return ", ".join(str(v) for v in values)


def format_value(value: Any, field: SchemaField) -> str:
    if value is None or value is NOT_FOUND or value == "":
        return EMPTY_DISPLAY

    field_type = field.type.lower()
    if field_type == "checkbox":
        if isinstance(value, bool):
            return "Yes" if value else "No"
        if isinstance(value, list):
            return _join(value)
        return str(value)
    if field_type == "select":
        return _join(value) if isinstance(value, list) else str(value)
    if field_type == "date":
        if parse_datetime(value) is not None:
            return format_date_display(value)
        return str(value)
    if field_type == "file":
        if isinstance(value, Mapping):
            return str(value.get("name") or value.get("fileName") or value.get("path") or json.dumps(value))
        return str(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_answers(schema: Any, answers: Any) -> List[Tuple[str, str]]:
    """(label, display text) for every question, in schema order."""
    return [
        (field.label, format_value(get_answer_for_field(field, i, answers), field))
        for i, field in enumerate(normalize_schema(schema))
    ]


def default_value_for_type(field_type: str) -> Any:
    field_type = field_type.upper()
    if field_type in ("SHORT_TEXT", "LONG_TEXT"):
        return ""
    if field_type == "CHECKBOX":
        return False
    return None


def _field_key(field: SchemaField) -> str:
    return field.key or field.id


def reconcile_answers(schema: Any, current: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """One entry per schema field: the current answer or the type's default."""
    current = current or {}
    safe: Dict[str, Any] = {}
    for field in normalize_schema(schema):
        key = _field_key(field)
        safe[key] = current[key] if key in current else default_value_for_type(field.type)
    return safe


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return len(value) == 0
    return False


def missing_required(schema: Any, answers: Optional[Mapping[str, Any]]) -> List[str]:
    answers = answers or {}
    return [
        field.label or _field_key(field)
        for field in normalize_schema(schema)
        if field.required and _is_empty(answers.get(_field_key(field)))
    ]


def over_word_limit(schema: Any, answers: Optional[Mapping[str, Any]]) -> List[str]:
    """Labels of text answers longer than their question's word limit."""
    answers = answers or {}
    over = []
    for field in normalize_schema(schema):
        value = answers.get(_field_key(field))
        if field.max_words and isinstance(value, str) and not validate_word_limit(value, field.max_words):
            over.append(field.label or _field_key(field))
    return over


def word_counts(schema: Any, answers: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """``"12/100 words"`` per word-limited question, keyed like the answers."""
    answers = answers or {}
    counts = {}
    for field in normalize_schema(schema):
        if field.max_words:
            value = answers.get(_field_key(field))
            counts[_field_key(field)] = word_count_text(value if isinstance(value, str) else None, field.max_words)
    return counts
