"""
Flavr - JSON response repair.

The external service is asked for a single JSON object but sometimes
returns near-JSON. Parsing runs as an auditable pipeline:

1. Sanitise: strip code fences and control characters, normalise whitespace
2. Parse; on failure apply each REPAIRS entry in order and parse again
3. On continued failure, extract the first balanced {...} span and parse once more
4. Otherwise raise GenerationError

parse_recipe() adds recipe-schema validation on top.

Every repair is a pure text -> text function aimed at one defect.
"""

import json
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from flavr.errors import GenerationError, RecipeValidationError
from flavr.models import RecipeRecord, validate_recipe_payload

_CODE_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_code_fences(text: str) -> str:
    """Markdown wrapping: ```json ... ```"""
    return _CODE_FENCE_RE.sub("", text)


def strip_control_characters(text: str) -> str:
    """Non-printing bytes that json.loads rejects outright."""
    return _CONTROL_CHARS_RE.sub("", text)


def normalize_whitespace(text: str) -> str:
    """Raw newlines and tabs inside string values; collapse to single spaces."""
    return _WHITESPACE_RE.sub(" ", text).strip()


SANITIZERS: tuple[Callable[[str], str], ...] = (
    strip_code_fences,
    strip_control_characters,
    normalize_whitespace,
)


def remove_trailing_separators(text: str) -> str:
    """Trailing comma before a closing brace or bracket: {"a": 1,}"""
    return re.sub(r",\s*([}\]])", r"\1", text)


def insert_missing_separators(text: str) -> str:
    """
    Missing comma between adjacent values.

    Covers objects/arrays back to back ({...} {...}) and string literals
    back to back ("x" "next_key": ...).
    """
    text = re.sub(r"([}\]])\s*([{\[])", r"\1,\2", text)
    return re.sub(r'(?<!\\)"\s+"', '", "', text)


def normalize_empty_values(text: str) -> str:
    """Missing values ("a": ,), JS-isms (undefined, NaN) and empty list slots ([1,,2])."""
    text = re.sub(r":\s*(?=[,}])", ": null", text)
    text = re.sub(r"(:\s*)(?:undefined|NaN)(?=\s*[,}\]])", r"\1null", text)
    text = re.sub(r",\s*,", ",", text)
    return re.sub(r"\[\s*,", "[", text)


@dataclass(frozen=True)
class Repair:
    """A named text repair, recorded when it changes the input."""

    name: str
    apply: Callable[[str], str]


REPAIRS: tuple[Repair, ...] = (
    Repair("trailing_separators", remove_trailing_separators),
    Repair("missing_separators", insert_missing_separators),
    Repair("empty_values", normalize_empty_values),
)


@dataclass
class ParseOutcome:
    """A parsed object plus an audit trail of what it took to parse."""

    data: dict[str, Any]
    repairs: list[str] = field(default_factory=list)
    extracted: bool = False

    @property
    def repaired(self) -> bool:
        return bool(self.repairs) or self.extracted


def sanitize(text: str) -> str:
    """Run every sanitiser in order."""
    for step in SANITIZERS:
        text = step(text)
    return text


def apply_repairs(text: str) -> tuple[str, list[str]]:
    """
    Apply REPAIRS in order.

    Returns:
        (repaired_text, names of repairs that changed the text)
    """
    applied = []
    for repair in REPAIRS:
        fixed = repair.apply(text)
        if fixed != text:
            applied.append(repair.name)
            text = fixed
    return text, applied


def extract_balanced_object(text: str) -> str | None:
    """
    Return the first balanced {...} span, honouring string literals.

    Returns None when no object opens or the first one never closes.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def parse_json_object(text: str) -> ParseOutcome:
    """
    Parse a model response into a single JSON object.

    Raises:
        GenerationError: If no object can be recovered
    """
    cleaned = sanitize(text or "")
    if not cleaned:
        raise GenerationError("Empty response from generation service")

    data = _loads_object(cleaned)
    if data is not None:
        return ParseOutcome(data)

    repaired, applied = apply_repairs(cleaned)
    data = _loads_object(repaired)
    if data is not None:
        return ParseOutcome(data, repairs=applied)

    span = extract_balanced_object(repaired)
    if span is None:
        raise GenerationError("Response contains no balanced JSON object")

    data = _loads_object(span)
    if data is None:
        raise GenerationError("Response JSON could not be repaired")
    return ParseOutcome(data, repairs=applied, extracted=True)


def parse_recipe(text: str) -> tuple[RecipeRecord, ParseOutcome]:
    """
    Parse and validate a recipe response.

    Raises:
        GenerationError: If the JSON is unrepairable or fails the recipe schema
    """
    outcome = parse_json_object(text)
    try:
        record = validate_recipe_payload(outcome.data)
    except RecipeValidationError as e:
        raise GenerationError(f"Generated recipe failed validation: {', '.join(e.fields)}") from e
    return record, outcome
