"""Validates the provider's parsed JSON and builds ExtractedFields."""

import math
import re
from typing import Any

from docuextract.documents.models import STAMP_CODES
from docuextract.extraction.exceptions import MalformedResponseError
from docuextract.extraction.models import ExtractedFields

LOW_CONFIDENCE_CAP = 50

_POSTAL_CODE_RE = re.compile(r"^\d{5}$")
_DATE_RE = re.compile(r"^\d{2}\.\d{2}\.\d{4}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")
_TEXT_FIELDS = ("name", "address", "postalcode", "city", "birthday", "date", "time", "stamp")
_TRUE_STRINGS = frozenset({"true", "yes", "ja", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "nein", "0", ""})


def validate_and_build(data: Any) -> ExtractedFields:
    """Validate a parsed provider payload.

    Format violations (postal code, dates, time) never fail the request: the
    value is kept and a warning is recorded. An out-of-pattern postal code
    additionally caps the confidence at LOW_CONFIDENCE_CAP.

    Raises:
        MalformedResponseError: if the payload is not an object or a field has
            an unusable type.
    """
    if not isinstance(data, dict):
        raise MalformedResponseError("Extraction payload must be a JSON object")

    text = {key: _build_text(data.get(key), key) for key in _TEXT_FIELDS}
    warnings: list[str] = []

    postal_code = text["postalcode"]
    postal_code_invalid = postal_code is not None and not _POSTAL_CODE_RE.match(postal_code)
    if postal_code_invalid:
        warnings.append(f"postalcode '{postal_code}' is not 5 digits")
    for key in ("birthday", "date"):
        value = text[key]
        if value is not None and not _DATE_RE.match(value):
            warnings.append(f"{key} '{value}' is not DD.MM.YYYY")
    if text["time"] is not None and not _TIME_RE.match(text["time"]):
        warnings.append(f"time '{text['time']}' is not HH:MM")

    confidence = _build_confidence(data.get("confidence"))
    if postal_code_invalid:
        confidence = LOW_CONFIDENCE_CAP if confidence is None else min(confidence, LOW_CONFIDENCE_CAP)

    return ExtractedFields(
        name=text["name"],
        address=text["address"],
        postal_code=postal_code,
        city=text["city"],
        birthday=text["birthday"],
        document_date=text["date"],
        time=text["time"],
        handwritten=_build_flag(data.get("handwritten"), "handwritten"),
        signed=_build_flag(data.get("signed"), "signed"),
        stamp=_build_stamp(text["stamp"]),
        confidence=confidence,
        warnings=tuple(warnings),
    )


def _build_text(raw: Any, field: str) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise MalformedResponseError(f"'{field}' must be a string or null")
    if isinstance(raw, (int, float)):
        # Models occasionally emit postal codes as numbers.
        return str(raw)
    if not isinstance(raw, str):
        raise MalformedResponseError(f"'{field}' must be a string or null")
    value = raw.strip()
    return value or None


def _build_flag(raw: Any, field: str) -> bool:
    if raw is None:
        return False
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise MalformedResponseError(f"'{field}' must be a boolean, got {raw!r}")


def _build_stamp(raw: str | None) -> str | None:
    if raw is None:
        return None
    upper = raw.upper()
    if upper in STAMP_CODES:
        return upper
    return "other"


def _build_confidence(raw: Any) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise MalformedResponseError("'confidence' must be a number between 0 and 100")
    if isinstance(raw, str):
        try:
            raw = float(raw.strip().rstrip("%"))
        except ValueError as exc:
            raise MalformedResponseError(
                f"'confidence' must be a number between 0 and 100, got {raw!r}"
            ) from exc
    if not isinstance(raw, (int, float)):
        raise MalformedResponseError("'confidence' must be a number between 0 and 100")
    if not math.isfinite(raw):
        raise MalformedResponseError(
            f"'confidence' must be a finite number between 0 and 100, got {raw!r}"
        )
    return max(0, min(100, round(raw)))
