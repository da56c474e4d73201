"""JSON Schema validation of forms backend payloads.

The forms backend is not owned by this package, so its response bodies are
checked against a minimal JSON Schema before they are turned into
FormSummary and Submission objects. Only the envelope is constrained: the
body must be an array of objects and every form needs an ``id``. Individual
members such as ``data``, ``created_at`` or ``state`` are coerced by
``from_dict`` instead of rejected, so one drifted entry never blanks the
whole guestbook.

A body that fails validation raises UpstreamPayloadError, which reaches the
caller as an unexpected failure (HTTP 500).
"""

from dataclasses import dataclass
from typing import Any, Dict, List

import jsonschema
from jsonschema import Draft7Validator

from guestbook_feed.errors import UpstreamPayloadError
from guestbook_feed.types import FormSummary, Submission


FORMS_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "id": {"type": ["string", "integer"]},
        },
        "required": ["id"],
    },
}

SUBMISSIONS_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {"type": "object"},
}


@dataclass(frozen=True)
class PayloadProblem:
    """A single schema violation in an upstream payload.

    Attributes:
        path: Dot-notation location inside the payload (e.g. "2.id")
        message: Human-readable description
    """
    path: str
    message: str

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class PayloadValidator:
    """Validates forms backend bodies and converts them to typed records.

    Examples:
        >>> validator = PayloadValidator()
        >>> forms = validator.validate_forms([{"id": "f1", "name": "guestbook"}])
        >>> forms[0].name
        'guestbook'
    """

    def __init__(self) -> None:
        Draft7Validator.check_schema(FORMS_SCHEMA)
        Draft7Validator.check_schema(SUBMISSIONS_SCHEMA)
        self._forms_validator = Draft7Validator(FORMS_SCHEMA)
        self._submissions_validator = Draft7Validator(SUBMISSIONS_SCHEMA)

    def validate_forms(self, payload: Any) -> List[FormSummary]:
        """Check a "list forms" body and build FormSummary records.

        Raises:
            UpstreamPayloadError: If the body is not a list of form objects
        """
        self._check(self._forms_validator, payload, "forms listing")
        return [FormSummary.from_dict(item) for item in payload]

    def validate_submissions(self, payload: Any) -> List[Submission]:
        """Check a "list submissions" body and build Submission records.

        Raises:
            UpstreamPayloadError: If the body is not a list of submission objects
        """
        self._check(self._submissions_validator, payload, "submissions listing")
        return [Submission.from_dict(item) for item in payload]

    def problems(self, validator: Draft7Validator, payload: Any) -> List[PayloadProblem]:
        """Collect every schema violation, ordered by location."""
        errors = sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.path])
        return [self._translate_error(error) for error in errors]

    def _check(self, validator: Draft7Validator, payload: Any, what: str) -> None:
        problems = self.problems(validator, payload)
        if problems:
            summary = "; ".join(str(p) for p in problems[:3])
            if len(problems) > 3:
                summary += f" (and {len(problems) - 3} more)"
            raise UpstreamPayloadError(f"Malformed {what} from forms backend: {summary}")

    def _translate_error(self, error: jsonschema.ValidationError) -> PayloadProblem:
        path = ".".join(str(p) for p in error.path)

        if error.validator == "required":
            missing_prop = error.message.split("'")[1] if "'" in error.message else "field"
            full_path = f"{path}.{missing_prop}" if path else missing_prop
            return PayloadProblem(path=full_path, message="required member is missing")

        if error.validator == "type":
            expected = error.validator_value
            if isinstance(expected, list):
                expected = " or ".join(expected)
            received = type(error.instance).__name__
            return PayloadProblem(path=path, message=f"expected {expected}, got {received}")

        return PayloadProblem(path=path, message=error.message)


__all__ = [
    "FORMS_SCHEMA",
    "SUBMISSIONS_SCHEMA",
    "PayloadProblem",
    "PayloadValidator",
]
