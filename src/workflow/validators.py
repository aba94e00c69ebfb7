"""Response validators.

Each check raises StepValidationError with expected vs. actual and the
response body in the message. Field paths use dot notation
(``user.address.city``); list indices are accepted as path segments
(``items.0.id``).
"""

from typing import Any, Iterable, Optional

from src.integrations.http_client import ApiResponse
from src.workflow.error_handling import StepValidationError

MISSING: Any = object()


def get_nested_field(obj: Any, path: str) -> Any:
    """Return the value at a dot path, or MISSING if any segment is absent."""
    current = obj
    for key in path.split("."):
        if isinstance(current, dict):
            if key not in current:
                return MISSING
            current = current[key]
        elif isinstance(current, list) and key.isdigit():
            index = int(key)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


class ResponseValidator:
    """Static assertions over ApiResponse objects."""

    @staticmethod
    def validate_status(response: ApiResponse, expected_status: int, step_name: str = "") -> None:
        """Status code must equal ``expected_status``."""
        if response.status != expected_status:
            raise StepValidationError(
                f"Expected status {expected_status}, but got {response.status}",
                step_name=step_name,
                expected=expected_status,
                actual=response.status,
                body=response.body,
            )

    @staticmethod
    def validate_status_ok(response: ApiResponse, step_name: str = "") -> None:
        """Status code must be 2xx."""
        if not response.ok:
            raise StepValidationError(
                f"Expected successful response, but got {response.status}",
                step_name=step_name,
                expected="2xx",
                actual=response.status,
                body=response.body,
            )

    @staticmethod
    def validate_field(
        response: ApiResponse,
        field_path: str,
        expected_value: Any = MISSING,
        step_name: str = "",
    ) -> None:
        """Field must exist; when ``expected_value`` is given it must also match.

        A field that is present with value ``None`` (JSON null) counts as present.
        """
        value = get_nested_field(response.body, field_path)

        if value is MISSING:
            raise StepValidationError(
                f"Field '{field_path}' not found in response",
                step_name=step_name,
                expected=field_path,
                actual=None,
                body=response.body,
            )

        if expected_value is not MISSING and value != expected_value:
            raise StepValidationError(
                f"Expected field '{field_path}' to be {expected_value!r}, but got {value!r}",
                step_name=step_name,
                expected=expected_value,
                actual=value,
                body=response.body,
            )

    @staticmethod
    def validate_schema(response: ApiResponse, schema: dict, step_name: str = "") -> None:
        """Every name in ``schema['required']`` must be a top-level body key."""
        body = response.body if isinstance(response.body, dict) else {}
        for field in schema.get("required", []):
            if field not in body:
                raise StepValidationError(
                    f"Required field '{field}' missing from response",
                    step_name=step_name,
                    expected=field,
                    actual=sorted(body),
                    body=response.body,
                )

    @staticmethod
    def validate_contains(
        response: ApiResponse,
        field_path: str,
        items: Iterable[Any],
        step_name: str = "",
    ) -> None:
        """Field must be a list containing every one of ``items``."""
        value = get_nested_field(response.body, field_path)
        if not isinstance(value, list):
            raise StepValidationError(
                f"Expected field '{field_path}' to be a list, but got {value!r}",
                step_name=step_name,
                expected="list",
                actual=None if value is MISSING else value,
                body=response.body,
            )
        missing = [item for item in items if item not in value]
        if missing:
            raise StepValidationError(
                f"Expected field '{field_path}' to contain {missing!r}, but got {value!r}",
                step_name=step_name,
                expected=missing,
                actual=value,
                body=response.body,
            )

    @staticmethod
    def validate_required_fields(
        response: ApiResponse, fields: Iterable[str], step_name: Optional[str] = ""
    ) -> None:
        """Each dot path in ``fields`` must exist."""
        for field_path in fields:
            ResponseValidator.validate_field(response, field_path, step_name=step_name or "")
