"""Tests for response validators."""

import pytest

from src.integrations.http_client import ApiResponse
from src.workflow.error_handling import StepValidationError
from src.workflow.validators import MISSING, ResponseValidator, get_nested_field

BODY = {
    "opportunityId": "OPP-1",
    "status": "INITIATED",
    "customer": {"pan": "ABCPA1234K", "address": {"city": "Pune"}},
    "availableAssetCategories": ["MUTUAL_FUND", "EQUITY"],
    "items": [{"id": 1}, {"id": 2}],
    "remarks": None,
}


def response(status: int = 200, body=BODY) -> ApiResponse:
    return ApiResponse(status=status, body=body, ok=200 <= status < 300)


class TestGetNestedField:
    """Test dot-path lookup."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("opportunityId", "OPP-1"),
            ("customer.address.city", "Pune"),
            ("items.1.id", 2),
            ("remarks", None),
        ],
    )
    def test_found(self, path, expected):
        assert get_nested_field(BODY, path) == expected

    @pytest.mark.parametrize("path", ["nope", "customer.phone", "items.5.id", "status.x"])
    def test_missing(self, path):
        assert get_nested_field(BODY, path) is MISSING

    def test_non_dict_body(self):
        assert get_nested_field("Bad Gateway", "status") is MISSING


class TestValidateStatus:
    """Test status assertions."""

    def test_match(self):
        ResponseValidator.validate_status(response(201), 201)

    def test_mismatch_reports_expected_actual_and_body(self):
        with pytest.raises(StepValidationError) as exc_info:
            ResponseValidator.validate_status(
                response(400, {"message": "bad pan"}), 200, step_name="create_opportunity"
            )

        message = str(exc_info.value)
        assert "Step 'create_opportunity'" in message
        assert "Expected status 200, but got 400" in message
        assert "bad pan" in message
        assert exc_info.value.step_name == "create_opportunity"

    def test_status_ok(self):
        ResponseValidator.validate_status_ok(response(204))
        with pytest.raises(StepValidationError, match="2xx|successful"):
            ResponseValidator.validate_status_ok(response(500))


class TestValidateField:
    """Test field presence and value checks."""

    def test_present(self):
        ResponseValidator.validate_field(response(), "customer.pan")

    def test_null_counts_as_present(self):
        ResponseValidator.validate_field(response(), "remarks")

    def test_absent(self):
        with pytest.raises(StepValidationError, match="Field 'customer.phone' not found"):
            ResponseValidator.validate_field(response(), "customer.phone")

    def test_value_match(self):
        ResponseValidator.validate_field(response(), "status", "INITIATED")

    def test_value_mismatch(self):
        with pytest.raises(StepValidationError) as exc_info:
            ResponseValidator.validate_field(response(), "status", "COMPLETED")

        assert exc_info.value.expected == "COMPLETED"
        assert exc_info.value.actual == "INITIATED"

    def test_expected_none_is_checked(self):
        with pytest.raises(StepValidationError):
            ResponseValidator.validate_field(response(), "status", None)


class TestValidateSchema:
    """Test required top-level keys."""

    def test_all_present(self):
        ResponseValidator.validate_schema(response(), {"required": ["opportunityId", "status"]})

    def test_missing_key(self):
        with pytest.raises(StepValidationError, match="Required field 'offerId'"):
            ResponseValidator.validate_schema(response(), {"required": ["offerId"]})

    def test_text_body(self):
        with pytest.raises(StepValidationError):
            ResponseValidator.validate_schema(response(body="oops"), {"required": ["a"]})


class TestValidateContains:
    """Test list membership."""

    def test_contains(self):
        ResponseValidator.validate_contains(response(), "availableAssetCategories", ["MUTUAL_FUND"])

    def test_missing_item(self):
        with pytest.raises(StepValidationError, match="BONDS"):
            ResponseValidator.validate_contains(response(), "availableAssetCategories", ["BONDS"])

    def test_not_a_list(self):
        with pytest.raises(StepValidationError, match="to be a list"):
            ResponseValidator.validate_contains(response(), "status", ["X"])


class TestValidateRequiredFields:
    def test_nested_paths(self):
        ResponseValidator.validate_required_fields(response(), ["opportunityId", "customer.address.city"])

    def test_first_missing_raises(self):
        with pytest.raises(StepValidationError, match="offerId"):
            ResponseValidator.validate_required_fields(response(), ["opportunityId", "offerId"], "x")
