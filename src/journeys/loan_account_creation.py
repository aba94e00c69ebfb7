"""Loan account creation journey (partner DSP API chain).

Steps and the references they thread:

    1. generate_offer          POST  -
    2. client_dedupe_check     POST  -
    3. create_opportunity      POST  -> opportunityId
    4. kyc_utility_init        POST  opportunityId -> utilityReferenceId
    5. get_kyc_utility         GET   utilityReferenceId, opportunityId
    6. photo_verification      POST  opportunityId, utilityReferenceId
                                     -> photoVerificationReferenceId
                                     -> utilityReferenceId (if re-issued)
    7. get_photo_verification  GET   latest utilityReferenceId,
                                     photoVerificationReferenceId

Request templates and expected responses come from
``testdata/los/loan_account_creation.json``; endpoint paths from
``config/endpoints.json`` under ``los.loanAccountCreation``.
"""

from functools import partial
from pathlib import Path
from typing import Any

from src.journeys import Journey, JourneyRegistry
from src.utils.config import Settings
from src.utils.testdata import load_endpoints, load_image_base64, load_testdata
from src.workflow.state import WorkflowState
from src.workflow.steps import StepDescriptor

JOURNEY_NAME = "loan_account_creation"


def selected_user(fixture: dict) -> dict:
    """User record named by ``common.selectedUser``."""
    return fixture["userDetails"][fixture["common"]["selectedUser"]]


def _expected(fixture: dict, key: str) -> dict:
    return fixture[key]["expectedResponse"]


def _status_checks(fixture: dict, key: str) -> dict[str, Any]:
    expected = _expected(fixture, key)
    return {name: expected[name] for name in ("status", "subStatus") if name in expected}


# Request builders: (state, fixture) -> body


def build_generate_offer(state: WorkflowState, fixture: dict) -> dict:
    return {"pan": selected_user(fixture)["pan"], **fixture["generateOffer"]["request"]}


def build_client_dedupe_check(state: WorkflowState, fixture: dict) -> dict:
    return {"pan": selected_user(fixture)["pan"], **fixture["clientDedupeCheck"]["request"]}


def build_create_opportunity(state: WorkflowState, fixture: dict) -> dict:
    user = selected_user(fixture)
    return {
        "pan": user["pan"],
        "phoneNumber": user["phone"],
        **fixture["createOpportunity"]["request"],
    }


def build_kyc_utility_init(state: WorkflowState, fixture: dict) -> dict:
    return {
        "opportunityId": state.require_ref("opportunityId", "kyc_utility_init"),
        **fixture["kycUtilityInit"]["request"],
    }


def build_photo_verification(state: WorkflowState, fixture: dict, testdata_dir: Path) -> dict:
    section = fixture["photoVerification"]
    return {
        "opportunityId": state.require_ref("opportunityId", "photo_verification"),
        "utilityReferenceId": state.require_ref("utilityReferenceId", "photo_verification"),
        "image": load_image_base64(section["imageFile"], testdata_dir=testdata_dir),
        **section["request"],
    }


def build_steps(fixture: dict, endpoints: dict, testdata_dir: Path) -> list[StepDescriptor]:
    """Assemble the journey's StepDescriptors from fixture and endpoints."""
    paths = endpoints["los"]["loanAccountCreation"]
    dedupe = _expected(fixture, "clientDedupeCheck")

    return [
        StepDescriptor(
            name="generate_offer",
            method="POST",
            endpoint=paths["generateOffer"],
            build_request=build_generate_offer,
            expected_status=_expected(fixture, "generateOffer")["statusCode"],
            required_fields=_expected(fixture, "generateOffer")["requiredFields"],
        ),
        StepDescriptor(
            name="client_dedupe_check",
            method="POST",
            endpoint=paths["clientDedupeCheck"],
            build_request=build_client_dedupe_check,
            expected_status=dedupe["statusCode"],
            required_fields=dedupe["requiredFields"],
            expected_values={"isDuplicate": dedupe["isDuplicate"], "message": dedupe["message"]},
            expected_contains={"availableAssetCategories": dedupe["availableAssetCategories"]},
        ),
        StepDescriptor(
            name="create_opportunity",
            method="POST",
            endpoint=paths["createOpportunity"],
            build_request=build_create_opportunity,
            expected_status=_expected(fixture, "createOpportunity")["statusCode"],
            required_fields=_expected(fixture, "createOpportunity")["requiredFields"],
            extractors={"opportunityId": "opportunityId"},
        ),
        StepDescriptor(
            name="kyc_utility_init",
            method="POST",
            endpoint=paths["kycUtilityInit"],
            build_request=build_kyc_utility_init,
            requires=("opportunityId",),
            expected_status=_expected(fixture, "kycUtilityInit")["statusCode"],
            required_fields=_expected(fixture, "kycUtilityInit")["requiredFields"],
            expected_values=_status_checks(fixture, "kycUtilityInit"),
            expected_refs={"opportunityId": "opportunityId"},
            extractors={"utilityReferenceId": "utilityReferenceId"},
        ),
        StepDescriptor(
            name="get_kyc_utility",
            method="GET",
            endpoint=paths["getKycUtility"],
            path_params={"utilityReferenceId": "utilityReferenceId"},
            query_params={"imageType": fixture["getKycUtility"]["request"]["imageType"]},
            expected_status=_expected(fixture, "getKycUtility")["statusCode"],
            required_fields=_expected(fixture, "getKycUtility")["requiredFields"],
            expected_values=_status_checks(fixture, "getKycUtility"),
            expected_refs={
                "opportunityId": "opportunityId",
                "utilityReferenceId": "utilityReferenceId",
            },
        ),
        StepDescriptor(
            name="photo_verification",
            method="POST",
            endpoint=paths["photoVerification"],
            build_request=partial(build_photo_verification, testdata_dir=testdata_dir),
            requires=("opportunityId", "utilityReferenceId"),
            expected_status=_expected(fixture, "photoVerification")["statusCode"],
            required_fields=_expected(fixture, "photoVerification")["requiredFields"],
            expected_values=_status_checks(fixture, "photoVerification"),
            extractors={"photoVerificationReferenceId": "photoVerificationReferenceId"},
            optional_extractors={"utilityReferenceId": "utilityReferenceId"},
        ),
        StepDescriptor(
            name="get_photo_verification",
            method="GET",
            endpoint=paths["getPhotoVerification"],
            path_params={"utilityReferenceId": "utilityReferenceId"},
            expected_status=_expected(fixture, "getPhotoVerification")["statusCode"],
            required_fields=_expected(fixture, "getPhotoVerification")["requiredFields"],
            expected_values=_status_checks(fixture, "getPhotoVerification"),
            expected_refs={"photoVerificationReferenceId": "photoVerificationReferenceId"},
        ),
    ]


@JourneyRegistry.register(JOURNEY_NAME)
def loan_account_creation(settings: Settings) -> Journey:
    """Load fixtures for the configured environment and build the journey."""
    fixture = load_testdata("los", JOURNEY_NAME, settings.TESTDATA_DIR)
    endpoints = load_endpoints(settings.CONFIG_DIR)
    return Journey(
        name=JOURNEY_NAME,
        steps=build_steps(fixture, endpoints, Path(settings.TESTDATA_DIR)),
        fixture=fixture,
        sourcing_channel_code=fixture["common"].get("sourcingChannelCode"),
    )
