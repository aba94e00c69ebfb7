"""HTTP clients and request signing for the platform APIs."""

from src.integrations.dsp_auth import NO_BODY, generate_dsp_auth_headers, generate_signature
from src.integrations.dsp_client import DspClient
from src.integrations.exceptions import SigningInputError, TransportError
from src.integrations.http_client import ApiClient, ApiResponse

__all__ = [
    "NO_BODY",
    "generate_dsp_auth_headers",
    "generate_signature",
    "ApiClient",
    "ApiResponse",
    "DspClient",
    "SigningInputError",
    "TransportError",
]
