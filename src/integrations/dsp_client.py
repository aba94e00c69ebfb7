"""Signed client for the partner (DSP) loan-origination API."""

from typing import Any, Optional

import httpx

from src.integrations.dsp_auth import (
    NO_BODY,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    Clock,
    current_timestamp,
    serialize_body,
    sign_serialized,
)
from src.integrations.exceptions import SigningInputError
from src.integrations.http_client import ApiClient, ApiResponse, HttpMethod
from src.utils.config import Settings, get_settings

SOURCING_CHANNEL_HEADER = "X-SourcingChannelCode"


class DspClient(ApiClient):
    """ApiClient that signs every request with the partner HMAC headers.

    The body is serialized once; that exact text is both signed and sent,
    so nothing can reorder keys between signing and transmission.

    Args:
        base_url: Partner API host
        secret_key: Shared HMAC secret
        sourcing_channel_code: Default X-SourcingChannelCode value
        clock: Optional clock for deterministic timestamps
        **kwargs: Passed to ApiClient (timeout, transport, pod_name)

    Raises:
        SigningInputError: If ``secret_key`` is empty
    """

    def __init__(
        self,
        base_url: str,
        secret_key: str,
        sourcing_channel_code: str = "DSP-UAT",
        clock: Optional[Clock] = None,
        **kwargs: Any,
    ):
        if not secret_key:
            raise SigningInputError("DSP secret key is empty; set DSP_SECRET_KEY")
        kwargs.setdefault("pod_name", "los")
        super().__init__(base_url, **kwargs)
        self._secret_key = secret_key
        self.sourcing_channel_code = sourcing_channel_code
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "DspClient":
        """Build a client from DSP_BASE_URL, DSP_SECRET_KEY and friends."""
        settings = settings or get_settings()
        return cls(
            base_url=settings.resolve_dsp_base_url(),
            secret_key=settings.get_dsp_secret_key() or "",
            sourcing_channel_code=settings.SOURCING_CHANNEL_CODE,
            timeout=settings.API_TIMEOUT,
            transport=transport,
        )

    def auth_headers(self, body_text: Optional[str] = None) -> dict[str, str]:
        """Fresh timestamp and signature over an already-serialized body."""
        timestamp = current_timestamp(self._clock)
        return {
            TIMESTAMP_HEADER: timestamp,
            SIGNATURE_HEADER: sign_serialized(self._secret_key, timestamp, body_text),
        }

    async def signed_request(
        self,
        method: HttpMethod,
        endpoint: str,
        body: Any = NO_BODY,
        *,
        params: Optional[dict[str, Any]] = None,
        sourcing_channel_code: Optional[str] = None,
    ) -> ApiResponse:
        """Send a signed request.

        Args:
            method: HTTP method
            endpoint: Path relative to the partner host
            body: JSON value to send; leave as NO_BODY for GET
            params: Query parameters (not part of the signature)
            sourcing_channel_code: Overrides the client default

        Returns:
            Parsed ApiResponse
        """
        body_text = None if body is NO_BODY else serialize_body(body)
        headers = {
            SOURCING_CHANNEL_HEADER: sourcing_channel_code or self.sourcing_channel_code,
            **self.auth_headers(body_text),
        }
        content = body_text.encode("utf-8") if body_text is not None else None
        return await self.request(method, endpoint, content=content, params=params, headers=headers)
