"""HTTP client for the platform's upload-token and assets endpoints."""

import base64
from typing import Any, Iterable, Optional, Sequence, Set

import httpx
from pydantic import ValidationError

from common.constants import DEFAULT_API_BASE_URL, JWT_EXPIRED_ERROR_CODE
from common.logging_config import get_logger
from common.types import FileRecord, UploadCredential
from uploader import __version__
from uploader.exceptions import ApiError, AuthExpiredError
from uploader.schemas import (
    ApiEnvelope,
    FingerprintsRequest,
    UploadPayloadFile,
    UploadPayloadMetadata,
    UploadTokenResult,
)

logger = get_logger(__name__)

USER_AGENT = f"pages-deploy/{__version__}"


def _truncate(text: str, max_length: int = 100) -> str:
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}... (length = {len(text)})"


def build_upload_payload(files: Sequence[FileRecord]) -> list:
    """Serialize a batch into the upload endpoint's request body."""
    return [
        UploadPayloadFile(
            key=record.fingerprint,
            value=base64.b64encode(record.content).decode('ascii'),
            metadata=UploadPayloadMetadata(contentType=record.content_type),
        ).model_dump()
        for record in files
    ]


class AssetsClient:
    """Async HTTP client for one project's asset namespace."""

    def __init__(
        self,
        account_id: str,
        project_name: str,
        api_token: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize assets client.

        Args:
            account_id: Account that owns the project
            project_name: Project receiving the deployment
            api_token: Account API token, only used to obtain upload tokens
            base_url: API base URL
            timeout: Default request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.account_id = account_id
        self.project_name = project_name
        self.api_token = api_token
        self.timeout = timeout
        self.session = httpx.AsyncClient(
            base_url=base_url.rstrip('/'),
            timeout=timeout,
            transport=transport,
            headers={'User-Agent': USER_AGENT}
        )
        logger.info(f"Initialized AssetsClient [base_url={base_url}, project={project_name}]")

    async def __aenter__(self) -> 'AssetsClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session."""
        await self.session.aclose()

    def _calculate_upload_timeout(self, payload_size: int) -> float:
        """
        Calculate timeout for a batch upload based on its size.

        Args:
            payload_size: Sum of file sizes in bytes

        Returns:
            Timeout in seconds (base timeout + 0.1s per MiB)
        """
        size_mb = payload_size / (1024 * 1024)
        return self.timeout + size_mb * 0.1

    async def _request(
        self,
        method: str,
        endpoint: str,
        token: str,
        json: Any = None,
        timeout: Optional[float] = None
    ) -> Any:
        """
        Make an API request and unwrap its envelope.

        Returns:
            The envelope's result field

        Raises:
            AuthExpiredError: The upload token has expired
            ApiError: Transport failure, malformed body or unsuccessful envelope
        """
        headers = {'Authorization': f'Bearer {token}'}
        logger.debug(f"Making request: {method} {endpoint}")

        try:
            response = await self.session.request(
                method,
                endpoint,
                json=json,
                headers=headers,
                timeout=timeout if timeout is not None else self.timeout
            )
        except httpx.TimeoutException as e:
            raise ApiError(f"Request timed out: {method} {endpoint}") from e
        except httpx.TransportError as e:
            raise ApiError(f"Network error: {method} {endpoint} error={type(e).__name__}") from e
        except httpx.RequestError as e:
            raise ApiError(f"Request failed: {method} {endpoint} error={type(e).__name__}") from e

        logger.debug(f"Response received: {method} {endpoint} status={response.status_code}")

        try:
            envelope = ApiEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ApiError(
                "Received a malformed response from the API\n"
                f"{_truncate(response.text)}\n"
                f"{method} {endpoint} -> {response.status_code} {response.reason_phrase}"
            ) from e

        if not envelope.success:
            error = envelope.errors[0] if envelope.errors else None
            code = error.code if error else None
            message = error.message if error and error.message else f"{method} {endpoint} failed"
            logger.warning(f"API error: {method} {endpoint} status={response.status_code} code={code}")
            if code == JWT_EXPIRED_ERROR_CODE:
                raise AuthExpiredError(message, code=code)
            raise ApiError(message, code=code)

        return envelope.result

    async def fetch_credential(self) -> UploadCredential:
        """Obtain a fresh upload token for the project."""
        result = await self._request(
            'GET',
            f'/accounts/{self.account_id}/pages/projects/{self.project_name}/upload-token',
            token=self.api_token
        )
        try:
            token = UploadTokenResult.model_validate(result)
        except ValidationError as e:
            raise ApiError("Upload token response did not contain a token") from e
        logger.debug("Fetched new upload token")
        return UploadCredential(token=token.jwt)

    async def check_missing(self, credential: UploadCredential, fingerprints: Iterable[str]) -> Set[str]:
        """
        Ask which fingerprints the store does not hold yet.

        Returns:
            Subset of fingerprints that still need uploading
        """
        body = FingerprintsRequest(hashes=sorted(set(fingerprints)))
        result = await self._request(
            'POST',
            '/pages/assets/check-missing',
            token=credential.token,
            json=body.model_dump()
        )
        if not isinstance(result, list):
            raise ApiError("check-missing response was not a list of hashes")
        return set(result)

    async def upload_batch(self, credential: UploadCredential, files: Sequence[FileRecord]) -> None:
        """Upload one batch of files in a single request."""
        payload_size = sum(record.size_in_bytes for record in files)
        await self._request(
            'POST',
            '/pages/assets/upload',
            token=credential.token,
            json=build_upload_payload(files),
            timeout=self._calculate_upload_timeout(payload_size)
        )

    async def commit_fingerprints(self, credential: UploadCredential, fingerprints: Iterable[str]) -> None:
        """Tell the store the fingerprints are referenced by this deployment."""
        body = FingerprintsRequest(hashes=sorted(set(fingerprints)))
        await self._request(
            'POST',
            '/pages/assets/upsert-hashes',
            token=credential.token,
            json=body.model_dump()
        )
