"""
Enterprise Management Client - remote-call capability for the reconciler.

Talks to the Enterprise Management REST API over aiohttp. The API offers
create, get and update for enterprises; there is no delete.
"""

import asyncio
import json
import logging
import time
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from config import DEFAULT_IAM_URL, EnterpriseAPIConfig
from errors import ClientUnavailable, RemoteFailure, RemoteNotFound
from models import CreateEnterpriseRequest, CreateEnterpriseResponse, Enterprise

logger = logging.getLogger(__name__)

IAM_APIKEY_GRANT = "urn:ibm:params:oauth:grant-type:apikey"


def _error_message(body: str) -> str:
    """Extract a human-readable message from an API error body."""
    if not body:
        return "no response body"
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict):
        errors = data.get("errors")
        if isinstance(errors, list):
            messages = [
                str(e.get("message")) for e in errors if isinstance(e, dict) and e.get("message")
            ]
            if messages:
                return "; ".join(messages)
        for key in ("message", "errorMessage", "error_description"):
            if data.get(key):
                return str(data[key])
    return body


class BearerTokenAuthenticator:
    """Authenticates with a pre-issued IAM bearer token."""

    def __init__(self, token: str):
        self.token = token

    async def get_token(self, session: aiohttp.ClientSession) -> str:
        return self.token


class IAMAuthenticator:
    """
    Exchanges an API key for an IAM access token.

    The token is reused until shortly before it expires.
    """

    expiry_margin: int = 60  # seconds

    def __init__(self, api_key: str, iam_url: str = DEFAULT_IAM_URL):
        self.api_key = api_key
        self.iam_url = iam_url
        self._token: Optional[str] = None
        self._expires_at: float = 0.0

    async def get_token(self, session: aiohttp.ClientSession) -> str:
        if self._token and time.time() < self._expires_at - self.expiry_margin:
            return self._token

        async with session.post(
            self.iam_url,
            data={"grant_type": IAM_APIKEY_GRANT, "apikey": self.api_key},
            headers={"Accept": "application/json"},
        ) as response:
            body = await response.text()
            if response.status != 200:
                raise RemoteFailure(
                    "RequestIAMToken", _error_message(body), response.status, body
                )

        try:
            data = json.loads(body)
            self._token = data["access_token"]
        except (ValueError, KeyError, TypeError) as e:
            raise RemoteFailure(
                "RequestIAMToken", f"unreadable token response: {e}", 200, body
            ) from e
        expiration = data.get("expiration")
        if expiration:
            self._expires_at = float(expiration)
        else:
            self._expires_at = time.time() + float(data.get("expires_in", 3600))
        logger.debug("Obtained IAM access token")
        return self._token


class EnterpriseManagementClient:
    """
    Client for the Enterprise Management API.

    Each call opens its own session and accepts an optional deadline in
    seconds; without one the configured request timeout applies.
    """

    def __init__(
        self,
        api_base_url: str,
        authenticator: Any,
        request_timeout: int = 60,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.authenticator = authenticator
        self.request_timeout = request_timeout

    async def _get_headers(self, session: aiohttp.ClientSession) -> Dict[str, str]:
        token = await self.authenticator.get_token(session)
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }

    def _client_timeout(self, timeout: Optional[float]) -> aiohttp.ClientTimeout:
        if timeout is None:
            timeout = self.request_timeout
        return aiohttp.ClientTimeout(total=timeout)

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[int, str]:
        """Send one request and return (status, body text)."""
        url = f"{self.api_base_url}{path}"
        client_timeout = self._client_timeout(timeout)

        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as session:
                headers = await self._get_headers(session)
                async with session.request(
                    method, url, headers=headers, json=payload
                ) as response:
                    return response.status, await response.text()
        except asyncio.TimeoutError as e:
            raise RemoteFailure(
                operation, f"timed out after {client_timeout.total}s"
            ) from e
        except aiohttp.ClientError as e:
            raise RemoteFailure(operation, str(e) or type(e).__name__) from e

    def _failure(self, operation: str, status: int, body: str) -> RemoteFailure:
        logger.debug(f"{operation} failed with status {status}\n{body}")
        return RemoteFailure(operation, _error_message(body), status, body)

    async def create_enterprise(
        self, request: CreateEnterpriseRequest, timeout: Optional[float] = None
    ) -> str:
        """
        Create an enterprise.

        Returns:
            The new enterprise ID.

        Raises:
            RemoteFailure: If the call fails or returns no enterprise ID.
        """
        operation = "CreateEnterprise"
        status, body = await self._request(
            operation, "POST", "/enterprises", request.to_payload(), timeout
        )
        if status not in (200, 201, 202):
            raise self._failure(operation, status, body)

        try:
            created = CreateEnterpriseResponse.model_validate_json(body)
        except ValidationError as e:
            raise RemoteFailure(operation, f"unreadable response: {e}", status, body)
        if not created.enterprise_id:
            raise RemoteFailure(
                operation, "response did not include an enterprise_id", status, body
            )
        return created.enterprise_id

    async def get_enterprise(
        self, enterprise_id: str, timeout: Optional[float] = None
    ) -> Enterprise:
        """
        Fetch an enterprise by ID.

        Raises:
            RemoteNotFound: If the enterprise does not exist.
            RemoteFailure: On any other failure.
        """
        operation = "GetEnterprise"
        status, body = await self._request(
            operation, "GET", f"/enterprises/{quote(enterprise_id, safe='')}", None, timeout
        )
        if status == 404:
            raise RemoteNotFound(operation, enterprise_id)
        if status != 200:
            raise self._failure(operation, status, body)

        try:
            return Enterprise.model_validate_json(body)
        except ValidationError as e:
            raise RemoteFailure(operation, f"unreadable response: {e}", status, body)

    async def update_enterprise(
        self,
        enterprise_id: str,
        changes: Dict[str, str],
        timeout: Optional[float] = None,
    ) -> None:
        """
        Update the given fields of an enterprise.

        Raises:
            RemoteFailure: If the call fails.
        """
        operation = "UpdateEnterprise"
        status, body = await self._request(
            operation,
            "PATCH",
            f"/enterprises/{quote(enterprise_id, safe='')}",
            changes,
            timeout,
        )
        if status not in (200, 202, 204):
            raise self._failure(operation, status, body)


def build_client(api_config: EnterpriseAPIConfig) -> EnterpriseManagementClient:
    """
    Build a client from configuration.

    Raises:
        ClientUnavailable: If no credentials are configured.
    """
    if api_config.bearer_token:
        authenticator: Any = BearerTokenAuthenticator(api_config.bearer_token)
    elif api_config.api_key:
        authenticator = IAMAuthenticator(api_config.api_key, api_config.iam_url)
    else:
        raise ClientUnavailable(
            "No IBM Cloud credentials configured. "
            "Set IBMCLOUD_API_KEY or IBMCLOUD_IAM_TOKEN."
        )

    return EnterpriseManagementClient(
        api_base_url=api_config.api_base_url,
        authenticator=authenticator,
        request_timeout=api_config.request_timeout,
    )
