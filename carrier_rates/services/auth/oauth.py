"""
OAuth2 client-credentials token acquisition.
"""

import base64
import json
import logging
from dataclasses import dataclass
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic import ValidationError as PydanticValidationError

from carrier_rates.core.enums import ErrorCode
from carrier_rates.core.exceptions import AuthError
from carrier_rates.services.http_client import HttpClient

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN_SECONDS = 3600


class TokenResponse(BaseModel):
    """Token endpoint response body"""
    model_config = ConfigDict(extra="allow")

    access_token: Annotated[str, StringConstraints(min_length=1)]
    token_type: Optional[str] = None
    expires_in: Optional[int] = Field(default=None, gt=0)


@dataclass(frozen=True)
class OAuthToken:
    access_token: str
    expires_in_seconds: int
    token_type: Optional[str] = None


class OAuthClient:
    """
    Requests access tokens from a client-credentials token endpoint.
    """

    def __init__(
        self,
        http_client: HttpClient,
        auth_url: str,
        client_id: str,
        client_secret: str,
        timeout_ms: Optional[int] = None,
    ):
        self.http_client = http_client
        self.auth_url = auth_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout_ms = timeout_ms

    def get_basic_auth_header(self) -> str:
        """Basic authentication header value for the token endpoint"""
        credentials = f"{self.client_id}:{self.client_secret}"
        encoded_credentials = base64.b64encode(credentials.encode()).decode()
        return f"Basic {encoded_credentials}"

    async def acquire_token(self) -> OAuthToken:
        """
        Exchange the client credentials for an access token

        Returns:
            OAuthToken: The new token and its lifetime

        Raises:
            AuthError: AUTH_FAILED if the endpoint rejects the call or the body is invalid
        """
        response = await self.http_client.request(
            "POST",
            self.auth_url,
            headers={
                "Authorization": self.get_basic_auth_header(),
                "Content-Type": "application/x-www-form-urlencoded",
            },
            content="grant_type=client_credentials",
            timeout_ms=self.timeout_ms,
        )

        if not response.ok:
            logger.error(f"OAuth token request failed: HTTP {response.status}")
            raise AuthError(
                ErrorCode.AUTH_FAILED,
                f"OAuth token request failed with HTTP {response.status}",
                details={"status": response.status, "body": response.body_text},
            )

        try:
            payload = json.loads(response.body_text)
        except ValueError:
            payload = None

        try:
            token = TokenResponse.model_validate(payload)
        except PydanticValidationError as e:
            logger.error("OAuth token response failed validation")
            raise AuthError(
                ErrorCode.AUTH_FAILED,
                "OAuth token response failed validation",
                details={"issues": e.errors(include_url=False)},
                cause=e,
            ) from e

        return OAuthToken(
            access_token=token.access_token,
            expires_in_seconds=token.expires_in or DEFAULT_EXPIRES_IN_SECONDS,
            token_type=token.token_type,
        )
