"""Shared Pydantic models for Restforce.

This module contains the credential model the rest client holds. A
credential bundles the access token, its paired refresh token, and the
instance URL every relative API path is resolved against.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Credential(BaseModel):
    """OAuth2 credential for one authenticated Salesforce session.

    Credentials are immutable. A token refresh yields a new instance that
    replaces the one held by the client.

    :param access_token: Bearer token sent with every API request
    :type access_token: str
    :param refresh_token: Token exchanged for a new access token
    :type refresh_token: str
    :param instance_url: Base URL of the org instance
    :type instance_url: str
    :param token_type: Type of token (default: "Bearer")
    :type token_type: str
    :param id_url: Identity URL of the resource owner, if issued
    :type id_url: Optional[str]
    :param issued_at: When the access token was issued
    :type issued_at: Optional[datetime]
    :param scope: Optional scope string for the token
    :type scope: Optional[str]
    :param signature: Optional signature over the identity URL and issue time
    :type signature: Optional[str]
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str
    instance_url: str
    token_type: str = "Bearer"
    id_url: Optional[str] = None
    issued_at: Optional[datetime] = None
    scope: Optional[str] = None
    signature: Optional[str] = None

    @field_validator("access_token", "refresh_token")
    @classmethod
    def validate_token_present(cls, v: str) -> str:
        """Reject empty or blank tokens.

        :param v: Token value
        :type v: str
        :return: The unchanged token
        :rtype: str
        :raises ValueError: If the token is empty
        """
        if not v or not v.strip():
            raise ValueError("token must be a non-empty string")
        return v

    @field_validator("instance_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the instance URL so paths can be appended to it."""
        return v.rstrip("/")

    @classmethod
    def from_token_response(
        cls, data: Dict[str, Any], refresh_token: Optional[str] = None
    ) -> "Credential":
        """Build a credential from an OAuth token endpoint response body.

        Refresh grants usually omit ``refresh_token`` from the response;
        in that case ``refresh_token`` is carried forward.

        :param data: Parsed JSON body of the token response
        :type data: Dict[str, Any]
        :param refresh_token: Fallback refresh token
        :type refresh_token: Optional[str]
        :return: New credential
        :rtype: Credential
        """
        issued_at = None
        raw_issued_at = data.get("issued_at")
        if raw_issued_at:
            # Salesforce reports milliseconds since the epoch as a string
            issued_at = datetime.fromtimestamp(
                int(raw_issued_at) / 1000, tz=timezone.utc
            )

        return cls(
            access_token=data.get("access_token") or "",
            refresh_token=data.get("refresh_token") or refresh_token or "",
            instance_url=data.get("instance_url") or "",
            token_type=data.get("token_type") or "Bearer",
            id_url=data.get("id"),
            issued_at=issued_at,
            scope=data.get("scope"),
            signature=data.get("signature"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for storage."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credential":
        """Deserialize from storage."""
        return cls.model_validate(data)

    def __repr__(self) -> str:
        return (
            f"Credential(instance_url={self.instance_url!r}, "
            f"token_type={self.token_type!r}, access_token=<REDACTED>)"
        )

    __str__ = __repr__
