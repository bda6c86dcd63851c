"""Identity provider adapter speaking the Identity Toolkit REST API."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from adminprefs.adapters.http_resilience import ResilientClient
from adminprefs.config.identity import DEFAULT_IDENTITY_BASE_URL, get_identity_config
from adminprefs.domain.ports.identity import (
    DecodedIdToken,
    IdentityProvider,
    IdentityProviderError,
    IdentityRecord,
    InvalidIdTokenError,
)

from .schema import ErrorResponse, LookupResponse, OobCodeResponse, UpdateResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx
    from pydantic import BaseModel

    from adminprefs.config.http_resilience import ResilienceConfig
    from adminprefs.config.identity import IdentityConfig

log = getLogger(__name__)

# Error messages the API returns for tokens that no longer prove the caller.
INVALID_TOKEN_MESSAGES = frozenset(
    {
        "INVALID_ID_TOKEN",
        "TOKEN_EXPIRED",
        "USER_NOT_FOUND",
        "USER_DISABLED",
        "CREDENTIAL_TOO_OLD_LOGIN_AGAIN",
    }
)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _error_code(message: str) -> str:
    # Messages may carry a suffix, e.g. "TOKEN_EXPIRED : details".
    return message.split(":", 1)[0].strip()


@dataclass(slots=True)
class IdentityToolkitClient:
    """Synchronous ``IdentityProvider`` backed by an async resilient HTTP client."""

    config: IdentityConfig = field(default_factory=get_identity_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _runner: asyncio.Runner | None = field(default=None, init=False, repr=False)
    _client: ResilientClient | None = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def verify_id_token(self, token: str, *, check_revoked: bool = True) -> DecodedIdToken:
        try:
            payload = self._call("accounts:lookup", {"idToken": token}, LookupResponse)
        except IdentityProviderError as exc:
            if _error_code(str(exc)) in INVALID_TOKEN_MESSAGES:
                raise InvalidIdTokenError(str(exc), code=exc.code) from exc
            raise
        if not payload.users:
            raise InvalidIdTokenError("ID token does not belong to a known user")
        user = payload.users[0]
        if check_revoked and user.disabled:
            raise InvalidIdTokenError("USER_DISABLED")
        return DecodedIdToken(uid=user.local_id, email=user.email)

    def get_user(self, uid: str) -> IdentityRecord:
        payload = self._call(
            self._project_path("accounts:lookup"), {"localId": [uid]}, LookupResponse
        )
        if not payload.users:
            raise IdentityProviderError(f"USER_NOT_FOUND: {uid}")
        user = payload.users[0]
        return IdentityRecord(
            uid=user.local_id, email=user.email, email_verified=user.email_verified
        )

    def generate_email_verification_link(self, email: str) -> str:
        payload = self._call(
            self._project_path("accounts:sendOobCode"),
            {"requestType": "VERIFY_EMAIL", "email": email, "returnOobLink": True},
            OobCodeResponse,
        )
        return payload.oob_link

    def update_user(self, uid: str, *, email: str, email_verified: bool) -> IdentityRecord:
        payload = self._call(
            self._project_path("accounts:update"),
            {"localId": uid, "email": email, "emailVerified": email_verified},
            UpdateResponse,
        )
        log.info("Updated identity record for uid=%s", uid)
        return IdentityRecord(
            uid=payload.local_id,
            email=payload.email,
            email_verified=payload.email_verified,
        )

    def close(self) -> None:
        """Close the HTTP client and the event loop it is bound to."""
        with self._lock:
            if self._runner is None:
                return
            try:
                if self._client is not None:
                    self._runner.run(self._client.aclose())
            finally:
                self._client = None
                self._runner.close()
                self._runner = None

    def __enter__(self) -> IdentityToolkitClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _project_path(self, method: str) -> str:
        return f"projects/{self.config.project_id}/{method}"

    def _endpoint(self, path: str) -> str:
        # "accounts:lookup" on its own parses as a URL with scheme "accounts".
        root = (self.config.resilience.base_url or DEFAULT_IDENTITY_BASE_URL).rstrip("/")
        return f"{root}/{path}"

    def _call[TModel: BaseModel](
        self, path: str, body: dict[str, Any], model: type[TModel]
    ) -> TModel:
        # The client and its rate limiter are bound to this runner's loop.
        with self._lock:
            if self._runner is None:
                self._runner = asyncio.Runner()
            if self._client is None:
                self._client = self.client_factory(self.config.resilience)
            return self._runner.run(self._post(self._client, path, body, model))

    async def _post[TModel: BaseModel](
        self,
        client: ResilientClient,
        path: str,
        body: dict[str, Any],
        model: type[TModel],
    ) -> TModel:
        headers = (
            {"Authorization": f"Bearer {self.config.access_token}"}
            if self.config.access_token
            else None
        )
        response = await client.post(
            self._endpoint(path),
            json=body,
            params={"key": self.config.api_key},
            headers=headers,
        )
        return _parse_response(response, model, path=path)


def _parse_response[TModel: BaseModel](
    response: httpx.Response, model: type[TModel], *, path: str
) -> TModel:
    try:
        payload = response.json()
    except ValueError as exc:
        raise IdentityProviderError(
            f"Unexpected identity response for {path}", code=response.status_code
        ) from exc

    if isinstance(payload, dict) and "error" in payload:
        try:
            error = ErrorResponse.model_validate(payload).error
        except ValidationError:
            error = None
        message = error.message if error else "UNKNOWN_ERROR"
        code = error.code if error and error.code is not None else response.status_code
        log.error("Identity API error %s on %s: %s", code, path, message)
        raise IdentityProviderError(message, code=code)

    if response.is_error:
        raise IdentityProviderError(
            f"Identity request {path} failed with status {response.status_code}",
            code=response.status_code,
        )

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise IdentityProviderError(f"Unexpected identity response for {path}") from exc


if TYPE_CHECKING:
    _provider_check: IdentityProvider = IdentityToolkitClient()
