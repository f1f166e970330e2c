"""
MediCore API HTTP Client

Async client for the MediCore clinic-management REST API.
Uses httpx with a cookie jar, so the session cookie set by ``login`` is
carried by every later call (the session probe included).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from medicore_admin.config.settings import get_settings
from medicore_admin.core.domain.events import EntityKind
from medicore_admin.models import Appointment, AppointmentStatus, Doctor, Message, Principal

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class MediCoreAPIError(Exception):
    """Error raised for any failed MediCore API call."""

    def __init__(
        self,
        error_code: str,
        error_message: str,
        status_code: int | None = None,
        from_server: bool = False,
    ):
        self.error_code = error_code
        self.error_message = error_message
        self.status_code = status_code
        # True when error_message is the server's own user-facing text
        self.from_server = from_server
        super().__init__(f"{error_code}: {error_message}")

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class LoginResult(BaseModel):
    message: str
    principal: Principal


class MediCoreAPIClient:
    """
    Async HTTP client for the MediCore API.

    Environment Variables:
        API_BASE_URL: Base URL of the API (default: hosted MediCore backend)
        API_TIMEOUT: Request timeout in seconds (default: 30)

    Example:
        async with MediCoreAPIClient() as client:
            principal = await client.get_current_admin()
            doctors = await client.list_doctors()
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize MediCore client.

        Args:
            base_url: API base URL (defaults to settings API_BASE_URL)
            timeout_seconds: Request timeout (defaults to settings API_TIMEOUT)
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout_seconds or settings.API_TIMEOUT
        self._user_agent = settings.API_USER_AGENT
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> MediCoreAPIClient:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def open(self) -> None:
        """Create the underlying client (idempotent)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=self._get_headers(),
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    @property
    def is_open(self) -> bool:
        return self._client is not None and not self._client.is_closed

    def _get_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": self._user_agent,
        }

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            raise RuntimeError("Client not initialized. Use 'async with MediCoreAPIClient() as client:'")
        return self._client

    # ------------------------------------------------------------------ #
    #  Session                                                            #
    # ------------------------------------------------------------------ #
    async def get_current_admin(self) -> Principal | None:
        """
        Probe the current session.

        Returns:
            The logged-in admin, or None when the server reports no session (401)
            or answers without a user

        Raises:
            MediCoreAPIError: On transport errors or malformed payloads
        """
        try:
            data = await self._request("GET", "/user/admin/me")
        except MediCoreAPIError as e:
            if e.is_unauthorized:
                return None
            raise

        user = data.get("user")
        if not user:
            return None
        return self._parse(Principal, user)

    async def login(self, email: str, password: str, role: str = "Admin") -> LoginResult:
        """Authenticate with email/password; the session cookie is kept by the client."""
        data = await self._request(
            "POST",
            "/user/login",
            json={"email": email, "password": password, "role": role},
        )
        user = data.get("user")
        if not user:
            raise MediCoreAPIError("INVALID_RESPONSE", "Login response did not include a user")
        return LoginResult(message=data.get("message") or "Logged in", principal=self._parse(Principal, user))

    async def logout(self) -> str:
        data = await self._request("GET", "/user/admin/logout")
        return data.get("message", "")

    # ------------------------------------------------------------------ #
    #  Collections                                                        #
    # ------------------------------------------------------------------ #
    async def list_doctors(self) -> list[Doctor]:
        data = await self._request("GET", "/user/doctors")
        return self._parse_list(Doctor, data, "doctors")

    async def list_messages(self) -> list[Message]:
        data = await self._request("GET", "/message/")
        return self._parse_list(Message, data, "messages")

    async def list_appointments(self) -> list[Appointment]:
        data = await self._request("GET", "/appointment/")
        return self._parse_list(Appointment, data, "appointments")

    async def list_entities(self, kind: EntityKind | str) -> list[Any]:
        """Fetch the full collection for ``kind``."""
        entity_kind = EntityKind.parse(kind)
        if entity_kind is EntityKind.DOCTORS:
            return await self.list_doctors()
        if entity_kind is EntityKind.MESSAGES:
            return await self.list_messages()
        return await self.list_appointments()

    # ------------------------------------------------------------------ #
    #  Writes                                                             #
    # ------------------------------------------------------------------ #
    async def add_doctor(
        self,
        form: Mapping[str, Any],
        avatar: tuple[str, bytes, str] | None = None,
    ) -> str:
        """
        Register a doctor (multipart form).

        Args:
            form: Doctor fields in the server's camelCase names; empty values are skipped
            avatar: Optional (filename, content, content_type) for ``docAvatar``
        """
        fields = {key: str(value) for key, value in form.items() if value not in (None, "")}
        files = {"docAvatar": avatar} if avatar else None
        data = await self._request("POST", "/user/doctor/addnew", data=fields, files=files)
        return data.get("message", "")

    async def add_admin(self, form: Mapping[str, Any]) -> str:
        data = await self._request("POST", "/user/admin/addnew", json=dict(form))
        return data.get("message", "")

    async def update_appointment_status(self, appointment_id: str, status: AppointmentStatus | str) -> str:
        status_value = AppointmentStatus(status).value
        data = await self._request("PUT", f"/appointment/{appointment_id}", json={"status": status_value})
        return data.get("message", "")

    async def delete_message(self, message_id: str) -> str:
        data = await self._request("DELETE", f"/message/{message_id}")
        return data.get("message", "")

    async def test_connection(self) -> bool:
        """Return True if the API answers at all (any status below 500)."""
        client = self._get_client()
        try:
            response = await client.get("/user/doctors")
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.error(f"MediCore connection test failed: {e}")
            return False

    # ------------------------------------------------------------------ #
    #  Internals                                                          #
    # ------------------------------------------------------------------ #
    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        client = self._get_client()

        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._handle_http_error(e)
        except httpx.TimeoutException as e:
            raise MediCoreAPIError("TIMEOUT", f"Request timed out: {e}") from e
        except httpx.RequestError as e:
            raise MediCoreAPIError("CONNECTION_ERROR", f"Connection error: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise MediCoreAPIError(
                "INVALID_RESPONSE", f"Non-JSON response from {path}", response.status_code
            ) from e
        if not isinstance(data, dict):
            raise MediCoreAPIError(
                "INVALID_RESPONSE", f"Unexpected response shape from {path}", response.status_code
            )
        return data

    def _parse(self, model: type[M], payload: Any) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise MediCoreAPIError("INVALID_RESPONSE", f"Malformed {model.__name__} payload: {e}") from e

    def _parse_list(self, model: type[M], data: dict[str, Any], key: str) -> list[M]:
        raw = data.get(key) or []
        if not isinstance(raw, list):
            raise MediCoreAPIError("INVALID_RESPONSE", f"Expected a list under '{key}'")
        return [self._parse(model, entry) for entry in raw]

    def _handle_http_error(self, error: httpx.HTTPStatusError) -> None:
        """
        Map an HTTP error to MediCoreAPIError.

        The server's JSON ``message`` is preferred as the user-facing text.

        Raises:
            MediCoreAPIError: Always
        """
        status = error.response.status_code
        server_message = self._server_message(error.response)

        error_mapping = {
            400: ("BAD_REQUEST", "Bad request"),
            401: ("AUTH_ERROR", "Not authenticated"),
            403: ("FORBIDDEN", "Access denied"),
            404: ("NOT_FOUND", "Resource not found"),
            409: ("CONFLICT", "Conflict"),
            422: ("VALIDATION_ERROR", "Validation error"),
            429: ("RATE_LIMIT", "Rate limit exceeded"),
        }

        if status in error_mapping:
            code, message = error_mapping[status]
        elif status >= 500:
            code, message = "SERVER_ERROR", f"MediCore server error: {status}"
        else:
            code, message = f"HTTP_{status}", error.response.reason_phrase or "Request failed"

        raise MediCoreAPIError(
            code,
            server_message or message,
            status_code=status,
            from_server=server_message is not None,
        ) from error

    @staticmethod
    def _server_message(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            if isinstance(message, str) and message:
                return message
        return None
