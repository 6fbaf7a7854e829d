from typing import Any, Dict, List, Optional

import httpx

from healthcare_app.config import get_settings
from healthcare_app.utils.logger import get_logger

logger = get_logger("client.api")


class ApiError(RuntimeError):
    """Failed call to the appointments API.

    ``status_code`` is None when the request never got a response
    (connection refused, DNS, reset...).
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None


class AppointmentsClient:
    """Thin async wrapper over /api/appointments."""

    def __init__(self, base_url: str | None = None, *, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = (base_url or get_settings().API_BASE_URL).rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AppointmentsClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise ApiError(str(e) or e.__class__.__name__) from e
        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = None
            message = (body.get("message") if isinstance(body, dict) else None) or resp.text
            raise ApiError(message, status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            logger.warning(f"{method} {url} returned a non-JSON body: {e}")
            raise ApiError("Invalid JSON in response", status_code=resp.status_code) from e

    async def list_appointments(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/appointments")

    async def create_appointment(self, payload: Dict[str, str]) -> Dict[str, Any]:
        return await self._request("POST", "/api/appointments", json=payload)

    async def get_appointment(self, appointment_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/api/appointments/{appointment_id}")

    async def update_appointment(self, appointment_id: str, changes: Dict[str, str]) -> Dict[str, Any]:
        return await self._request("PUT", f"/api/appointments/{appointment_id}", json=changes)

    async def delete_appointment(self, appointment_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/appointments/{appointment_id}")
