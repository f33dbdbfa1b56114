"""
Async client for the practitioner availability API.

Wraps ``httpx.AsyncClient``. Transport failures and non-2xx responses are
raised as ``AvailabilityLoadError`` (reads) or ``AvailabilitySaveError``
(writes) so callers can tell network problems apart from schedule
validation errors.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Type
import logging

import httpx
from pydantic import ValidationError

from ..core.config import settings
from ..core.exceptions import (
    AvailabilityAPIError, AvailabilityLoadError, AvailabilitySaveError
)
from ..schemas.availability import BookableTimeSlot

logger = logging.getLogger(__name__)

class AvailabilityClient:
    def __init__(
        self,
        practitioner_id: int,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.practitioner_id = practitioner_id
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.AVAILABILITY_API_URL,
            timeout=timeout if timeout is not None else settings.AVAILABILITY_API_TIMEOUT,
            transport=transport,
            headers=headers,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _path(self, resource: str) -> str:
        return f"/practitioners/{self.practitioner_id}/{resource}"

    async def _request(
        self,
        method: str,
        resource: str,
        error_cls: Type[AvailabilityAPIError],
        **kwargs: Any,
    ) -> Any:
        path = self._path(resource)
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            code = exc.response.status_code
            logger.warning(f"{method} {path} returned {code}")
            raise error_cls(f"{method} {path} failed with status {code}", status_code=code) from exc
        except httpx.HTTPError as exc:
            logger.warning(f"{method} {path} failed: {exc!r}")
            raise error_cls(f"{method} {path} failed: {exc}") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise error_cls(f"{method} {path} returned invalid JSON") from exc

    async def get_availability(self) -> Optional[Dict[str, Any]]:
        """The stored ``{schedule, timezone}`` document, or None when nothing is stored."""
        payload = await self._request("GET", "availability", AvailabilityLoadError)
        return payload or None

    async def put_availability(self, document: Dict[str, Any]) -> Dict[str, Any]:
        payload = await self._request(
            "PUT", "availability", AvailabilitySaveError, json=document
        )
        return payload or {}

    async def get_time_slots(self, start: date, end: date) -> List[BookableTimeSlot]:
        payload = await self._request(
            "GET",
            "time-slots",
            AvailabilityLoadError,
            params={"start": start.isoformat(), "end": end.isoformat()},
        )
        if not isinstance(payload, list):
            return []
        try:
            return [BookableTimeSlot.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise AvailabilityLoadError(f"Malformed time slot payload: {exc}") from exc
