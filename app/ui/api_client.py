import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

logger = logging.getLogger(__name__)

# Timeout for dashboard/portal REST calls (seconds).
_REQUEST_TIMEOUT = 15.0


class ApiRequestError(Exception):
    """A REST call failed.

    ``status`` is the HTTP status, or 0 when the request never got a
    response (connection refused, timeout).
    """

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}")


class ApiClient:
    """Thin JSON client for the ``/api`` endpoints used by the UI workflows."""

    def __init__(
        self,
        base_url: str = "",
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=_REQUEST_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.TimeoutException as exc:
            logger.error("%s %s timed out", method, path)
            raise ApiRequestError(0, "Request timed out") from exc
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise ApiRequestError(0, "Network error") from exc

        if response.is_error:
            message = response.reason_phrase or "Request failed"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise ApiRequestError(response.status_code, message)

        if not response.content:
            return None
        return response.json()

    # -- leads -------------------------------------------------------------

    async def list_leads(self) -> List[Dict[str, Any]]:
        body = await self.request("GET", "/api/leads")
        return body.get("data", [])

    async def bulk_update_leads(
        self, ids: Sequence[str], data: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await self.request(
            "PUT", "/api/leads", json={"ids": [str(i) for i in ids], "data": data}
        )

    async def bulk_delete_leads(self, ids: Sequence[str]) -> Dict[str, Any]:
        return await self.request(
            "DELETE", "/api/leads", json={"ids": [str(i) for i in ids]}
        )

    # -- portal ------------------------------------------------------------

    async def published_properties(
        self, criteria: Dict[str, Any], page: int
    ) -> Dict[str, Any]:
        params = {k: v for k, v in criteria.items() if v not in (None, "", [])}
        params["page"] = page
        return await self.request("GET", "/api/portal/properties", params=params)

    async def favorite_ids(self) -> List[str]:
        body = await self.request("GET", "/api/portal/favorites")
        return body.get("favoriteIds", [])

    async def add_favorite(self, property_id: str) -> Dict[str, Any]:
        return await self.request(
            "POST", "/api/portal/favorites", json={"propertyId": str(property_id)}
        )

    async def remove_favorite(self, property_id: str) -> Dict[str, Any]:
        return await self.request(
            "DELETE", "/api/portal/favorites", json={"propertyId": str(property_id)}
        )
