"""
Async HTTP client with expected-status contracts.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from shared.errors import PayloadError, TransportError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

ModelT = TypeVar("ModelT", bound=BaseModel)


class RemoteClient:
    """Thin async client for one base URL.

    Every call states the status code it expects; any other status raises
    ``TransportError`` carrying the observed status. Connection failures
    raise ``TransportError`` with ``status=None``. Nothing is retried here.
    """

    def __init__(
        self,
        base_url: str,
        service: str,
        *,
        timeout: float = 10.0,
        default_headers: Optional[Dict[str, str]] = None,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.service = service
        self.metrics = metrics
        self.logger = get_logger(f"adapter.{service}_client")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=default_headers or {},
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def get(self, path: str, expected_status: int = 200, *,
                  headers: Optional[Dict[str, str]] = None) -> Any:
        return await self._request("GET", path, expected_status, headers=headers)

    async def put(self, path: str, body: Any, expected_status: int = 200) -> Any:
        return await self._request("PUT", path, expected_status, body=body)

    async def post(self, path: str, body: Any, expected_status: int = 201) -> Any:
        return await self._request("POST", path, expected_status, body=body)

    async def patch(self, path: str, body: Any, expected_status: int = 200) -> Any:
        return await self._request("PATCH", path, expected_status, body=body)

    async def delete(self, path: str, expected_status: int = 204) -> None:
        await self._request("DELETE", path, expected_status)

    def parse(self, path: str, payload: Any, model: Type[ModelT]) -> ModelT:
        """Validate a response body against ``model``."""
        try:
            return model.model_validate(payload)
        except SchemaError as exc:
            self.logger.error("Malformed payload", path=path, model=model.__name__, error=str(exc))
            raise PayloadError(
                self.service,
                self._url(path),
                f"response does not match {model.__name__}",
                details={"errors": exc.errors(include_url=False, include_context=False)},
            ) from exc

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        expected_status: int,
        *,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = self._url(path)
        self.logger.debug("Remote request", method=method, url=url)
        kwargs: Dict[str, Any] = {}
        if headers:
            kwargs["headers"] = headers
        if method != "DELETE":
            kwargs["json"] = body

        try:
            response = await self._client.request(method, path.lstrip("/"), **kwargs)
        except httpx.HTTPError as exc:
            self._record(method, None)
            self.logger.error("Remote request failed", method=method, url=url, error=str(exc))
            raise TransportError(self.service, url, None, f"{method} {url} failed: {exc}") from exc

        self._record(method, response.status_code)
        if response.status_code != expected_status:
            self.logger.error(
                "Unexpected status",
                method=method,
                url=url,
                status_code=response.status_code,
                expected=expected_status,
                response=response.text,
            )
            raise TransportError(
                self.service,
                url,
                response.status_code,
                f"{method} {url} did not return the expected status code "
                f"(got: {response.status_code}, expected: {expected_status})",
            )

        return self._decode(response)

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            # JSONDecodeError or UnicodeDecodeError
            self.logger.error("Undecodable response", url=str(response.request.url), error=str(exc))
            raise PayloadError(self.service, str(response.request.url), "response is not JSON") from exc

    def _record(self, method: str, status_code: Optional[int]) -> None:
        if self.metrics:
            self.metrics.record_remote_request(self.service, method, status_code)
