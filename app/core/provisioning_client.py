"""HTTP client replicating resource mutations to a downstream provisioning endpoint.

Every request targets ``<base_uri>[/<id>]?<params>``, where ``params`` is a
fixed set of query parameters (e.g. the ``client_id`` the downstream system
uses to attribute the change).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

import requests

from app.core.exceptions import ForwardError

REQUEST_TIMEOUT = 5

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForwardResult:
    """System-of-record identifiers returned by a successful create."""
    id: str
    external_id: str


class ProvisioningClient:
    """Forwarder for create/update/delete mutations of one resource type.

    Usage:
        client = ProvisioningClient("https://idp.example.com/Users", {"client_id": "scim"})
        result = client.forward_create({"userName": "alice"})
        client.forward_update(result.id, {"Operations": [...]})
        client.forward_delete(result.id)
    """

    def __init__(
        self,
        base_uri: str,
        params: Optional[Dict[str, str]] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.base_uri = base_uri.rstrip("/")
        self.params = dict(params or {})
        self.timeout = timeout

    def url(self, identifier: str = "") -> str:
        """Build the request URL, appending the static query parameters."""
        url = self.base_uri
        if identifier:
            url += "/" + quote(identifier, safe="")
        if self.params:
            url += "?" + urlencode(sorted(self.params.items()))
        return url

    def forward_create(self, body: Dict[str, Any]) -> ForwardResult:
        """POST a new resource downstream.

        Success is exactly HTTP 201 with a JSON body carrying string ``id``
        and ``externalId`` fields.

        Raises:
            ForwardError: On transport failure, any other status, an
                unparseable body, or a missing/non-string identifier
        """
        url = self.url()
        try:
            resp = requests.post(url, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ForwardError("create", str(exc)) from exc

        if resp.status_code != 201:
            raise ForwardError(
                "create",
                f"[{resp.status_code}] {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        logger.info(f"Provisioning create accepted | url={url} | status={resp.status_code}")

        try:
            returned = resp.json()
        except ValueError as exc:
            raise ForwardError("create", f"response is not JSON: {exc}", resp.status_code, resp.text) from exc
        if not isinstance(returned, dict):
            raise ForwardError("create", "response is not a JSON object", resp.status_code, resp.text)

        external_id = returned.get("externalId")
        if not isinstance(external_id, str):
            raise ForwardError("create", "externalId not found as string", resp.status_code, resp.text)
        downstream_id = returned.get("id")
        if not isinstance(downstream_id, str):
            raise ForwardError("create", "id not found as string", resp.status_code, resp.text)

        return ForwardResult(id=downstream_id, external_id=external_id)

    def forward_update(self, identifier: str, body: Dict[str, Any]) -> None:
        """PATCH ``base/<identifier>``. The response body is only logged."""
        self._send("update", "PATCH", identifier, body)

    def forward_delete(self, identifier: str) -> None:
        """DELETE ``base/<identifier>``. The response body is only logged."""
        self._send("delete", "DELETE", identifier)

    def _send(self, phase: str, method: str, identifier: str, body: Optional[Dict[str, Any]] = None) -> None:
        url = self.url(identifier)
        try:
            if method == "PATCH":
                resp = requests.patch(url, json=body, timeout=self.timeout)
            else:
                resp = requests.delete(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ForwardError(phase, str(exc)) from exc

        logger.info(
            f"Provisioning {phase} response | url={url} | "
            f"status={resp.status_code} | body={resp.text}"
        )
        if resp.status_code >= 400:
            raise ForwardError(
                phase,
                f"[{resp.status_code}] {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )
