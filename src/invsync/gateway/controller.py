"""Automation controller API client.

Implements ControllerGatewayPort over the controller's REST API
(AWX / Ansible Automation Platform ``/api/v2``) using httpx.
"""

from types import TracebackType
from typing import Any, TypeVar

import httpx
from loguru import logger
from pydantic import ValidationError

from invsync.config.models import ControllerConfig
from invsync.errors import GatewayError
from invsync.models.entities import ControllerModel, Group, Host, Inventory, Page

SUCCESS_CODES = frozenset({200, 201, 202, 204})

M = TypeVar("M", bound=ControllerModel)


class ControllerGateway:
    """
    Synchronous controller API client.

    One httpx.Client per gateway; close it with close() or use the
    gateway as a context manager. No retries: a failed call raises
    GatewayError immediately.
    """

    def __init__(
        self,
        config: ControllerConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._api = config.api_path

        headers = {"Accept": "application/json"}
        auth: httpx.Auth | None = None
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        elif config.username is not None and config.password is not None:
            auth = httpx.BasicAuth(config.username, config.password)

        self._client = httpx.Client(
            base_url=config.url,
            headers=headers,
            auth=auth,
            timeout=config.timeout_seconds,
            verify=config.verify_ssl,
            transport=transport,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> "ControllerGateway":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # Inventories

    def create_inventory(self, inventory: Inventory) -> Inventory:
        return self._send("POST", f"{self._api}/inventories/", inventory)

    def get_inventory(self, inventory_id: int) -> Inventory:
        return self._fetch(f"{self._api}/inventories/{inventory_id}/", Inventory)

    def update_inventory(self, inventory_id: int, inventory: Inventory) -> Inventory:
        return self._send("PUT", f"{self._api}/inventories/{inventory_id}/", inventory)

    def delete_inventory(self, inventory_id: int) -> None:
        self._request("DELETE", f"{self._api}/inventories/{inventory_id}/")

    # Groups

    def create_group(self, group: Group) -> Group:
        return self._send("POST", f"{self._api}/groups/", group)

    def get_group(self, group_id: int) -> Group:
        return self._fetch(f"{self._api}/groups/{group_id}/", Group)

    def update_group(self, group_id: int, group: Group) -> Group:
        return self._send("PUT", f"{self._api}/groups/{group_id}/", group)

    def delete_group(self, group_id: int) -> None:
        self._request("DELETE", f"{self._api}/groups/{group_id}/")

    def list_group_children(self, group_id: int) -> list[Group]:
        return self._list(f"{self._api}/groups/{group_id}/children/", Group)

    def list_inventory_groups(self, inventory_id: int) -> list[Group]:
        return self._list(f"{self._api}/inventories/{inventory_id}/groups/", Group)

    # Hosts

    def create_host(self, host: Host) -> Host:
        return self._send("POST", f"{self._api}/hosts/", host)

    def get_host(self, host_id: int) -> Host:
        return self._fetch(f"{self._api}/hosts/{host_id}/", Host)

    def update_host(self, host_id: int, host: Host) -> Host:
        return self._send("PUT", f"{self._api}/hosts/{host_id}/", host)

    def delete_host(self, host_id: int) -> None:
        self._request("DELETE", f"{self._api}/hosts/{host_id}/")

    def list_host_groups(self, host_id: int) -> list[Group]:
        return self._list(f"{self._api}/hosts/{host_id}/groups/", Group)

    def list_inventory_hosts(self, inventory_id: int) -> list[Host]:
        return self._list(f"{self._api}/inventories/{inventory_id}/hosts/", Host)

    # Associations

    def add_child_to_group(self, parent_id: int, child_id: int) -> None:
        self._request("POST", f"{self._api}/groups/{parent_id}/children/", json={"id": child_id})

    def remove_child_from_group(self, parent_id: int, child_id: int) -> None:
        self._request(
            "POST",
            f"{self._api}/groups/{parent_id}/children/",
            json={"id": child_id, "disassociate": True},
        )

    def add_group_to_host(self, host_id: int, group_id: int) -> None:
        self._request("POST", f"{self._api}/hosts/{host_id}/groups/", json={"id": group_id})

    def remove_group_from_host(self, host_id: int, group_id: int) -> None:
        self._request(
            "POST",
            f"{self._api}/hosts/{host_id}/groups/",
            json={"id": group_id, "disassociate": True},
        )

    # Plumbing

    def _request(
        self,
        method: str,
        url: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            response = self._client.request(method, url, json=json, params=params)
        except httpx.HTTPError as e:
            raise GatewayError(f"{method} {url} failed: {e}", method, url) from e

        logger.debug("{} {} -> {}", method, url, response.status_code)

        if response.status_code not in SUCCESS_CODES:
            raise GatewayError(
                f"status: {response.status_code}, body: {response.text}",
                method,
                url,
                status_code=response.status_code,
                body=response.text,
            )
        return response

    def _decode(self, response: httpx.Response, model: type[Any]) -> Any:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise GatewayError(
                f"Unexpected response body from {response.request.method} "
                f"{response.request.url}: {e}",
                response.request.method,
                str(response.request.url),
                status_code=response.status_code,
                body=response.text,
            ) from e

    def _send(self, method: str, url: str, entity: M) -> M:
        response = self._request(method, url, json=entity.payload())
        return self._decode(response, type(entity))

    def _fetch(self, url: str, model: type[M]) -> M:
        return self._decode(self._request("GET", url), model)

    def _list(self, url: str, model: type[M]) -> list[M]:
        items: list[M] = []
        next_url: str | None = url
        params: dict[str, Any] | None = {"page_size": self.config.page_size}

        while next_url is not None:
            response = self._request("GET", next_url, params=params)
            page: Page = self._decode(response, Page)
            try:
                items.extend(page.items_typed(model))
            except ValidationError as e:
                raise GatewayError(
                    f"Unexpected list item from GET {next_url}: {e}",
                    "GET",
                    next_url,
                    status_code=response.status_code,
                    body=response.text,
                ) from e

            if page.next and not self.config.follow_pagination:
                logger.warning(
                    "Only the first page of {} was read: {} of {} items",
                    url,
                    len(items),
                    page.count,
                )
                break
            # next is a server-absolute path that already carries page_size and
            # any path prefix of the url; resolve it against the origin only
            next_url = str(self._client.base_url.join(page.next)) if page.next else None
            params = None

        return items
