"""Registry client - fetches registry items over HTTP."""

import logging
from typing import Any, Self

import httpx
from pydantic import TypeAdapter, ValidationError

from tiptap_cli.errors import (
    RegistryFetchError,
    RegistryForbiddenError,
    RegistryNotFoundError,
    RegistryParseError,
    RegistryUnauthorizedError,
)
from tiptap_cli.models import RegistryIndexEntry, RegistryItem, RegistryItemType

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://template.tiptap.dev"
INDEX_PATH = "index.json"

_STATUS_MESSAGES: dict[int, str] = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    500: "Internal server error",
}

_index_adapter = TypeAdapter(list[RegistryIndexEntry])
_names_adapter = TypeAdapter(list[str])

# Registry item type -> config alias key used when installing into a workspace.
REGISTRY_TYPE_ALIASES: dict[RegistryItemType, str] = {
    RegistryItemType.UI: "tiptap_ui",
    RegistryItemType.UI_PRIMITIVE: "tiptap_ui_primitives",
    RegistryItemType.EXTENSION: "tiptap_extensions",
    RegistryItemType.NODE: "tiptap_nodes",
    RegistryItemType.CONTEXT: "contexts",
    RegistryItemType.HOOK: "hooks",
    RegistryItemType.LIB: "lib",
    RegistryItemType.TEMPLATE: "components",
    RegistryItemType.COMPONENT: "components",
    RegistryItemType.ICON: "tiptap_icons",
    RegistryItemType.STYLE: "styles",
}


def is_url(path: str) -> bool:
    try:
        url = httpx.URL(path)
    except httpx.InvalidURL:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


def get_registry_url(path: str, registry_url: str = DEFAULT_REGISTRY_URL) -> str:
    """Map a registry path or item name to the URL it is served from."""
    if is_url(path):
        return str(httpx.URL(path))

    base = registry_url.rstrip("/")
    if path == INDEX_PATH:
        return f"{base}/r/{path}"

    if path.startswith("components/"):
        name = path.removeprefix("components/").removesuffix(".json")
        return f"{base}/api/registry/components/{name}"

    return f"{base}/{path}"


def get_item_url(name_or_url: str, registry_url: str = DEFAULT_REGISTRY_URL) -> str:
    """Canonical fetch key for an item given by bare name, registry path or URL.

    ``button``, ``components/button.json`` and the full component URL all map
    to the same key.
    """
    if is_url(name_or_url):
        return get_registry_url(name_or_url, registry_url)
    return get_registry_url(f"components/{item_name(name_or_url)}.json", registry_url)


def item_name(name_or_path: str) -> str:
    """Strip registry path decoration from an item reference."""
    return name_or_path.removeprefix("components/").removesuffix(".json")


class RegistryClient:
    """Async client for the component registry.

    A single instance lives for one command invocation. The bearer token, when
    given, is attached to every request.
    """

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        *,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        self.registry_url = registry_url.rstrip("/")
        self.token = token
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            headers=headers,
            transport=transport,
            timeout=timeout,
            follow_redirects=True,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def url_for(self, path: str) -> str:
        return get_registry_url(path, self.registry_url)

    def item_url(self, name_or_url: str) -> str:
        return get_item_url(name_or_url, self.registry_url)

    async def fetch_json(self, path: str) -> Any:
        """GET a registry path and return the decoded JSON body."""
        url = self.url_for(path)
        logger.debug(f"Fetching {url}")
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise RegistryFetchError(f"Failed to fetch from {url}.\n{e}", url=url) from e

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                raise RegistryParseError(f"Invalid JSON returned by {url}.", url=url) from e

        raise _status_error(response, url)

    async def fetch_item(self, name_or_url: str) -> RegistryItem:
        url = self.item_url(name_or_url)
        data = await self.fetch_json(url)
        return parse_registry_item(data, url)

    async def get_index(self) -> list[RegistryIndexEntry]:
        """Fetch ``index.json`` listing every registry item."""
        url = self.url_for(INDEX_PATH)
        data = await self.fetch_json(INDEX_PATH)
        try:
            return _index_adapter.validate_python(data)
        except ValidationError as e:
            raise RegistryParseError(f"Invalid registry index at {url}:\n{e}", url=url) from e

    async def fetch_free_names(self) -> list[str]:
        """Fetch the names of free-tier items."""
        url = self.url_for("api/registry/free")
        data = await self.fetch_json(url)
        try:
            return _names_adapter.validate_python(data)
        except ValidationError as e:
            raise RegistryParseError(f"Invalid free registry list at {url}:\n{e}", url=url) from e


def parse_registry_item(data: Any, url: str) -> RegistryItem:
    try:
        return RegistryItem.model_validate(data)
    except ValidationError as e:
        raise RegistryParseError(f"Invalid registry item at {url}:\n{e}", url=url) from e


def _status_error(response: httpx.Response, url: str) -> Exception:
    status = response.status_code
    if status == 401:
        return RegistryUnauthorizedError(
            f"You are not authorized to access the component at {url}.\n"
            "Please run 'tiptap auth login' to authenticate with the registry, "
            "or make sure your token is valid.",
            url=url,
        )
    if status == 403:
        return RegistryForbiddenError(
            f"You do not have access to the component at {url}.\n"
            "Your account may not have the required subscription plan for this component.\n"
            "Please upgrade your subscription or use a component available in your current plan.",
            url=url,
        )
    if status == 404:
        return RegistryNotFoundError(
            f"The component at {url} was not found.\n"
            "It may not exist at the registry. Please make sure it is a valid component.",
            url=url,
        )

    message = response.reason_phrase or _STATUS_MESSAGES.get(status, f"HTTP {status}")
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        message = str(body["error"])
    return RegistryFetchError(f"Failed to fetch from {url}.\n{message}", url=url)
