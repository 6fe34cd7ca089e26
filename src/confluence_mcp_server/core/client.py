import logging
import threading
from collections.abc import Iterable
from typing import Any

import requests

from ..config import Config
from .exceptions import ConfigurationError, ConfluenceAPIError, NotFoundError

logger = logging.getLogger(__name__)


class ConfluenceClient:
    """Thin wrapper over the Confluence REST API (``/rest/api``).

    Every public method performs one or two blocking HTTP round trips and
    returns the decoded JSON. Nothing is cached between calls.
    """

    def __init__(self, config: Config):
        self.config = config
        self._thread_local = threading.local()
        self.api_url = self._get_api_url()
        logger.info(
            "ConfluenceClient initialized with URL: %s", config.confluence_url
        )

    @property
    def session(self) -> requests.Session:
        """The current thread's session."""
        return self._get_session()

    @property
    def base_url(self) -> str:
        return self.config.confluence_url.rstrip("/")

    def _get_api_url(self) -> str:
        return f"{self.config.confluence_url.rstrip('/')}/rest/api"

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        if self.config.username:
            session.auth = (self.config.username, self.config.api_token)
        else:
            session.headers["Authorization"] = f"Bearer {self.config.api_token}"
        session.headers["Content-Type"] = "application/json"
        session.headers["Accept"] = "application/json"
        session.verify = not self.config.insecure
        return session

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make a request against the REST API and return the decoded JSON body.

        Raises:
            NotFoundError: On HTTP 404.
            ConfluenceAPIError: On any other non-2xx status.
        """
        url = f"{self.api_url}{endpoint}"
        logger.debug("Making request to: %s %s params=%s", method, url, params)

        response = self._get_session().request(
            method,
            url,
            params=params,
            json=payload,
            timeout=self.config.request_timeout,
        )

        if not response.ok:
            logger.error(
                "API request error: %s %s -> %s", method, url, response.status_code
            )
            error_cls = (
                NotFoundError if response.status_code == 404 else ConfluenceAPIError
            )
            raise error_cls(response.status_code, response.text)

        if not response.content:
            return None
        return response.json()

    def validate_connection(self) -> str:
        """
        Validate credentials and reachability with a minimal space listing.
        Returns the base URL if successful.
        """
        self._request("GET", "/space", params={"limit": 1})
        return self.base_url

    def get_spaces(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        List spaces.

        Args:
            params: Query parameters forwarded as-is (limit, start, type, status)

        Returns:
            Pagination envelope with a ``results`` list. When a space allow-list
            is configured, ``results`` only keeps allowed keys, in server order;
            the envelope's paging counts are left as the server reported them.
        """
        spaces = self._request("GET", "/space", params=dict(params or {}))

        allowed = self.config.spaces_filter
        if allowed and isinstance(spaces, dict):
            spaces["results"] = [
                space
                for space in spaces.get("results", [])
                if space.get("key") in allowed
            ]

        return spaces

    def get_space(self, space_key: str) -> dict[str, Any]:
        """
        Get one space by key.

        Raises:
            NotFoundError: If the API answers with any non-2xx status
        """
        try:
            return self._request("GET", f"/space/{space_key}")
        except NotFoundError:
            raise
        except ConfluenceAPIError as e:
            raise NotFoundError(e.status_code, e.body) from e

    def get_content_by_id(
        self, content_id: str, expand: Iterable[str] = ()
    ) -> dict[str, Any]:
        """
        Get one content item.

        Args:
            content_id: Content (page) ID
            expand: Dotted property paths to expand, e.g. ``body.storage``.
                Empty omits the ``expand`` parameter.
        """
        expand_fields = list(expand)
        params = {"expand": ",".join(expand_fields)} if expand_fields else None
        return self._request("GET", f"/content/{content_id}", params=params)

    def get_content_by_space_and_title(
        self, space_key: str, title: str
    ) -> dict[str, Any]:
        """
        Exact-title lookup inside a space.

        Returns:
            Envelope whose ``results`` hold zero or more matches, each with
            ``body.storage`` and ``version`` expanded.
        """
        params = {
            "spaceKey": space_key,
            "title": title,
            "expand": "body.storage,version",
        }
        return self._request("GET", "/content", params=params)

    def search(self, cql: str, limit: int = 10) -> dict[str, Any]:
        """
        Run a CQL query.

        Returns:
            Envelope with ``results``, ``start``, ``limit``, ``size``,
            ``totalSize`` and the echoed ``cqlQuery``.
        """
        params = {"cql": cql, "limit": str(limit)}
        return self._request("GET", "/search", params=params)

    def create_page(
        self,
        space_key: str | None,
        title: str,
        content: str,
        parent_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a page.

        Args:
            space_key: Target space; falls back to the configured testing space
            title: Page title
            content: Body in storage format (XHTML)
            parent_id: Optional parent page, set as the sole ancestor

        Returns:
            The created content item (server-assigned id, version 1)

        Raises:
            ConfigurationError: If no space key is given and none is configured
        """
        effective_space_key = space_key or self.config.testing_space_key
        if not effective_space_key:
            raise ConfigurationError(
                "No space key provided and TESTING_SPACE_KEY not set in environment"
            )

        data: dict[str, Any] = {
            "type": "page",
            "title": title,
            "space": {"key": effective_space_key},
            "body": {
                "storage": {"value": content, "representation": "storage"}
            },
        }
        if parent_id:
            data["ancestors"] = [{"id": parent_id}]

        return self._request("POST", "/content", payload=data)

    def update_page(
        self,
        page_id: str,
        title: str,
        content: str,
        version: int | None = None,
    ) -> dict[str, Any]:
        """
        Replace a page's title and body.

        Args:
            page_id: Page to update
            title: Title to store (always sent, even if unchanged)
            content: New body in storage format
            version: The page's *current* version number. The request always
                carries ``version + 1``. When omitted, the current version is
                fetched first.

        Returns:
            The updated content item
        """
        if version is None:
            current = self.get_content_by_id(page_id, ["version"])
            version = current["version"]["number"]

        data = {
            "type": "page",
            "title": title,
            "body": {
                "storage": {"value": content, "representation": "storage"}
            },
            "version": {"number": version + 1},
        }

        return self._request("PUT", f"/content/{page_id}", payload=data)
