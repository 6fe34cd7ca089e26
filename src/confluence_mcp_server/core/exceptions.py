"""Exceptions raised by the Confluence client."""


class ConfluenceError(Exception):
    """Base class for Confluence client errors."""


class ConfluenceAPIError(ConfluenceError):
    """The Confluence REST API answered with a non-2xx status.

    The raw response body is kept verbatim; Confluence error bodies are not
    guaranteed to be JSON.
    """

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Confluence API Error ({status_code}): {body}")


class NotFoundError(ConfluenceAPIError):
    """The requested space or content does not exist (or is not visible)."""


class ConfigurationError(ConfluenceError):
    """A setting needed by the requested operation is missing."""
