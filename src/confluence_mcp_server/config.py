"""Configuration for the Confluence MCP server.

Reads Confluence connection settings from CLI args, environment variables,
.env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    CONFLUENCE_URL: Confluence base URL (required)
    CONFLUENCE_API_TOKEN: API token (required)
    CONFLUENCE_USERNAME: Username (optional; enables Basic auth, else Bearer)
    TESTING_SPACE_KEY: Default space for page creation (optional)
    CONFLUENCE_SPACES_FILTER: Comma-separated space key allow-list (optional)
    USE_HTTP_TRANSPORT: Serve streamable HTTP instead of stdio (optional, default: false)
    CONFLUENCE_HTTP_HOST: HTTP bind host (optional, default: 127.0.0.1)
    CONFLUENCE_HTTP_PORT: HTTP bind port (optional, default: 3002)
    CONFLUENCE_INSECURE: Skip SSL verification (optional, default: false)
    CONFLUENCE_TIMEOUT: Per-request timeout in seconds (optional, default: none)
    CONFLUENCE_READ_ONLY: Hide page write tools (optional, default: false)
    CONFLUENCE_DEBUG: Enable debug logging (optional, default: false)
    LOG_LEVEL: Log level name (optional; default depends on transport)
    LOG_FILE: Log file path (optional)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_HTTP_HOST = "127.0.0.1"
DEFAULT_HTTP_PORT = 3002


@dataclass
class Config:
    confluence_url: str
    api_token: str
    username: str | None = None
    testing_space_key: str | None = None
    spaces_filter: tuple[str, ...] | None = None
    use_http_transport: bool = False
    http_host: str = DEFAULT_HTTP_HOST
    http_port: int = DEFAULT_HTTP_PORT
    insecure: bool = False
    request_timeout: float | None = None
    read_only: bool = False
    debug: bool = False
    log_level: str | None = None
    log_file: str | None = None


def parse_spaces_filter(raw: str | list | tuple | None) -> tuple[str, ...] | None:
    """Parse a space allow-list from a comma-separated string or a list.

    Entries are trimmed and empty entries dropped. Returns ``None`` when no
    filter is configured, so an empty string does not hide every space.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        items = raw.split(",")
    else:
        items = [str(item) for item in raw]
    keys = tuple(key.strip() for key in items if key.strip())
    return keys or None


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If URL format is invalid, the token is empty, or
            numeric settings are out of range.
    """
    config.confluence_url = config.confluence_url.strip()

    if not config.confluence_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid Confluence URL '{config.confluence_url}': must start with http:// or https://"
        )

    parsed = urlparse(config.confluence_url)
    if not parsed.hostname:
        raise ValueError(
            f"Invalid Confluence URL '{config.confluence_url}': URL must include a hostname"
        )

    config.confluence_url = config.confluence_url.removesuffix("/")

    if not config.api_token.strip():
        raise ValueError(
            "Confluence API token cannot be empty. Set CONFLUENCE_API_TOKEN environment variable."
        )

    if config.username is not None and not config.username.strip():
        config.username = None

    if not (1 <= config.http_port <= 65535):
        raise ValueError(
            f"Invalid HTTP port {config.http_port}: must be between 1 and 65535"
        )

    if config.request_timeout is not None and config.request_timeout <= 0:
        raise ValueError(
            f"Invalid request timeout {config.request_timeout}: must be a positive number of seconds"
        )

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def _resolve_bool(cli_value: bool, env_key: str, fallback: object) -> bool:
    if cli_value:
        return True
    env_value = _get_bool_env(env_key)
    if env_value is not None:
        return env_value
    return bool(fallback)


def load_config(
    url: str | None = None,
    username: str | None = None,
    api_token: str | None = None,
    space_key: str | None = None,
    http: bool = False,
    port: int | None = None,
    insecure: bool = False,
    read_only: bool = False,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        url: Override Confluence URL.
        username: Override username.
        api_token: Override API token.
        space_key: Override default testing space key.
        http: Serve streamable HTTP instead of stdio (CLI flag).
        port: Override HTTP port.
        insecure: Skip SSL verification (CLI flag).
        read_only: Hide write tools (CLI flag).
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Flat dict of values from the YAML config file
            (``confluence`` and ``server`` sections merged). Used when CLI
            arg and env var are both unset.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If the URL or token is missing after checking all
            sources, or a numeric value cannot be parsed.
    """
    fb = yaml_fallbacks or {}

    # --- String fields: CLI > env > YAML ---

    confluence_url = url or os.getenv("CONFLUENCE_URL") or fb.get("url")
    if not confluence_url:
        raise ValueError(
            "Confluence URL not found. Set CONFLUENCE_URL environment variable, "
            "pass --url CLI argument, or add 'url' to config.yml."
        )

    token = api_token or os.getenv("CONFLUENCE_API_TOKEN") or fb.get("api_token")
    if not token:
        raise ValueError(
            "Confluence API token not found. Set CONFLUENCE_API_TOKEN environment variable, "
            "pass --token CLI argument, or add 'api_token' to config.yml."
        )

    final_username = (
        username or os.getenv("CONFLUENCE_USERNAME") or fb.get("username")
    )
    final_space_key = (
        space_key or os.getenv("TESTING_SPACE_KEY") or fb.get("testing_space_key")
    )

    env_filter = os.getenv("CONFLUENCE_SPACES_FILTER")
    spaces_filter = parse_spaces_filter(
        env_filter if env_filter is not None else fb.get("spaces_filter")
    )

    http_host = (
        os.getenv("CONFLUENCE_HTTP_HOST") or fb.get("http_host") or DEFAULT_HTTP_HOST
    )

    # --- Boolean fields: CLI > env > YAML > default ---

    final_http = _resolve_bool(
        http, "USE_HTTP_TRANSPORT", fb.get("use_http_transport", False)
    )
    final_insecure = _resolve_bool(
        insecure, "CONFLUENCE_INSECURE", fb.get("insecure", False)
    )
    final_read_only = _resolve_bool(
        read_only, "CONFLUENCE_READ_ONLY", fb.get("read_only", False)
    )
    final_debug = _resolve_bool(debug, "CONFLUENCE_DEBUG", fb.get("debug", False))

    log_level = os.getenv("LOG_LEVEL") or fb.get("log_level")
    log_file = os.getenv("LOG_FILE") or fb.get("log_file")

    # --- Numeric fields: CLI > env > YAML > default ---

    if port is not None:
        final_port = port
    else:
        port_raw = os.getenv("CONFLUENCE_HTTP_PORT")
        if port_raw is not None:
            try:
                final_port = int(port_raw)
            except ValueError:
                raise ValueError(
                    f"Invalid CONFLUENCE_HTTP_PORT '{port_raw}': must be a number between 1 and 65535"
                ) from None
        else:
            final_port = int(fb.get("http_port", DEFAULT_HTTP_PORT))

    timeout_raw = os.getenv("CONFLUENCE_TIMEOUT")
    if timeout_raw is not None:
        try:
            final_timeout: float | None = float(timeout_raw)
        except ValueError:
            raise ValueError(
                f"Invalid CONFLUENCE_TIMEOUT '{timeout_raw}': must be a number of seconds"
            ) from None
    elif fb.get("request_timeout") is not None:
        final_timeout = float(fb["request_timeout"])
    else:
        final_timeout = None

    config = Config(
        confluence_url=confluence_url.strip(),
        api_token=token.strip(),
        username=final_username.strip() if final_username else None,
        testing_space_key=final_space_key.strip() if final_space_key else None,
        spaces_filter=spaces_filter,
        use_http_transport=final_http,
        http_host=http_host,
        http_port=final_port,
        insecure=final_insecure,
        request_timeout=final_timeout,
        read_only=final_read_only,
        debug=final_debug,
        log_level=log_level.upper() if log_level else None,
        log_file=log_file,
    )

    validate_config(config)

    return config
