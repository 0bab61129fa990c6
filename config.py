import json
import logging
import os

log = logging.getLogger(__name__)

CONFIG_FILE_NAME = "shar.config.json"
BASE_URL_ENV = "SHAR_BASE_URL"
DEFAULT_HEADERS_ENV = "SHAR_DEFAULT_HEADERS"


class FetchConfig:
    """Settings baked into the generated ``__shar_fetch`` helper."""

    def __init__(self, base_url: str = "", default_headers: dict | None = None):
        self.base_url = base_url or ""
        self.default_headers = dict(default_headers) if default_headers else None

    def __repr__(self):
        return f"FetchConfig(base_url={self.base_url!r}, default_headers={self.default_headers!r})"


def _read_config_file(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.warning("ignoring unreadable config %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        log.warning("ignoring config %s: top level must be an object", path)
        return {}
    return data


def load_config(directory=None, environ=None) -> FetchConfig:
    # Precedence: environment, then shar.config.json, then defaults.
    directory = directory or os.getcwd()
    environ = os.environ if environ is None else environ

    data = {}
    path = os.path.join(directory, CONFIG_FILE_NAME)
    if os.path.exists(path):
        data = _read_config_file(path)

    base_url = environ.get(BASE_URL_ENV) or data.get("baseUrl") or ""

    headers = data.get("defaultHeaders") or None
    raw_headers = environ.get(DEFAULT_HEADERS_ENV)
    if raw_headers:
        try:
            headers = json.loads(raw_headers)
        except ValueError as e:
            log.warning("ignoring %s: %s", DEFAULT_HEADERS_ENV, e)
            headers = None
    if headers is not None and not isinstance(headers, dict):
        log.warning("default headers must be an object, got %s", type(headers).__name__)
        headers = None

    return FetchConfig(base_url=str(base_url), default_headers=headers)
