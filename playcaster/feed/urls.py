"""URL validation and enclosure URL construction."""

from urllib.parse import quote, urljoin, urlsplit

from pydantic import HttpUrl, TypeAdapter, ValidationError

from playcaster.errors import UrlError

_http_url = TypeAdapter(HttpUrl)


def validate_http_url(value: str) -> str:
    """Validate an absolute http(s) URL and return it unchanged.

    Raises:
        UrlError: If the value is not an absolute http(s) URL
    """
    try:
        _http_url.validate_python(value)
    except ValidationError as e:
        message = e.errors()[0]["msg"] if e.errors() else str(e)
        raise UrlError(value, message) from e
    return value


def enclosure_url(base_url: str, feed_name: str, item_id: str, extension: str) -> str:
    """Build the public URL of an item's media file.

    The feed name becomes a path segment under the base URL, so several feeds
    can share one base URL: ``<base_url>/<feed_name>/<item_id>.<extension>``.
    Any path already present in the base URL is preserved.

    Raises:
        UrlError: If the base URL is not absolute or a segment is empty
    """
    parts = urlsplit(base_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise UrlError(base_url, "base URL must be an absolute http(s) URL")
    if not feed_name:
        raise UrlError(base_url, "feed name must not be empty")
    if not item_id:
        raise UrlError(base_url, "item id must not be empty")

    base = base_url if base_url.endswith("/") else base_url + "/"
    try:
        feed_base = urljoin(base, quote(feed_name, safe="") + "/")
        return urljoin(feed_base, f"{quote(item_id, safe='')}.{extension}")
    except ValueError as e:
        raise UrlError(base_url, f"could not join {feed_name}/{item_id}: {e}") from e
