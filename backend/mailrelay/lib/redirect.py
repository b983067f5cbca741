# mailrelay/lib/redirect.py
from typing import Optional
from urllib.parse import quote, urlencode, urlsplit, urlunsplit


def build_redirect_url(base_url: str, ok: bool, message: Optional[str] = None) -> str:
    """
    Append the outcome to the configured redirect URL.

    ok  -> <base>?status=ok
    err -> <base>?status=error&message=<percent-encoded message>

    An existing query string on the base URL is kept; the fragment stays last.
    """
    if ok:
        params = [("status", "ok")]
    else:
        params = [("status", "error"), ("message", message or "Something went wrong")]

    encoded = urlencode(params, quote_via=quote)
    parts = urlsplit(base_url)
    query = f"{parts.query}&{encoded}" if parts.query else encoded
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))
