from __future__ import annotations

import ipaddress
from typing import Callable
from urllib.parse import urlsplit

import idna
import tldextract  # type: ignore

UNKNOWN_DOMAIN = "unknown"
WEB_SCHEMES = {"http", "https"}
DOMAIN_MODES = ("host", "registrable")

# Bundled public suffix snapshot only; never fetch the list over the network.
_TLD_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())


def _host_of(url: str) -> str:
    """Return the ASCII (punycode) host of an absolute http(s) URL, or ""."""
    if not isinstance(url, str):
        return ""
    try:
        p = urlsplit(url.strip())
        if p.scheme.lower() not in WEB_SCHEMES:
            return ""
        host = p.hostname or ""
        # Raises ValueError on a malformed port.
        _ = p.port
    except ValueError:
        return ""
    if not host:
        return ""
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        pass
    try:
        return idna.encode(host, uts46=True).decode("ascii")
    except (idna.IDNAError, UnicodeError):
        return ""


def extract_domain(url: str) -> str:
    host = _host_of(url)
    if host.startswith("www."):
        host = host[4:]
    return host or UNKNOWN_DOMAIN


def registrable_domain(url: str) -> str:
    host = _host_of(url)
    if not host:
        return UNKNOWN_DOMAIN
    ext = _TLD_EXTRACT(host)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}"
    # IP literals and hosts without a public suffix stay as they are.
    return extract_domain(url)


def domain_extractor(mode: str) -> Callable[[str], str]:
    m = (mode or "").strip().lower()
    if m == "host":
        return extract_domain
    if m == "registrable":
        return registrable_domain
    raise ValueError(f"Unknown domain mode {mode!r}; expected one of {', '.join(DOMAIN_MODES)}")
