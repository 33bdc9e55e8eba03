"""Input validation for dig queries."""

import ipaddress
import logging
import re
from dataclasses import dataclass

import dns.exception
import dns.name

from dig_runner.core.config import MAX_TIMEOUT_SECONDS
from dig_runner.utils.exceptions import InvalidArgument

logger = logging.getLogger(__name__)

ROOT_DOMAIN = "."

# Record types dig is allowed to query
VALID_RECORD_TYPES = frozenset(
    {
        "A", "AAAA", "ALL", "CAA", "CDNSKEY", "CDS", "CERT", "CNAME", "DNAME",
        "DNSKEY", "DS", "HINFO", "HTTPS", "INTEGRITY", "IPSECKEY", "KEY", "MX",
        "NAPTR", "NS", "NSEC", "NSEC3", "NSEC3PARAM", "PTR", "RP", "RRSIG",
        "SIG", "SOA", "SPF", "SRV", "SSHFP", "SVCB", "TLSA", "TXT", "WKS",
    }
)  # fmt: skip

# Whole label: letters, digits and inner hyphens only
_RE_HOSTNAME_LABEL = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?")


@dataclass(frozen=True)
class QueryRequest:
    """A validated, normalized dig query."""

    domain: str
    record_type: str
    server: str
    timeout_seconds: int


def validate_record_type(record_type: str) -> str:
    """Return the normalized record type or raise InvalidArgument."""
    if not isinstance(record_type, str):
        raise InvalidArgument("Invalid DNS record type provided.")

    normalized = record_type.strip().upper()

    if normalized not in VALID_RECORD_TYPES:
        raise InvalidArgument("Invalid DNS record type provided.")

    return normalized


def is_valid_hostname(domain: str) -> bool:
    """
    Check hostname syntax.

    Accepts dot-separated labels of letters, digits and hyphens with no
    leading or trailing hyphen, and a single optional trailing dot. Label
    and total length limits are enforced through dnspython.
    """
    if not isinstance(domain, str) or not domain:
        return False

    name = domain[:-1] if domain.endswith(".") else domain

    if not name:
        return False

    if not all(_RE_HOSTNAME_LABEL.fullmatch(label) for label in name.split(".")):
        return False

    try:
        dns.name.from_text(name)
    except dns.exception.DNSException:
        return False

    return True


def validate_domain(domain: str) -> str:
    """Return the domain unchanged if it is the root or a valid hostname."""
    if domain != ROOT_DOMAIN and not is_valid_hostname(domain):
        raise InvalidArgument("Invalid domain name provided.")

    return domain


def validate_server(server: str) -> str:
    """Return the server address if it is an IPv4 or IPv6 literal."""
    # ipaddress also accepts integers
    if not isinstance(server, str):
        raise InvalidArgument("Invalid DNS server IP address provided.")

    try:
        address = ipaddress.ip_address(server)
    except ValueError as e:
        raise InvalidArgument("Invalid DNS server IP address provided.") from e

    # Zone-scoped IPv6 such as fe80::1%eth0 is not a plain literal
    if getattr(address, "scope_id", None):
        raise InvalidArgument("Invalid DNS server IP address provided.")

    return server


def validate_timeout(timeout_seconds: int, ceiling: int = MAX_TIMEOUT_SECONDS) -> int:
    """Return the effective timeout, clamped to the ceiling."""
    if (
        isinstance(timeout_seconds, bool)
        or not isinstance(timeout_seconds, int)
        or timeout_seconds <= 0
    ):
        raise InvalidArgument("Timeout must be a positive integer.")

    if timeout_seconds > ceiling:
        logger.debug(f"Timeout {timeout_seconds}s clamped to {ceiling}s")
        return ceiling

    return timeout_seconds


def validate_request(
    domain: str,
    record_type: str,
    server: str,
    timeout_seconds: int,
    ceiling: int = MAX_TIMEOUT_SECONDS,
) -> QueryRequest:
    """Validate all query arguments, failing on the first bad one."""
    normalized_type = validate_record_type(record_type)
    validate_domain(domain)
    validate_server(server)
    effective_timeout = validate_timeout(timeout_seconds, ceiling)

    return QueryRequest(
        domain=domain,
        record_type=normalized_type,
        server=server,
        timeout_seconds=effective_timeout,
    )
