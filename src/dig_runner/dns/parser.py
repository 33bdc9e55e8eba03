"""Parsing of dig '+noall +answer' output."""

from typing import List, Optional

from dig_runner.core.models import DnsRecord

COMMENT_MARKER = ";"

# NAME TTL CLASS TYPE DATA...
MIN_FIELDS = 5


def parse_line(line: str) -> Optional[DnsRecord]:
    """
    Parse one answer line into a DnsRecord.

    Returns None for blank lines, comment lines, lines with fewer than
    five fields and lines whose TTL is not a non-negative integer.
    """
    if not line.strip() or COMMENT_MARKER in line:
        return None

    parts = line.split()

    if len(parts) < MIN_FIELDS:
        return None

    if not (parts[1].isascii() and parts[1].isdigit()):
        return None

    return DnsRecord(
        name=parts[0],
        ttl=int(parts[1]),
        type=parts[3],
        data=" ".join(parts[4:]),
    )


def parse_answer(output: str) -> List[DnsRecord]:
    """Parse dig answer output, preserving the order records were printed."""
    records: List[DnsRecord] = []

    for line in output.splitlines():
        record = parse_line(line)

        if record is not None:
            records.append(record)

    return records
