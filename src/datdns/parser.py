"""Record parsers for DNS-over-HTTPS answers and well-known bodies.

Pure functions: no I/O, no logging of outcomes beyond debug detail. The
probes wrap these and translate the raised errors into events.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from datdns.errors import MalformedRecordFailure, RecordNotFoundFailure
from datdns.models.resolution import DEFAULT_TTL, MAX_TTL

if TYPE_CHECKING:
    from datdns.config import RecordSettings

log = structlog.get_logger()

_TTL_LINE_RE = re.compile(r"^ttl=(\d+)$", re.IGNORECASE)


def key_body(hash_pattern: str) -> str:
    """Strip the outer ``^`` and ``$`` anchors so the key shape can be embedded."""
    body = hash_pattern.removeprefix("^")
    if body.endswith("$") and not body.endswith("\\$"):
        body = body[:-1]
    return body


@dataclass(frozen=True)
class RecordPatterns:
    """Compiled matchers for one protocol's key, TXT record and URI shapes."""

    hash_re: re.Pattern[str]
    txt_re: re.Pattern[str]
    uri_re: re.Pattern[str]
    scheme: str

    @classmethod
    def from_settings(cls, records: RecordSettings) -> RecordPatterns:
        label = re.escape(records.txt_label)
        scheme = re.escape(records.protocol_scheme)
        body = key_body(records.hash_pattern)
        return cls(
            hash_re=re.compile(records.hash_pattern, re.IGNORECASE),
            txt_re=re.compile(rf'^"?{label}=((?:{body}))"?$', re.IGNORECASE),
            uri_re=re.compile(rf"^{scheme}://((?:{body}))", re.IGNORECASE),
            scheme=records.protocol_scheme,
        )

    def is_key(self, value: str) -> bool:
        return self.hash_re.match(value) is not None


def coerce_ttl(value: object) -> int:
    """Clamp a reported TTL into ``[0, MAX_TTL]``.

    Anything that is not a non-negative integer falls back to DEFAULT_TTL.
    Integral floats such as ``300.0`` count as integers. ``bool`` is
    rejected even though it subclasses ``int``.
    """
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return DEFAULT_TTL
    return min(value, MAX_TTL)


def parse_doh_response(name: str, body: str, patterns: RecordPatterns) -> tuple[str, int]:
    """Extract ``(key, ttl)`` from a JSON DNS-over-HTTPS response body.

    When several answers carry a valid key, the greatest key wins so the same
    answer set always yields the same result regardless of ordering.
    """
    try:
        record = json.loads(body)
    except ValueError as exc:
        raise MalformedRecordFailure(
            f"Invalid dns-over-https record for {name}, must provide json"
        ) from exc

    answers = record.get("Answer") if isinstance(record, dict) else None
    if not isinstance(answers, list):
        raise RecordNotFoundFailure(
            f"Invalid dns-over-https record for {name}, no TXT answers given"
        )

    candidates: list[tuple[str, object]] = []
    for answer in answers:
        if not isinstance(answer, dict):
            continue
        data = answer.get("data")
        if not isinstance(data, str):
            continue
        match = patterns.txt_re.match(data)
        if match is None or not patterns.is_key(match.group(1)):
            continue
        candidates.append((match.group(1).lower(), answer.get("TTL")))

    if not candidates:
        raise RecordNotFoundFailure(
            f"Invalid dns-over-https record for {name}, no TXT key answer given"
        )

    candidates.sort(key=lambda c: c[0], reverse=True)
    key, ttl = candidates[0]
    return key, coerce_ttl(ttl)


def parse_well_known_record(name: str, body: str, patterns: RecordPatterns) -> tuple[str, int]:
    """Extract ``(key, ttl)`` from a well-known record body.

    Line 1 must be ``<scheme>://<key>``; line 2 may be ``TTL=<seconds>``.
    A malformed TTL line is ignored and the default TTL applies.
    """
    if not body:
        raise MalformedRecordFailure(f"Empty well-known record for {name}")

    lines = [line.rstrip("\r") for line in body.split("\n")]

    match = patterns.uri_re.match(lines[0])
    if match is None or not patterns.is_key(match.group(1)):
        raise MalformedRecordFailure(
            f"Invalid well-known record for {name}, must provide a {patterns.scheme}://{{key}} url"
        )
    key = match.group(1).lower()

    ttl: object = None
    if len(lines) > 1 and lines[1]:
        ttl_match = _TTL_LINE_RE.match(lines[1])
        if ttl_match is None:
            log.debug("well_known_ttl_unparsed", name=name, line=lines[1])
        else:
            ttl = int(ttl_match.group(1))

    return key, coerce_ttl(ttl)
