from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    INVALID_NAME = "INVALID_NAME"
    NOT_FQDN = "NOT_FQDN"
    TRANSPORT_FAILED = "TRANSPORT_FAILED"
    HTTP_STATUS = "HTTP_STATUS"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    MALFORMED_RECORD = "MALFORMED_RECORD"


# Status codes that mean "this host clearly has no record"
NOT_FOUND_STATUS_CODES: frozenset[int] = frozenset({0, 404})


class DatDnsError(Exception):
    """Base for every expected resolution failure.

    Probes raise subclasses of this; the resolver decides whether a failure
    falls through to the next probe, gets negative-cached, or is handed to
    the persistent cache. Anything that is not a ``DatDnsError`` is a bug
    and propagates untouched.
    """

    code: ErrorCode

    def __init__(
        self,
        message: str,
        *,
        recoverable: bool = False,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code in NOT_FOUND_STATUS_CODES

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "recoverable": self.recoverable,
                "status_code": self.status_code,
            }
        }


class InvalidNameError(DatDnsError):
    code = ErrorCode.INVALID_NAME


class NotFqdnError(DatDnsError):
    code = ErrorCode.NOT_FQDN


class TransportFailure(DatDnsError):
    code = ErrorCode.TRANSPORT_FAILED

    def __init__(self, message: str, *, recoverable: bool = True) -> None:
        super().__init__(message, recoverable=recoverable, status_code=0)


class HttpStatusFailure(DatDnsError):
    code = ErrorCode.HTTP_STATUS


class RecordNotFoundFailure(DatDnsError):
    code = ErrorCode.RECORD_NOT_FOUND


class MalformedRecordFailure(DatDnsError):
    code = ErrorCode.MALFORMED_RECORD
