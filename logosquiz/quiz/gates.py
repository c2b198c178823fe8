"""
Access policies applied before a participant may take a quiz.

- Availability: the quiz's optional open/close window
- Attempts: a per-IP cap on stored submissions

The attempt cap is checked against the stored rows on every request, so
concurrent submissions from one IP may briefly exceed it.
"""
from datetime import datetime
from typing import Callable, Mapping, NamedTuple, Optional

UNKNOWN_IP = "unknown"

# Width of the stored ip_address column
MAX_IP_LENGTH = 64

NOT_STARTED = "notStarted"
CLOSED = "closed"


class Availability(NamedTuple):
    is_available: bool
    reason: Optional[str] = None
    boundary: Optional[datetime] = None


class AttemptDecision(NamedTuple):
    allowed: bool
    attempt_count: int = 0
    max_attempts_per_ip: Optional[int] = None


def is_available(available_from: Optional[datetime], available_until: Optional[datetime], now: datetime) -> bool:
    not_started = available_from is not None and available_from > now
    closed = available_until is not None and available_until < now
    return not not_started and not closed


def check_availability(available_from: Optional[datetime], available_until: Optional[datetime],
                       now: datetime) -> Availability:
    """
    Decide whether ``now`` falls inside the window and, if not, why.

    Unset bounds impose no constraint. A window whose start lies after its
    end is not validated here; such a quiz is reported as not started.
    """
    not_started = available_from is not None and available_from > now
    closed = available_until is not None and available_until < now

    if not_started:
        return Availability(False, NOT_STARTED, available_from)
    if closed:
        return Availability(False, CLOSED, available_until)
    return Availability(True)


def attempt_limit_applies(max_attempts_per_ip: Optional[int]) -> bool:
    return bool(max_attempts_per_ip and max_attempts_per_ip > 0)


def check_attempt_limit(max_attempts_per_ip: Optional[int], count_attempts: Callable[[], int]) -> AttemptDecision:
    """
    Decide whether another attempt is allowed.

    Args:
        max_attempts_per_ip: The quiz's cap; None or <= 0 means unlimited
        count_attempts: Returns the stored submission count for the visitor's
            IP. Only called when a cap applies.
    """
    if not attempt_limit_applies(max_attempts_per_ip):
        return AttemptDecision(True)

    attempt_count = count_attempts()
    return AttemptDecision(attempt_count < max_attempts_per_ip, attempt_count, max_attempts_per_ip)


def resolve_visitor_ip(headers: Mapping) -> str:
    """
    Resolve the visitor IP from proxy headers.

    The first X-Forwarded-For entry is the original client behind a proxy
    chain; X-Real-IP is the fallback. Visitors without either share the
    "unknown" bucket and are counted together. Values are cut to
    MAX_IP_LENGTH so an oversized header is still counted as an attempt.
    """
    forwarded_for = headers.get("X-Forwarded-For") or ""
    first_hop = forwarded_for.split(",")[0].strip()
    if first_hop:
        return first_hop[:MAX_IP_LENGTH]
    real_ip = (headers.get("X-Real-IP") or "").strip()
    return real_ip[:MAX_IP_LENGTH] or UNKNOWN_IP
