"""
Request Guard — Restricts outbound writes to known SharePoint endpoints.
Reads are always allowed; POSTs must target contextinfo or ProcessQuery.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from ..errors import TransportError

logger = logging.getLogger("o365_cli.safety")

READ_METHODS = {"GET", "HEAD", "OPTIONS"}

ALLOWED_POST_ENDPOINTS = [
    re.compile(r"/_api/contextinfo$", re.IGNORECASE),
    re.compile(r"/_vti_bin/client\.svc/ProcessQuery$", re.IGNORECASE),
]


class SafetyViolation(TransportError):
    """Raised when a request targets an endpoint the CLI never writes to."""
    pass


class RequestGuard:
    """
    Validates every outbound HTTP request before the client sends it.
    Keeps an audit trail of blocked requests.
    """

    def __init__(self):
        self.violations: list[dict] = []
        self.checks_performed: int = 0
        self.started_at: str = datetime.now(timezone.utc).isoformat()

    def validate_request(self, method: str, url: str) -> bool:
        """Return True if the request may be sent, raise SafetyViolation if not."""
        self.checks_performed += 1
        method_upper = method.upper()

        if not url.lower().startswith("https://"):
            self._record_violation(method_upper, url, "Non-HTTPS URL")
            raise SafetyViolation(f"Refusing to send {method_upper} to non-HTTPS URL: {url}", url=url)

        if method_upper in READ_METHODS:
            return True

        path = url.split("?", 1)[0]
        if method_upper == "POST":
            for pattern in ALLOWED_POST_ENDPOINTS:
                if pattern.search(path):
                    return True

        self._record_violation(method_upper, url, "Write to unrecognized endpoint")
        raise SafetyViolation(f"Blocked {method_upper} to unrecognized endpoint: {url}", url=url)

    def _record_violation(self, method: str, url: str, reason: str):
        self.violations.append({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "method": method,
            "url": url,
            "reason": reason,
        })
        logger.error(f"Request blocked: {reason} — {method} {url}")

    def get_audit_record(self, since: Optional[str] = None) -> dict:
        violations = [
            v for v in self.violations if since is None or v["timestamp"] >= since
        ]
        return {
            "started_at": self.started_at,
            "checks_performed": self.checks_performed,
            "violations": violations,
            "status": "CLEAN" if not violations else "BLOCKED_REQUESTS",
        }
