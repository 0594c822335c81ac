from .guardian import RequestGuard, SafetyViolation

__all__ = ["RequestGuard", "SafetyViolation"]
