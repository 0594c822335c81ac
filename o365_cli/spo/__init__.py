from .client import FormDigest, SpoClient
from .session import SpoSession

__all__ = ["FormDigest", "SpoClient", "SpoSession"]
