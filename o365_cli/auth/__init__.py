from .authenticator import Authenticator, AuthenticationError, resource_for

__all__ = ["Authenticator", "AuthenticationError", "resource_for"]
