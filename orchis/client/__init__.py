"""Clients for the managed backend and third-party APIs."""

from .firestore import DocumentStore, agent_path, get_app
from .functions import CallableFunctions
from .storage import LogoStorage
from .unsplash import UnsplashClient
from .auth import AdminAuthenticator, AdminIdentity

__all__ = [
    "DocumentStore",
    "agent_path",
    "get_app",
    "CallableFunctions",
    "LogoStorage",
    "UnsplashClient",
    "AdminAuthenticator",
    "AdminIdentity",
]
