"""
Clients for the remote MediCore API
"""

from .medicore_api_client import LoginResult, MediCoreAPIClient, MediCoreAPIError

__all__ = [
    "MediCoreAPIClient",
    "MediCoreAPIError",
    "LoginResult",
]
