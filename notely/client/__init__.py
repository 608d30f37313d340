"""
Remote API access.

APIClient is the transport (httpx, bearer token, global 401 handling);
NotelyAPI maps endpoints to typed calls.
"""

from notely.client.api import NotelyAPI
from notely.client.http import APIClient, error_from_response

__all__ = ["APIClient", "NotelyAPI", "error_from_response"]
