"""Shared dependency factories for FastAPI endpoints."""

from fastapi import HTTPException
from fastapi import Request

from verifier_library.verification import VerifierClient


def get_client(language: str, request: Request) -> VerifierClient:
    """Get the verifier client for the language in the request path.

    Raises:
        HTTPException: 404 if the language is unsupported or disabled
    """
    clients: dict[str, VerifierClient] = request.app.state.clients or {}
    client = clients.get(language)
    if client is None:
        raise HTTPException(status_code=404, detail=f"Language not supported or disabled: {language}")
    return client
