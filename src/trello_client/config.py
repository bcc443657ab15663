from __future__ import annotations

import os
from typing import Tuple

from dotenv import load_dotenv

from .client import TrelloClient

API_KEY_ENV = "TRELLO_API_KEY"
AUTH_TOKEN_ENV = "TRELLO_AUTH_TOKEN"


def load_env_config(*, use_dotenv: bool = True) -> Tuple[str, str]:
    """Load the Trello API key and auth token from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    api_key = os.getenv(API_KEY_ENV, "").strip()
    auth_token = os.getenv(AUTH_TOKEN_ENV, "").strip()
    return api_key, auth_token


def create_client_from_env(*, use_dotenv: bool = True, **kwargs) -> TrelloClient:
    """Create a TrelloClient from environment variables."""
    api_key, auth_token = load_env_config(use_dotenv=use_dotenv)
    if not api_key or not auth_token:
        raise ValueError(f"Missing {API_KEY_ENV} or {AUTH_TOKEN_ENV} in environment.")
    return TrelloClient(api_key=api_key, auth_token=auth_token, **kwargs)


__all__ = [
    "API_KEY_ENV",
    "AUTH_TOKEN_ENV",
    "load_env_config",
    "create_client_from_env",
]
