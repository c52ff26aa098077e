from functools import partial
from typing import Any, Callable, Optional

from fastapi import Depends, Header, Request

from persona_studio.core.client_config import get_client
from persona_studio.core.credential_store import CredentialStore
from persona_studio.pipeline.executor import StudioExecutor


def get_credential_store(request: Request) -> CredentialStore:
    """Dependency to get the shared credential store."""
    return request.app.state.credential_store


def get_client_factory(
    store: CredentialStore = Depends(get_credential_store),
    x_api_key: Optional[str] = Header(None, description="Per-request API key; overrides the registered key"),
) -> Callable[[], Any]:
    """
    Dependency returning a zero-argument client builder.

    The key is resolved only when the builder is called, so requests that never
    reach the service never need a credential.
    """
    return partial(get_client, x_api_key, store)


def get_studio_executor(client_factory: Callable[[], Any] = Depends(get_client_factory)) -> StudioExecutor:
    """Dependency to get a StudioExecutor bound to this request's credential."""
    return StudioExecutor(client_factory=client_factory)
