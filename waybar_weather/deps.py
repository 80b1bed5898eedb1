# ABOUTME: Dependency container for one widget run using Pydantic BaseModel.
# ABOUTME: Holds the httpx.Client and the persisted mode and cache stores.

import httpx
from pydantic import BaseModel, ConfigDict

from waybar_weather.cache_store import CacheStore
from waybar_weather.mode_store import ModeStore

DEFAULT_TIMEOUT = 10.0
USER_AGENT = "waybar-weather"


class WidgetDeps(BaseModel):
    """Collaborators the orchestrator talks to, injected so tests can swap them."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    http_client: httpx.Client
    mode_store: ModeStore
    cache_store: CacheStore


def create_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.Client:
    """Create a synchronous httpx client.

    No retry transport: a failed request surfaces immediately and the caller
    backs off once before reporting it.
    """
    return httpx.Client(timeout=timeout, headers={"User-Agent": USER_AGENT})
