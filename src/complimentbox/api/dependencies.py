"""Shared FastAPI dependencies."""

from fastapi import Request

from complimentbox.realtime.registry import ChannelRegistry


def get_registry(request: Request) -> ChannelRegistry:
    """The process-wide channel registry, owned by the app instance."""
    return request.app.state.registry
