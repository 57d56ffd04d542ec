"""Shared dependencies for web routes."""

from fastapi import Request

from metrics.store import RunStore


def get_store(request: Request) -> RunStore:
    """FastAPI dependency for the run store."""
    return request.app.state.store


def get_records(request: Request) -> dict:
    """FastAPI dependency for the filename -> detailed records lookup."""
    return request.app.state.records


def get_settings(request: Request) -> dict:
    """FastAPI dependency for user-provided settings."""
    return request.app.state.settings
