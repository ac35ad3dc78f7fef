"""Shared route dependencies."""

from fastapi import Request

from growseed.runtime import TrackerRuntime


def get_runtime(request: Request) -> TrackerRuntime:
    return request.app.state.runtime
