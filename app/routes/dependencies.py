"""
Shared route dependencies.

The workspace is built once at startup and kept on app.state; tests swap
it through app.dependency_overrides.
"""

from fastapi import Request

from app.services.triage_workspace import TriageWorkspace


def get_workspace(request: Request) -> TriageWorkspace:
    return request.app.state.workspace
