"""Shared helpers for the API routes"""

from typing import Iterator

from fastapi import HTTPException, Request

from ..core.context import AppContext
from ..core.result import OperationResult


def get_context(request: Request) -> AppContext:
    """Application context built at startup"""
    return request.app.state.context


def get_writable_context(request: Request) -> Iterator[AppContext]:
    """
    Application context for handlers that change stored data.

    Those handlers are plain functions run in the threadpool; they take the
    context's write lock so store changes and file rewrites happen one at a time.
    """
    context = get_context(request)
    with context.write_lock:
        yield context


def raise_for_result(result: OperationResult) -> None:
    """Turn a failed result into an HTTP error: 404 when something is missing, 400 otherwise"""
    if result:
        return

    status_code = 404 if result.is_not_found else 400
    if result.errors:
        detail = {"message": result.message, "reason": result.reason.value, "errors": result.errors}
    else:
        detail = result.message
    raise HTTPException(status_code=status_code, detail=detail)
