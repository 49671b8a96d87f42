"""Admin endpoints for triggering batch runs, with simple token auth."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from session_renderer.containers import AppContainer
    from session_renderer.domain.report import BatchReport

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str | None = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not admin_token or not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.post("/runs", dependencies=[Depends(require_admin)])
async def start_run(request: Request) -> dict[str, object]:
    """Run one batch to completion and return its report."""
    lock: asyncio.Lock = request.app.state.run_lock
    if lock.locked():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="A batch is already running."
        )
    container: AppContainer = request.app.state.container
    async with lock:
        report = await container.orchestrator.run()
    request.app.state.last_report = report
    return report.to_dict()


@router.get("/runs/latest", dependencies=[Depends(require_admin)])
async def latest_run(request: Request) -> dict[str, object]:
    """Return the report of the most recent run."""
    report: BatchReport | None = request.app.state.last_report
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return report.to_dict()
