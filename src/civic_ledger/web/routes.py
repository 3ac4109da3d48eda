"""HTTP endpoints that pin issue uploads and action snapshots.

These run after the browser has already sent (or is about to send) the
matching contract transaction, so they only talk to the metadata store.
Errors are returned as ``{"error": ...}`` with status 400 for bad input
and 500 for storage failures.
"""

from __future__ import annotations

import json
from typing import Any

import structlog
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..core.mirror import MetadataMirror
from ..models.snapshot import FundingSnapshot, StatusSnapshot
from ..models.status import IssueStatus
from ..utils.errors import MirrorError, UnknownStatusError

log = structlog.get_logger()

router = APIRouter(prefix="/api")

MISSING_FIELDS = "Missing required fields"


def get_mirror(request: Request) -> MetadataMirror:
    return request.app.state.mirror


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def _read_json(request: Request) -> dict[str, Any] | None:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


@router.post("/upload-to-ipfs")
async def upload_to_ipfs(
    file: UploadFile | None = File(None),
    location: str = Form(""),
    description: str = Form(""),
    reporter: str = Form(""),
    mirror: MetadataMirror = Depends(get_mirror),
) -> Any:
    if file is None or not location or not description or not reporter:
        return _error(MISSING_FIELDS, 400)

    content = await file.read()
    if not content:
        return _error(MISSING_FIELDS, 400)

    try:
        upload = await mirror.upload_issue(
            file.filename or "issue",
            content,
            file.content_type or "application/octet-stream",
            location,
            description,
            reporter,
        )
    except MirrorError as e:
        log.error("upload_to_ipfs_failed", error=str(e))
        return _error("Failed to upload to IPFS", 500)

    return {"success": True, "imageHash": upload.image_hash, "metadataHash": upload.metadata_hash}


@router.post("/update-issue-status")
async def update_issue_status(
    request: Request,
    mirror: MetadataMirror = Depends(get_mirror),
) -> Any:
    payload = await _read_json(request)
    if payload is None:
        return _error("Invalid JSON body", 400)

    issue_id = payload.get("issueId")
    new_status = payload.get("newStatus")
    admin_address = payload.get("adminAddress")
    if not issue_id or not new_status or not admin_address:
        return _error(MISSING_FIELDS, 400)

    try:
        status = IssueStatus.from_display(str(new_status))
        snapshot = StatusSnapshot(
            issue_id=issue_id,
            image_hash=payload.get("imageHash"),
            status=status.display,
            updated_by=admin_address,
        )
    except UnknownStatusError as e:
        return _error(str(e), 400)
    except ValidationError as e:
        return _error(f"Invalid status update: {e.errors()[0]['msg']}", 400)

    try:
        cid = await mirror.pin(snapshot, name=f"issue-{snapshot.issue_id}-status")
    except MirrorError as e:
        log.error("update_issue_status_failed", issue_id=snapshot.issue_id, error=str(e))
        return _error("Failed to update issue status", 500)

    return {"success": True, "metadataCid": cid, "statusMetadata": snapshot.to_document()}


@router.post("/update-issue-funding")
async def update_issue_funding(
    request: Request,
    mirror: MetadataMirror = Depends(get_mirror),
) -> Any:
    payload = await _read_json(request)
    if payload is None:
        return _error("Invalid JSON body", 400)

    if not all(payload.get(k) for k in ("issueId", "action", "amount", "userAddress")):
        return _error(MISSING_FIELDS, 400)

    try:
        snapshot = FundingSnapshot(
            issue_id=payload["issueId"],
            action=payload["action"],
            amount=payload["amount"],
            user_address=payload["userAddress"],
            total_funding=payload.get("totalFunding"),
            funds_used=payload.get("fundsUsed"),
            available=payload.get("available"),
        )
    except ValidationError as e:
        return _error(f"Invalid funding update: {e.errors()[0]['msg']}", 400)

    try:
        cid = await mirror.pin(snapshot, name=f"issue-{snapshot.issue_id}-{snapshot.action}")
    except MirrorError as e:
        log.error("update_issue_funding_failed", issue_id=snapshot.issue_id, error=str(e))
        return _error("Failed to update issue funding", 500)

    return {"success": True, "metadataCid": cid, "fundingMetadata": snapshot.to_document()}


@router.get("/health")
async def health(request: Request) -> Any:
    checker = request.app.state.health_checker
    if checker is None:
        return {"healthy": True, "status": "unknown", "checks": []}

    report = await checker.run_all_checks()
    return JSONResponse(report.to_dict(), status_code=200 if report.healthy else 503)
