"""
FastAPI server for the celebrity draft room.

Endpoints:
    GET  /draft                 Current draft state
    POST /draft                 Apply a draft action
    POST /checkpoints           list | save | load | restore checkpoints
    POST /validate-celebrity    Validate a name (cached)
    POST /custom-auto-lists     list | add | remove | reorder wish lists
    GET  /health                Liveness check
    WS   /ws                    Change notifications ("state:updated")

Clients never receive state over the socket; on each notification they
call ``GET /draft`` again.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from src.draft_manager.checkpoints import CheckpointManager
from src.draft_manager.config import STORE_DIR
from src.draft_manager.draft_rules import (
    DraftActionError,
    Forbidden,
    InvalidInput,
    NotFound,
    NotInitialized,
    StaleWrite,
    draft_order,
)
from src.draft_manager.draft_state import DraftState
from src.draft_manager.state_persistence import BlobStore, JsonFileBlobStore, StoreError
from src.sync.broadcaster import NotificationChannel
from src.sync.custom_lists import CustomListManager
from src.sync.draft_service import DraftService
from src.validation.celebrity_lookup import CelebrityLookup
from src.validation.validation_cache import ValidationCache
from src.validation.validation_worker import ValidationWorker

logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

# Actions only the room admin may run
ADMIN_DRAFT_ACTIONS = {"init", "reset", "undo", "replace", "rollback"}
ADMIN_CHECKPOINT_ACTIONS = {"save", "restore"}

# Rejections that are not plain bad input
ERROR_STATUS = {
    Forbidden: 403,
    NotFound: 404,
    StaleWrite: 409,
}


# ===== Pydantic Models =====

class DraftActionRequest(BaseModel):
    """Draft action; action-specific fields ride along as extras."""
    model_config = ConfigDict(extra="allow")

    action: str = Field("", description="init, pick, editPick, reset, undo, applyValidation, replace or rollback")
    expectedVersion: Optional[int] = Field(None, description="State version the client last saw")
    isAdmin: bool = Field(False, description="Caller holds the shared admin privilege")


class CheckpointRequest(BaseModel):
    action: str = Field("", description="list, save, load or restore")
    name: Optional[str] = Field(None, description="Checkpoint name (save)")
    id: Optional[str] = Field(None, description="Checkpoint id (load, restore)")
    state: Optional[Dict[str, Any]] = Field(None, description="State to save; defaults to the live draft")
    isAdmin: bool = Field(False, description="Caller holds the shared admin privilege")


class ValidateCelebrityRequest(BaseModel):
    name: str = Field("", description="Celebrity name as typed")
    force: bool = Field(False, description="Bypass the validation cache")


class CustomListRequest(BaseModel):
    action: str = Field("", description="list, add, remove or reorder")
    drafterId: Optional[str] = Field(None, description="Owner of the list")
    drafterName: Optional[str] = Field(None, description="Owner display name (add)")
    name: Optional[str] = Field(None, description="Celebrity name (add)")
    validation: Optional[Dict[str, Any]] = Field(None, description="Validation result (add); looked up when omitted")
    celebrityId: Optional[str] = Field(None, description="Entry to drop (remove)")
    order: Optional[List[str]] = Field(None, description="Celebrity ids in the wanted order (reorder)")


def _require_admin(action: str, is_admin: bool, admin_actions) -> None:
    if action in admin_actions and not is_admin:
        raise Forbidden(f'Only the admin may run "{action}".')


def create_app(
    store: Optional[BlobStore] = None,
    lookup=None,
    channel: Optional[NotificationChannel] = None,
    start_worker: bool = True,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        store: Durable key-value slot (JSON files under STORE_DIR if omitted)
        lookup: Celebrity lookup client (CelebrityLookup if omitted)
        channel: Notification channel shared with in-process subscribers
        start_worker: Run the validation worker thread for the app's lifetime

    Returns:
        FastAPI application instance
    """
    store = store if store is not None else JsonFileBlobStore(STORE_DIR)
    lookup = lookup if lookup is not None else CelebrityLookup()

    validation_cache = ValidationCache(store, lookup)
    worker = ValidationWorker(validation_cache)
    service = DraftService(store, channel=channel, validation_queue=worker)
    worker.apply_validation = service.apply_validation_result
    checkpoints = CheckpointManager(store)
    custom_lists = CustomListManager(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if start_worker:
            worker.start()
        yield
        if start_worker:
            worker.stop()

    app = FastAPI(
        title="Celebrity Draft Room API",
        description="Shared snake-draft board with notify-then-pull sync",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.service = service
    app.state.worker = worker
    app.state.checkpoints = checkpoints
    app.state.custom_lists = custom_lists
    app.state.validation_cache = validation_cache

    # ===== Error handlers =====

    @app.exception_handler(DraftActionError)
    async def draft_action_error_handler(request: Request, exc: DraftActionError):
        status_code = ERROR_STATUS.get(type(exc), 400)
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error("Store failure on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"success": False, "reason": "StoreError", "error": str(exc)},
        )

    # ===== Draft =====

    @app.get("/draft")
    def get_draft():
        """Current draft state and snake order, or 404 before the first init."""
        try:
            state = service.get_state()
        except NotInitialized as e:
            return JSONResponse(status_code=404, content=e.to_dict())
        order = [d.id for d in draft_order(state.drafters, state.config.total_rounds)]
        return {"success": True, "state": state.to_dict(), "order": order}

    @app.post("/draft")
    def post_draft(request: DraftActionRequest):
        """
        Apply a draft action.

        Returns:
            {success, state, changed, notified}

        Raises:
            400 on rule violations, 403 for admin actions without the
            privilege, 409 on a stale expectedVersion, 503 if the store
            is unreachable
        """
        action = request.action.strip()
        _require_admin(action, request.isAdmin, ADMIN_DRAFT_ACTIONS)

        if action == "rollback":
            result = service.rollback()
        else:
            payload = request.model_dump(exclude={"action", "expectedVersion", "isAdmin"})
            result = service.apply(action, payload, expected_version=request.expectedVersion)
        return result.to_dict()

    # ===== Checkpoints =====

    @app.post("/checkpoints")
    def post_checkpoints(request: CheckpointRequest):
        action = request.action.strip()
        _require_admin(action, request.isAdmin, ADMIN_CHECKPOINT_ACTIONS)

        if action == "list":
            return {"success": True, "checkpoints": checkpoints.list()}

        if action == "save":
            if request.state is not None:
                try:
                    state = DraftState.from_dict(request.state)
                except (AttributeError, KeyError, TypeError, ValueError) as e:
                    raise InvalidInput(f'Missing or invalid "state" for save action: {e}') from e
            else:
                state = service.get_state()
            saved = checkpoints.save(request.name, state)
            return {"success": True, "checkpoints": checkpoints.list(), "saved": saved}

        if action == "load":
            return {"success": True, "checkpoint": checkpoints.load(request.id).to_dict()}

        if action == "restore":
            checkpoint = checkpoints.load(request.id)
            result = service.restore(checkpoint.state)
            logger.info("Restored checkpoint %s (%s)", checkpoint.name, checkpoint.id)
            return result.to_dict()

        raise InvalidInput(f'Unsupported action "{action}".')

    # ===== Validation =====

    @app.post("/validate-celebrity")
    def validate_celebrity(request: ValidateCelebrityRequest):
        result = validation_cache.validate(request.name, force=request.force)
        return {"success": True, "result": result}

    # ===== Custom auto-draft lists =====

    @app.post("/custom-auto-lists")
    def post_custom_lists(request: CustomListRequest):
        action = request.action.strip()

        if action == "list":
            return {"success": True, "listsByDrafter": custom_lists.list_all()}

        if action == "add":
            validation = request.validation
            if validation is None and request.name:
                validation = validation_cache.validate(request.name)
            if validation is not None and validation.get("isValid") is False:
                raise InvalidInput(f'"{request.name}" could not be validated.')
            updated, added = custom_lists.add(
                request.drafterId, request.drafterName, request.name, validation
            )
            return {
                "success": True,
                "listsByDrafter": custom_lists.list_all(),
                "list": updated,
                "added": added,
            }

        if action == "remove":
            updated = custom_lists.remove(request.drafterId, request.celebrityId)
            return {"success": True, "listsByDrafter": custom_lists.list_all(), "list": updated}

        if action == "reorder":
            updated = custom_lists.reorder(request.drafterId, request.order)
            return {"success": True, "listsByDrafter": custom_lists.list_all(), "list": updated}

        raise InvalidInput(f'Unsupported action "{action}".')

    # ===== Health =====

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "subscribers": service.channel.subscriber_count,
            "pendingValidations": worker.pending,
            "lookupConfigured": bool(getattr(lookup, "is_configured", False)),
        }

    # ===== WebSocket =====

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        Change notifications for one browser session.

        Messages from server:
        - state:updated: the draft changed; re-fetch GET /draft

        Messages from client:
        - ping: keepalive (answered with pong)
        """
        await websocket.accept()
        loop = asyncio.get_running_loop()
        outbox: "asyncio.Queue[Dict]" = asyncio.Queue()

        def forward(message: Dict) -> None:
            loop.call_soon_threadsafe(outbox.put_nowait, message)

        unsubscribe = service.channel.subscribe(forward)

        async def send_loop():
            while True:
                message = await outbox.get()
                await websocket.send_json(message)

        async def receive_loop():
            while True:
                message = await websocket.receive_json()
                if isinstance(message, dict) and message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})

        tasks = [asyncio.create_task(send_loop()), asyncio.create_task(receive_loop())]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                if not task.cancelled() and task.exception() is not None:
                    if not isinstance(task.exception(), WebSocketDisconnect):
                        logger.warning("WebSocket closed with error: %s", task.exception())
        finally:
            unsubscribe()
            for task in tasks:
                task.cancel()

    return app
