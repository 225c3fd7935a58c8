"""HTTP surface for renderers: one drive per session cookie."""
from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import get_settings
from ..events import EventCatalog
from ..models import OutfitConfig
from ..outfits import OutfitError
from ..service import GameService

logger = logging.getLogger(__name__)

SESSION_COOKIE = "trail_drive_session"
MAX_SESSIONS = 256


class OutfitRequest(BaseModel):
    herd_size: int = 2500
    extra_crew: int = 0
    extra_horses: int = 0
    extra_supplies: int = 0
    armament: str = "rifles"
    spare_parts: int = 0
    wage_tier: str = "standard"


class PaceRequest(BaseModel):
    pace: str


class ChoiceRequest(BaseModel):
    index: int


def create_app(
    service_factory: Optional[Callable[[], GameService]] = None,
    max_sessions: int = MAX_SESSIONS,
) -> FastAPI:
    """Build the app; ``service_factory`` makes a fresh drive per session.

    Handlers are ``async`` and never await, so actions on a drive run one at
    a time on the event loop. Sessions live in an LRU map of at most
    ``max_sessions`` drives; the least recently used drive is dropped first.
    """

    if service_factory is None:
        settings = get_settings()
        catalog = EventCatalog.load(resource_keys=settings.resource_keys)

        def service_factory() -> GameService:
            return GameService(settings=settings, catalog=catalog)

    factory = service_factory
    sessions: "OrderedDict[str, GameService]" = OrderedDict()
    app = FastAPI(title="Trail Drive")
    app.state.sessions = sessions

    @app.exception_handler(RequestValidationError)
    async def bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    def session(request: Request, response: Response) -> GameService:
        session_id = request.cookies.get(SESSION_COOKIE)
        if session_id in sessions:
            sessions.move_to_end(session_id)
        else:
            session_id = uuid.uuid4().hex
            sessions[session_id] = factory()
            logger.info("Opened drive session %s", session_id)
            while len(sessions) > max_sessions:
                dropped, _ = sessions.popitem(last=False)
                logger.info("Evicted drive session %s", dropped)
        response.set_cookie(SESSION_COOKIE, session_id)
        return sessions[session_id]

    def run(action: Callable[[], object]) -> None:
        try:
            action()
        except GameService.InvalidPhaseError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except (GameService.InvalidChoiceError, OutfitError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.get("/state")
    async def get_state(request: Request, response: Response) -> dict:
        return session(request, response).view()

    @app.post("/start")
    async def start(request: Request, response: Response, outfit: Optional[OutfitRequest] = None) -> dict:
        service = session(request, response)
        config = OutfitConfig(**(outfit or OutfitRequest()).model_dump())
        run(lambda: service.start(config))
        return service.view()

    @app.post("/pace")
    async def set_pace(body: PaceRequest, request: Request, response: Response) -> dict:
        service = session(request, response)
        run(lambda: service.set_pace(body.pace))
        return service.view()

    @app.post("/advance")
    async def advance(request: Request, response: Response) -> dict:
        service = session(request, response)
        run(service.advance)
        return service.view()

    @app.post("/choose")
    async def choose(body: ChoiceRequest, request: Request, response: Response) -> dict:
        service = session(request, response)
        run(lambda: service.choose(body.index))
        return service.view()

    @app.post("/continue")
    async def continue_trail(request: Request, response: Response) -> dict:
        service = session(request, response)
        run(service.continue_trail)
        return service.view()

    @app.post("/restart")
    async def restart(request: Request, response: Response) -> dict:
        service = session(request, response)
        service.restart()
        return service.view()

    return app


__all__ = ["create_app", "OutfitRequest", "PaceRequest", "ChoiceRequest"]
