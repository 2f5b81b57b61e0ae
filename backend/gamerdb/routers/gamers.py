from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from ..domain.gamer import GamerRecord
from ..observability.logging import get_logger
from ..repositories.gamers_repo import GamerRepository

router = APIRouter(tags=["gamers"])
log = get_logger("gamers")


def get_repository(request: Request) -> GamerRepository:
    return request.app.state.gamers


@router.post("/gamers", status_code=201, response_model=GamerRecord, response_model_by_alias=True)
def create_gamer(
    payload: Any = Body(default=None),
    repo: GamerRepository = Depends(get_repository),
):
    # InvalidGamerInput and DdbError are rendered by the app's exception handlers.
    record = repo.create(payload)
    log.info("gamer_created", gamer_id=record.id, created_at=record.created_at)
    return record


@router.get("/gamers/{gamer_id}", response_model=GamerRecord, response_model_by_alias=True)
def get_gamer(gamer_id: str, repo: GamerRepository = Depends(get_repository)):
    record = repo.get(gamer_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Gamer not found")
    return record
