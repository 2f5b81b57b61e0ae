from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/", tags=["health"])
def health(request: Request):
    settings = request.app.state.settings
    return {
        "message": "Gamer Profiles API",
        "version": "1.0.0",
        "status": "running",
        "environment": settings.normalized_environment,
        "dynamodb": {
            "region": settings.aws_region,
            "table": settings.ddb_table_name,
        },
        "endpoints": [
            "POST /gamers",
            "GET /gamers/{id}",
        ],
    }
