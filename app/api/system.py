"""
System / health routes.
"""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["System"])


@router.get("/health")
async def health(request: Request):
    engine = getattr(request.app.state, "engine", None)
    models = [
        {"model_id": a.model_id, "weight": a.weight, "simulated": a.simulated}
        for a in (engine.adapters if engine else ())
    ]
    return {"status": "healthy", "models": models}


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots():
    return "User-agent: *\nDisallow: /"
