"""
FastAPI routes for the guidance service.
What it provides:
- POST /guidance: full plan, plan revised from feedback, or one step refreshed

And, the main purpose:
Expose plan generation over HTTP. The body is read raw so a malformed
body is a 400 from us, not a framework 422.
"""


import json

from fastapi import APIRouter, Depends, Request

from app.agent.planner import generate_guidance
from app.core.errors import ValidationError
from app.llm.router import ModelInvoker
from app.llm.schemas import GuidancePlan

router = APIRouter()


def get_invoker() -> ModelInvoker:
    return ModelInvoker()


@router.post("/guidance", responses={200: {"model": GuidancePlan}})
async def api_guidance(request: Request, invoker: ModelInvoker = Depends(get_invoker)):
    # missing credential wins over a bad body
    invoker.ensure_key()

    try:
        body = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON body.")
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON body.")

    return await generate_guidance(body, invoker)
