from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..parser import parse_passage
from ..scorecard import build_scorecard
from ..validator import get_policy, summarize_report, validate_passage


router = APIRouter(tags=["analysis"])


class ValidateRequest(BaseModel):
    raw: str = Field(min_length=1)
    policy: Literal["simple", "detailed"] = "simple"


class ParseRequest(BaseModel):
    raw: str = Field(min_length=1)


@router.post("/validate")
def validate(req: ValidateRequest):
    try:
        policy = get_policy(req.policy)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    report = validate_passage(req.raw, policy)
    return {
        "report": report,
        "summary": summarize_report(report, policy),
        "scorecard": build_scorecard(req.raw),
    }


@router.post("/parse")
def parse(req: ParseRequest):
    outcome = parse_passage(req.raw)
    return {
        "ok": outcome.ok,
        "passage": outcome.passage,
        "error": outcome.error,
        "duplicate_markers": outcome.duplicate_markers,
    }
