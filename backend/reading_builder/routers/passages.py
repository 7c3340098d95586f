from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db
from ..dependencies import generation_http_error, get_orchestrator
from ..errors import GenerationError
from ..models import PassageBatch, StoredPassage
from ..orchestrator import MAX_BATCH_SIZE, RetryOrchestrator
from ..policy import BATCH_RETRY, REGENERATE_RETRY
from ..schemas import GeneratedPassage, GenerationInput


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/passages", tags=["passages"])


class BatchRequest(GenerationInput):
    count: int = Field(default=1, ge=1, le=MAX_BATCH_SIZE)


class BatchResponse(BaseModel):
    batch_id: str
    passages: List[GeneratedPassage]
    needs_regeneration: List[int]


def _fill_row(row: StoredPassage, passage: GeneratedPassage) -> StoredPassage:
    row.passage_id = passage.id
    row.topic_used = passage.topic_used
    row.domain_used = passage.domain_used
    row.score = passage.report.score
    row.retry_count = passage.retry_count
    row.needs_regeneration = passage.needs_regeneration
    row.payload_json = passage.model_dump_json()
    return row


def _load_batch(db: Session, batch_id: str) -> PassageBatch:
    batch = db.get(PassageBatch, batch_id)
    if not batch:
        raise HTTPException(status_code=404, detail="Batch not found")
    return batch


def _response(batch: PassageBatch) -> BatchResponse:
    passages = [GeneratedPassage.model_validate_json(row.payload_json) for row in batch.passages]
    return BatchResponse(
        batch_id=batch.batch_id,
        passages=passages,
        needs_regeneration=[p.id for p in passages if p.needs_regeneration],
    )


@router.post("/batch", response_model=BatchResponse)
async def generate_batch(
    req: BatchRequest,
    orchestrator: RetryOrchestrator = Depends(get_orchestrator),
    db: Session = Depends(get_db),
):
    request = GenerationInput.model_validate(req.model_dump(exclude={"count"}))
    try:
        passages = await orchestrator.generate_batch(request, req.count, BATCH_RETRY)
    except GenerationError as exc:
        logger.error("Batch aborted: %s", exc)
        raise generation_http_error(exc)
    batch = PassageBatch(
        batch_id=uuid.uuid4().hex,
        request_json=request.model_dump_json(),
        passage_count=len(passages),
    )
    batch.passages = [_fill_row(StoredPassage(), p) for p in passages]
    db.add(batch)
    db.commit()
    db.refresh(batch)
    return _response(batch)


@router.get("/{batch_id}", response_model=BatchResponse)
async def get_batch(batch_id: str, db: Session = Depends(get_db)):
    return _response(_load_batch(db, batch_id))


@router.post("/{batch_id}/{passage_id}/regenerate", response_model=GeneratedPassage)
async def regenerate_passage(
    batch_id: str,
    passage_id: int,
    orchestrator: RetryOrchestrator = Depends(get_orchestrator),
    db: Session = Depends(get_db),
):
    batch = _load_batch(db, batch_id)
    row = next((r for r in batch.passages if r.passage_id == passage_id), None)
    if row is None:
        raise HTTPException(status_code=404, detail="Passage not found in batch")
    # Regenerate on the topic this passage actually used
    request = GenerationInput.model_validate_json(batch.request_json).model_copy(
        update={"topic": row.topic_used, "domain": row.domain_used}
    )
    try:
        passage = await orchestrator.regenerate_passage(request, passage_id, REGENERATE_RETRY)
    except GenerationError as exc:
        logger.error("Regeneration of passage %s failed: %s", passage_id, exc)
        raise generation_http_error(exc)
    _fill_row(row, passage)
    batch.updated_at = datetime.utcnow()
    db.add(batch)
    db.commit()
    return passage
