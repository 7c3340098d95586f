from fastapi import APIRouter

from ..topics import SAMPLE_TOPICS, random_topic

router = APIRouter(prefix="/topics", tags=["topics"])


@router.get("")
def list_topics():
	return {"topics": SAMPLE_TOPICS}


@router.get("/random")
def pick_random_topic():
	return random_topic()
