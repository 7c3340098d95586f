import asyncio
import logging

from fastapi import FastAPI

from .db import Base, engine, get_db
from .cleanup import purge_stale_batches
from .settings import settings
from .routers import health, generate, passages, analysis, topics, dictionary

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="C1 Reading Builder API")
app.include_router(health.router)
app.include_router(generate.router)
app.include_router(passages.router)
app.include_router(analysis.router)
app.include_router(topics.router)
app.include_router(dictionary.router)


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key), "model": settings.gemini_model}


def _purge_once() -> None:
	db = next(get_db())
	try:
		removed = purge_stale_batches(db)
		if removed:
			logger.info("Purged %s stale passage batches", removed)
	finally:
		db.close()


async def _cleanup_watcher():
	# Startup purge already ran; repeat daily
	while True:
		await asyncio.sleep(24 * 60 * 60)
		try:
			_purge_once()
		except Exception:
			logger.exception("Passage batch cleanup failed")


@app.on_event("startup")
async def startup_event():
	Base.metadata.create_all(bind=engine)
	try:
		_purge_once()
	except Exception:
		logger.exception("Passage batch cleanup failed")
	asyncio.create_task(_cleanup_watcher())
