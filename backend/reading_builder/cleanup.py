from __future__ import annotations
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from .models import PassageBatch
from .settings import settings


def purge_stale_batches(db: Session, *, days: Optional[int] = None, now: Optional[datetime] = None) -> int:
	"""Delete batches (and their passages) not touched within the retention window."""
	retention = settings.passage_retention_days if days is None else days
	threshold = (now or datetime.utcnow()) - timedelta(days=retention)
	# ORM delete so the passage rows cascade on SQLite as well
	stale = db.query(PassageBatch).filter(PassageBatch.updated_at < threshold).all()
	for batch in stale:
		db.delete(batch)
	db.commit()
	return len(stale)
