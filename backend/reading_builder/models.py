from __future__ import annotations
from datetime import datetime
from sqlalchemy import Boolean, Column, String, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from .db import Base


class PassageBatch(Base):
	__tablename__ = "passage_batches"
	batch_id = Column(String(64), primary_key=True, index=True)
	# GenerationInput the batch was requested with (JSON string)
	request_json = Column(Text, nullable=False)
	passage_count = Column(Integer, default=1, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	passages = relationship(
		"StoredPassage",
		back_populates="batch",
		cascade="all, delete-orphan",
		order_by="StoredPassage.passage_id",
	)


class StoredPassage(Base):
	__tablename__ = "generated_passages"
	__table_args__ = (UniqueConstraint("batch_id", "passage_id", name="uq_batch_passage"),)
	id = Column(Integer, primary_key=True, autoincrement=True)
	batch_id = Column(String(64), ForeignKey("passage_batches.batch_id", ondelete="CASCADE"), nullable=False, index=True)
	# 1-based position within the batch
	passage_id = Column(Integer, nullable=False)
	topic_used = Column(String(256), nullable=False)
	domain_used = Column(String(256), nullable=False)
	score = Column(Integer, default=0, nullable=False)
	retry_count = Column(Integer, default=0, nullable=False)
	needs_regeneration = Column(Boolean, default=False, nullable=False)
	payload_json = Column(Text, nullable=False)  # GeneratedPassage snapshot
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	batch = relationship("PassageBatch", back_populates="passages")
