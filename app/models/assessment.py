# app/models/assessment.py
# 性格測驗：保留資料表結構，API 目前停用

import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, JSON, ForeignKey, TIMESTAMP, CHAR
from app.core.database import Base, utcnow

class Assessment(Base):
    __tablename__ = "assessments"

    assessment_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text)
    questions = Column(JSON, nullable=False)
    results = Column(JSON, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow)

class AssessmentResult(Base):
    __tablename__ = "assessment_results"

    result_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    assessment_id = Column(CHAR(36), ForeignKey("assessments.assessment_id", ondelete="CASCADE"), nullable=False, index=True)
    answers = Column(JSON, nullable=False)
    result_type = Column(String(100), nullable=False)
    score = Column(Integer)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)
