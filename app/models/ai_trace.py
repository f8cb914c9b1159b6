from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean
from datetime import datetime
from app.core.database import Base

class AITrace(Base):
    __tablename__ = "ai_traces"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    analysis_type = Column(String, nullable=False)  # "parse_tasks", "transcribe"
    input_type = Column(String, nullable=True)  # "text" or "voice"
    input_text = Column(String, nullable=True)
    generated_content = Column(String, nullable=False, default="")  # raw model output
    tasks_created = Column(Integer, nullable=False, default=0)
    model_used = Column(String, nullable=True)
    tokens_used = Column(Integer, nullable=True)
    execution_time_ms = Column(Integer, nullable=True)
    success = Column(Boolean, default=True)
    error_message = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
