from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

class AITraceResponse(BaseModel):
    """AI trace returned by the API"""
    id: int
    user_id: int
    analysis_type: str
    input_type: Optional[str]
    input_text: Optional[str]
    generated_content: str
    tasks_created: int
    model_used: Optional[str]
    tokens_used: Optional[int]
    execution_time_ms: Optional[int]
    success: bool
    error_message: Optional[str]
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)
