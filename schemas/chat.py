from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

class MessageCreate(BaseModel):
    message: str

class AuthorResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class MessageResponse(BaseModel):
    id: int
    user_id: int
    body: str
    created_at: datetime
    user: AuthorResponse

class ChatHistoryResponse(BaseModel):
    messages: List[MessageResponse]
    last_message_id: Optional[int]
    channel: str

class SendMessageResponse(BaseModel):
    status: str
    message: MessageResponse
