import logging
from datetime import datetime
from typing import Any, List, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from app.database import get_db, get_session_factory
from app.models.models import Conversation, Project
from app.streaming.relay import ChatRelay
from app.streaming.upstream import ProviderNotConfigured, UpstreamError
from app.utils.auth import auth_dependency
from app.utils.http import get_http_client
from app.utils.titles import generate_ai_title

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


# Models for incoming data
class ConversationCreate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    project_id: Optional[int] = None

class ConversationUpdate(BaseModel):
    title: str = Field(min_length=1, max_length=200)

class SendMessageParams(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())

    content: str = Field(min_length=1, max_length=100_000)
    model: Optional[str] = Field(default=None, max_length=100)
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    max_tokens: Optional[int] = Field(default=None, ge=1, le=200_000)
    top_p: Optional[float] = Field(default=None, ge=0, le=1)
    attachments: Optional[List[Any]] = None
    system_instructions: Optional[str] = Field(default=None, max_length=50_000)
    template_system_prompt: Optional[str] = Field(default=None, max_length=50_000)
    skill_system_prompt: Optional[str] = Field(default=None, max_length=50_000)
    enabled_tools: Optional[List[str]] = None

class MessageResponse(BaseModel):
    id: int
    conversation_id: int
    role: str
    content: str
    attachments: Optional[Any]
    usage: Optional[dict]
    created_at: datetime

    class Config:
        from_attributes = True

class ConversationResponse(BaseModel):
    id: int
    title: str
    project_id: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True

class ConversationDetail(ConversationResponse):
    messages: List[MessageResponse]


def get_conversation_or_404(db: Session, conversation_id: int) -> Conversation:
    conversation = db.get(Conversation, conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@router.get('/api/conversations', response_model=list[ConversationResponse])
def get_conversations(db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return db.query(Conversation).order_by(Conversation.created_at.desc(), Conversation.id.desc()).all()

@router.get('/api/conversations/{conversation_id}', response_model=ConversationDetail)
def get_conversation(conversation_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return get_conversation_or_404(db, conversation_id)

@router.post('/api/conversations', response_model=ConversationResponse, status_code=201)
def create_conversation(params: ConversationCreate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    if params.project_id is not None and not db.get(Project, params.project_id):
        raise HTTPException(status_code=400, detail="Project does not exist")
    conversation = Conversation(title=params.title or "New Chat", project_id=params.project_id)
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    return conversation

@router.patch('/api/conversations/{conversation_id}', response_model=ConversationResponse)
def rename_conversation(conversation_id: int, params: ConversationUpdate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    conversation = get_conversation_or_404(db, conversation_id)
    conversation.title = params.title
    db.commit()
    db.refresh(conversation)
    return conversation

@router.delete('/api/conversations/{conversation_id}', status_code=204)
def delete_conversation(conversation_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    conversation = get_conversation_or_404(db, conversation_id)
    # messages go with it through the relationship cascade
    db.delete(conversation)
    db.commit()
    return Response(status_code=204)


# Route to send a message with a streaming response
@router.post('/api/conversations/{conversation_id}/messages')
async def send_message(
    conversation_id: int,
    params: SendMessageParams,
    db: Session = Depends(get_db),
    session_factory = Depends(get_session_factory),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    user = Depends(auth_dependency),
):
    get_conversation_or_404(db, conversation_id)

    relay = ChatRelay(conversation_id, params, http_client, session_factory)
    try:
        await relay.open(db)
    except ProviderNotConfigured as e:
        logger.error("Cannot stream conversation %s: %s", conversation_id, e)
        raise HTTPException(status_code=500, detail=str(e))
    except UpstreamError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return StreamingResponse(
        relay.events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )

@router.post('/api/conversations/{conversation_id}/auto-title', response_model=ConversationResponse)
async def auto_title(conversation_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    conversation = get_conversation_or_404(db, conversation_id)
    if not conversation.messages:
        raise HTTPException(status_code=400, detail="Conversation has no messages")

    conversation.title = await generate_ai_title(conversation.messages)
    db.commit()
    db.refresh(conversation)
    return conversation
