from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.models import KnowledgeDoc
from app.utils.auth import auth_dependency

router = APIRouter(tags=["knowledge"])


class KnowledgeDocCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: str = "general"
    tags: Optional[List[str]] = None


class KnowledgeDocResponse(BaseModel):
    id: int
    title: str
    content: str
    category: Optional[str]
    tags: Optional[List[str]]
    created_at: datetime

    class Config:
        from_attributes = True


@router.get('/api/knowledge', response_model=list[KnowledgeDocResponse])
def list_knowledge(db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return db.query(KnowledgeDoc).order_by(KnowledgeDoc.id).all()


@router.post('/api/knowledge', response_model=KnowledgeDocResponse, status_code=201)
def create_knowledge_doc(doc: KnowledgeDocCreate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    new_doc = KnowledgeDoc(**doc.model_dump())
    db.add(new_doc)
    db.commit()
    db.refresh(new_doc)
    return new_doc
