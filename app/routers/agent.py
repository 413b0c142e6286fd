from datetime import datetime
from typing import Any, Dict, Optional

from app.utils.auth import auth_dependency
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from app.database import get_db
from app.models.enums import AgentIcon, AgentRole
from app.models.models import Agent

router = APIRouter(tags=["agents"])

# Models for incoming data
class AgentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    role: AgentRole
    description: str = Field(min_length=1)
    avatar: Optional[str] = None
    is_active: bool = True
    config: Optional[Dict[str, Any]] = None

class AgentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    role: Optional[AgentRole] = None
    description: Optional[str] = Field(default=None, min_length=1)
    avatar: Optional[str] = None
    is_active: Optional[bool] = None
    config: Optional[Dict[str, Any]] = None

class AgentResponse(BaseModel):
    id: int
    name: str
    role: str
    role_label: str
    icon: AgentIcon
    description: str
    avatar: Optional[str]
    is_active: Optional[bool]
    config: Optional[Dict[str, Any]]
    created_at: datetime

    class Config:
        from_attributes = True  # This allows SQLAlchemy models to be converted to Pydantic models

# Route to get all agents
@router.get('/api/agents', response_model=list[AgentResponse])
def get_all_agents(db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return db.query(Agent).order_by(Agent.id).all()

# Route to retrieve an agent by ID
@router.get('/api/agents/{agent_id}', response_model=AgentResponse)
def get_agent(agent_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    agent = db.query(Agent).filter_by(id=agent_id).first()
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")

    return agent

# Route to create an agent
@router.post('/api/agents', response_model=AgentResponse, status_code=201)
def create_agent(agent: AgentCreate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    new_agent = Agent(**agent.model_dump(mode="json"))
    db.add(new_agent)
    db.commit()
    db.refresh(new_agent)

    return new_agent

# Route to update an agent
@router.put('/api/agents/{agent_id}', response_model=AgentResponse)
def update_agent(agent_id: int, agent: AgentUpdate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    existing_agent = db.query(Agent).filter_by(id=agent_id).first()
    if not existing_agent:
        raise HTTPException(status_code=404, detail="Agent not found")

    for key, value in agent.model_dump(mode="json", exclude_unset=True).items():
        setattr(existing_agent, key, value)
    db.commit()
    db.refresh(existing_agent)

    return existing_agent
