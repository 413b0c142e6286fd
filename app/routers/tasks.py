from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.enums import TaskPriority, TaskStatus
from app.models.models import Agent, Task
from app.utils.auth import auth_dependency

router = APIRouter(tags=["tasks"])


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    status: TaskStatus = TaskStatus.PENDING
    agent_id: Optional[int] = None
    result: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    status: Optional[TaskStatus] = None
    agent_id: Optional[int] = None
    result: Optional[str] = None
    priority: Optional[TaskPriority] = None


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str
    status: str
    agent_id: Optional[int]
    result: Optional[str]
    priority: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


def _check_agent(db: Session, agent_id: Optional[int]):
    if agent_id is not None and not db.get(Agent, agent_id):
        raise HTTPException(status_code=400, detail="Agent does not exist")


@router.get('/api/tasks', response_model=list[TaskResponse])
def list_tasks(
    agent_id: Optional[int] = Query(default=None, alias="agentId"),
    status: Optional[TaskStatus] = None,
    db: Session = Depends(get_db),
    user = Depends(auth_dependency),
):
    query = db.query(Task)
    if agent_id:
        query = query.filter(Task.agent_id == agent_id)
    if status:
        query = query.filter(Task.status == status.value)
    return query.order_by(Task.created_at.desc(), Task.id.desc()).all()


@router.post('/api/tasks', response_model=TaskResponse, status_code=201)
def create_task(task: TaskCreate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    _check_agent(db, task.agent_id)
    new_task = Task(**task.model_dump(mode="json"))
    db.add(new_task)
    db.commit()
    db.refresh(new_task)
    return new_task


@router.patch('/api/tasks/{task_id}', response_model=TaskResponse)
def update_task(task_id: int, task: TaskUpdate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    existing = db.get(Task, task_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Task not found")

    updates = task.model_dump(mode="json", exclude_unset=True)
    _check_agent(db, updates.get("agent_id"))
    for key, value in updates.items():
        setattr(existing, key, value)
    existing.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(existing)
    return existing
