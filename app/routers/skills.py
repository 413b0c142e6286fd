from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.models import OutputTemplate, Skill
from app.utils.auth import auth_dependency

router = APIRouter(tags=["skills"])


class SkillCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    icon: Optional[str] = None
    system_prompt: Optional[str] = Field(default=None, max_length=50_000)
    tools: List[str] = []
    color: Optional[str] = None
    is_default: bool = False
    is_active: bool = True

class SkillUpdate(SkillCreate):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    tools: Optional[List[str]] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None

class SkillResponse(BaseModel):
    id: int
    user_id: Optional[str]
    name: str
    description: Optional[str]
    icon: Optional[str]
    system_prompt: Optional[str]
    tools: Optional[List[str]]
    color: Optional[str]
    is_default: bool
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

class TemplateCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    system_prompt: Optional[str] = Field(default=None, max_length=50_000)
    css: Optional[str] = None
    header_html: Optional[str] = None
    footer_html: Optional[str] = None

class TemplateUpdate(TemplateCreate):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)

class TemplateResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    system_prompt: Optional[str]
    css: Optional[str]
    header_html: Optional[str]
    footer_html: Optional[str]
    is_builtin: bool
    created_at: datetime

    class Config:
        from_attributes = True


def get_or_404(db: Session, model, item_id: int, label: str):
    item = db.get(model, item_id)
    if not item:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return item


def apply_updates(db: Session, item, updates: dict):
    for key, value in updates.items():
        setattr(item, key, value)
    db.commit()
    db.refresh(item)
    return item


@router.get('/api/skills', response_model=list[SkillResponse])
def get_skills(db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return db.query(Skill).order_by(Skill.id).all()

@router.get('/api/skills/{skill_id}', response_model=SkillResponse)
def get_skill(skill_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return get_or_404(db, Skill, skill_id, "Skill")

@router.post('/api/skills', response_model=SkillResponse, status_code=201)
def create_skill(params: SkillCreate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    skill = Skill(user_id=user.id, **params.model_dump())
    db.add(skill)
    db.commit()
    db.refresh(skill)
    return skill

@router.put('/api/skills/{skill_id}', response_model=SkillResponse)
def update_skill(skill_id: int, params: SkillUpdate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    skill = get_or_404(db, Skill, skill_id, "Skill")
    return apply_updates(db, skill, params.model_dump(exclude_unset=True))

@router.delete('/api/skills/{skill_id}', status_code=204)
def delete_skill(skill_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    db.delete(get_or_404(db, Skill, skill_id, "Skill"))
    db.commit()
    return Response(status_code=204)


@router.get('/api/output-templates', response_model=list[TemplateResponse])
def get_templates(db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return db.query(OutputTemplate).order_by(OutputTemplate.id).all()

@router.get('/api/output-templates/{template_id}', response_model=TemplateResponse)
def get_template(template_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return get_or_404(db, OutputTemplate, template_id, "Template")

@router.post('/api/output-templates', response_model=TemplateResponse, status_code=201)
def create_template(params: TemplateCreate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    template = OutputTemplate(**params.model_dump())
    db.add(template)
    db.commit()
    db.refresh(template)
    return template

@router.put('/api/output-templates/{template_id}', response_model=TemplateResponse)
def update_template(template_id: int, params: TemplateUpdate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    template = get_or_404(db, OutputTemplate, template_id, "Template")
    return apply_updates(db, template, params.model_dump(exclude_unset=True))

@router.delete('/api/output-templates/{template_id}', status_code=204)
def delete_template(template_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    template = get_or_404(db, OutputTemplate, template_id, "Template")
    if template.is_builtin:
        raise HTTPException(status_code=403, detail="Built-in templates cannot be deleted")
    db.delete(template)
    db.commit()
    return Response(status_code=204)
