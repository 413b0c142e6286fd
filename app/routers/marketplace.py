import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.models import (
    MarketplaceAgent,
    MarketplaceCategory,
    MarketplaceInstall,
    MarketplaceRating,
    Skill,
)
from app.utils.auth import auth_dependency

logger = logging.getLogger(__name__)

router = APIRouter(tags=["marketplace"])

SORT_COLUMNS = {
    "downloads": MarketplaceAgent.downloads_count,
    "rating": MarketplaceAgent.rating_avg,
    "newest": MarketplaceAgent.created_at,
}


class CategoryResponse(BaseModel):
    id: int
    name: str
    name_en: str
    icon: Optional[str]
    sort_order: int

    class Config:
        from_attributes = True

class MarketplaceAgentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    name_en: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    icon: Optional[str] = None
    category: Optional[str] = None
    system_prompt: Optional[str] = Field(default=None, max_length=50_000)
    tools: List[str] = []
    tags: Optional[List[str]] = None
    price_type: Literal["free", "premium"] = "free"
    price: Decimal = Decimal("0")
    is_published: bool = False
    is_featured: bool = False
    version: str = "1.0"
    screenshots: List[str] = []

class MarketplaceAgentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    name_en: Optional[str] = None
    description: Optional[str] = None
    description_en: Optional[str] = None
    icon: Optional[str] = None
    category: Optional[str] = None
    system_prompt: Optional[str] = Field(default=None, max_length=50_000)
    tools: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    price_type: Optional[Literal["free", "premium"]] = None
    price: Optional[Decimal] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None
    version: Optional[str] = None
    screenshots: Optional[List[str]] = None

class MarketplaceAgentResponse(BaseModel):
    id: int
    creator_id: Optional[str]
    name: str
    name_en: Optional[str]
    description: Optional[str]
    description_en: Optional[str]
    icon: Optional[str]
    category: Optional[str]
    system_prompt: Optional[str]
    tools: Optional[List[str]]
    tags: Optional[List[str]]
    price_type: str
    price: Decimal
    downloads_count: int
    rating_avg: float
    ratings_count: int
    is_published: bool
    is_featured: bool
    version: str
    screenshots: Optional[List[str]]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class InstallResponse(BaseModel):
    id: int
    user_id: str
    marketplace_agent_id: int
    installed_at: datetime
    is_active: bool
    agent: Optional[MarketplaceAgentResponse]

    class Config:
        from_attributes = True

class RatingCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    review: Optional[str] = Field(default=None, max_length=5000)

class RatingResponse(BaseModel):
    id: int
    user_id: str
    marketplace_agent_id: int
    rating: int
    review: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


def get_agent_or_404(db: Session, agent_id: int) -> MarketplaceAgent:
    agent = db.get(MarketplaceAgent, agent_id)
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")
    return agent


def get_own_agent(db: Session, agent_id: int, user) -> MarketplaceAgent:
    agent = get_agent_or_404(db, agent_id)
    if agent.creator_id != user.id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return agent


def list_published(db: Session, search: Optional[str] = None, category: Optional[str] = None,
                   sort: Optional[str] = None, featured: bool = False):
    query = db.query(MarketplaceAgent).filter(MarketplaceAgent.is_published.is_(True))
    if category:
        query = query.filter(MarketplaceAgent.category == category)
    if featured:
        query = query.filter(MarketplaceAgent.is_featured.is_(True))
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            MarketplaceAgent.name.ilike(pattern),
            MarketplaceAgent.name_en.ilike(pattern),
            MarketplaceAgent.description.ilike(pattern),
            MarketplaceAgent.description_en.ilike(pattern),
            cast(MarketplaceAgent.tags, String).ilike(f'%"{search}"%'),
        ))
    order = SORT_COLUMNS.get(sort, MarketplaceAgent.downloads_count)
    return query.order_by(order.desc(), MarketplaceAgent.id.desc()).all()


def recompute_rating(db: Session, agent: MarketplaceAgent):
    count, avg = (
        db.query(func.count(MarketplaceRating.id), func.avg(MarketplaceRating.rating))
        .filter(MarketplaceRating.marketplace_agent_id == agent.id)
        .one()
    )
    agent.ratings_count = count
    agent.rating_avg = float(avg or 0)


@router.get('/api/marketplace/categories', response_model=list[CategoryResponse])
def get_categories(db: Session = Depends(get_db)):
    return db.query(MarketplaceCategory).order_by(MarketplaceCategory.sort_order).all()

@router.get('/api/marketplace/featured', response_model=list[MarketplaceAgentResponse])
def get_featured(db: Session = Depends(get_db)):
    return list_published(db, featured=True)

@router.get('/api/marketplace/installed', response_model=list[InstallResponse])
def get_installed(db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return db.query(MarketplaceInstall).filter(MarketplaceInstall.user_id == user.id).all()

@router.get('/api/marketplace/my-agents', response_model=list[MarketplaceAgentResponse])
def get_my_agents(db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return (
        db.query(MarketplaceAgent)
        .filter(MarketplaceAgent.creator_id == user.id)
        .order_by(MarketplaceAgent.created_at.desc(), MarketplaceAgent.id.desc())
        .all()
    )

@router.get('/api/marketplace/{agent_id}', response_model=MarketplaceAgentResponse)
def get_marketplace_agent(agent_id: int, db: Session = Depends(get_db)):
    return get_agent_or_404(db, agent_id)

@router.get('/api/marketplace/{agent_id}/ratings', response_model=list[RatingResponse])
def get_ratings(agent_id: int, db: Session = Depends(get_db)):
    return (
        db.query(MarketplaceRating)
        .filter(MarketplaceRating.marketplace_agent_id == agent_id)
        .order_by(MarketplaceRating.created_at.desc(), MarketplaceRating.id.desc())
        .all()
    )

# Route to browse published agents
@router.get('/api/marketplace', response_model=list[MarketplaceAgentResponse])
def browse(search: Optional[str] = None, category: Optional[str] = None,
           sort: Optional[str] = None, db: Session = Depends(get_db)):
    return list_published(db, search=search, category=category, sort=sort)

@router.post('/api/marketplace', response_model=MarketplaceAgentResponse, status_code=201)
def publish_agent(params: MarketplaceAgentCreate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    agent = MarketplaceAgent(creator_id=user.id, **params.model_dump())
    db.add(agent)
    db.commit()
    db.refresh(agent)
    return agent

@router.put('/api/marketplace/{agent_id}', response_model=MarketplaceAgentResponse)
def update_marketplace_agent(agent_id: int, params: MarketplaceAgentUpdate,
                             db: Session = Depends(get_db), user = Depends(auth_dependency)):
    agent = get_own_agent(db, agent_id, user)
    for key, value in params.model_dump(exclude_unset=True).items():
        setattr(agent, key, value)
    db.commit()
    db.refresh(agent)
    return agent

@router.delete('/api/marketplace/{agent_id}')
def delete_marketplace_agent(agent_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    agent = get_own_agent(db, agent_id, user)
    # installs and ratings go with it through the relationship cascade
    db.delete(agent)
    db.commit()
    return {"success": True}

# Route to install an agent as a skill
@router.post('/api/marketplace/{agent_id}/install')
def install(agent_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    existing = (
        db.query(MarketplaceInstall)
        .filter(MarketplaceInstall.user_id == user.id, MarketplaceInstall.marketplace_agent_id == agent_id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=400, detail="Already installed")
    agent = get_agent_or_404(db, agent_id)

    db.add(MarketplaceInstall(user_id=user.id, marketplace_agent_id=agent.id, is_active=True))
    agent.downloads_count = MarketplaceAgent.downloads_count + 1
    db.add(Skill(
        user_id=user.id,
        name=agent.name,
        description=agent.description,
        icon=agent.icon,
        system_prompt=agent.system_prompt,
        tools=agent.tools or [],
        is_default=False,
        is_active=True,
    ))
    db.commit()
    logger.info("User %s installed marketplace agent %s", user.id, agent.id)
    return {"success": True}

@router.delete('/api/marketplace/{agent_id}/install')
def uninstall(agent_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    (
        db.query(MarketplaceInstall)
        .filter(MarketplaceInstall.user_id == user.id, MarketplaceInstall.marketplace_agent_id == agent_id)
        .delete()
    )
    db.commit()
    return {"success": True}

@router.post('/api/marketplace/{agent_id}/rate', response_model=RatingResponse)
def rate(agent_id: int, params: RatingCreate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    agent = get_agent_or_404(db, agent_id)
    existing = (
        db.query(MarketplaceRating)
        .filter(MarketplaceRating.user_id == user.id, MarketplaceRating.marketplace_agent_id == agent_id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=400, detail="Already rated")

    rating = MarketplaceRating(
        user_id=user.id,
        marketplace_agent_id=agent_id,
        rating=params.rating,
        review=params.review or None,
    )
    db.add(rating)
    db.flush()
    recompute_rating(db, agent)
    db.commit()
    db.refresh(rating)
    return rating
