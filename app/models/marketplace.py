from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, Numeric, String, DateTime, JSON, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class MarketplaceCategory(Base):
    __tablename__ = "marketplace_categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    name_en = Column(String, nullable=False)
    icon = Column(String, nullable=True)
    sort_order = Column(Integer, default=0)


class MarketplaceAgent(Base):
    __tablename__ = "marketplace_agents"

    id = Column(Integer, primary_key=True)
    creator_id = Column(String, nullable=True)
    name = Column(String, nullable=False)
    name_en = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    description_en = Column(Text, nullable=True)
    icon = Column(String, nullable=True)
    category = Column(String, nullable=True)
    system_prompt = Column(Text, nullable=True)
    tools = Column(JSON, default=list)
    tags = Column(JSON, nullable=True)
    price_type = Column(String, default="free")  # free, premium
    price = Column(Numeric(10, 2), default=0)
    downloads_count = Column(Integer, default=0)
    rating_avg = Column(Float, default=0)
    ratings_count = Column(Integer, default=0)
    is_published = Column(Boolean, default=False)
    is_featured = Column(Boolean, default=False)
    version = Column(String, default="1.0")
    screenshots = Column(JSON, default=list)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    installs = relationship("MarketplaceInstall", back_populates="agent", cascade="all, delete-orphan")
    ratings = relationship("MarketplaceRating", back_populates="agent", cascade="all, delete-orphan")


class MarketplaceInstall(Base):
    __tablename__ = "marketplace_installs"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    marketplace_agent_id = Column(Integer, ForeignKey("marketplace_agents.id"), nullable=False)
    installed_at = Column(DateTime, default=func.now(), nullable=False)
    is_active = Column(Boolean, default=True)

    agent = relationship("MarketplaceAgent", back_populates="installs")


class MarketplaceRating(Base):
    __tablename__ = "marketplace_ratings"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    marketplace_agent_id = Column(Integer, ForeignKey("marketplace_agents.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    review = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    agent = relationship("MarketplaceAgent", back_populates="ratings")
