from sqlalchemy import Boolean, Column, Integer, String, DateTime, JSON, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base
from app.models.enums import AgentIcon, AgentRole

class Agent(Base):
    __tablename__ = 'agents'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    role = Column(String(50), nullable=False)  # AgentRole value
    description = Column(Text, nullable=False)
    avatar = Column(String, nullable=True)  # URL to avatar image
    is_active = Column(Boolean, default=True)
    config = Column(JSON, nullable=True)  # freeform: nameEn, tone, expertise, systemPrompt, icon, color
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    tasks = relationship('Task', back_populates='agent')

    @property
    def role_label(self):
        try:
            return AgentRole(self.role).label
        except ValueError:
            return self.role

    @property
    def icon(self):
        return AgentIcon.from_name((self.config or {}).get('icon'))

    def __repr__(self):
        return f"<Agent(name={self.name}, role={self.role})>"
