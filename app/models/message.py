from sqlalchemy import Column, Integer, String, ForeignKey, Text, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

class Message(Base):
    __tablename__ = 'messages'

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(Integer, ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False)
    role = Column(String, nullable=False)  # MessageRole value
    content = Column(Text, nullable=False)
    attachments = Column(JSON, nullable=True)
    usage = Column(JSON, nullable=True)  # token counts reported by the provider
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    conversation = relationship('Conversation', back_populates='messages')
