from sqlalchemy import Column, Integer, String, DateTime, JSON, Text
from sqlalchemy.sql import func
from app.database import Base

class KnowledgeDoc(Base):
    __tablename__ = 'knowledge_docs'

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String, default='general')
    tags = Column(JSON, nullable=True)  # list of strings
    embedding = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
