from sqlalchemy import Column, ForeignKey, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base

class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    system_prompt = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    files = relationship("ProjectFile", back_populates="project", cascade="all, delete-orphan")
    conversations = relationship("Conversation", back_populates="project")


class ProjectFile(Base):
    __tablename__ = "project_files"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)  # original filename
    path = Column(String, nullable=False)  # stored name, local relative path or s3:// url
    type = Column(String, nullable=False)  # file category
    size = Column(Integer, nullable=False)  # File size in bytes
    uploaded_at = Column(DateTime, default=func.now(), nullable=False)

    project = relationship("Project", back_populates="files")
