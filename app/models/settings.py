from sqlalchemy import Boolean, Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func

from app.database import Base


class ProviderSetting(Base):
    __tablename__ = "provider_settings"

    id = Column(Integer, primary_key=True)
    provider = Column(String, unique=True, nullable=False)
    api_key = Column(String, nullable=True)  # Fernet token, never the plain key
    is_active = Column(Boolean, default=False)
    last_tested = Column(DateTime, nullable=True)
    status = Column(String, default="unconfigured")  # unconfigured, configured, connected, error
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)


class UserPreference(Base):
    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True)
    key = Column(String, unique=True, nullable=False)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
