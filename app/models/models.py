from app.database import Base




from app.models.user import User
from app.models.agent import Agent
from app.models.task import Task
from app.models.knowledge import KnowledgeDoc
from app.models.project import Project, ProjectFile
from app.models.conversation import Conversation
from app.models.message import Message
from app.models.settings import ProviderSetting, UserPreference
from app.models.skill import Skill, OutputTemplate
from app.models.marketplace import MarketplaceCategory, MarketplaceAgent, MarketplaceInstall, MarketplaceRating
