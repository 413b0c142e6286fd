import enum


class AgentRole(str, enum.Enum):
    HR = "hr"
    SALES = "sales"
    TECH_SUPPORT = "tech_support"
    FORMATION_ADVISOR = "formation_advisor"
    CONTRACT_ANALYZER = "contract_analyzer"
    CONTENT_WRITER = "content_writer"
    FINANCE_ASSISTANT = "finance_assistant"
    TEAM_COACH = "team_coach"
    DATA_ANALYST = "data_analyst"

    @property
    def label(self) -> str:
        return _ROLE_LABELS[self]


_ROLE_LABELS = {
    AgentRole.HR: "Human Resources",
    AgentRole.SALES: "Sales",
    AgentRole.TECH_SUPPORT: "Technical Support",
    AgentRole.FORMATION_ADVISOR: "Formation Advisor",
    AgentRole.CONTRACT_ANALYZER: "Contract Analyzer",
    AgentRole.CONTENT_WRITER: "Content Writer",
    AgentRole.FINANCE_ASSISTANT: "Finance Assistant",
    AgentRole.TEAM_COACH: "Team Coach",
    AgentRole.DATA_ANALYST: "Data Analyst",
}


class AgentIcon(str, enum.Enum):
    BOT = "Bot"
    BUILDING = "Building2"
    FILE_SEARCH = "FileSearch"
    PEN_TOOL = "PenTool"
    CALCULATOR = "Calculator"
    USERS = "Users"
    BAR_CHART = "BarChart3"

    @classmethod
    def from_name(cls, name):
        """Resolve a stored icon name, falling back to BOT for unknown names."""
        try:
            return cls(name)
        except ValueError:
            return cls.BOT


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MessageRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

    @classmethod
    def normalize(cls, role: str) -> "MessageRole":
        # Gemini history uses "model" for assistant turns
        if role == "model":
            return cls.ASSISTANT
        return cls(role)


class Provider(str, enum.Enum):
    OPENROUTER = "openrouter"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    OLLAMA = "ollama"
