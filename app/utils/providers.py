from typing import Optional

from sqlalchemy.orm import Session

from app.database import get_settings
from app.models.enums import Provider
from app.models.models import ProviderSetting
from app.utils.encrypt import decrypt

PROVIDER_TEST_ENDPOINTS = {
    Provider.OPENROUTER: {"url": "https://openrouter.ai/api/v1/models", "method": "GET"},
    Provider.OPENAI: {"url": "https://api.openai.com/v1/models", "method": "GET"},
    Provider.ANTHROPIC: {"url": "https://api.anthropic.com/v1/messages", "method": "POST"},
}

STATIC_MODELS = {
    Provider.OPENAI: [
        {"id": "gpt-4o", "name": "GPT-4o", "provider": "openai", "vision": True, "tools": True},
        {"id": "gpt-4o-mini", "name": "GPT-4o Mini", "provider": "openai", "vision": True, "tools": True},
        {"id": "gpt-4-turbo", "name": "GPT-4 Turbo", "provider": "openai", "vision": True, "tools": True},
        {"id": "o1-preview", "name": "o1 Preview", "provider": "openai"},
        {"id": "o1-mini", "name": "o1 Mini", "provider": "openai"},
    ],
    Provider.ANTHROPIC: [
        {"id": "claude-4-opus-20250514", "name": "Claude 4 Opus", "provider": "anthropic", "vision": True, "tools": True},
        {"id": "claude-4-sonnet-20250514", "name": "Claude 4 Sonnet", "provider": "anthropic", "vision": True, "tools": True},
        {"id": "claude-3.5-sonnet-20241022", "name": "Claude 3.5 Sonnet", "provider": "anthropic", "vision": True, "tools": True},
        {"id": "claude-3.5-haiku-20241022", "name": "Claude 3.5 Haiku", "provider": "anthropic", "tools": True},
    ],
    Provider.GOOGLE: [
        {"id": "gemini-2.5-flash", "name": "Gemini 2.5 Flash", "provider": "google", "vision": True, "tools": True},
        {"id": "gemini-2.5-pro", "name": "Gemini 2.5 Pro", "provider": "google", "vision": True, "tools": True},
    ],
}


def get_provider_setting(db: Session, provider: Provider) -> Optional[ProviderSetting]:
    return db.query(ProviderSetting).filter(ProviderSetting.provider == provider.value).first()


def get_provider_api_key(db: Session, provider: Provider) -> Optional[str]:
    """Plain API key for a provider; Google falls back to the environment key."""
    setting = get_provider_setting(db, provider)
    if setting and setting.api_key:
        return decrypt(setting.api_key)
    if provider == Provider.GOOGLE:
        return get_settings().GEMINI_API_KEY or None
    return None
