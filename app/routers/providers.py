import logging
from datetime import datetime
from typing import Dict, Optional

import httpx
from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.enums import Provider
from app.models.models import ProviderSetting, UserPreference
from app.streaming.upstream import ANTHROPIC_VERSION
from app.utils.auth import auth_dependency
from app.utils.config import SYSTEM_INSTRUCTIONS_KEY
from app.utils.encrypt import decrypt, encrypt, mask_api_key
from app.utils.http import get_http_client
from app.utils.providers import PROVIDER_TEST_ENDPOINTS, STATIC_MODELS, get_provider_setting

logger = logging.getLogger(__name__)

router = APIRouter(tags=["providers"])

OPENROUTER_MODEL_LIMIT = 100


class ApiKeyParams(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    api_key: str = Field(min_length=1, max_length=500)

class ProviderStatus(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    provider: str
    configured: bool
    is_active: bool
    status: str
    last_tested: Optional[datetime] = None
    masked_key: Optional[str] = None

class SystemInstructions(BaseModel):
    instructions: str = Field(max_length=50_000)


def provider_or_404(provider: str) -> Provider:
    try:
        return Provider(provider)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown provider {provider}")


def provider_status(provider: Provider, setting: Optional[ProviderSetting]) -> dict:
    configured = bool(setting and setting.api_key)
    return ProviderStatus(
        provider=provider.value,
        configured=configured,
        is_active=bool(setting and setting.is_active),
        status=setting.status if setting else "unconfigured",
        last_tested=setting.last_tested if setting else None,
        masked_key=mask_api_key(decrypt(setting.api_key)) if configured else None,
    ).model_dump(by_alias=True)


def set_preference(db: Session, key: str, value: str):
    preference = db.query(UserPreference).filter(UserPreference.key == key).first()
    if preference is None:
        db.add(UserPreference(key=key, value=value))
    else:
        preference.value = value


async def check_connection(client: httpx.AsyncClient, provider: Provider, api_key: str):
    """Returns ``(success, error)`` for a cheap authenticated request."""
    endpoint = PROVIDER_TEST_ENDPOINTS.get(provider)
    if endpoint is None:
        return True, None
    try:
        if provider == Provider.ANTHROPIC:
            response = await client.post(
                endpoint["url"],
                headers={"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION},
                json={"model": "claude-3.5-haiku-20241022", "max_tokens": 1,
                      "messages": [{"role": "user", "content": "hi"}]},
            )
            # rate limited still means the key was accepted
            success = response.is_success or response.status_code == 429
        else:
            response = await client.get(endpoint["url"], headers={"Authorization": f"Bearer {api_key}"})
            success = response.is_success
    except httpx.HTTPError as e:
        return False, str(e) or "Connection failed"
    return success, None if success else f"HTTP {response.status_code}"


async def openrouter_models(client: httpx.AsyncClient, api_key: str):
    try:
        response = await client.get(
            PROVIDER_TEST_ENDPOINTS[Provider.OPENROUTER]["url"],
            headers={"Authorization": f"Bearer {api_key}"},
        )
        response.raise_for_status()
        data = response.json().get("data") or []
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Error fetching OpenRouter models: %s", e)
        return []
    models = [m for m in data if m.get("id") and m.get("name")][:OPENROUTER_MODEL_LIMIT]
    return [
        {
            "id": f"openrouter/{m['id']}",
            "name": m["name"],
            "provider": Provider.OPENROUTER.value,
            "providerId": m["id"],
            "contextLength": m.get("context_length"),
        }
        for m in models
    ]


@router.get('/api/providers')
def get_providers(db: Session = Depends(get_db), user = Depends(auth_dependency)):
    settings = {s.provider: s for s in db.query(ProviderSetting).all()}
    return [provider_status(p, settings.get(p.value)) for p in Provider]

@router.get('/api/providers/models')
async def get_models(
    db: Session = Depends(get_db),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    user = Depends(auth_dependency),
):
    models = list(STATIC_MODELS[Provider.GOOGLE])
    for setting in db.query(ProviderSetting).order_by(ProviderSetting.id).all():
        if not setting.api_key or not setting.is_active:
            continue
        if setting.provider == Provider.OPENROUTER.value:
            models.extend(await openrouter_models(http_client, decrypt(setting.api_key)))
        elif setting.provider in (Provider.OPENAI.value, Provider.ANTHROPIC.value):
            models.extend(STATIC_MODELS[Provider(setting.provider)])
    return models

# Route to store a provider API key
@router.post('/api/providers/{provider}/key')
def save_key(provider: str, params: ApiKeyParams, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    provider = provider_or_404(provider)
    setting = get_provider_setting(db, provider)
    if setting is None:
        setting = ProviderSetting(provider=provider.value)
        db.add(setting)
    setting.api_key = encrypt(params.api_key)
    setting.is_active = True
    setting.status = "configured"
    db.commit()
    db.refresh(setting)
    logger.info("API key stored for %s", provider.value)
    return provider_status(provider, setting)

@router.delete('/api/providers/{provider}/key')
def delete_key(provider: str, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    provider = provider_or_404(provider)
    setting = get_provider_setting(db, provider)
    if setting is not None:
        db.delete(setting)
        db.commit()
    return {"success": True}

@router.post('/api/providers/{provider}/test')
async def run_provider_test(
    provider: str,
    db: Session = Depends(get_db),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    user = Depends(auth_dependency),
):
    provider = provider_or_404(provider)
    setting = get_provider_setting(db, provider)
    if setting is None or not setting.api_key:
        return {"success": False, "error": "API key not configured"}

    success, error = await check_connection(http_client, provider, decrypt(setting.api_key))
    setting.status = "connected" if success else "error"
    setting.last_tested = datetime.now()
    db.commit()
    if not success:
        logger.warning("Connection test for %s failed: %s", provider.value, error)
    return {"success": success, "error": error}


@router.get('/api/preferences')
def get_preferences(db: Session = Depends(get_db), user = Depends(auth_dependency)) -> Dict[str, str]:
    return {p.key: p.value for p in db.query(UserPreference).all()}

@router.post('/api/preferences')
def save_preferences(updates: Dict[str, str] = Body(...), db: Session = Depends(get_db), user = Depends(auth_dependency)):
    for key, value in updates.items():
        set_preference(db, key, value)
    db.commit()
    return {"success": True}

@router.get('/api/system-instructions')
def get_system_instructions(db: Session = Depends(get_db), user = Depends(auth_dependency)):
    preference = db.query(UserPreference).filter(UserPreference.key == SYSTEM_INSTRUCTIONS_KEY).first()
    return {"instructions": preference.value if preference else ""}

@router.post('/api/system-instructions')
def save_system_instructions(params: SystemInstructions, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    set_preference(db, SYSTEM_INSTRUCTIONS_KEY, params.instructions)
    db.commit()
    return {"success": True}
