import logging
import uuid
from datetime import datetime
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.database import DEBUG, get_db, get_settings
from app.models.models import User
from app.utils.auth import SESSION_COOKIE, auth_dependency, security, session_token
from app.utils.encrypt import hash_password, verify_password
from app.utils.http import get_http_client
from app.utils.jwtman import jwt_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


class LoginParams(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=200)

class RegisterParams(LoginParams):
    password: str = Field(min_length=8, max_length=200)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)

class UserResponse(BaseModel):
    id: str
    email: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    profile_image_url: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


def set_session_cookie(response: Response, user: User):
    token = jwt_manager.issue_token(user_id=user.id)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=jwt_manager.expiration_minutes * 60,
        httponly=True,
        secure=not DEBUG,
        samesite="lax",
    )


def upsert_user(db: Session, profile: dict) -> User:
    user_id = str(profile.get("sub") or profile.get("id") or "")
    if not user_id:
        raise HTTPException(status_code=502, detail="Identity provider returned no user id")
    user = db.get(User, user_id)
    if user is None:
        user = User(id=user_id)
        db.add(user)
    user.email = profile.get("email") or user.email
    user.first_name = profile.get("first_name") or profile.get("given_name") or user.first_name
    user.last_name = profile.get("last_name") or profile.get("family_name") or user.last_name
    user.profile_image_url = profile.get("profile_image_url") or profile.get("picture") or user.profile_image_url
    db.commit()
    db.refresh(user)
    return user


# Route to start the OAuth login
@router.get('/api/auth/login')
def oauth_login(redirect: str = "/"):
    settings = get_settings()
    if not settings.OAUTH_AUTHORIZE_URL or not settings.OAUTH_CLIENT_ID:
        raise HTTPException(status_code=500, detail="OAuth is not configured")
    if not redirect.startswith("/"):
        redirect = "/"
    query = urlencode({
        "response_type": "code",
        "client_id": settings.OAUTH_CLIENT_ID,
        "redirect_uri": settings.OAUTH_REDIRECT_URI,
        "scope": "openid email profile",
        "state": jwt_manager.issue_state(redirect),
    })
    return RedirectResponse(f"{settings.OAUTH_AUTHORIZE_URL}?{query}", status_code=302)

# Route for the OAuth provider to return to
@router.get('/api/auth/callback')
async def oauth_callback(
    code: str,
    state: str,
    db: Session = Depends(get_db),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    settings = get_settings()
    claims = jwt_manager.validate_state(state)
    try:
        token_response = await http_client.post(settings.OAUTH_TOKEN_URL, data={
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": settings.OAUTH_REDIRECT_URI,
            "client_id": settings.OAUTH_CLIENT_ID,
            "client_secret": settings.OAUTH_CLIENT_SECRET,
        })
        token_response.raise_for_status()
        access_token = token_response.json()["access_token"]

        profile_response = await http_client.get(
            settings.OAUTH_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
        )
        profile_response.raise_for_status()
        profile = profile_response.json()
    except (httpx.HTTPError, KeyError, ValueError) as e:
        logger.error("OAuth code exchange failed: %s", e)
        raise HTTPException(status_code=502, detail="Login with the identity provider failed")

    user = upsert_user(db, profile)
    logger.info("User %s signed in through OAuth", user.id)
    response = RedirectResponse(claims.get("redirect") or "/", status_code=302)
    set_session_cookie(response, user)
    return response

@router.post('/api/auth/register', response_model=UserResponse, status_code=201)
def register(params: RegisterParams, response: Response, db: Session = Depends(get_db)):
    email = params.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="Email is already registered")
    user = User(
        id=str(uuid.uuid4()),
        email=email,
        first_name=params.first_name,
        last_name=params.last_name,
        hashed_password=hash_password(params.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    set_session_cookie(response, user)
    return user

@router.post('/api/auth/login', response_model=UserResponse, responses={401: {'description': 'Incorrect email/password'}})
def login(params: LoginParams, response: Response, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == params.email.strip().lower()).first()
    if not user or not verify_password(params.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Incorrect email/password")
    set_session_cookie(response, user)
    return user

@router.get('/api/auth/user', response_model=UserResponse)
def current_user(user = Depends(auth_dependency)):
    return user

@router.get('/api/logout')
def logout(request: Request, credentials = Depends(security)):
    token = session_token(request, credentials)
    if token:
        jwt_manager.blacklist_token(token)
    response = RedirectResponse("/", status_code=302)
    response.delete_cookie(SESSION_COOKIE)
    return response
