from app.utils.jwtman import jwt_manager
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from app.models.models import User
from app.database import get_db


SESSION_COOKIE = "session"

security = HTTPBearer(auto_error=False)

def get_user(db: Session, user_id: str):
    return db.query(User).filter(User.id == user_id).first()

def session_token(request: Request, credentials: HTTPAuthorizationCredentials | None = None):
    """The session token from the cookie, falling back to a bearer header."""
    token = request.cookies.get(SESSION_COOKIE)
    if not token and credentials:
        token = credentials.credentials
    return token

async def auth_dependency(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db)
):
    token = session_token(request, credentials)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    claims = jwt_manager.validate_token(token)
    user = get_user(db, claims['sub'])
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
