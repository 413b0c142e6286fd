import jwt
import time
from typing import Dict, Optional
from fastapi import HTTPException

from app.database import get_settings

class JWTManager:
    def __init__(self, secret_key: str, algorithm: str = "HS256", expiration_minutes: int = 30):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expiration_minutes = expiration_minutes
        self.blacklist = set()

    def issue_token(self, user_id: str, additional_claims: Optional[Dict] = None, expiration_minutes: Optional[int] = None) -> str:
        minutes = expiration_minutes if expiration_minutes is not None else self.expiration_minutes
        payload = {
            "sub": user_id,
            "exp": time.time() + minutes * 60,
            "iat": time.time(),
        }
        if additional_claims:
            payload.update(additional_claims)

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return token

    def issue_state(self, redirect_to: str = "/") -> str:
        """Signed, short-lived OAuth ``state`` value."""
        return self.issue_token("oauth-state", {"purpose": "oauth_state", "redirect": redirect_to}, expiration_minutes=10)

    def validate_state(self, state: str) -> Dict:
        decoded = self.validate_token(state)
        if decoded.get("purpose") != "oauth_state":
            raise HTTPException(status_code=400, detail="Invalid OAuth state")
        return decoded

    def blacklist_token(self, token: str):
        self.blacklist.add(token)

    def validate_token(self, token: str) -> Dict:
        try:
            decoded = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            if token in self.blacklist:
                raise HTTPException(status_code=401, detail="Session has ended")
            return decoded
        except jwt.ExpiredSignatureError:
            raise HTTPException(status_code=401, detail="Session has expired")
        except jwt.InvalidTokenError:
            raise HTTPException(status_code=401, detail="Unauthorized")

    def is_blacklisted(self, token: str) -> bool:
        return token in self.blacklist

jwt_manager = JWTManager(
    secret_key=get_settings().SESSION_SECRET,
    expiration_minutes=get_settings().SESSION_TTL_MINUTES,
)
