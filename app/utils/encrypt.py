import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken
from passlib.context import CryptContext

from app.database import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(password, hashed_password)


def _fernet() -> Fernet:
    digest = hashlib.sha256(get_settings().SESSION_SECRET.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt(text: str) -> str:
    return _fernet().encrypt(text.encode()).decode()


def decrypt(token: str) -> str:
    try:
        return _fernet().decrypt(token.encode()).decode()
    except InvalidToken:
        # keys stored before encryption was enabled are kept as plain text
        return token


def mask_api_key(key: str) -> str:
    if not key or len(key) < 8:
        return "••••••••"
    return key[:4] + "••••" + key[-4:]
