# utils/hashing.py
from passlib.context import CryptContext

# pbkdf2_sha256 is pure python; no native bcrypt build needed
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(plain_password, password_hash)
    except ValueError:
        # Unrecognised or malformed hash in the store
        return False
