from passlib.context import CryptContext

from config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

MAX_BCRYPT_BYTES = 72


def hash_password(password: str) -> str:
    data = password.encode("utf-8")
    if len(data) > MAX_BCRYPT_BYTES:
        # bcrypt would silently truncate the rest
        raise ValueError("Password is too long for bcrypt (max 72 bytes when UTF-8 encoded)")
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    if len(plain.encode("utf-8")) > MAX_BCRYPT_BYTES:
        # never hashed in the first place, see hash_password()
        return False
    return pwd_context.verify(plain, hashed)
