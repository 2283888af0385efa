import secrets
from hashlib import sha256
from hmac import compare_digest


def generate_salt() -> str:
    return secrets.token_hex(16)


def hash_password(raw: str, salt: str) -> str:
    return sha256(f"{salt}{raw}".encode("utf-8")).hexdigest()


def verify_password(raw: str, hashed: str, salt: str) -> bool:
    return compare_digest(hashed, hash_password(raw, salt))


def issue_token() -> str:
    return secrets.token_urlsafe(32)
