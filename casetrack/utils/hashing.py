# casetrack/utils/hashing.py
from functools import lru_cache

from passlib.context import CryptContext

# Cost factor 10 keeps a hash around 100ms on server hardware
DEFAULT_ROUNDS = 10


@lru_cache()
def get_password_context(rounds: int = DEFAULT_ROUNDS) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def get_password_hash(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    return get_password_context(rounds).hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # The cost factor is read back from the stored hash
    return get_password_context().verify(plain_password, hashed_password)


def dummy_verify(rounds: int = DEFAULT_ROUNDS) -> None:
    """Burn the time of one verification so unknown usernames cost the same as wrong passwords."""
    get_password_context(rounds).dummy_verify()
