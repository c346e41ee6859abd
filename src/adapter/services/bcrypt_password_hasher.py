import bcrypt

from src.app.services.password_hasher import (
    MAX_PASSWORD_BYTES,
    IPasswordHasher,
    UnhashablePasswordError,
)


class BcryptPasswordHasher(IPasswordHasher):
    """bcrypt-backed digest capability (cost factor configurable, default 12)"""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_hash = bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(rounds))

    def hash(self, password: str) -> str:
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise UnhashablePasswordError(f"Password exceeds {MAX_PASSWORD_BYTES} bytes")
        try:
            return bcrypt.hashpw(encoded, bcrypt.gensalt(self.rounds)).decode("utf-8")
        except ValueError as exc:
            raise UnhashablePasswordError(str(exc)) from exc

    def verify(self, password: str, password_hash: str) -> bool:
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            # Nothing this long was ever hashed; burn the same time and fail
            self.dummy_verify(password)
            return False
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash never authenticates
            return False

    def dummy_verify(self, password: str) -> None:
        try:
            bcrypt.checkpw(password.encode("utf-8")[:MAX_PASSWORD_BYTES], self._dummy_hash)
        except ValueError:
            pass
