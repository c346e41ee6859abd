from abc import ABC, abstractmethod

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class UnhashablePasswordError(ValueError):
    """Plaintext the digest algorithm can't take, e.g. over MAX_PASSWORD_BYTES"""


class IPasswordHasher(ABC):
    """Opaque password digest capability"""

    @abstractmethod
    def hash(self, password: str) -> str:
        """
        Return a salted digest for the plaintext password

        Raises:
            UnhashablePasswordError: password is longer than MAX_PASSWORD_BYTES
                or otherwise rejected by the algorithm
        """
        pass

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time check of a plaintext password against a digest. Never raises."""
        pass

    @abstractmethod
    def dummy_verify(self, password: str) -> None:
        """Spend the same time as verify() when there is no digest to check. Never raises."""
        pass
