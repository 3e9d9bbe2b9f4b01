"""
Password hashing and verification for the account store.

Digests are Argon2id PHC strings computed over an HMAC-SHA256 of the
password keyed with a server secret, so a leaked table alone is not
enough to mount an offline guessing attack. All hashing runs on a
CpuWorkerPool so the event loop is never blocked.
"""

import hashlib
import hmac
import logging
from dataclasses import dataclass, field

from argon2 import PasswordHasher, Type, extract_parameters
from argon2.exceptions import (
    HashingError,
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)

from ..config.settings import Settings
from .exceptions import CredentialFailure, InvalidArgument
from .workers import CpuWorkerPool

logger = logging.getLogger(__name__)


def _is_encodable(password: str) -> bool:
    try:
        password.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


@dataclass(frozen=True)
class HashingConfig:
    """
    Immutable hashing parameters shared by every hashing call.

    Built once at startup and handed to the hasher; the secret never
    appears in repr output.
    """
    secret: bytes = field(repr=False)
    time_cost: int = 2
    memory_cost: int = 19456
    parallelism: int = 1
    hash_len: int = 32
    salt_len: int = 16

    def __post_init__(self):
        if not self.secret:
            raise ValueError("Hashing secret must not be empty")

    @classmethod
    def from_settings(cls, settings: Settings) -> "HashingConfig":
        return cls(
            secret=settings.PASSWORD_HASH_SECRET.encode("utf-8"),
            time_cost=settings.ARGON2_TIME_COST,
            memory_cost=settings.ARGON2_MEMORY_COST,
            parallelism=settings.ARGON2_PARALLELISM,
            hash_len=settings.ARGON2_HASH_LENGTH,
            salt_len=settings.ARGON2_SALT_LENGTH,
        )


class CredentialHasher:
    """
    Keyed Argon2id hasher whose work runs on a CPU worker pool.

    Verification failures are reported as a single CredentialFailure
    regardless of cause; the cause is logged at debug level only.
    """

    def __init__(self, config: HashingConfig, pool: CpuWorkerPool):
        self._config = config
        self._pool = pool
        self._hasher = PasswordHasher(
            time_cost=config.time_cost,
            memory_cost=config.memory_cost,
            parallelism=config.parallelism,
            hash_len=config.hash_len,
            salt_len=config.salt_len,
            type=Type.ID,
        )

    @property
    def config(self) -> HashingConfig:
        return self._config

    @property
    def pool(self) -> CpuWorkerPool:
        return self._pool

    def _key(self, password: str) -> bytes:
        return hmac.new(self._config.secret, password.encode("utf-8"), hashlib.sha256).digest()

    def _hash_sync(self, password: str) -> str:
        # PasswordHasher.hash draws a fresh random salt on every call
        return self._hasher.hash(self._key(password))

    def _verify_sync(self, password: str, digest: str) -> None:
        extract_parameters(digest)
        self._hasher.verify(digest, self._key(password))

    async def hash_password(self, password: str) -> str:
        """
        Hash a password on the worker pool.

        Returns:
            Self-describing PHC string ($argon2id$v=19$m=..,t=..,p=..$salt$hash)

        Raises:
            InvalidArgument: If the password is empty or not encodable as UTF-8
            CredentialFailure: If the hashing primitive fails
            TaskDispatchFailure: If the worker pool refuses the job
        """
        if not password:
            raise InvalidArgument("Password must not be empty", field="password")
        if not _is_encodable(password):
            raise InvalidArgument("Password must be valid UTF-8 text", field="password")

        try:
            return await self._pool.run(self._hash_sync, password)
        except HashingError as e:
            logger.error(f"Password hashing failed: {e}")
            raise CredentialFailure("Can't save password") from e

    async def verify_password(self, password: str, digest: str) -> None:
        """
        Check a password against a stored digest on the worker pool.

        Raises:
            CredentialFailure: On mismatch, on a malformed digest or on a
                password that cannot be encoded
            TaskDispatchFailure: If the worker pool refuses the job
        """
        if not _is_encodable(password):
            logger.debug("Password verification failed: unencodable_password")
            raise CredentialFailure()

        try:
            await self._pool.run(self._verify_sync, password, digest)
        except VerifyMismatchError as e:
            logger.debug("Password verification failed: mismatch")
            raise CredentialFailure() from e
        except (InvalidHashError, VerificationError, ValueError) as e:
            # ValueError covers digests with non-ASCII bytes
            logger.debug("Password verification failed: corrupt_digest")
            raise CredentialFailure() from e

    def needs_rehash(self, digest: str) -> bool:
        """True if ``digest`` was produced with different cost parameters."""
        try:
            return self._hasher.check_needs_rehash(digest)
        except (InvalidHashError, ValueError):
            return True


def build_credential_hasher(settings: Settings) -> CredentialHasher:
    """Construct the hasher and its dedicated worker pool from settings."""
    pool = CpuWorkerPool(
        max_workers=settings.HASH_WORKERS,
        max_pending=max(settings.HASH_MAX_PENDING, settings.HASH_WORKERS),
        thread_name_prefix="password_hash",
    )
    return CredentialHasher(HashingConfig.from_settings(settings), pool)


__all__ = [
    "CredentialHasher",
    "HashingConfig",
    "build_credential_hasher",
]
