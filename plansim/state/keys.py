"""Named Ed25519 keys persisted in the state store.

Only the 32-byte private seed is stored, under KEY_PREFIX + name. Public
keys are derived on every lookup with ``cryptography``.
"""

import logging
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from plansim.exceptions import CollaboratorError, DuplicateKeyName
from plansim.state.store import KEY_PREFIX, StateStore
from plansim.types import ADDRESS_LEN

logger = logging.getLogger(__name__)

ED25519_ADDRESS_PREFIX = 0


def derive_address(public_key: bytes, prefix: int = ED25519_ADDRESS_PREFIX) -> bytes:
    """Address = one type-prefix byte followed by the raw public key."""
    if len(public_key) != ADDRESS_LEN - 1:
        raise CollaboratorError(
            f"public key must be {ADDRESS_LEN - 1} bytes, got {len(public_key)}"
        )
    return bytes([prefix]) + bytes(public_key)


def address_to_str(address: bytes) -> str:
    return address.hex()


def _storage_key(name: str) -> bytes:
    return KEY_PREFIX + name.encode("utf-8")


def _public_bytes(private_seed: bytes) -> bytes:
    private_key = Ed25519PrivateKey.from_private_bytes(private_seed)
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


class KeyStore:
    """Creates and looks up named keys in a caller-supplied store."""

    def create_named_key(self, store: StateStore, name: str) -> bytes:
        """Generate a key under ``name`` and return its public key.

        Raises:
            DuplicateKeyName: if the name is taken; the existing public key
                is attached so callers can reuse it.
        """
        existing = self.get_public_key(store, name)
        if existing is not None:
            raise DuplicateKeyName(
                f"named key already exists: {name}", key_name=name, public_key=existing
            )
        private_key = Ed25519PrivateKey.generate()
        seed = private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        store.set(_storage_key(name), seed)
        logger.debug("[KeyStore] created named key %r", name)
        return _public_bytes(seed)

    def get_public_key(self, store: StateStore, name: str) -> Optional[bytes]:
        """Public key for ``name``, or None if no such key exists."""
        seed = store.get(_storage_key(name))
        if seed is None:
            return None
        try:
            return _public_bytes(seed)
        except ValueError as exc:
            raise CollaboratorError(f"stored key {name!r} is corrupt: {exc}") from exc
