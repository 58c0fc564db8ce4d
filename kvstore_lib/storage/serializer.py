from decimal import Decimal, InvalidOperation
from typing import Any, Protocol
import pickle
import json
import yaml


class Serializer(Protocol):
    """Serialize/deserialize Python values for backends that store bytes/text.

    Implementations should be symmetric: `dump` -> bytes, `load` <- bytes.
    """

    def dump(self, value: Any) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


class PickleSerializer:
    """Serializer using pickle (binary).

    Preserves every value kind a store accepts (Decimal, bytes, datetime)
    without conversion, which is why the cloud store uses it by default.
    """

    def dump(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    def load(self, data: bytes) -> Any:
        return pickle.loads(data)


class JSONSerializer:
    """Serializer using JSON (text). Caller must ensure values are JSON-serializable."""

    def dump(self, value: Any) -> bytes:
        return json.dumps(value).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class YAMLSerializer:
    """Serializer using YAML (text).

    Uses the safe dumper/loader; bytes round-trip through the `!!binary`
    tag and datetimes through YAML timestamps.
    """

    def dump(self, value: Any) -> bytes:
        return yaml.safe_dump(value, allow_unicode=True, sort_keys=False).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return yaml.safe_load(data.decode("utf-8"))


class NumberArchiveSerializer:
    """Encode a single number as an opaque, self-describing byte frame.

    The frame records the numeric kind so a decoded value comes back as the
    same Python type it was stored as. Decimals are kept as text to preserve
    every digit. The leading magic byte is never valid UTF-8, so an archive
    cannot be mistaken for stored text.
    """

    MAGIC = b"\xffKVN1"
    _KINDS = ("bool", "int", "float", "decimal")

    def dump(self, value: Any) -> bytes:
        if isinstance(value, bool):
            frame = {"kind": "bool", "value": value}
        elif isinstance(value, int):
            frame = {"kind": "int", "value": value}
        elif isinstance(value, float):
            frame = {"kind": "float", "value": value}
        elif isinstance(value, Decimal):
            frame = {"kind": "decimal", "value": str(value)}
        else:
            raise TypeError(f"Not a number: {type(value).__name__}")
        return self.MAGIC + json.dumps(frame).encode("utf-8")

    def load(self, data: bytes) -> Any:
        if not data.startswith(self.MAGIC):
            raise ValueError("not a number archive")
        try:
            frame = json.loads(data[len(self.MAGIC):].decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValueError("not a number archive") from e
        if not isinstance(frame, dict) or frame.get("kind") not in self._KINDS:
            raise ValueError("not a number archive")
        kind, raw = frame["kind"], frame.get("value")
        if kind == "bool" and isinstance(raw, bool):
            return raw
        if kind == "int" and isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        if kind == "float" and isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return float(raw)
        if kind == "decimal" and isinstance(raw, str):
            try:
                return Decimal(raw)
            except InvalidOperation as e:
                raise ValueError("corrupt decimal in number archive") from e
        raise ValueError(f"corrupt {kind} in number archive")


class EncryptedSerializer:
    """Serializer that encrypts payloads using Fernet (symmetric, authenticated).

    Notes:
    - Fernet is an authenticated symmetric cipher (AES-CBC + HMAC under the
      hood via the cryptography library); a tampered or foreign payload fails
      to decrypt instead of producing garbage.
    - `base_serializer` defaults to JSON (text).
    - With `password`, each payload carries a random salt and the PBKDF2
      parameters so the loader can derive the key again.
    """

    def __init__(
        self,
        *,
        key: bytes | None = None,
        password: str | None = None,
        iterations: int = 390000,
        base_serializer: Serializer | None = None,
    ) -> None:
        self._key = key
        self._password = password
        self._iterations = iterations
        self.base_serializer = base_serializer or JSONSerializer()

    def _derive_key(self, password: str, salt: bytes, iterations: int) -> bytes:
        import base64
        from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
        from cryptography.hazmat.primitives import hashes

        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=iterations,
        )
        return base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))

    def dump(self, value: Any) -> bytes:
        """Serialize and encrypt value, returning a framed JSON blob."""
        import os
        import base64
        from cryptography.fernet import Fernet
        inner = self.base_serializer.dump(value)

        if self._password is not None:
            salt = os.urandom(16)
            key = self._derive_key(self._password, salt, self._iterations)
            ct = Fernet(key).encrypt(inner)
            frame = {
                "v": 1,
                "mode": "password",
                "kdf": "pbkdf2",
                "iterations": self._iterations,
                "salt": base64.urlsafe_b64encode(salt).decode("ascii"),
                "ct": base64.urlsafe_b64encode(ct).decode("ascii"),
            }
            return json.dumps(frame).encode("utf-8")

        if self._key is not None:
            ct = Fernet(self._key).encrypt(inner)
            frame = {"v": 1, "mode": "key", "ct": base64.urlsafe_b64encode(ct).decode("ascii")}
            return json.dumps(frame).encode("utf-8")

        raise ValueError("EncryptedSerializer requires either `key` or `password`")

    def load(self, data: bytes) -> Any:
        """Parse framed blob, derive key if needed, decrypt and deserialize.

        Raises ValueError for malformed frames and
        `cryptography.fernet.InvalidToken` for a wrong key or tampering.
        """
        import base64
        from cryptography.fernet import Fernet

        frame = json.loads(data.decode("utf-8"))
        mode = frame.get("mode")
        if mode == "password":
            if self._password is None:
                raise ValueError("serializer was not configured with a password")
            salt = base64.urlsafe_b64decode(frame["salt"].encode("ascii"))
            iterations = frame.get("iterations", self._iterations)
            key = self._derive_key(self._password, salt, iterations)
            ct = base64.urlsafe_b64decode(frame["ct"].encode("ascii"))
            return self.base_serializer.load(Fernet(key).decrypt(ct))

        if mode == "key":
            if self._key is None:
                raise ValueError("serializer was not configured with a key")
            ct = base64.urlsafe_b64decode(frame["ct"].encode("ascii"))
            return self.base_serializer.load(Fernet(self._key).decrypt(ct))

        raise ValueError("unknown frame format")
