from __future__ import annotations

"""
poster_backend/object_store.py

Almacén de objetos S3-compatible (Storj gateway) para pósters y metadatos.

Interfaz (ObjectStore):
- exists(key)  -> bool         (HEAD; "no existe" != "no disponible")
- get(key)     -> bytes | None
- put(key, data, content_type=...)
- presigned_url(key, expires_in=...) -> str
- ping()                       (HEAD bucket, para /ready)

Errores:
- Ausencia del objeto: False / None.
- Cualquier otro fallo (credenciales, red, 5xx): ObjectStoreError. El gateway
  decide qué hacer con él; aquí no se oculta.

Implementaciones:
- S3ObjectStore: boto3.
- InMemoryObjectStore: dict protegido por lock (runs locales sin Storj).
"""

import threading
from typing import Any, Final, Protocol

import boto3  # type: ignore[import-not-found]
from botocore.client import Config  # type: ignore[import-not-found]
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore[import-not-found]

DEFAULT_REGION: Final[str] = "us-east-1"

_NOT_FOUND_CODES: Final[frozenset[str]] = frozenset({"404", "NoSuchKey", "NotFound"})


class ObjectStoreError(RuntimeError):
    """El almacén no pudo responder (distinto de 'objeto inexistente')."""


class ObjectStore(Protocol):
    def exists(self, key: str) -> bool: ...

    def get(self, key: str) -> bytes | None: ...

    def put(self, key: str, data: bytes, *, content_type: str) -> None: ...

    def presigned_url(self, key: str, *, expires_in: int) -> str: ...

    def ping(self) -> None: ...


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def build_s3_client(
    *,
    endpoint_url: str | None,
    access_key: str | None,
    secret_key: str | None,
    region: str = DEFAULT_REGION,
) -> Any:
    # Storj exige SigV4; path-style evita depender de DNS por bucket.
    config = Config(signature_version="s3v4", s3={"addressing_style": "path"})
    client_args: dict[str, str | None] = {
        "endpoint_url": endpoint_url,
        "aws_access_key_id": access_key,
        "aws_secret_access_key": secret_key,
    }
    return boto3.client(
        "s3",
        region_name=region or DEFAULT_REGION,
        config=config,
        **{k: v for k, v in client_args.items() if v},
    )


class S3ObjectStore:
    def __init__(self, *, client: Any, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    def exists(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as exc:
            if _error_code(exc) in _NOT_FOUND_CODES:
                return False
            raise ObjectStoreError(f"head_object failed for {key}: {_error_code(exc) or exc!r}") from exc
        except BotoCoreError as exc:
            raise ObjectStoreError(f"head_object failed for {key}: {exc!r}") from exc
        return True

    def get(self, key: str) -> bytes | None:
        try:
            obj = self._client.get_object(Bucket=self._bucket, Key=key)
            body = obj.get("Body")
            return None if body is None else body.read()
        except ClientError as exc:
            if _error_code(exc) in _NOT_FOUND_CODES:
                return None
            raise ObjectStoreError(f"get_object failed for {key}: {_error_code(exc) or exc!r}") from exc
        except BotoCoreError as exc:
            raise ObjectStoreError(f"get_object failed for {key}: {exc!r}") from exc

    def put(self, key: str, data: bytes, *, content_type: str) -> None:
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            raise ObjectStoreError(f"put_object failed for {key}: {exc!r}") from exc

    def presigned_url(self, key: str, *, expires_in: int) -> str:
        try:
            return str(
                self._client.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self._bucket, "Key": key},
                    ExpiresIn=int(expires_in),
                )
            )
        except (ClientError, BotoCoreError) as exc:
            raise ObjectStoreError(f"presign failed for {key}: {exc!r}") from exc

    def ping(self) -> None:
        try:
            self._client.head_bucket(Bucket=self._bucket)
        except (ClientError, BotoCoreError) as exc:
            raise ObjectStoreError(f"bucket {self._bucket!r} not reachable: {exc!r}") from exc


class InMemoryObjectStore:
    """
    Implementación en memoria. No hay URLs firmadas reales: presigned_url
    devuelve una URL `memory://` con la caducidad como query.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._objects: dict[str, tuple[bytes, str]] = {}

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self._objects

    def get(self, key: str) -> bytes | None:
        with self._lock:
            entry = self._objects.get(key)
        return None if entry is None else entry[0]

    def content_type(self, key: str) -> str | None:
        with self._lock:
            entry = self._objects.get(key)
        return None if entry is None else entry[1]

    def put(self, key: str, data: bytes, *, content_type: str) -> None:
        with self._lock:
            self._objects[key] = (bytes(data), content_type)

    def presigned_url(self, key: str, *, expires_in: int) -> str:
        return f"memory://{key}?expires={int(expires_in)}"

    def ping(self) -> None:
        return None

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._objects)
