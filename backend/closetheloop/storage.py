"""
Object storage for uploaded lecture documents and student submissions.

Writes are create-only: an existing path is never overwritten, the write is
rejected with StorageError instead.
"""
from __future__ import annotations
import logging
import mimetypes
import time
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import StorageError
from .settings import settings

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
	def put(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str: ...

	def delete(self, path: str) -> None: ...


class LocalObjectStore:
	def __init__(self, root: str | Path) -> None:
		self.root = Path(root)

	def _resolve(self, path: str) -> Path:
		target = (self.root / path).resolve()
		if self.root.resolve() not in target.parents:
			raise StorageError("Object path escapes storage root", {"path": path})
		return target

	def put(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
		target = self._resolve(path)
		try:
			target.parent.mkdir(parents=True, exist_ok=True)
			with open(target, "xb") as fh:
				fh.write(data)
		except FileExistsError as err:
			raise StorageError("Object already exists", {"path": path}) from err
		except OSError as err:
			raise StorageError(f"Failed to write object: {err}", {"path": path}) from err
		return path

	def delete(self, path: str) -> None:
		try:
			self._resolve(path).unlink(missing_ok=True)
		except OSError as err:
			raise StorageError(f"Failed to delete object: {err}", {"path": path}) from err


class S3ObjectStore:
	def __init__(self, bucket: str, region: str = "us-east-1") -> None:
		self._bucket = bucket
		self._region = region
		self._s3_client = boto3.client("s3", region_name=region)

	def put(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
		try:
			# Conditional write; S3 rejects it with 412 if the key exists
			self._s3_client.put_object(
				Bucket=self._bucket,
				Key=path,
				Body=data,
				ContentType=content_type,
				IfNoneMatch="*",
			)
		except ClientError as err:
			code = err.response.get("Error", {}).get("Code", "")
			if code == "PreconditionFailed":
				raise StorageError("Object already exists", {"path": path}) from err
			raise StorageError(f"Object upload rejected: {code or err}", {"path": path}) from err
		except BotoCoreError as err:
			raise StorageError(f"Object upload failed: {err}", {"path": path}) from err
		return path

	def delete(self, path: str) -> None:
		try:
			self._s3_client.delete_object(Bucket=self._bucket, Key=path)
		except (ClientError, BotoCoreError) as err:
			raise StorageError(f"Object delete failed: {err}", {"path": path}) from err


@lru_cache(maxsize=1)
def build_object_store() -> ObjectStore:
	if settings.storage_backend == "s3":
		return S3ObjectStore(settings.storage_bucket, region=settings.aws_region)
	return LocalObjectStore(settings.storage_dir)


def get_object_store() -> ObjectStore:
	return build_object_store()


def discard_object(store: ObjectStore, path: str) -> None:
	"""Best-effort removal of an object written by a failed request."""
	try:
		store.delete(path)
	except StorageError:
		logger.warning("Could not remove orphaned object %s", path, exc_info=True)


def timestamped_path(prefix: str, session_id: str, filename: str, *, now_ms: Optional[int] = None) -> str:
	"""Return ``{prefix}/{session_id}/{epoch_ms}-{basename}``."""
	stamp = now_ms if now_ms is not None else int(time.time() * 1000)
	name = PurePosixPath(filename.replace("\\", "/")).name or "upload"
	return f"{prefix}/{session_id}/{stamp}-{name}"


def guess_content_type(filename: str, fallback: Optional[str] = None) -> str:
	guessed, _ = mimetypes.guess_type(filename)
	return guessed or fallback or "application/octet-stream"
