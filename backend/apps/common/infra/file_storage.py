"""
谜题附件存储：本地 MEDIA_ROOT（默认）或 S3 兼容对象存储（STORAGE_BACKEND=oss）

两种后端接口一致：save_bytes / url_for / exists / delete / iter_files，
路径一律是相对存储根的 POSIX 路径，例如 puzzles/my-slug-1760860000000/ab12cd34ef56a7b8_grid.png
"""

from __future__ import annotations

import secrets
import time
from pathlib import Path
from typing import Iterator, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings

from apps.common.exceptions import StorageUnavailableError
from apps.common.infra.logger import get_logger, logger_extra

logger = get_logger(__name__)


class LocalFileStorage:
    """MEDIA_ROOT 下的文件，对外经 /files/<相对路径> 访问"""

    def __init__(self, base_dir: str | None = None):
        media_root = getattr(settings, "MEDIA_ROOT", None)
        self.base_dir = Path(base_dir or media_root or "uploads").resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def save_bytes(self, *, content: bytes, filename: str, subdir: str | None = None) -> Tuple[str, str | None]:
        """文件名只保留末段并加随机前缀；返回 (相对路径, URL)"""
        relative_path = _join(_safe_subdir(subdir), _safe_filename(filename))
        target = self.base_dir / relative_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            logger.exception("本地文件存储失败", extra=logger_extra({"path": relative_path}))
            raise StorageUnavailableError() from exc
        return relative_path, self.url_for(relative_path)

    def url_for(self, relative_path: str | None) -> str | None:
        if not relative_path:
            return None
        media_url = getattr(settings, "MEDIA_URL", None)
        return f"{media_url.rstrip('/')}/{relative_path}" if media_url else None

    def _resolve(self, relative_path: str) -> Path | None:
        # 只允许访问 base_dir 之内的路径
        target = (self.base_dir / _safe_subdir(relative_path)).resolve()
        if self.base_dir not in target.parents:
            return None
        return target

    def exists(self, relative_path: str) -> bool:
        target = self._resolve(relative_path) if relative_path else None
        return bool(target and target.is_file())

    def delete(self, relative_path: str | None) -> bool:
        """文件不存在时返回 False，不抛错"""
        if not relative_path:
            return False
        target = self._resolve(relative_path)
        if target is None:
            logger.warning("拒绝删除存储目录之外的文件", extra=logger_extra({"path": relative_path}))
            return False
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.exception("本地文件删除失败", extra=logger_extra({"path": relative_path}))
            raise StorageUnavailableError() from exc
        return True

    def iter_files(self, subdir: str | None = None) -> Iterator[Tuple[str, float]]:
        """遍历子目录下所有文件，产出 (相对路径, 修改时间戳)"""
        safe_subdir = _safe_subdir(subdir)
        root = self.base_dir / safe_subdir if safe_subdir else self.base_dir
        if not root.is_dir():
            return
        for path in root.rglob("*"):
            if path.is_file():
                yield path.relative_to(self.base_dir).as_posix(), path.stat().st_mtime


class OSSStorage:
    """S3 兼容对象存储，键为 OSS_KEY_PREFIX/<相对路径>"""

    def __init__(self):
        self.endpoint = getattr(settings, "OSS_ENDPOINT", "")
        self.access_key = getattr(settings, "OSS_ACCESS_KEY_ID", "")
        self.secret_key = getattr(settings, "OSS_ACCESS_KEY_SECRET", "")
        self.bucket = getattr(settings, "OSS_BUCKET", "")
        self.prefix = (getattr(settings, "OSS_KEY_PREFIX", "") or "").strip().strip("/")
        if not all([self.endpoint, self.access_key, self.secret_key, self.bucket]):
            raise RuntimeError(
                "OSS 配置不完整，请在 .env 中填写 OSS_ENDPOINT/OSS_ACCESS_KEY_ID/OSS_ACCESS_KEY_SECRET/OSS_BUCKET")
        self.client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
        )

    def _key(self, relative_path: str) -> str:
        return _join(self.prefix, _safe_subdir(relative_path))

    def save_bytes(self, *, content: bytes, filename: str, subdir: str | None = None) -> Tuple[str, str]:
        relative_path = _join(_safe_subdir(subdir), _safe_filename(filename))
        key = self._key(relative_path)
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=content)
        except (BotoCoreError, ClientError) as exc:  # pragma: no cover - 依赖外部服务
            logger.exception("上传 OSS 失败", extra=logger_extra({"bucket": self.bucket, "key": key}))
            raise StorageUnavailableError() from exc
        return relative_path, self.url_for(relative_path)

    def url_for(self, relative_path: str | None) -> str | None:
        if not relative_path:
            return None
        # path-style：endpoint/bucket/key
        return f"{self.endpoint.rstrip('/')}/{self.bucket}/{self._key(relative_path)}"

    def exists(self, relative_path: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=self._key(relative_path))
        except ClientError:
            return False
        return True

    def delete(self, relative_path: str | None) -> bool:
        if not relative_path:
            return False
        key = self._key(relative_path)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:  # pragma: no cover - 依赖外部服务
            logger.exception("删除 OSS 对象失败", extra=logger_extra({"bucket": self.bucket, "key": key}))
            raise StorageUnavailableError() from exc
        return True

    def iter_files(self, subdir: str | None = None) -> Iterator[Tuple[str, float]]:
        prefix = self._key(subdir or "")
        paginator = self.client.get_paginator("list_objects_v2")
        strip = f"{self.prefix}/" if self.prefix else ""
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                key = obj["Key"]
                yield key[len(strip):] if strip and key.startswith(strip) else key, obj["LastModified"].timestamp()


def get_storage():
    """STORAGE_BACKEND=oss 时用对象存储，否则用本地磁盘"""
    backend = str(getattr(settings, "STORAGE_BACKEND", "local")).lower()
    if backend == "oss":
        return OSSStorage()
    return LocalFileStorage()


def file_age_seconds(modified_at: float) -> float:
    return time.time() - modified_at


def _join(*parts: str) -> str:
    return "/".join(part for part in parts if part)


def _safe_filename(filename: str) -> str:
    """随机前缀 + 原文件名末段（最多 120 字符）"""
    name = Path(filename or "").name.replace("\\", "").replace("/", "")
    if not name or name in {".", ".."}:
        name = "file"
    return f"{secrets.token_hex(8)}_{name[-120:]}"


def _safe_subdir(subdir: str | None) -> str:
    """去掉空段、. 与 ..，结果不会逃出存储根"""
    if not subdir:
        return ""
    return _join(*(part for part in str(subdir).replace("\\", "/").split("/") if part not in {".", ".."}))
