"""本地文件存储

上传文件保存在 STORAGE_PATH/{nc,cad,dxf,media,documents,versions}/ 下，
文件名带上传时间戳前缀；版本快照复制为 versions/v{n}-{原文件名}。
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Union

from ..errors import StorageError
from .helpers import timestamped_filename

logger = logging.getLogger(__name__)

CATEGORIES = ("nc", "cad", "dxf", "media", "documents", "versions")


@dataclass
class StoredFile:
    filename: str
    filepath: str
    mimetype: str
    size: int
    uploaded_at: datetime = field(default_factory=datetime.utcnow)


class FileStorage:
    """本地磁盘文件存储"""

    def __init__(self, base_path: Union[str, Path]):
        self.base_path = Path(base_path)

    def open(self) -> "FileStorage":
        """创建所有分类目录"""
        for category in CATEGORIES:
            (self.base_path / category).mkdir(parents=True, exist_ok=True)
        logger.info("File storage initialized at %s", self.base_path)
        return self

    def close(self) -> None:
        pass

    def path_for(self, category: str, filename: str) -> Path:
        if category not in CATEGORIES:
            raise StorageError(f"Unknown storage category: {category}")
        # 只取文件名部分，防止 ../ 跳出存储目录
        return self.base_path / category / os.path.basename(filename)

    def save_bytes(self, data: bytes, original_name: str, category: str, mimetype: str = "application/octet-stream") -> StoredFile:
        filename = timestamped_filename(original_name)
        filepath = self.path_for(category, filename)
        # 同一毫秒内的同名文件加序号
        stamp, _, rest = filename.partition("-")
        seq = 1
        while filepath.exists():
            filename = f"{stamp}_{seq}-{rest}"
            filepath = self.path_for(category, filename)
            seq += 1
        try:
            filepath.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to write file {filename}") from exc
        return StoredFile(filename=filename, filepath=str(filepath), mimetype=mimetype, size=len(data))

    def save_text(self, content: str, original_name: str, category: str) -> StoredFile:
        return self.save_bytes(content.encode("utf-8"), original_name, category, mimetype="text/plain")

    def read_file(self, filepath: Union[str, Path]) -> bytes:
        try:
            return Path(filepath).read_bytes()
        except FileNotFoundError as exc:
            raise StorageError("File not found", status_code=404) from exc
        except OSError as exc:
            raise StorageError("Failed to read file") from exc

    def delete_file(self, filepath: Union[str, Path]) -> bool:
        """删除文件；失败只记录日志，不影响调用方"""
        try:
            Path(filepath).unlink()
            return True
        except OSError as exc:
            logger.warning("Error deleting file %s: %s", filepath, exc)
            return False

    def exists(self, filepath: Union[str, Path]) -> bool:
        return Path(filepath).is_file()

    def file_size(self, filepath: Union[str, Path]) -> int:
        try:
            return Path(filepath).stat().st_size
        except OSError as exc:
            raise StorageError("File not found", status_code=404) from exc

    def create_version(self, filepath: Union[str, Path], version_number: int) -> str:
        """把文件复制为版本快照，返回快照路径"""
        source = Path(filepath)
        target = self.path_for("versions", f"v{version_number}-{source.name}")
        try:
            shutil.copyfile(source, target)
        except OSError as exc:
            raise StorageError(f"Failed to create version snapshot for {source.name}") from exc
        return str(target)
