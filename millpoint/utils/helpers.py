"""工具函数模块

包含一些常用的工具函数
"""

import math
import os
import re
import time

# 按扩展名推断媒体文件的 Content-Type
CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
}

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def sanitize_filename(name: str) -> str:
    """把原始文件名中的非安全字符替换为下划线"""
    return _UNSAFE_CHARS.sub("_", os.path.basename(name or "")) or "file"


def timestamped_filename(name: str) -> str:
    """生成 <毫秒时间戳>-<安全文件名> 形式的存储文件名"""
    return f"{int(time.time() * 1000)}-{sanitize_filename(name)}"


def content_type_for(filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    return CONTENT_TYPES.get(ext, "application/octet-stream")


def total_pages(total: int, limit: int) -> int:
    """总页数 = ceil(total / limit)"""
    if limit <= 0:
        return 0
    return int(math.ceil(total / limit))
