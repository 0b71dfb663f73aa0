"""程序自动编号

零件号为空时，取机床计数器的当前值，格式化为 4 位补零字符串，计数器加 1。
同一机床的"读取-格式化-递增"必须串行，由 KeyedLocks 加数据库原子更新保证。
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from ..models import DEFAULT_NEXT_PROGRAM_NUMBER


def format_program_number(value: int) -> str:
    """100 -> "0100"，10000 -> "10000"（不截断）"""
    return f"{value:04d}"


def wants_auto_number(part_number: Optional[str]) -> bool:
    return part_number is None or not part_number.strip()


def current_counter(value: Optional[int]) -> int:
    return DEFAULT_NEXT_PROGRAM_NUMBER if value is None else value


class KeyedLocks:
    """按键（机床 id / 程序 id）分配的进程内互斥锁

    每个键记录等待 / 持有者数量，计数归零时删除该键的锁。
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, List] = {}  # key -> [lock, users]

    def active_keys(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]
