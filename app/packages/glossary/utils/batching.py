"""分页与分批工具：绕开存储端单次请求的行数上限。

- ``fetch_in_pages``：按固定页大小连续发起范围查询，直到拿到不满一页的结果，
  或累计行数达到安全上限（避免存储返回异常数据时无限循环）；
- ``chunked``：把标识列表切成固定大小的批次。
"""

from __future__ import annotations

from typing import Callable, Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def fetch_in_pages(
    fetch_page: Callable[[int, int], Sequence[T]],
    *,
    page_size: int,
    max_rows: int,
) -> List[T]:
    """``fetch_page(offset, limit)`` 返回一页数据；结果按调用顺序拼接。"""
    if page_size < 1:
        raise ValueError("page_size must be positive")

    rows: List[T] = []
    offset = 0
    while offset < max_rows:
        limit = min(page_size, max_rows - offset)
        page = fetch_page(offset, limit)
        rows.extend(page[:limit])
        if len(page) < limit:
            break
        offset += limit
    return rows


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    if size < 1:
        raise ValueError("size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
