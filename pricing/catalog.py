# -*- coding: utf-8 -*-
"""
价格表缓存模块

功能：
- 缓存云厂商的单价列表，采集周期内查询不再访问 API
- Sync 时整体替换快照，失败时保留旧快照
- 按 (资源类型, 规格, 位置, 计价单位) 精确查询，不做跨位置回退
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from pricing.errors import MalformedCatalog, PriceNotFound

logger = logging.getLogger(__name__)


class UnitType(Enum):
    """计价单位"""
    HOURLY = "hourly"              # 每小时
    MONTHLY = "monthly"            # 每月
    PER_GB_MONTH = "per_gb_month"  # 每 GB 每月（卷、快照）
    PER_TB = "per_tb"              # 每 TB（超额流量）
    PERCENTAGE = "percentage"      # 相对服务器价格的百分比（备份）


@dataclass(frozen=True)
class Price:
    """净价与含税价"""
    net: float
    gross: float

    def scaled(self, factor: float) -> 'Price':
        return Price(net=self.net * factor, gross=self.gross * factor)


@dataclass(frozen=True)
class PriceCatalogEntry:
    """价格表中的单个条目，拉取后不可修改"""
    resource_kind: str                   # 资源类型，如 "server", "volume"
    location: Optional[str]              # 位置，如 "fsn1"；与位置无关时为 None
    resource_type: Optional[str]         # 规格，如 "cx11", "lb11", "ipv4"
    unit_type: UnitType                  # 计价单位
    gross: float                         # 含税价
    net: float                           # 净价

    @property
    def key(self) -> Tuple[str, Optional[str], Optional[str], UnitType]:
        return (self.resource_kind, self.resource_type, self.location, self.unit_type)

    @property
    def price(self) -> Price:
        return Price(net=self.net, gross=self.gross)


class CatalogSnapshot:
    """
    价格表快照

    一次 Sync 的完整结果，创建后只读。PriceCatalog 通过替换整个快照对象实现原子更新。
    """

    def __init__(self, entries: Iterable[PriceCatalogEntry], version: int = 0,
                 fetched_at: Optional[float] = None):
        index: Dict[tuple, PriceCatalogEntry] = {}
        for entry in entries:
            if entry.key in index:
                raise MalformedCatalog(f"价格表中存在重复条目: {entry.key}")
            index[entry.key] = entry

        self._entries: Mapping[tuple, PriceCatalogEntry] = MappingProxyType(index)
        self.version = version
        self.fetched_at = fetched_at if fetched_at is not None else time.time()

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, resource_kind: str, location: Optional[str] = None,
               resource_type: Optional[str] = None,
               unit_type: UnitType = UnitType.HOURLY) -> PriceCatalogEntry:
        """
        精确查询价格条目

        Raises:
            PriceNotFound: 没有与所有维度完全一致的条目
        """
        entry = self._entries.get((resource_kind, resource_type, location, unit_type))
        if entry is None:
            raise PriceNotFound(resource_kind, location, resource_type, unit_type)
        return entry


class PriceCatalog:
    """
    价格表缓存

    功能：
    - sync() 从 Provider 拉取价格列表并整体替换快照
    - lookup() 从当前快照查询，不访问 API
    - sync 可以与任意数量的 lookup 并发执行：读者拿到的要么是旧快照，要么是新快照
    """

    def __init__(self):
        """初始化空价格表（首次 sync 之前所有查询都会失败）"""
        self._snapshot: Optional[CatalogSnapshot] = None
        self._sync_lock = threading.Lock()  # 只串行化 sync，lookup 不加锁
        self._version = 0

    @property
    def snapshot(self) -> Optional[CatalogSnapshot]:
        """当前快照（读者应先取出快照再连续查询，保证一致性）"""
        return self._snapshot

    @property
    def version(self) -> int:
        snapshot = self._snapshot
        return snapshot.version if snapshot is not None else 0

    def sync(self, provider, ctx=None) -> CatalogSnapshot:
        """
        拉取价格列表并替换快照

        Args:
            provider: ProviderClient 实例
            ctx: RequestContext（可选），用于超时和取消

        Returns:
            新快照

        Raises:
            ProviderUnavailable: API 调用失败
            MalformedCatalog: 响应结构不符合预期
        """
        with self._sync_lock:
            start_time = time.time()
            entries = provider.get_price_list(ctx)

            # 先构建完整快照，任何异常都不会影响旧快照
            snapshot = CatalogSnapshot(entries, version=self._version + 1)

            self._version = snapshot.version
            self._snapshot = snapshot

            logger.info(
                f"价格表同步完成: version={snapshot.version}, 条目数={len(snapshot)}, "
                f"耗时={time.time() - start_time:.2f}s"
            )
            return snapshot

    def lookup(self, resource_kind: str, location: Optional[str] = None,
               resource_type: Optional[str] = None,
               unit_type: UnitType = UnitType.HOURLY) -> PriceCatalogEntry:
        """
        查询价格条目

        Args:
            resource_kind: 资源类型
            location: 位置（必须与条目完全一致）
            resource_type: 规格（必须与条目完全一致）
            unit_type: 计价单位

        Returns:
            唯一匹配的价格条目

        Raises:
            PriceNotFound: 价格表尚未同步，或没有匹配条目
        """
        snapshot = self._snapshot
        if snapshot is None:
            logger.warning(f"价格表尚未同步，无法查询: kind={resource_kind}, location={location}")
            raise PriceNotFound(resource_kind, location, resource_type, unit_type)
        return snapshot.lookup(resource_kind, location, resource_type, unit_type)
