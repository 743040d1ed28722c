# -*- coding: utf-8 -*-
"""
Provider 接口定义

功能：
- 定义 ProviderClient 接口：枚举资源、拉取价格列表
- 定义资源的只读视图 Resource
- 采集器只依赖接口，不关心具体云厂商 SDK
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ResourceKind(Enum):
    """可枚举的资源类型"""
    SERVER = "server"
    FLOATING_IP = "floating_ip"
    LOAD_BALANCER = "load_balancer"
    VOLUME = "volume"
    SNAPSHOT = "snapshot"


@dataclass(frozen=True)
class Resource:
    """资源视图（每个采集周期从 API 重新获取，不跨周期保留）"""
    identifier: str                      # 资源 ID
    name: str                            # 显示名称，用作 name 标签
    kind: ResourceKind                   # 资源类型
    location: Optional[str]              # 位置，如 "fsn1"
    resource_type: Optional[str]         # 规格，如 "cx11"
    created_at: datetime                 # 创建时间（带时区）
    attributes: Dict[str, Any] = field(default_factory=dict)  # 类型相关属性（size、流量、备份等）


class ProviderClient(ABC):
    """
    云厂商客户端接口

    两个方法都可能抛出 ProviderUnavailable
    """

    @abstractmethod
    def list_resources(self, kind: ResourceKind, ctx=None) -> List[Resource]:
        """
        枚举指定类型的资源

        Args:
            kind: 资源类型
            ctx: RequestContext（可选）

        Returns:
            资源列表（保持 API 返回顺序）
        """
        pass

    @abstractmethod
    def get_price_list(self, ctx=None) -> list:
        """
        拉取价格列表

        Returns:
            PriceCatalogEntry 列表

        Raises:
            ProviderUnavailable: API 调用失败
            MalformedCatalog: 响应结构不符合预期
        """
        pass
