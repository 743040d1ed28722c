# -*- coding: utf-8 -*-
"""
ResourceCollector 接口和公共实现

功能：
- 定义每种资源采集器共享的生命周期（metric_handles / reset / run）
- 按资源名称和标签构建四个 Prometheus 指标
- 统一发布 hourly / monthly / current / current_counter
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from prometheus_client import Counter, Gauge

from pricing.catalog import PriceCatalog
from provider.interfaces import ProviderClient, Resource, ResourceKind

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CostFigures:
    """单个资源在一次采集中的费用数据"""
    hourly: float   # 每小时含税价
    monthly: float  # 每月含税价
    current: float  # 至今累计费用（净价）


class ResourceCollector(ABC):
    """
    资源采集器接口

    子类只需声明 resource / kind / labels 并实现 evaluate()：
    - resource: 指标名中的资源名，如 "server"
    - kind: 向 Provider 枚举的资源类型
    - labels: name 之外的标签，同一资源的四个指标标签完全一致
    """

    resource: str = ''
    kind: ResourceKind = None
    labels: Tuple[str, ...] = ()

    def __init__(self, catalog: PriceCatalog, namespace: str = 'hcloud',
                 clock: Optional[Callable[[], datetime]] = None):
        """
        初始化采集器

        Args:
            catalog: 共享的价格表缓存
            namespace: 指标命名空间
            clock: 返回当前时间的函数（测试时注入固定时间）
        """
        self.catalog = catalog
        self.clock = clock or utcnow
        self.labelnames = ['name'] + list(self.labels)

        # 指标不注册到全局 REGISTRY，由 CollectorSet.register_all 统一注册
        self.hourly = Gauge(
            f'{self.resource}_hourly',
            f'The cost of the resource {self.resource} per hour',
            self.labelnames,
            namespace=namespace,
            subsystem='pricing',
            registry=None,
        )
        self.monthly = Gauge(
            f'{self.resource}_monthly',
            f'The cost of the resource {self.resource} per month',
            self.labelnames,
            namespace=namespace,
            subsystem='pricing',
            registry=None,
        )
        self.current = Gauge(
            f'{self.resource}_current',
            f'The cost of the resource {self.resource} so far',
            self.labelnames,
            namespace=namespace,
            subsystem='pricing',
            registry=None,
        )
        # 每个周期先 clear 再 inc 一次，等价于设置为最新的累计值
        # 暴露名带 _total 后缀
        self.current_counter = Counter(
            f'{self.resource}_current_counter',
            f'The cost of the resource {self.resource} so far',
            self.labelnames,
            namespace=namespace,
            subsystem='pricing',
            registry=None,
        )

    @property
    def name(self) -> str:
        return self.resource

    def metric_handles(self) -> Tuple[Gauge, Gauge, Gauge, Counter]:
        """返回 (hourly, monthly, current, current_counter)"""
        return self.hourly, self.monthly, self.current, self.current_counter

    def reset(self):
        """清空四个指标的所有标签组合"""
        for metric in self.metric_handles():
            metric.clear()

    def label_values(self, resource: Resource) -> List[str]:
        """按 labelnames 顺序生成标签值"""
        values = []
        for label in self.labelnames:
            if label == 'name':
                value = resource.name
            elif label == 'location':
                value = resource.location
            elif label == 'type':
                value = resource.resource_type
            else:
                value = resource.attributes.get(label)
            values.append('' if value is None else str(value))
        return values

    @abstractmethod
    def evaluate(self, resource: Resource, now: datetime) -> Optional[CostFigures]:
        """
        计算单个资源的费用

        Args:
            resource: 资源视图
            now: 本次采集的计算时刻

        Returns:
            CostFigures；返回 None 表示该资源本周期不产生指标

        Raises:
            PriceNotFound: 价格表中没有匹配条目
        """
        pass

    def run(self, provider: ProviderClient, ctx=None) -> int:
        """
        执行一次采集

        枚举失败时不发布任何指标；某个资源价格缺失时，
        已处理资源的指标保留，剩余资源不再处理。

        Args:
            provider: ProviderClient 实例
            ctx: RequestContext（可选）

        Returns:
            发布了指标的资源数量

        Raises:
            ProviderUnavailable: 枚举资源失败
            PriceNotFound: 某个资源价格缺失
        """
        resources = provider.list_resources(self.kind, ctx)
        now = self.clock()

        published = 0
        for resource in resources:
            figures = self.evaluate(resource, now)
            if figures is None:
                continue
            self._publish(self.label_values(resource), figures)
            published += 1

        logger.debug(f"[{self.name}] 共 {len(resources)} 个资源, 发布 {published} 个")
        return published

    def _publish(self, label_values: List[str], figures: CostFigures):
        self.hourly.labels(*label_values).set(figures.hourly)
        self.monthly.labels(*label_values).set(figures.monthly)
        self.current.labels(*label_values).set(figures.current)
        self.current_counter.labels(*label_values).inc(figures.current)
