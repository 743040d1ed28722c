# -*- coding: utf-8 -*-
"""
采集器集合

功能：
- 持有全部 ResourceCollector
- 启动时一次性注册所有指标
- 执行采集周期：每个采集器先清空指标再运行，失败不影响其他采集器，最后聚合错误
- 暴露 exporter 自身指标（错误计数、周期耗时、价格表版本）
"""

import logging
import time
from typing import Iterable, List, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

from collector.base import ResourceCollector
from collector.collector_result import CollectorResult, CollectorStatus
from pricing.catalog import PriceCatalog
from pricing.errors import CycleError, MalformedCatalog, PriceNotFound, ProviderUnavailable
from provider.interfaces import ProviderClient

logger = logging.getLogger(__name__)


def classify_error(error: Exception) -> str:
    """错误类型（用作 error_type 标签）"""
    if isinstance(error, ProviderUnavailable):
        return 'provider_unavailable'
    if isinstance(error, PriceNotFound):
        return 'price_not_found'
    if isinstance(error, MalformedCatalog):
        return 'malformed_catalog'
    return 'unknown'


class CollectorSet:
    """
    采集器集合

    假设调用方（调度器）串行触发 run_cycle，不会有两个周期重叠执行
    """

    def __init__(self, collectors: Iterable[ResourceCollector], catalog: Optional[PriceCatalog] = None,
                 namespace: str = 'hcloud'):
        """
        初始化采集器集合

        Args:
            collectors: 采集器列表（按此顺序执行）
            catalog: 价格表（可选，用于暴露当前版本）
            namespace: 指标命名空间
        """
        self.collectors: List[ResourceCollector] = list(collectors)
        self.catalog = catalog

        self.last_results: List[CollectorResult] = []
        self.last_cycle_at: Optional[float] = None

        # Exporter 自身指标
        self.collector_errors_total = Counter(
            'exporter_collector_errors',
            'Total number of failed collector runs',
            ['collector', 'error_type'],
            namespace=namespace,
            subsystem='pricing',
            registry=None,
        )
        self.cycle_duration_seconds = Histogram(
            'exporter_cycle_duration_seconds',
            'Duration of a full fetch cycle in seconds',
            namespace=namespace,
            subsystem='pricing',
            buckets=[0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0],
            registry=None,
        )
        self.catalog_version = Gauge(
            'exporter_catalog_version',
            'Version of the price catalog snapshot in use',
            namespace=namespace,
            subsystem='pricing',
            registry=None,
        )
        if catalog is not None:
            self.catalog_version.set_function(lambda: catalog.version)

    def __len__(self) -> int:
        return len(self.collectors)

    def register_all(self, registry: CollectorRegistry):
        """
        注册所有采集器的四个指标和 exporter 自身指标（进程启动时调用一次）

        Raises:
            ValueError: 重复注册
        """
        for collector in self.collectors:
            for metric in collector.metric_handles():
                registry.register(metric)

        registry.register(self.collector_errors_total)
        registry.register(self.cycle_duration_seconds)
        registry.register(self.catalog_version)

        logger.info(f"已注册 {len(self.collectors)} 个采集器的指标")

    def run_cycle(self, provider: ProviderClient, ctx=None) -> List[CollectorResult]:
        """
        执行一次采集周期

        每个采集器运行前先清空自己的四个指标，已删除资源的标签组合不会残留。
        某个采集器失败时继续执行后续采集器。

        Args:
            provider: ProviderClient 实例
            ctx: RequestContext（可选）

        Returns:
            每个采集器的执行结果

        Raises:
            CycleError: 至少一个采集器失败，errors 中包含所有失败
        """
        cycle_start = time.time()
        results: List[CollectorResult] = []
        errors = []

        for collector in self.collectors:
            collector.reset()

            start_time = time.time()
            try:
                published = collector.run(provider, ctx)
            except Exception as e:
                error_type = classify_error(e)
                if error_type == 'unknown':
                    logger.error(f"[{collector.name}] 采集异常: {e}", exc_info=True)
                else:
                    logger.error(f"[{collector.name}] 采集失败 ({error_type}): {e}")

                self.collector_errors_total.labels(collector=collector.name, error_type=error_type).inc()
                errors.append((collector.name, e))
                results.append(CollectorResult(
                    collector=collector.name,
                    status=CollectorStatus.FAILED,
                    duration=time.time() - start_time,
                    error=str(e),
                    error_type=error_type,
                ))
                continue

            results.append(CollectorResult(
                collector=collector.name,
                status=CollectorStatus.SUCCESS,
                published=published,
                duration=time.time() - start_time,
            ))

        duration = time.time() - cycle_start
        self.cycle_duration_seconds.observe(duration)
        self.last_results = results
        self.last_cycle_at = time.time()

        failed = len(errors)
        logger.info(
            f"采集周期完成: 采集器={len(results)}, 成功={len(results) - failed}, "
            f"失败={failed}, 耗时={duration:.2f}s"
        )

        if errors:
            raise CycleError(errors)
        return results

    def get_summary(self) -> dict:
        """最近一次采集周期的汇总信息"""
        return {
            'last_cycle_at': self.last_cycle_at,
            'success': sum(1 for r in self.last_results if r.is_success()),
            'failed': sum(1 for r in self.last_results if r.is_failed()),
            'collectors': [r.to_dict() for r in self.last_results],
        }
