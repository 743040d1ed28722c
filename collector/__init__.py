# -*- coding: utf-8 -*-
"""
Prometheus Collector 模块

功能：
- 每种计费资源一个采集器，共享同一生命周期
- 查询价格表、计算累计费用、更新 Prometheus 指标
- CollectorSet 统一注册指标并执行采集周期
"""

from .backup import ServerBackupCollector
from .base import CostFigures, ResourceCollector
from .collector_result import CollectorResult, CollectorStatus
from .collector_set import CollectorSet
from .floating_ip import FloatingIPCollector
from .load_balancer import LoadBalancerCollector
from .server import ServerCollector
from .snapshot import SnapshotCollector
from .traffic import LoadBalancerTrafficCollector, ServerTrafficCollector
from .volume import VolumeCollector

COLLECTOR_CLASSES = [
    FloatingIPCollector,
    LoadBalancerCollector,
    LoadBalancerTrafficCollector,
    ServerCollector,
    ServerBackupCollector,
    ServerTrafficCollector,
    SnapshotCollector,
    VolumeCollector,
]


def build_collectors(catalog, namespace='hcloud', clock=None):
    """按固定顺序创建全部采集器"""
    return [cls(catalog, namespace=namespace, clock=clock) for cls in COLLECTOR_CLASSES]
