# -*- coding: utf-8 -*-
"""
服务器费用采集器

功能：
- 按 (规格, 位置) 查询服务器时价和月价
- 按创建时间计算累计费用
"""

from datetime import datetime

from collector.base import CostFigures, ResourceCollector
from pricing.accrual import accrued_cost
from pricing.catalog import UnitType
from provider.interfaces import Resource, ResourceKind


class ServerCollector(ResourceCollector):
    """服务器（计算实例）"""

    resource = 'server'
    kind = ResourceKind.SERVER
    labels = ('location', 'type')

    def evaluate(self, resource: Resource, now: datetime) -> CostFigures:
        hourly = self.catalog.lookup('server', resource.location, resource.resource_type, UnitType.HOURLY)
        monthly = self.catalog.lookup('server', resource.location, resource.resource_type, UnitType.MONTHLY)

        return CostFigures(
            hourly=hourly.gross,
            monthly=monthly.gross,
            current=accrued_cost(resource.created_at, hourly.net, now),
        )
