# -*- coding: utf-8 -*-
"""
浮动 IP 费用采集器

功能：
- 浮动 IP 只有月价，时价按 30 天换算
- 按 (IP 类型, 所属位置) 查询价格
"""

from datetime import datetime

from collector.base import CostFigures, ResourceCollector
from pricing.accrual import accrued_cost, hourly_from_monthly
from pricing.catalog import UnitType
from provider.interfaces import Resource, ResourceKind


class FloatingIPCollector(ResourceCollector):
    """浮动 IP"""

    resource = 'floatingip'
    kind = ResourceKind.FLOATING_IP
    labels = ('location', 'type')

    def evaluate(self, resource: Resource, now: datetime) -> CostFigures:
        monthly = self.catalog.lookup('floating_ip', resource.location, resource.resource_type, UnitType.MONTHLY)

        return CostFigures(
            hourly=hourly_from_monthly(monthly.gross),
            monthly=monthly.gross,
            current=accrued_cost(resource.created_at, hourly_from_monthly(monthly.net), now),
        )
