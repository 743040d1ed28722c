# -*- coding: utf-8 -*-
"""
卷费用采集器

功能：
- 按容量（GB）× 每 GB 月价计算
- 卷价格与位置无关，价格表中对应条目的 location 为 None
"""

from datetime import datetime

from collector.base import CostFigures, ResourceCollector
from pricing.accrual import accrued_cost, hourly_from_monthly
from pricing.catalog import UnitType
from provider.interfaces import Resource, ResourceKind


class VolumeCollector(ResourceCollector):
    """块存储卷"""

    resource = 'volume'
    kind = ResourceKind.VOLUME
    labels = ('location', 'size')

    def evaluate(self, resource: Resource, now: datetime) -> CostFigures:
        per_gb = self.catalog.lookup('volume', unit_type=UnitType.PER_GB_MONTH)
        monthly = per_gb.price.scaled(resource.attributes.get('size', 0))

        return CostFigures(
            hourly=hourly_from_monthly(monthly.gross),
            monthly=monthly.gross,
            current=accrued_cost(resource.created_at, hourly_from_monthly(monthly.net), now),
        )
