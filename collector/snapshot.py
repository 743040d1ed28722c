# -*- coding: utf-8 -*-
"""
快照费用采集器
"""

from datetime import datetime

from collector.base import CostFigures, ResourceCollector
from pricing.accrual import accrued_cost, hourly_from_monthly
from pricing.catalog import UnitType
from provider.interfaces import Resource, ResourceKind


class SnapshotCollector(ResourceCollector):
    """快照镜像：镜像大小（GB）× 每 GB 月价"""

    resource = 'snapshot'
    kind = ResourceKind.SNAPSHOT

    def evaluate(self, resource: Resource, now: datetime) -> CostFigures:
        per_gb = self.catalog.lookup('image', unit_type=UnitType.PER_GB_MONTH)
        monthly = per_gb.price.scaled(resource.attributes.get('image_size', 0.0))

        return CostFigures(
            hourly=hourly_from_monthly(monthly.gross),
            monthly=monthly.gross,
            current=accrued_cost(resource.created_at, hourly_from_monthly(monthly.net), now),
        )
