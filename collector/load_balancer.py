# -*- coding: utf-8 -*-
"""
负载均衡费用采集器
"""

from datetime import datetime

from collector.base import CostFigures, ResourceCollector
from pricing.accrual import accrued_cost
from pricing.catalog import UnitType
from provider.interfaces import Resource, ResourceKind


class LoadBalancerCollector(ResourceCollector):
    """负载均衡（按规格和位置计价）"""

    resource = 'loadbalancer'
    kind = ResourceKind.LOAD_BALANCER
    labels = ('location', 'type')

    def evaluate(self, resource: Resource, now: datetime) -> CostFigures:
        hourly = self.catalog.lookup('load_balancer', resource.location, resource.resource_type, UnitType.HOURLY)
        monthly = self.catalog.lookup('load_balancer', resource.location, resource.resource_type, UnitType.MONTHLY)

        return CostFigures(
            hourly=hourly.gross,
            monthly=monthly.gross,
            current=accrued_cost(resource.created_at, hourly.net, now),
        )
