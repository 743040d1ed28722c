# -*- coding: utf-8 -*-
"""
超额流量费用采集器

功能：
- 出站流量超过包含额度的部分按 TB 计费
- 流量按用量计费而不是按时间：current 为本计费周期已产生的超额费用（净价）
"""

from datetime import datetime

from collector.base import CostFigures, ResourceCollector
from pricing.accrual import BYTES_PER_TB, hourly_from_monthly
from pricing.catalog import UnitType
from provider.interfaces import Resource, ResourceKind


class TrafficCollector(ResourceCollector):
    """超额流量采集器公共实现，子类声明 price_kind"""

    price_kind: str = ''
    labels = ('location', 'type')

    def evaluate(self, resource: Resource, now: datetime) -> CostFigures:
        per_tb = self.catalog.lookup(self.price_kind, resource.location, resource.resource_type, UnitType.PER_TB)

        outgoing = resource.attributes.get('outgoing_traffic', 0)
        included = resource.attributes.get('included_traffic', 0)
        overage_tb = max(0, outgoing - included) / BYTES_PER_TB
        monthly = per_tb.price.scaled(overage_tb)

        return CostFigures(
            hourly=hourly_from_monthly(monthly.gross),
            monthly=monthly.gross,
            current=monthly.net,
        )


class ServerTrafficCollector(TrafficCollector):
    """服务器超额流量"""

    resource = 'server_traffic'
    kind = ResourceKind.SERVER
    price_kind = 'server_traffic'


class LoadBalancerTrafficCollector(TrafficCollector):
    """负载均衡超额流量"""

    resource = 'loadbalancer_traffic'
    kind = ResourceKind.LOAD_BALANCER
    price_kind = 'load_balancer_traffic'
