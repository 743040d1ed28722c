# -*- coding: utf-8 -*-
"""
服务器备份费用采集器

功能：
- 只处理启用了备份的服务器
- 备份费用 = 服务器价格 × 备份百分比
"""

from datetime import datetime
from typing import Optional

from collector.base import CostFigures, ResourceCollector
from pricing.accrual import accrued_cost
from pricing.catalog import UnitType
from provider.interfaces import Resource, ResourceKind


class ServerBackupCollector(ResourceCollector):
    """服务器备份"""

    resource = 'server_backup'
    kind = ResourceKind.SERVER
    labels = ('location', 'type')

    def evaluate(self, resource: Resource, now: datetime) -> Optional[CostFigures]:
        if not resource.attributes.get('backups_enabled'):
            return None

        percentage = self.catalog.lookup('server_backup', unit_type=UnitType.PERCENTAGE)
        factor = percentage.net / 100

        hourly = self.catalog.lookup('server', resource.location, resource.resource_type, UnitType.HOURLY)
        monthly = self.catalog.lookup('server', resource.location, resource.resource_type, UnitType.MONTHLY)

        return CostFigures(
            hourly=hourly.gross * factor,
            monthly=monthly.gross * factor,
            current=accrued_cost(resource.created_at, hourly.net * factor, now),
        )
