# -*- coding: utf-8 -*-
"""
Hetzner Cloud 价格列表解析

功能：
- 将 GET /pricing 的响应转换为 PriceCatalogEntry 列表
- 响应结构不符合预期时抛出 MalformedCatalog
"""

import logging
from typing import Any, Dict, List, Optional

from pricing.catalog import PriceCatalogEntry, UnitType
from pricing.errors import MalformedCatalog

logger = logging.getLogger(__name__)


def _amount(price: Dict[str, Any], field: str) -> float:
    # API 返回的金额是十进制字符串，如 "0.0050000000"
    return float(price[field])


def _entry(kind: str, location: Optional[str], resource_type: Optional[str],
           unit_type: UnitType, price: Dict[str, Any]) -> PriceCatalogEntry:
    return PriceCatalogEntry(
        resource_kind=kind,
        location=location,
        resource_type=resource_type,
        unit_type=unit_type,
        gross=_amount(price, 'gross'),
        net=_amount(price, 'net'),
    )


def _parse_typed_prices(types: List[Dict[str, Any]], kind: str, traffic_kind: str) -> List[PriceCatalogEntry]:
    """解析 server_types / load_balancer_types：每个规格、每个位置的时价、月价和超额流量价"""
    entries = []
    for type_data in types:
        type_name = type_data['name']
        for price in type_data['prices']:
            location = price['location']
            entries.append(_entry(kind, location, type_name, UnitType.HOURLY, price['price_hourly']))
            entries.append(_entry(kind, location, type_name, UnitType.MONTHLY, price['price_monthly']))

            traffic_price = price.get('price_per_tb_traffic')
            if traffic_price is not None:
                entries.append(_entry(traffic_kind, location, type_name, UnitType.PER_TB, traffic_price))
    return entries


def parse_price_list(data: Dict[str, Any]) -> List[PriceCatalogEntry]:
    """
    解析价格列表

    Args:
        data: GET /pricing 的 JSON 响应（包含顶层 "pricing" 字段）

    Returns:
        PriceCatalogEntry 列表

    Raises:
        MalformedCatalog: 缺少字段、类型错误或金额无法解析
    """
    try:
        pricing = data['pricing']
        entries: List[PriceCatalogEntry] = []

        entries.extend(_parse_typed_prices(pricing['server_types'], 'server', 'server_traffic'))
        entries.extend(_parse_typed_prices(pricing['load_balancer_types'], 'load_balancer', 'load_balancer_traffic'))

        for ip_data in pricing['floating_ips']:
            for price in ip_data['prices']:
                entries.append(_entry('floating_ip', price['location'], ip_data['type'],
                                      UnitType.MONTHLY, price['price_monthly']))

        entries.append(_entry('volume', None, None, UnitType.PER_GB_MONTH,
                              pricing['volume']['price_per_gb_month']))
        entries.append(_entry('image', None, None, UnitType.PER_GB_MONTH,
                              pricing['image']['price_per_gb_month']))

        # 备份价格是服务器价格的百分比，净价与含税价相同
        percentage = float(pricing['server_backup']['percentage'])
        entries.append(PriceCatalogEntry(
            resource_kind='server_backup',
            location=None,
            resource_type=None,
            unit_type=UnitType.PERCENTAGE,
            gross=percentage,
            net=percentage,
        ))
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedCatalog(f"价格列表结构不符合预期: {type(e).__name__}: {e}") from e

    logger.debug(f"解析价格列表完成: 共 {len(entries)} 个条目, currency={pricing.get('currency')}")
    return entries
