# -*- coding: utf-8 -*-
"""
价格导出器异常定义

功能：
- 定义 Provider 调用、价格查询、价格表解析的错误类型
- 定义一次采集周期的聚合错误
"""

from typing import List, Optional, Tuple


class PricingError(Exception):
    """所有定价相关错误的基类"""


class ProviderUnavailable(PricingError):
    """云厂商 API 调用失败（网络错误、超时、取消、API 返回错误）"""


class MalformedCatalog(PricingError):
    """价格表响应结构不符合预期"""


class PriceNotFound(PricingError):
    """价格表中没有与资源精确匹配的价格条目"""

    def __init__(self, resource_kind: str, location: Optional[str] = None,
                 resource_type: Optional[str] = None, unit_type=None):
        self.resource_kind = resource_kind
        self.location = location
        self.resource_type = resource_type
        self.unit_type = unit_type
        unit = getattr(unit_type, 'value', unit_type)
        super().__init__(
            f"no price found for kind={resource_kind}, type={resource_type}, "
            f"location={location}, unit={unit}"
        )


class CycleError(PricingError):
    """
    一次采集周期的聚合错误

    errors 为 (collector 名称, 异常) 列表，顺序与 collector 执行顺序一致
    """

    def __init__(self, errors: List[Tuple[str, Exception]]):
        self.errors = list(errors)
        details = "; ".join(f"{name}: {error}" for name, error in self.errors)
        super().__init__(f"{len(self.errors)} collector(s) failed: {details}")
