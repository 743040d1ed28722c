# -*- coding: utf-8 -*-
"""
定价模块

功能：
- 价格表缓存与精确查询
- 累计费用计算
- 定价相关异常
"""

from .catalog import CatalogSnapshot, Price, PriceCatalog, PriceCatalogEntry, UnitType
from .errors import CycleError, MalformedCatalog, PriceNotFound, PricingError, ProviderUnavailable
