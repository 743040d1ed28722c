# -*- coding: utf-8 -*-
"""
Hetzner Cloud Provider 模块

功能：
- 通过 hcloud SDK 枚举计费资源
- 解析价格列表
"""

from .client import HetznerProvider
from .pricing import parse_price_list
