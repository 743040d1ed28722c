# -*- coding: utf-8 -*-
"""
费用累计计算

功能：
- 月价与时价换算
- 按创建时间计算至今的累计费用（不足一小时按一小时计）
"""

import math
from datetime import datetime, timezone
from typing import Optional

HOURS_PER_MONTH = 30 * 24  # 月价换算时价：按 30 天计
BYTES_PER_TB = 1000 ** 4    # 流量按十进制 TB 计费


def hourly_from_monthly(monthly: float) -> float:
    """月价换算为时价"""
    return monthly / HOURS_PER_MONTH


def billed_hours(created_at: datetime, now: Optional[datetime] = None) -> int:
    """
    计算从创建时间到 now 的计费小时数（向上取整）

    Args:
        created_at: 资源创建时间（带时区）
        now: 计算时刻，默认当前 UTC 时间

    Returns:
        计费小时数；创建时间晚于 now（时钟偏差）时返回 0
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elapsed_hours = (now - created_at).total_seconds() / 3600
    if elapsed_hours <= 0:
        return 0
    return math.ceil(elapsed_hours)


def accrued_cost(created_at: datetime, hourly_net: float, now: Optional[datetime] = None) -> float:
    """累计费用 = 计费小时数 × 每小时净价"""
    return billed_hours(created_at, now) * hourly_net
