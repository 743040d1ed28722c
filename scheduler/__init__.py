# -*- coding: utf-8 -*-
"""
定时任务模块

功能：
- 按 fetch_interval 定时执行采集周期
- 按 sync_interval 定时同步价格表
- 在后台线程中运行，不阻塞主程序
"""

from scheduler.scheduler import FailurePolicy, PricingScheduler

__all__ = ['FailurePolicy', 'PricingScheduler']
