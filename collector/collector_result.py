# -*- coding: utf-8 -*-
"""
采集结果数据结构

功能：
- 定义单个采集器在一次周期中的执行状态
- 供 /health 和日志汇总使用
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CollectorStatus(Enum):
    """采集状态"""
    SUCCESS = "success"    # 采集成功
    FAILED = "failed"      # 采集失败


@dataclass
class CollectorResult:
    """单个采集器的执行结果"""
    collector: str                     # 采集器名称（资源名）
    status: CollectorStatus            # 采集状态
    published: int = 0                 # 发布了指标的资源数量
    duration: float = 0.0              # 耗时（秒）
    error: Optional[str] = None        # 错误信息（failed 时）
    error_type: Optional[str] = None   # 错误类型（failed 时）

    def is_success(self) -> bool:
        return self.status == CollectorStatus.SUCCESS

    def is_failed(self) -> bool:
        return self.status == CollectorStatus.FAILED

    def to_dict(self) -> dict:
        return {
            'collector': self.collector,
            'status': self.status.value,
            'published': self.published,
            'duration': round(self.duration, 3),
            'error': self.error,
            'error_type': self.error_type,
        }
