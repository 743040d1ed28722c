# -*- coding: utf-8 -*-
"""
请求上下文

功能：
- 为一次采集周期或价格同步设置截止时间
- 支持外部取消（threading.Event）
- Provider 发起请求前及请求进行中检查上下文
"""

import threading
import time
from typing import Optional

from pricing.errors import ProviderUnavailable


class RequestContext:
    """带截止时间和取消信号的请求上下文"""

    def __init__(self, timeout: Optional[float] = None, cancel_event: Optional[threading.Event] = None):
        """
        Args:
            timeout: 从现在起的超时时间（秒），None 表示不限
            cancel_event: 取消信号，set 之后所有后续请求立即失败
        """
        self.deadline = time.monotonic() + timeout if timeout is not None else None
        self.cancel_event = cancel_event or threading.Event()

    def cancel(self):
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def remaining(self) -> Optional[float]:
        """剩余时间（秒），不限时返回 None"""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self):
        """
        检查上下文是否仍然有效

        Raises:
            ProviderUnavailable: 已取消或已超时
        """
        if self.cancelled:
            raise ProviderUnavailable("request cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise ProviderUnavailable("request deadline exceeded")
