# -*- coding: utf-8 -*-
"""
重试机制实现模块

功能：
- 指数退避重试
- 可配置重试次数和间隔
- 上下文取消或超时后不再重试
"""

import logging
import time
from typing import Callable, Tuple, Type

from pricing.errors import ProviderUnavailable

logger = logging.getLogger(__name__)


def retry_with_backoff(
    func: Callable,
    max_retries: int = 3,
    initial_interval: float = 1.0,
    max_interval: float = 30.0,
    multiplier: float = 2.0,
    retry_on: Tuple[Type[BaseException], ...] = (ProviderUnavailable,),
    ctx=None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    使用指数退避执行重试

    Args:
        func: 要执行的无参函数
        max_retries: 最大重试次数（不含首次执行）
        initial_interval: 初始重试间隔（秒）
        max_interval: 最大重试间隔（秒）
        multiplier: 退避倍数
        retry_on: 可重试的异常类型
        ctx: RequestContext（可选），取消或剩余时间不足时直接抛出
        sleep: 等待函数（测试时可替换）

    Returns:
        函数执行结果

    Raises:
        达到最大重试次数后抛出最后一次的异常
    """
    interval = initial_interval
    attempt = 0

    while True:
        if ctx is not None:
            ctx.check()

        try:
            return func()
        except retry_on as e:
            if attempt >= max_retries:
                logger.error(f"重试 {max_retries} 次后仍然失败: {e}")
                raise

            if ctx is not None:
                remaining = ctx.remaining()
                if ctx.cancelled or (remaining is not None and remaining < interval):
                    raise

            attempt += 1
            logger.warning(f"调用失败，{interval:.1f} 秒后第 {attempt}/{max_retries} 次重试: {e}")
            sleep(interval)
            interval = min(interval * multiplier, max_interval)
