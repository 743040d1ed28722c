# -*- coding: utf-8 -*-
"""
定时任务实现模块

功能：
- 定时调用采集周期函数和价格表同步函数
- 两个任务在各自的后台线程中按独立间隔运行
- 不直接操作 Prometheus metrics，只负责"什么时候刷新"
- 采集周期失败时按失败策略处理（退出进程或记录日志）
"""

import logging
import os
import threading
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class FailurePolicy(Enum):
    """采集周期失败策略"""
    FATAL = "fatal"  # 退出进程，由外部进程管理器重启
    LOG = "log"      # 记录日志，继续下一个周期


def _exit_process(error: Exception):
    # 后台线程中 sys.exit 只会结束当前线程
    os._exit(1)


class PricingScheduler:
    """
    价格采集定时任务调度器

    职责：
    1. 每 fetch_interval 秒调用一次 fetch_func（采集周期）
    2. 每 sync_interval 秒调用一次 sync_func（价格表同步）
    3. 采集周期失败按 failure_policy 处理；价格表同步失败只记录日志
    """

    def __init__(
        self,
        fetch_func: Callable,
        sync_func: Callable,
        fetch_interval: float = 300,   # 5 分钟
        sync_interval: float = 3000,   # 50 分钟
        failure_policy: FailurePolicy = FailurePolicy.FATAL,
        on_fatal: Optional[Callable[[Exception], None]] = None
    ):
        """
        初始化定时任务调度器

        Args:
            fetch_func: 执行采集周期的函数
            sync_func: 同步价格表的函数
            fetch_interval: 采集间隔（秒）
            sync_interval: 价格表同步间隔（秒）
            failure_policy: 采集周期失败策略
            on_fatal: FATAL 策略下的处理函数，默认退出进程
        """
        self.fetch_func = fetch_func
        self.sync_func = sync_func
        self.fetch_interval = fetch_interval
        self.sync_interval = sync_interval
        self.failure_policy = failure_policy
        self.on_fatal = on_fatal or _exit_process

        # 控制标志
        self._stop_event = threading.Event()
        self._running = False
        self._fetch_thread: Optional[threading.Thread] = None
        self._sync_thread: Optional[threading.Thread] = None

        # 运行状态
        self.fetch_count = 0
        self.fetch_failures = 0
        self.sync_count = 0
        self.sync_failures = 0

        logger.info(
            f"PricingScheduler 初始化完成: fetch_interval={fetch_interval}s, "
            f"sync_interval={sync_interval}s, failure_policy={failure_policy.value}"
        )

    def start(self):
        """
        启动定时任务

        启动两个后台线程：
        - fetch_loop: 每 fetch_interval 秒执行一次
        - sync_loop: 每 sync_interval 秒执行一次
        """
        if self._running:
            logger.warning("定时任务已在运行")
            return

        self._running = True
        self._stop_event.clear()

        self._fetch_thread = threading.Thread(
            target=self._fetch_loop,
            name="FetchCycleThread",
            daemon=True
        )
        self._fetch_thread.start()
        logger.info("采集周期线程已启动")

        self._sync_thread = threading.Thread(
            target=self._sync_loop,
            name="CatalogSyncThread",
            daemon=True
        )
        self._sync_thread.start()
        logger.info("价格表同步线程已启动")

    def stop(self):
        """停止定时任务"""
        if not self._running:
            return

        self._running = False
        self._stop_event.set()
        logger.info("停止定时任务调度器...")

        # 等待线程结束（最多等待 5 秒）
        if self._fetch_thread and self._fetch_thread.is_alive():
            self._fetch_thread.join(timeout=5)

        if self._sync_thread and self._sync_thread.is_alive():
            self._sync_thread.join(timeout=5)

        logger.info("定时任务调度器已停止")

    def run_fetch(self):
        """执行一次采集周期并按失败策略处理异常"""
        self.fetch_count += 1
        try:
            logger.info("[Scheduler] fetch cycle triggered")
            self.fetch_func()
            logger.info("[Scheduler] fetch cycle completed")
        except Exception as e:
            self.fetch_failures += 1
            if self.failure_policy == FailurePolicy.FATAL:
                logger.critical(f"[Scheduler] 采集周期失败，按 fatal 策略退出: {e}")
                self.on_fatal(e)
            else:
                logger.error(f"[Scheduler] 采集周期失败，等待下一个周期: {e}")

    def run_sync(self):
        """执行一次价格表同步；失败时保留旧价格表，不影响采集周期"""
        self.sync_count += 1
        try:
            logger.info("[Scheduler] catalog sync triggered")
            self.sync_func()
            logger.info("[Scheduler] catalog sync completed")
        except Exception as e:
            self.sync_failures += 1
            logger.error(f"[Scheduler] 价格表同步失败，继续使用上一次的价格表: {e}", exc_info=True)

    def _fetch_loop(self):
        logger.info(f"[Scheduler] 采集循环启动，间隔: {self.fetch_interval} 秒")

        # wait 返回 True 表示收到停止信号
        while not self._stop_event.wait(self.fetch_interval):
            self.run_fetch()

        logger.info("[Scheduler] 采集循环已退出")

    def _sync_loop(self):
        logger.info(f"[Scheduler] 价格表同步循环启动，间隔: {self.sync_interval} 秒")

        while not self._stop_event.wait(self.sync_interval):
            self.run_sync()

        logger.info("[Scheduler] 价格表同步循环已退出")

    def get_status(self) -> dict:
        """
        获取定时任务状态

        Returns:
            状态信息字典
        """
        return {
            'running': self._running,
            'fetch_interval': self.fetch_interval,
            'sync_interval': self.sync_interval,
            'failure_policy': self.failure_policy.value,
            'fetch_count': self.fetch_count,
            'fetch_failures': self.fetch_failures,
            'sync_count': self.sync_count,
            'sync_failures': self.sync_failures,
            'fetch_thread_alive': self._fetch_thread.is_alive() if self._fetch_thread else False,
            'sync_thread_alive': self._sync_thread.is_alive() if self._sync_thread else False
        }
