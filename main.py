#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Hetzner Cloud Pricing Exporter 主程序入口

功能：
- 启动 Flask HTTP 服务器
- 暴露 /metrics 端点供 Prometheus 抓取
- 暴露 /health 健康检查端点
- 定时同步价格表、定时执行采集周期
"""

import logging
import sys
import time
from typing import Optional

from flask import Flask
from prometheus_client import CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST

from collector import CollectorSet, build_collectors
from config.loader import ExporterConfig, load_config
from config.validator import log_level_value, validate_config
from pricing.catalog import PriceCatalog
from pricing.errors import CycleError, PricingError
from provider.context import RequestContext
from provider.hetzner import HetznerProvider
from provider.interfaces import ProviderClient
from scheduler import FailurePolicy, PricingScheduler

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# 减少 Flask 日志
logging.getLogger('werkzeug').setLevel(logging.WARNING)

# 创建 Flask 应用
app = Flask(__name__)

# 全局组件（在 main 函数中初始化）
registry: Optional[CollectorRegistry] = None
collector_set: Optional[CollectorSet] = None
catalog: Optional[PriceCatalog] = None
provider: Optional[ProviderClient] = None
scheduler: Optional[PricingScheduler] = None
config: Optional[ExporterConfig] = None


@app.route('/metrics')
def metrics():
    """
    Prometheus metrics 端点

    返回所有价格相关的 Prometheus 指标
    格式：Prometheus text format

    累计费用计数器按 Prometheus 命名约定带 _total 后缀暴露：
    <namespace>_pricing_<resource>_current_counter_total
    """
    if registry is None:
        return "# Exporter not initialized\n", 200, {'Content-Type': CONTENT_TYPE_LATEST}

    return generate_latest(registry), 200, {'Content-Type': CONTENT_TYPE_LATEST}


@app.route('/health')
def health():
    """
    健康检查端点

    返回 exporter 状态、价格表版本、最近一次采集结果
    """
    status = {'status': 'healthy'}

    if catalog is not None:
        snapshot = catalog.snapshot
        status['catalog'] = {
            'version': catalog.version,
            'entries': len(snapshot) if snapshot is not None else 0,
            'age_seconds': round(time.time() - snapshot.fetched_at, 1) if snapshot is not None else None,
        }
        if snapshot is None:
            status['status'] = 'unhealthy'

    if collector_set is not None:
        summary = collector_set.get_summary()
        status['last_cycle'] = summary
        if summary['failed']:
            status['status'] = 'degraded'

    if scheduler is not None:
        status['scheduler'] = scheduler.get_status()

    code = 503 if status['status'] == 'unhealthy' else 200
    return status, code


def fetch_cycle():
    """
    执行一次采集周期（供 scheduler 调用）

    超时时间等于采集间隔，避免两个周期重叠

    Raises:
        CycleError: 至少一个采集器失败
    """
    ctx = RequestContext(timeout=config.fetch_interval)
    collector_set.run_cycle(provider, ctx)


def sync_catalog():
    """
    同步价格表（供 scheduler 调用）

    Raises:
        ProviderUnavailable / MalformedCatalog: 同步失败，保留旧价格表
    """
    ctx = RequestContext(timeout=config.pricing_interval)
    catalog.sync(provider, ctx)


def main(argv=None):
    """
    主函数：启动 Flask 服务器

    功能：
    1. 加载并验证配置
    2. 初始化 Provider、价格表、采集器
    3. 同步价格表并执行初始采集
    4. 启动定时任务和 HTTP 服务器
    """
    global registry, collector_set, catalog, provider, scheduler, config

    # Phase 1: 加载配置
    try:
        config = load_config(argv)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"加载配置失败: {e}")
        sys.exit(1)

    is_valid, error_message = validate_config(config)
    if not is_valid:
        logger.error(f"配置无效: {error_message}")
        sys.exit(1)

    logging.getLogger().setLevel(log_level_value(config.log_level))
    logger.info("Starting HCloud Pricing Exporter...")
    logger.info(
        f"port={config.port}, fetch_interval={config.fetch_interval}s, "
        f"pricing_interval={config.pricing_interval}s, failure_policy={config.failure_policy}"
    )

    # Phase 2: 初始化组件
    provider = HetznerProvider(
        token=config.hcloud_token,
        timeout=config.request_timeout,
        max_retries=config.max_retries,
    )
    catalog = PriceCatalog()
    collector_set = CollectorSet(
        build_collectors(catalog, namespace=config.namespace),
        catalog=catalog,
        namespace=config.namespace,
    )

    registry = CollectorRegistry()
    collector_set.register_all(registry)

    # Phase 3: 初始价格表同步和采集
    try:
        sync_catalog()
    except PricingError as e:
        logger.error(f"初始价格表同步失败，无法计算费用: {e}")
        sys.exit(1)

    failure_policy = FailurePolicy(config.failure_policy)
    try:
        fetch_cycle()
    except CycleError as e:
        if failure_policy == FailurePolicy.FATAL:
            logger.critical(f"初始采集失败: {e}")
            sys.exit(1)
        logger.error(f"初始采集失败，继续启动: {e}")

    # Phase 4: 启动定时任务
    scheduler = PricingScheduler(
        fetch_func=fetch_cycle,
        sync_func=sync_catalog,
        fetch_interval=config.fetch_interval,
        sync_interval=config.pricing_interval,
        failure_policy=failure_policy,
    )
    scheduler.start()

    # Phase 5: 启动 HTTP 服务器
    logger.info(f"HTTP 服务器启动: 0.0.0.0:{config.port}")
    app.run(host='0.0.0.0', port=config.port, debug=False)


if __name__ == '__main__':
    main()
