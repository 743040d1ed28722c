# -*- coding: utf-8 -*-
"""
配置验证模块

功能：
- 验证配置的完整性和正确性
- 检查必填字段
- 验证字段格式和取值范围
"""

import logging
from typing import Optional, Tuple

VALID_FAILURE_POLICIES = ['fatal', 'log']
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'WARN', 'ERROR', 'CRITICAL']


def validate_config(config) -> Tuple[bool, Optional[str]]:
    """
    验证配置对象

    Args:
        config: ExporterConfig 对象

    Returns:
        (is_valid, error_message) 元组
    """
    if not config.hcloud_token:
        return False, "no API token for HCloud specified, but required (--hcloud-token or HCLOUD_TOKEN)"

    if not 1 <= config.port <= 65535:
        return False, f"port 必须在 1-65535 之间: {config.port}"

    if config.fetch_interval <= 0:
        return False, f"fetch_interval 必须是正数: {config.fetch_interval}"

    if config.pricing_interval <= 0:
        return False, f"pricing_interval 必须是正数: {config.pricing_interval}"

    if config.pricing_interval < config.fetch_interval:
        return False, (
            f"pricing_interval ({config.pricing_interval}s) 不能小于 "
            f"fetch_interval ({config.fetch_interval}s)"
        )

    if config.request_timeout <= 0:
        return False, f"request_timeout 必须是正数: {config.request_timeout}"

    if config.max_retries < 0:
        return False, f"max_retries 不能为负数: {config.max_retries}"

    if config.failure_policy not in VALID_FAILURE_POLICIES:
        return False, f"failure_policy 必须是以下值之一: {', '.join(VALID_FAILURE_POLICIES)}"

    if config.log_level not in VALID_LOG_LEVELS:
        return False, f"log_level 必须是以下值之一: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def log_level_value(level: str) -> int:
    """日志级别名称转换为 logging 常量"""
    if level == 'WARN':
        level = 'WARNING'
    return getattr(logging, level, logging.INFO)
