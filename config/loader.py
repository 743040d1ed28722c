# -*- coding: utf-8 -*-
"""
Exporter 配置加载模块

功能：
- 定义配置数据结构（ExporterConfig）
- 按优先级合并：命令行参数 > 环境变量 > YAML 配置文件 > 默认值
- 解析时长（支持 300、"1.5"、"500ms"、"90s"、"5m"、"1h30m"）
"""

import argparse
import os
import re
from dataclasses import dataclass, fields
from typing import Dict, List, Mapping, Optional, Union

import yaml

DEFAULT_PORT = 8080
DEFAULT_FETCH_INTERVAL = 300  # 5 分钟
PRICING_INTERVAL_FACTOR = 10  # 价格表同步间隔默认是采集间隔的 10 倍


@dataclass
class ExporterConfig:
    """Exporter 配置"""
    hcloud_token: str = ''                          # Hetzner Cloud API Token
    port: int = DEFAULT_PORT                        # /metrics 监听端口
    fetch_interval: float = DEFAULT_FETCH_INTERVAL  # 采集间隔（秒）
    pricing_interval: Optional[float] = None        # 价格表同步间隔（秒），默认 10 × fetch_interval
    namespace: str = 'hcloud'                       # 指标命名空间
    request_timeout: float = 30.0                   # 单次 API 请求超时（秒）
    max_retries: int = 3                            # 瞬时错误重试次数
    failure_policy: str = 'fatal'                   # 采集周期失败策略：fatal / log
    log_level: str = 'INFO'                         # 日志级别

    def __post_init__(self):
        if self.pricing_interval is None:
            self.pricing_interval = self.fetch_interval * PRICING_INTERVAL_FACTOR


# 环境变量 -> 配置字段
ENV_VARS = {
    'HCLOUD_TOKEN': 'hcloud_token',
    'EXPORTER_PORT': 'port',
    'FETCH_INTERVAL': 'fetch_interval',
    'PRICING_INTERVAL': 'pricing_interval',
    'METRICS_NAMESPACE': 'namespace',
    'REQUEST_TIMEOUT': 'request_timeout',
    'MAX_RETRIES': 'max_retries',
    'FAILURE_POLICY': 'failure_policy',
    'LOG_LEVEL': 'log_level',
}

_DURATION_PART = re.compile(r'(\d+(?:\.\d+)?)(ms|h|m|s)')
_DURATION_UNITS = {'h': 3600, 'm': 60, 's': 1, 'ms': 0.001}
_PLAIN_SECONDS = re.compile(r'\d+(?:\.\d+)?')


def _seconds(total: float) -> Union[int, float]:
    """整秒返回 int，否则保留小数"""
    return int(total) if float(total).is_integer() else float(total)


def parse_duration(value) -> Union[int, float]:
    """
    解析时长为秒数

    Args:
        value: 数字秒数（"300", "1.5"），或 Go 风格时长字符串（"500ms", "90s", "5m", "1h30m"）

    Returns:
        秒数（整秒为 int，否则为 float）

    Raises:
        ValueError: 格式无效
    """
    if isinstance(value, bool):
        raise ValueError(f"无效的时长: {value}")
    if isinstance(value, (int, float)):
        return _seconds(value)

    text = str(value).strip().lower()
    if _PLAIN_SECONDS.fullmatch(text):
        return _seconds(float(text))

    if not text or _DURATION_PART.sub('', text):
        raise ValueError(f"无效的时长: {value}")

    total = 0.0
    for amount, unit in _DURATION_PART.findall(text):
        total += float(amount) * _DURATION_UNITS[unit]
    return _seconds(round(total, 6))


def _convert(field_name: str, value):
    """将字符串或 YAML 值转换为字段类型"""
    if value is None:
        return None
    if field_name in ('fetch_interval', 'pricing_interval'):
        return parse_duration(value)
    if field_name in ('port', 'max_retries'):
        return int(value)
    if field_name == 'request_timeout':
        return float(parse_duration(value))
    if field_name in ('failure_policy', 'log_level'):
        value = str(value).strip()
        return value.upper() if field_name == 'log_level' else value.lower()
    return str(value)


def load_config_file(config_path: str) -> Dict:
    """
    从 YAML 文件加载配置

    Raises:
        FileNotFoundError: 文件不存在
        ValueError: YAML 解析失败或格式错误
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"配置文件不存在: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"YAML 解析失败: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("配置格式错误: 顶层必须是字典类型")

    known = {f.name for f in fields(ExporterConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"配置格式错误: 未知字段 {', '.join(sorted(unknown))}")
    return data


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Export Hetzner Cloud resource costs as Prometheus metrics')
    parser.add_argument('--config', help='YAML 配置文件路径')
    parser.add_argument('--hcloud-token', dest='hcloud_token', help='the token to authenticate against the HCloud API')
    parser.add_argument('--port', help='the port that the exporter exposes its data on')
    parser.add_argument('--fetch-interval', dest='fetch_interval', help='the interval between data fetching cycles')
    parser.add_argument('--pricing-interval', dest='pricing_interval', help='the interval between price catalog syncs')
    parser.add_argument('--namespace', help='the metric namespace')
    parser.add_argument('--request-timeout', dest='request_timeout', help='timeout of a single API request')
    parser.add_argument('--max-retries', dest='max_retries', help='retries for transient API errors')
    parser.add_argument('--failure-policy', dest='failure_policy', choices=['fatal', 'log'],
                        help='what to do when a fetch cycle fails')
    parser.add_argument('--log-level', dest='log_level', help='log level (DEBUG, INFO, WARNING, ERROR)')
    return parser


def load_config(argv: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None) -> ExporterConfig:
    """
    加载 Exporter 配置

    Args:
        argv: 命令行参数（默认 sys.argv[1:]）
        environ: 环境变量（默认 os.environ）

    Returns:
        ExporterConfig 对象

    Raises:
        FileNotFoundError: 指定的配置文件不存在
        ValueError: 配置值无效
    """
    environ = os.environ if environ is None else environ
    args = build_arg_parser().parse_args(argv)

    values: Dict = {}

    config_path = args.config or environ.get('CONFIG_FILE')
    if config_path:
        values.update(load_config_file(config_path))

    for env_name, field_name in ENV_VARS.items():
        if environ.get(env_name):
            values[field_name] = environ[env_name]

    for f in fields(ExporterConfig):
        arg_value = getattr(args, f.name, None)
        if arg_value is not None:
            values[f.name] = arg_value

    converted = {}
    for field_name, value in values.items():
        try:
            converted[field_name] = _convert(field_name, value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"配置项 {field_name} 无效: {e}")

    return ExporterConfig(**{k: v for k, v in converted.items() if v is not None})
