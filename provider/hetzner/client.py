# -*- coding: utf-8 -*-
"""
Hetzner Cloud API 客户端模块

功能：
- 封装 hcloud SDK 调用（servers, floating_ips, load_balancers, volumes, images, pricing）
- 将 SDK 对象转换为 Resource 视图
- 将 SDK/网络异常统一转换为 ProviderUnavailable
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable, Dict, List

import requests
from hcloud import Client, HCloudException

from pricing.errors import ProviderUnavailable
from provider.hetzner.pricing import parse_price_list
from provider.interfaces import ProviderClient, Resource, ResourceKind
from retry.retry import retry_with_backoff

logger = logging.getLogger(__name__)

APPLICATION_NAME = 'hcloud-pricing-exporter'

# 等待进行中调用时检查取消的间隔（秒）
CANCEL_POLL_INTERVAL = 0.05


def _server_to_resource(server) -> Resource:
    return Resource(
        identifier=str(server.id),
        name=server.name,
        kind=ResourceKind.SERVER,
        location=server.datacenter.location.name,
        resource_type=server.server_type.name,
        created_at=server.created,
        attributes={
            'backups_enabled': bool(server.backup_window),
            'outgoing_traffic': server.outgoing_traffic or 0,  # 字节
            'included_traffic': server.included_traffic or 0,  # 字节
        },
    )


def _floating_ip_to_resource(floating_ip) -> Resource:
    return Resource(
        identifier=str(floating_ip.id),
        name=floating_ip.name,
        kind=ResourceKind.FLOATING_IP,
        location=floating_ip.home_location.name,
        resource_type=floating_ip.type,  # ipv4 / ipv6
        created_at=floating_ip.created,
    )


def _load_balancer_to_resource(load_balancer) -> Resource:
    return Resource(
        identifier=str(load_balancer.id),
        name=load_balancer.name,
        kind=ResourceKind.LOAD_BALANCER,
        location=load_balancer.location.name,
        resource_type=load_balancer.load_balancer_type.name,
        created_at=load_balancer.created,
        attributes={
            'outgoing_traffic': load_balancer.outgoing_traffic or 0,
            'included_traffic': load_balancer.included_traffic or 0,
        },
    )


def _volume_to_resource(volume) -> Resource:
    return Resource(
        identifier=str(volume.id),
        name=volume.name,
        kind=ResourceKind.VOLUME,
        location=volume.location.name,
        resource_type=None,
        created_at=volume.created,
        attributes={'size': volume.size},  # GB
    )


def _snapshot_to_resource(image) -> Resource:
    return Resource(
        identifier=str(image.id),
        name=image.description or str(image.id),
        kind=ResourceKind.SNAPSHOT,
        location=None,
        resource_type=None,
        created_at=image.created,
        attributes={'image_size': image.image_size or 0.0},  # GB
    )


class HetznerProvider(ProviderClient):
    """
    Hetzner Cloud Provider 实现

    功能：
    - 按资源类型调用对应的 list API（自动分页）
    - 调用 /pricing 获取价格列表
    - 瞬时错误按指数退避重试
    """

    def __init__(self, token: str = None, timeout: float = 30.0, max_retries: int = 3,
                 retry_interval: float = 1.0, client: Client = None):
        """
        初始化 Hetzner Provider

        Args:
            token: Hetzner Cloud API Token
            timeout: 单次 HTTP 请求超时（秒）
            max_retries: 瞬时错误最大重试次数
            retry_interval: 初始重试间隔（秒）
            client: 已创建的 hcloud Client（可选，测试时注入）
        """
        if client is None:
            client = Client(token=token, application_name=APPLICATION_NAME, timeout=timeout)
            logger.debug(f"hcloud 客户端初始化成功, timeout={timeout}s")
        self.client = client
        self.max_retries = max_retries
        self.retry_interval = retry_interval
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix='hcloud-call')

        self._listers: Dict[ResourceKind, Callable[[], List[Resource]]] = {
            ResourceKind.SERVER: lambda: [_server_to_resource(s) for s in self.client.servers.get_all()],
            ResourceKind.FLOATING_IP: lambda: [_floating_ip_to_resource(f) for f in self.client.floating_ips.get_all()],
            ResourceKind.LOAD_BALANCER: lambda: [_load_balancer_to_resource(lb) for lb in self.client.load_balancers.get_all()],
            ResourceKind.VOLUME: lambda: [_volume_to_resource(v) for v in self.client.volumes.get_all()],
            ResourceKind.SNAPSHOT: lambda: [_snapshot_to_resource(i) for i in self.client.images.get_all(type='snapshot')],
        }

    def _call(self, description: str, func: Callable, ctx=None):
        """执行一次 API 调用，异常转换为 ProviderUnavailable"""
        def invoke():
            try:
                return func()
            except (HCloudException, requests.exceptions.RequestException) as e:
                logger.warning(f"{description} 失败: {e}")
                raise ProviderUnavailable(f"{description} failed: {e}") from e

        def attempt():
            if ctx is None:
                return invoke()
            ctx.check()
            return self._wait_bounded(description, self._executor.submit(invoke), ctx)

        return retry_with_backoff(
            attempt,
            max_retries=self.max_retries,
            initial_interval=self.retry_interval,
            ctx=ctx,
        )

    @staticmethod
    def _wait_bounded(description: str, future: Future, ctx):
        """
        等待进行中的调用，受上下文的截止时间和取消约束

        超时或取消时放弃该调用（后台线程仍受 HTTP 超时约束），
        抛出 ProviderUnavailable
        """
        while True:
            remaining = ctx.remaining()
            wait = CANCEL_POLL_INTERVAL if remaining is None else min(CANCEL_POLL_INTERVAL, remaining)
            try:
                result = future.result(timeout=wait)
                break
            except FuturesTimeoutError:
                if ctx.cancelled or ctx.remaining() == 0:
                    future.cancel()
                    logger.warning(f"{description} 被中止: 上下文已取消或超时")
                    ctx.check()
        ctx.check()
        return result

    def list_resources(self, kind: ResourceKind, ctx=None) -> List[Resource]:
        """
        枚举指定类型的资源

        Raises:
            ProviderUnavailable: API 调用失败、超时或上下文已取消
        """
        lister = self._listers.get(kind)
        if lister is None:
            raise ValueError(f"不支持的资源类型: {kind}")

        resources = self._call(f"list {kind.value}", lister, ctx)
        logger.debug(f"获取到 {len(resources)} 个 {kind.value}")
        return resources

    def get_price_list(self, ctx=None) -> list:
        """
        拉取价格列表

        Raises:
            ProviderUnavailable: API 调用失败
            MalformedCatalog: 响应结构不符合预期
        """
        data = self._call("get pricing", lambda: self.client.request("GET", "/pricing"), ctx)
        return parse_price_list(data)
