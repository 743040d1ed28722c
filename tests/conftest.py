# -*- coding: utf-8 -*-
"""测试公共 fixture"""

from datetime import datetime, timedelta, timezone

import pytest
from prometheus_client import CollectorRegistry

from pricing.catalog import PriceCatalog, PriceCatalogEntry, UnitType
from provider.interfaces import ProviderClient, Resource, ResourceKind

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeProvider(ProviderClient):
    """内存中的 Provider：按资源类型返回预设资源或抛出预设异常"""

    def __init__(self, resources=None, price_list=None):
        self.resources = resources or {}
        self.price_list = price_list or []
        self.list_calls = []

    def list_resources(self, kind, ctx=None):
        self.list_calls.append(kind)
        if ctx is not None:
            ctx.check()
        value = self.resources.get(kind, [])
        if isinstance(value, Exception):
            raise value
        return list(value)

    def get_price_list(self, ctx=None):
        if isinstance(self.price_list, Exception):
            raise self.price_list
        return list(self.price_list)


def make_resource(name, kind=ResourceKind.SERVER, location='fsn1', resource_type='cx11',
                  age=timedelta(hours=1), **attributes):
    return Resource(
        identifier=name,
        name=name,
        kind=kind,
        location=location,
        resource_type=resource_type,
        created_at=NOW - age,
        attributes=attributes,
    )


def sample_price_list():
    return [
        PriceCatalogEntry('server', 'fsn1', 'cx11', UnitType.HOURLY, gross=0.0060, net=0.0050),
        PriceCatalogEntry('server', 'fsn1', 'cx11', UnitType.MONTHLY, gross=3.0, net=2.5),
        PriceCatalogEntry('server', 'nbg1', 'cx11', UnitType.HOURLY, gross=0.0070, net=0.0060),
        PriceCatalogEntry('server', 'nbg1', 'cx11', UnitType.MONTHLY, gross=3.5, net=3.0),
        PriceCatalogEntry('server_traffic', 'fsn1', 'cx11', UnitType.PER_TB, gross=1.19, net=1.0),
        PriceCatalogEntry('load_balancer', 'fsn1', 'lb11', UnitType.HOURLY, gross=0.0095, net=0.008),
        PriceCatalogEntry('load_balancer', 'fsn1', 'lb11', UnitType.MONTHLY, gross=5.83, net=4.9),
        PriceCatalogEntry('load_balancer_traffic', 'fsn1', 'lb11', UnitType.PER_TB, gross=1.19, net=1.0),
        PriceCatalogEntry('floating_ip', 'fsn1', 'ipv4', UnitType.MONTHLY, gross=4.32, net=3.6),
        PriceCatalogEntry('volume', None, None, UnitType.PER_GB_MONTH, gross=0.0476, net=0.04),
        PriceCatalogEntry('image', None, None, UnitType.PER_GB_MONTH, gross=0.0119, net=0.01),
        PriceCatalogEntry('server_backup', None, None, UnitType.PERCENTAGE, gross=20.0, net=20.0),
    ]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def price_list():
    return sample_price_list()


@pytest.fixture
def catalog(price_list):
    """已同步 sample_price_list 的价格表"""
    catalog = PriceCatalog()
    catalog.sync(FakeProvider(price_list=price_list))
    return catalog


@pytest.fixture
def registry():
    return CollectorRegistry()
