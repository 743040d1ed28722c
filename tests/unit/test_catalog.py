# -*- coding: utf-8 -*-
"""价格表缓存测试"""

import threading

import pytest

from conftest import FakeProvider
from pricing.catalog import CatalogSnapshot, PriceCatalog, PriceCatalogEntry, UnitType
from pricing.errors import MalformedCatalog, PriceNotFound, ProviderUnavailable


def uniform_price_list(amount):
    """所有条目金额相同的价格列表"""
    return [
        PriceCatalogEntry('server', location, 'cx11', unit, gross=amount, net=amount)
        for location in ('fsn1', 'nbg1', 'hel1')
        for unit in (UnitType.HOURLY, UnitType.MONTHLY)
    ]


class TestLookup:
    """精确查询"""

    def test_returns_unique_matching_entry(self, catalog):
        entry = catalog.lookup('server', 'fsn1', 'cx11', UnitType.HOURLY)
        assert entry.gross == 0.0060
        assert entry.net == 0.0050
        assert entry.location == 'fsn1'

    def test_selects_by_unit(self, catalog):
        entry = catalog.lookup('server', 'fsn1', 'cx11', UnitType.MONTHLY)
        assert entry.gross == 3.0

    @pytest.mark.parametrize('location', ['fsn2', 'fsn', 'FSN1', 'nbg1 ', 'hel1'])
    def test_location_must_match_exactly(self, catalog, location):
        with pytest.raises(PriceNotFound) as exc_info:
            catalog.lookup('server', location, 'cx11', UnitType.HOURLY)
        assert exc_info.value.location == location

    def test_unknown_kind(self, catalog):
        with pytest.raises(PriceNotFound):
            catalog.lookup('primary_ip', 'fsn1', 'ipv4', UnitType.HOURLY)

    def test_location_independent_entry_does_not_match_location(self, catalog):
        assert catalog.lookup('volume', unit_type=UnitType.PER_GB_MONTH).net == 0.04
        with pytest.raises(PriceNotFound):
            catalog.lookup('volume', 'fsn1', unit_type=UnitType.PER_GB_MONTH)

    def test_lookup_before_sync_fails(self):
        catalog = PriceCatalog()
        assert catalog.snapshot is None
        assert catalog.version == 0
        with pytest.raises(PriceNotFound):
            catalog.lookup('server', 'fsn1', 'cx11')


class TestSync:
    """价格表同步"""

    def test_sync_replaces_snapshot(self, catalog):
        old_snapshot = catalog.snapshot
        catalog.sync(FakeProvider(price_list=uniform_price_list(1.0)))

        assert catalog.version == old_snapshot.version + 1
        assert catalog.lookup('server', 'hel1', 'cx11').gross == 1.0
        # 旧快照没有被修改
        assert old_snapshot.lookup('server', 'fsn1', 'cx11').gross == 0.0060
        with pytest.raises(PriceNotFound):
            catalog.lookup('volume', unit_type=UnitType.PER_GB_MONTH)

    def test_provider_failure_keeps_previous_snapshot(self, catalog):
        snapshot = catalog.snapshot
        with pytest.raises(ProviderUnavailable):
            catalog.sync(FakeProvider(price_list=ProviderUnavailable('boom')))

        assert catalog.snapshot is snapshot
        assert catalog.lookup('server', 'fsn1', 'cx11').gross == 0.0060

    def test_duplicate_entries_are_malformed(self, catalog):
        snapshot = catalog.snapshot
        duplicated = uniform_price_list(1.0) + uniform_price_list(2.0)[:1]

        with pytest.raises(MalformedCatalog):
            catalog.sync(FakeProvider(price_list=duplicated))
        assert catalog.snapshot is snapshot

    def test_empty_price_list_still_advances_version(self):
        catalog = PriceCatalog()
        snapshot = catalog.sync(FakeProvider(price_list=[]))

        assert len(snapshot) == 0
        assert catalog.snapshot is snapshot
        assert catalog.version == 1

    def test_snapshot_is_read_only(self, price_list):
        snapshot = CatalogSnapshot(price_list, version=1)
        assert len(snapshot) == len(price_list)
        with pytest.raises(TypeError):
            snapshot._entries[('server', 'cx11', 'fsn1', UnitType.HOURLY)] = None


class TestConcurrency:
    """sync 与 lookup 并发"""

    def test_readers_never_observe_mixed_snapshot(self):
        catalog = PriceCatalog()
        lists = [uniform_price_list(1.0), uniform_price_list(2.0)]
        catalog.sync(FakeProvider(price_list=lists[0]))

        stop = threading.Event()
        mixed = []

        def writer():
            i = 0
            while not stop.is_set():
                i += 1
                catalog.sync(FakeProvider(price_list=lists[i % 2]))

        def reader():
            while not stop.is_set():
                snapshot = catalog.snapshot
                amounts = {
                    snapshot.lookup('server', location, 'cx11', unit).gross
                    for location in ('fsn1', 'nbg1', 'hel1')
                    for unit in (UnitType.HOURLY, UnitType.MONTHLY)
                }
                if len(amounts) != 1:
                    mixed.append(amounts)
                # 单次 lookup 必须来自某一个完整的价格列表
                gross = catalog.lookup('server', 'nbg1', 'cx11').gross
                if gross not in (1.0, 2.0):
                    mixed.append({gross})

        threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(3)]
        for thread in threads:
            thread.start()
        stop.wait(0.3)
        stop.set()
        for thread in threads:
            thread.join(timeout=5)

        assert mixed == []
        assert catalog.version > 1
