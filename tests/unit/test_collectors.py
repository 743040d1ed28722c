# -*- coding: utf-8 -*-
"""资源采集器测试"""

from datetime import timedelta

import pytest

from collector import (
    COLLECTOR_CLASSES,
    FloatingIPCollector,
    LoadBalancerCollector,
    LoadBalancerTrafficCollector,
    ServerBackupCollector,
    ServerCollector,
    ServerTrafficCollector,
    SnapshotCollector,
    VolumeCollector,
    build_collectors,
)
from conftest import FakeProvider, make_resource
from pricing.errors import PriceNotFound, ProviderUnavailable
from provider.interfaces import ResourceKind

TB = 1000 ** 4


def run_collector(collector, registry, resources):
    for metric in collector.metric_handles():
        registry.register(metric)
    provider = FakeProvider(resources={collector.kind: resources})
    return collector.run(provider)


def samples(registry, resource, labels):
    prefix = f'hcloud_pricing_{resource}'
    return {
        'hourly': registry.get_sample_value(f'{prefix}_hourly', labels),
        'monthly': registry.get_sample_value(f'{prefix}_monthly', labels),
        'current': registry.get_sample_value(f'{prefix}_current', labels),
        'counter': registry.get_sample_value(f'{prefix}_current_counter_total', labels),
    }


class TestServerCollector:
    """服务器"""

    def test_end_to_end_scenario(self, catalog, clock, registry):
        collector = ServerCollector(catalog, clock=clock)
        web = make_resource('web-1', location='fsn1', resource_type='cx11', age=timedelta(hours=3, minutes=1))

        published = run_collector(collector, registry, [web])

        assert published == 1
        values = samples(registry, 'server', {'name': 'web-1', 'location': 'fsn1', 'type': 'cx11'})
        assert values['hourly'] == pytest.approx(0.0060)
        assert values['monthly'] == pytest.approx(3.0)
        assert values['current'] == pytest.approx(0.0200)
        assert values['counter'] == pytest.approx(0.0200)

    def test_price_follows_location(self, catalog, clock, registry):
        collector = ServerCollector(catalog, clock=clock)
        run_collector(collector, registry, [make_resource('db-1', location='nbg1')])

        values = samples(registry, 'server', {'name': 'db-1', 'location': 'nbg1', 'type': 'cx11'})
        assert values['hourly'] == pytest.approx(0.0070)
        assert values['current'] == pytest.approx(0.0060)

    def test_missing_price_keeps_already_processed_resources(self, catalog, clock, registry):
        collector = ServerCollector(catalog, clock=clock)
        resources = [
            make_resource('web-1'),
            make_resource('web-2', location='ash'),
            make_resource('web-3'),
        ]

        with pytest.raises(PriceNotFound):
            run_collector(collector, registry, resources)

        labels = {'name': 'web-1', 'location': 'fsn1', 'type': 'cx11'}
        assert registry.get_sample_value('hcloud_pricing_server_hourly', labels) == pytest.approx(0.0060)
        assert registry.get_sample_value(
            'hcloud_pricing_server_hourly', {'name': 'web-3', 'location': 'fsn1', 'type': 'cx11'}) is None

    def test_provider_failure_publishes_nothing(self, catalog, clock, registry):
        collector = ServerCollector(catalog, clock=clock)
        for metric in collector.metric_handles():
            registry.register(metric)

        with pytest.raises(ProviderUnavailable):
            collector.run(FakeProvider(resources={ResourceKind.SERVER: ProviderUnavailable('down')}))

        assert list(collector.hourly.collect()[0].samples) == []


class TestOtherCollectors:
    """其余资源类型"""

    def test_floating_ip(self, catalog, clock, registry):
        collector = FloatingIPCollector(catalog, clock=clock)
        ip = make_resource('ip-1', kind=ResourceKind.FLOATING_IP, resource_type='ipv4')
        run_collector(collector, registry, [ip])

        values = samples(registry, 'floatingip', {'name': 'ip-1', 'location': 'fsn1', 'type': 'ipv4'})
        assert values['monthly'] == pytest.approx(4.32)
        assert values['hourly'] == pytest.approx(4.32 / 720)
        assert values['current'] == pytest.approx(3.6 / 720)

    def test_load_balancer(self, catalog, clock, registry):
        collector = LoadBalancerCollector(catalog, clock=clock)
        lb = make_resource('lb-1', kind=ResourceKind.LOAD_BALANCER, resource_type='lb11',
                           age=timedelta(hours=2, minutes=30))
        run_collector(collector, registry, [lb])

        values = samples(registry, 'loadbalancer', {'name': 'lb-1', 'location': 'fsn1', 'type': 'lb11'})
        assert values['hourly'] == pytest.approx(0.0095)
        assert values['monthly'] == pytest.approx(5.83)
        assert values['current'] == pytest.approx(3 * 0.008)

    def test_volume(self, catalog, clock, registry):
        collector = VolumeCollector(catalog, clock=clock)
        volume = make_resource('data', kind=ResourceKind.VOLUME, resource_type=None, size=10)
        run_collector(collector, registry, [volume])

        values = samples(registry, 'volume', {'name': 'data', 'location': 'fsn1', 'size': '10'})
        assert values['monthly'] == pytest.approx(0.476)
        assert values['hourly'] == pytest.approx(0.476 / 720)
        assert values['current'] == pytest.approx(0.4 / 720)

    def test_snapshot(self, catalog, clock, registry):
        collector = SnapshotCollector(catalog, clock=clock)
        snapshot = make_resource('nightly', kind=ResourceKind.SNAPSHOT, location=None,
                                 resource_type=None, age=timedelta(hours=10), image_size=2.5)
        run_collector(collector, registry, [snapshot])

        values = samples(registry, 'snapshot', {'name': 'nightly'})
        assert values['monthly'] == pytest.approx(2.5 * 0.0119)
        assert values['current'] == pytest.approx(10 * 2.5 * 0.01 / 720)

    def test_backup_only_for_servers_with_backups(self, catalog, clock, registry):
        collector = ServerBackupCollector(catalog, clock=clock)
        resources = [
            make_resource('with-backup', backups_enabled=True),
            make_resource('without-backup', backups_enabled=False),
        ]
        published = run_collector(collector, registry, resources)

        assert published == 1
        values = samples(registry, 'server_backup', {'name': 'with-backup', 'location': 'fsn1', 'type': 'cx11'})
        assert values['hourly'] == pytest.approx(0.0012)
        assert values['monthly'] == pytest.approx(0.6)
        assert values['current'] == pytest.approx(0.001)
        assert registry.get_sample_value(
            'hcloud_pricing_server_backup_hourly',
            {'name': 'without-backup', 'location': 'fsn1', 'type': 'cx11'}) is None

    def test_server_traffic_overage(self, catalog, clock, registry):
        collector = ServerTrafficCollector(catalog, clock=clock)
        resources = [
            make_resource('busy', outgoing_traffic=3 * TB, included_traffic=1 * TB),
            make_resource('quiet', outgoing_traffic=TB // 2, included_traffic=1 * TB),
        ]
        run_collector(collector, registry, resources)

        busy = samples(registry, 'server_traffic', {'name': 'busy', 'location': 'fsn1', 'type': 'cx11'})
        assert busy['monthly'] == pytest.approx(2 * 1.19)
        assert busy['current'] == pytest.approx(2.0)
        assert busy['counter'] == pytest.approx(2.0)

        quiet = samples(registry, 'server_traffic', {'name': 'quiet', 'location': 'fsn1', 'type': 'cx11'})
        assert quiet['monthly'] == 0
        assert quiet['current'] == 0

    def test_load_balancer_traffic(self, catalog, clock, registry):
        collector = LoadBalancerTrafficCollector(catalog, clock=clock)
        lb = make_resource('lb-1', kind=ResourceKind.LOAD_BALANCER, resource_type='lb11',
                           outgoing_traffic=21 * TB, included_traffic=20 * TB)
        run_collector(collector, registry, [lb])

        values = samples(registry, 'loadbalancer_traffic', {'name': 'lb-1', 'location': 'fsn1', 'type': 'lb11'})
        assert values['monthly'] == pytest.approx(1.19)
        assert values['current'] == pytest.approx(1.0)


class TestMetricSchema:
    """指标命名和标签"""

    def test_all_four_series_share_labels(self, catalog):
        for collector in build_collectors(catalog):
            label_sets = {tuple(metric._labelnames) for metric in collector.metric_handles()}
            assert label_sets == {tuple(collector.labelnames)}
            assert collector.labelnames[0] == 'name'

    def test_metric_names(self, catalog):
        collector = ServerCollector(catalog, namespace='acme')
        names = [metric._name for metric in collector.metric_handles()]
        assert names == [
            'acme_pricing_server_hourly',
            'acme_pricing_server_monthly',
            'acme_pricing_server_current',
            'acme_pricing_server_current_counter',
        ]

    def test_eight_variants(self, catalog):
        collectors = build_collectors(catalog)
        assert len(collectors) == len(COLLECTOR_CLASSES) == 8
        assert len({c.name for c in collectors}) == 8
