# -------------------------------------------------------------------------------
# MIT License
#
# Copyright (c) 2023 - 2026 Advanced Micro Devices, Inc. All Rights Reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
# -------------------------------------------------------------------------------

import configparser
from unittest.mock import Mock, patch

import pytest
from conftest import add_interface
from prometheus_client import CollectorRegistry

from trafficstat.collector_activity import ACTIVITY, DataActivity


@pytest.fixture
def counters():
    """Mobile (tx_packets, rx_packets) snapshots returned by successive polls."""
    return []


@pytest.fixture
def collector(counters):
    stats = Mock()
    stats.get_mobile_tx_packets.side_effect = lambda: counters[0][0]
    stats.get_mobile_rx_packets.side_effect = lambda: counters.pop(0)[1]
    config = configparser.ConfigParser()
    return ACTIVITY(config, registry=CollectorRegistry(), stats=stats)


def poll_all(collector, counters, snapshots):
    counters.extend(snapshots)
    return [collector.poll() for _ in snapshots]


class TestActivity:
    def test_first_poll_has_no_baseline(self, collector, counters):
        assert poll_all(collector, counters, [(10, 10)]) == [DataActivity.NONE]

    def test_in_and_out(self, collector, counters):
        result = poll_all(collector, counters, [(10, 10), (12, 15)])
        assert result[-1] == DataActivity.DATAINANDOUT
        assert collector.sent_since_last_recv == 0

    def test_out_accumulates_sent_packets(self, collector, counters):
        result = poll_all(collector, counters, [(10, 10), (13, 10), (15, 10)])
        assert result[-1] == DataActivity.DATAOUT
        assert collector.sent_since_last_recv == 5

    def test_in_resets_sent_packets(self, collector, counters):
        result = poll_all(collector, counters, [(10, 10), (13, 10), (13, 11)])
        assert result[-1] == DataActivity.DATAIN
        assert collector.sent_since_last_recv == 0

    def test_idle_becomes_none(self, collector, counters):
        result = poll_all(collector, counters, [(10, 10), (12, 12), (12, 12)])
        assert result == [DataActivity.NONE, DataActivity.DATAINANDOUT, DataActivity.NONE]

    def test_idle_keeps_dormant(self, collector, counters):
        collector.activity = DataActivity.DORMANT
        result = poll_all(collector, counters, [(10, 10), (10, 10)])
        assert result[-1] == DataActivity.DORMANT

    def test_counter_reset(self, collector, counters):
        result = poll_all(collector, counters, [(10, 10), (15, 10), (3, 2)])
        assert result[-1] == DataActivity.NONE
        assert collector.sent_since_last_recv == 0

    def test_unavailable_counters_have_no_baseline(self, collector, counters):
        result = poll_all(collector, counters, [(-1, -1), (5, 5)])
        assert result == [DataActivity.NONE, DataActivity.NONE]

    def test_screen_off_freezes_activity(self, collector, counters):
        collector.notify_screen_state(False)
        result = poll_all(collector, counters, [(10, 10), (12, 15)])
        assert result[-1] == DataActivity.NONE

    def test_polling_disabled(self, collector, counters):
        collector.enable_poll = False
        result = poll_all(collector, counters, [(10, 10), (12, 15)])
        assert result[-1] == DataActivity.NONE

    def test_reset_drops_baseline(self, collector, counters):
        poll_all(collector, counters, [(10, 10), (13, 10)])
        collector.reset()
        assert collector.sent_since_last_recv == 0
        assert poll_all(collector, counters, [(20, 10)]) == [DataActivity.DATAOUT]


class TestPollInterval:
    def test_defaults(self, collector):
        assert collector.poll_interval == 1
        collector.notify_screen_state(False)
        assert collector.poll_interval == 600

    def test_from_config(self):
        config = configparser.ConfigParser()
        config["trafficstat.collectors.activity"] = {
            "poll_interval_secs": "0.5",
            "poll_interval_screen_off_secs": "30",
        }
        collector = ACTIVITY(config, registry=CollectorRegistry(), stats=Mock())
        assert collector.poll_interval == 0.5
        collector.notify_screen_state(False)
        assert collector.poll_interval == 30


class TestActivityMetrics:
    def test_metrics_follow_polls(self):
        registry = CollectorRegistry()
        stats = Mock()
        stats.get_mobile_tx_packets.side_effect = [10, 14]
        stats.get_mobile_rx_packets.side_effect = [10, 10]
        collector = ACTIVITY(configparser.ConfigParser(), registry=registry, stats=stats)
        collector.registerMetrics()

        collector.updateMetrics()
        collector.updateMetrics()

        assert registry.get_sample_value("trafficstat_mobile_data_activity") == int(DataActivity.DATAOUT)
        assert registry.get_sample_value("trafficstat_mobile_sent_since_last_recv_packets") == 4


class TestActivityConfig:
    @pytest.fixture
    def ppp_root(self, tmp_path):
        root = tmp_path / "net"
        add_interface(root, "lo", tx_packets=9, rx_packets=9)
        add_interface(root, "ppp0", tx_packets=4, rx_packets=2048)
        return root

    def test_fallback_follows_metric(self, ppp_root):
        config = configparser.ConfigParser()
        config["trafficstat.collectors.traffic"] = {
            "sysfs_root": str(ppp_root),
            "fallback_follows_metric": "True",
        }
        with patch("trafficstat.traffic_stats.procfs_available", return_value=True):
            collector = ACTIVITY(config, registry=CollectorRegistry())
        assert collector.stats.get_mobile_tx_packets() == 4
        assert collector.stats.get_mobile_rx_packets() == 2048

    def test_fallback_quirk_by_default(self, ppp_root):
        config = configparser.ConfigParser()
        config["trafficstat.collectors.traffic"] = {"sysfs_root": str(ppp_root)}
        with patch("trafficstat.traffic_stats.procfs_available", return_value=True):
            collector = ACTIVITY(config, registry=CollectorRegistry())
        assert collector.stats.get_mobile_rx_packets() == 4

    def test_enable_poll_from_config(self, counters):
        config = configparser.ConfigParser()
        config["trafficstat.collectors.activity"] = {"enable_poll": "False"}
        stats = Mock()
        stats.get_mobile_tx_packets.side_effect = lambda: counters[0][0]
        stats.get_mobile_rx_packets.side_effect = lambda: counters.pop(0)[1]
        collector = ACTIVITY(config, registry=CollectorRegistry(), stats=stats)

        assert collector.enable_poll is False
        assert poll_all(collector, counters, [(10, 10), (12, 15)])[-1] == DataActivity.NONE

    def test_enable_poll_default(self, collector):
        assert collector.enable_poll is True
