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

"""Mobile data activity

Derives the direction of mobile data traffic from successive snapshots of the
mobile packet counters and publishes it as a prometheus gauge:

trafficstat_mobile_data_activity 3.0
trafficstat_mobile_sent_since_last_recv_packets 0.0

Activity values follow DataActivity (0=none, 1=in, 2=out, 3=in and out,
4=dormant).
"""

import configparser
import enum
import logging
from typing import Optional

from prometheus_client import REGISTRY, Gauge

from trafficstat.collector_base import Collector
from trafficstat.traffic_stats import TrafficStats, stats_from_config

# Default polling periods (seconds) with the screen on/off.
POLL_INTERVAL_SECS = 1
POLL_INTERVAL_SCREEN_OFF_SECS = 60 * 10


class DataActivity(enum.IntEnum):
    NONE = 0
    DATAIN = 1
    DATAOUT = 2
    DATAINANDOUT = 3
    DORMANT = 4


class ACTIVITY(Collector):
    def __init__(self, config: configparser.ConfigParser, registry=REGISTRY, stats: Optional[TrafficStats] = None):
        """Initialize the ACTIVITY data collector.

        Args:
            config (configparser.ConfigParser): Cached copy of runtime configuration.
            registry (prometheus_client.CollectorRegistry): Registry for metrics.
            stats (TrafficStats, optional): Query backend; built from the traffic
                collector settings when omitted.
        """
        logging.debug(f"Initializing {self.__class__.__name__} data collector")

        self.__prefix = "trafficstat_"
        self.__registry = registry
        self.__activity_metric = None
        self.__sent_metric = None

        self.enable_poll = True
        self.__poll_interval = float(POLL_INTERVAL_SECS)
        self.__poll_interval_screen_off = float(POLL_INTERVAL_SCREEN_OFF_SECS)
        if config.has_section("trafficstat.collectors.activity"):
            section = config["trafficstat.collectors.activity"]
            self.enable_poll = section.getboolean("enable_poll", True)
            self.__poll_interval = section.getfloat("poll_interval_secs", self.__poll_interval)
            self.__poll_interval_screen_off = section.getfloat(
                "poll_interval_screen_off_secs", self.__poll_interval_screen_off
            )

        # share the traffic collector's settings so both report the same counters
        self.__stats = stats if stats is not None else stats_from_config(config)

        self.__screen_on = True
        self.activity = DataActivity.NONE
        self.reset()

    @property
    def stats(self) -> TrafficStats:
        return self.__stats

    def reset(self):
        """Forget the previous counter snapshot."""
        self.__tx_pkts = -1
        self.__rx_pkts = -1
        self.sent_since_last_recv = 0

    def notify_screen_state(self, screen_on: bool):
        self.__screen_on = screen_on

    @property
    def poll_interval(self) -> float:
        """Seconds until the next poll, depending on screen state."""
        return self.__poll_interval if self.__screen_on else self.__poll_interval_screen_off

    def poll(self) -> DataActivity:
        """Take one counter snapshot and update the activity state.

        Returns:
            DataActivity: Current activity after this snapshot.
        """
        prev_tx = self.__tx_pkts
        prev_rx = self.__rx_pkts

        self.__tx_pkts = self.__stats.get_mobile_tx_packets()
        self.__rx_pkts = self.__stats.get_mobile_rx_packets()

        if self.enable_poll and (prev_tx > 0 or prev_rx > 0):
            sent = self.__tx_pkts - prev_tx
            received = self.__rx_pkts - prev_rx

            if sent > 0 and received > 0:
                self.sent_since_last_recv = 0
                new_activity = DataActivity.DATAINANDOUT
            elif sent > 0 and received == 0:
                self.sent_since_last_recv += sent
                new_activity = DataActivity.DATAOUT
            elif sent == 0 and received > 0:
                self.sent_since_last_recv = 0
                new_activity = DataActivity.DATAIN
            elif sent == 0 and received == 0:
                new_activity = DataActivity.DORMANT if self.activity == DataActivity.DORMANT else DataActivity.NONE
            else:
                # counters went backwards (interface reset or fallback switch)
                self.sent_since_last_recv = 0
                new_activity = DataActivity.DORMANT if self.activity == DataActivity.DORMANT else DataActivity.NONE

            if self.activity != new_activity and self.__screen_on:
                logging.debug(f"ACTIVITY: {self.activity.name} -> {new_activity.name}")
                self.activity = new_activity

        return self.activity

    def registerMetrics(self):
        """Register metrics of interest"""

        metric = self.__prefix + "mobile_data_activity"
        description = "Mobile data activity (0=none, 1=in, 2=out, 3=in and out, 4=dormant)"
        self.__activity_metric = Gauge(metric, description, registry=self.__registry)
        logging.info(f"--> [registered] {metric} -> {description} (gauge)")

        metric = self.__prefix + "mobile_sent_since_last_recv_packets"
        description = "Mobile packets sent since the last received packet"
        self.__sent_metric = Gauge(metric, description, registry=self.__registry)
        logging.info(f"--> [registered] {metric} -> {description} (gauge)")

    def updateMetrics(self):
        """Update registered metrics of interest"""

        activity = self.poll()
        self.__activity_metric.set(int(activity))
        self.__sent_metric.set(self.sent_since_last_recv)
        return
