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

"""Traffic statistics

Implements prometheus gauge metrics for the aggregate network traffic queries:
mobile (radio interfaces, with legacy fallback), total (all non-loopback
interfaces) and per-UID TCP traffic. Unavailable counters are reported as -1.
Example metrics:

trafficstat_mobile_tx_bytes 150.0
trafficstat_total_tx_bytes 160.0
trafficstat_uid_rx_bytes{uid="10001"} 12345.0
"""

import configparser
import logging

from prometheus_client import REGISTRY, Gauge

import trafficstat.utils as utils
from trafficstat.collector_base import Collector
from trafficstat.traffic_stats import TrafficStats, stats_from_config


class TRAFFIC(Collector):
    def __init__(self, config: configparser.ConfigParser, registry=REGISTRY):
        """Initialize the TRAFFIC data collector.

        Args:
            config (configparser.ConfigParser): Cached copy of runtime configuration.
            registry (prometheus_client.CollectorRegistry): Registry for metrics.
        """
        logging.debug(f"Initializing {self.__class__.__name__} data collector")

        self.__prefix = "trafficstat_"
        self.__registry = registry
        self.__metrics = {}
        self.__uid_metrics = {}

        self.__uids = []

        # runtime config parsing
        if config.has_section("trafficstat.collectors.traffic"):
            self.__uids = utils.parseIntList(config["trafficstat.collectors.traffic"].get("uids", ""))

        self.__stats = stats_from_config(config)

    @property
    def stats(self) -> TrafficStats:
        return self.__stats

    def registerMetrics(self):
        """Register metrics of interest"""

        # fmt: off
        self.__aggregate_metrics = [
            {"metricName": "mobile_tx_packets", "query": self.__stats.get_mobile_tx_packets, "description": "Packets transmitted over mobile radio interfaces"},
            {"metricName": "mobile_rx_packets", "query": self.__stats.get_mobile_rx_packets, "description": "Packets received over mobile radio interfaces"},
            {"metricName": "mobile_tx_bytes",   "query": self.__stats.get_mobile_tx_bytes,   "description": "Bytes transmitted over mobile radio interfaces"},
            {"metricName": "mobile_rx_bytes",   "query": self.__stats.get_mobile_rx_bytes,   "description": "Bytes received over mobile radio interfaces"},
            {"metricName": "total_tx_packets",  "query": self.__stats.get_total_tx_packets,  "description": "Packets transmitted over all non-loopback interfaces"},
            {"metricName": "total_rx_packets",  "query": self.__stats.get_total_rx_packets,  "description": "Packets received over all non-loopback interfaces"},
            {"metricName": "total_tx_bytes",    "query": self.__stats.get_total_tx_bytes,    "description": "Bytes transmitted over all non-loopback interfaces"},
            {"metricName": "total_rx_bytes",    "query": self.__stats.get_total_rx_bytes,    "description": "Bytes received over all non-loopback interfaces"},
        ]
        # fmt: on

        for item in self.__aggregate_metrics:
            metric = item["metricName"]
            self.__metrics[metric] = Gauge(self.__prefix + metric, item["description"], registry=self.__registry)
            logging.info("--> [registered] %s (gauge)" % (self.__prefix + metric))

        if self.__uids:
            for kind, description in [("rx", "TCP bytes received by UID"), ("tx", "TCP bytes sent by UID")]:
                metric = self.__prefix + f"uid_{kind}_bytes"
                self.__uid_metrics[kind] = Gauge(metric, description, labelnames=["uid"], registry=self.__registry)
                logging.info("--> [registered] %s -> uids %s (gauge)" % (metric, self.__uids))

    def updateMetrics(self):
        """Update registered metrics of interest"""

        for item in self.__aggregate_metrics:
            self.__metrics[item["metricName"]].set(item["query"]())

        if self.__uid_metrics:
            for uid in self.__uids:
                self.__uid_metrics["rx"].labels(uid=uid).set(self.__stats.get_uid_rx_bytes(uid))
                self.__uid_metrics["tx"].labels(uid=uid).set(self.__stats.get_uid_tx_bytes(uid))
        return
