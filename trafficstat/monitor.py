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

# Prometheus exporter for network traffic statistics.
#
# Supporting monitor class to load the enabled data collectors, register their
# metrics and render samples on demand.
# --

import importlib
import logging
import os
import platform
import sys
import time

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from trafficstat import utils
from trafficstat.collector_definitions import COLLECTORS


class Monitor:
    def __init__(self, config, logFile=None, mode="Unknown"):

        self.config = config  # cache runtime configuration

        logLevel = os.environ.get("TRAFFICSTAT_LOG_LEVEL", "INFO").upper()
        if logFile:
            hostname = platform.node().split(".", 1)[0]
            logging.basicConfig(
                format=f"[{hostname}: %(asctime)s] %(message)s",
                level=logLevel,
                filename=logFile,
                datefmt="%H:%M:%S",
            )
        else:
            logging.basicConfig(format="%(message)s", level=logLevel, stream=sys.stdout)

        if not self.config.has_section("trafficstat.collectors"):
            self.config.add_section("trafficstat.collectors")

        # embed additional info into runtime config
        if not self.config.has_section("trafficstat.internal"):
            self.config.add_section("trafficstat.internal")
            self.config["trafficstat.internal"]["mode"] = mode

        self.__registry = CollectorRegistry()

        # initialize collection of data collectors
        self.__collectors = []

        logging.debug("Completed collector initialization (base class)")
        return

    @property
    def registry(self):
        return self.__registry

    @property
    def collectors(self):
        return list(self.__collectors)

    def initMetrics(self):

        for collector in COLLECTORS:
            runtime_option = collector["runtime_option"]
            default = collector["enabled_by_default"]
            if runtime_option:
                enabled = self.config["trafficstat.collectors"].getboolean(runtime_option, default)
            else:
                enabled = default
            if enabled:
                try:
                    module = importlib.import_module(collector["file"])
                    cls = getattr(module, collector["className"])
                except (ImportError, AttributeError) as e:
                    logging.error(f"Failed to load collector {collector['className']} from {collector['file']}: {e}")
                    sys.exit(1)
                self.__collectors.append(cls(config=self.config, registry=self.__registry))

        # Initialize all metrics
        prefix_filter = utils.PrefixFilter("   ")
        for collector in self.__collectors:
            logging.info("\nRegistering metrics for collector: %s" % collector.__class__.__name__)
            logging.getLogger().addFilter(prefix_filter)
            try:
                collector.registerMetrics()
            finally:
                logging.getLogger().removeFilter(prefix_filter)

        # Register performance runtime metric(s)
        self.__subtimers = self.config["trafficstat.collectors"].getboolean("enable_perf_collector_subtimers", False)
        labels = ["collector"]
        logging.info(
            "\nRegistering performance metrics for collector timing (subtimers enabled = %s)" % self.__subtimers
        )

        self.__perfMetric = Gauge(
            "trafficstat_perf_runtime_seconds",
            "Time to complete one data collection sample in seconds",
            labelnames=labels,
            registry=self.__registry,
        )

        # Gather metrics on startup
        self.updateAllMetrics()

    def updateAllMetrics(self):
        start_time_total = time.perf_counter()

        for collector in self.__collectors:
            start_time = time.perf_counter()
            collector.updateMetrics()
            if self.__subtimers:
                elapsed_time = time.perf_counter() - start_time
                self.__perfMetric.labels(collector.__class__.__name__).set(elapsed_time)

        elapsed_time_total = time.perf_counter() - start_time_total
        self.__perfMetric.labels("total").set(elapsed_time_total)

        return generate_latest(self.__registry)
