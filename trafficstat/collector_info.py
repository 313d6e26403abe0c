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

"""Info metric

Implements an info metric to log execution details including run mode, schema,
code version, and whether the host exposes the network pseudo-filesystems.
Example:

trafficstat_info{mode="server",schema="1.0",supported="True",version="0.1.0"} 1.0
"""

import configparser
import logging

from prometheus_client import REGISTRY, Gauge

import trafficstat.utils as utils
from trafficstat.collector_base import Collector


class INFO(Collector):
    def __init__(self, config: configparser.ConfigParser, registry=REGISTRY):
        """Initialize info metric.

        Args:
            config (configparser.ConfigParser): Cached copy of runtime configuration.
            registry (prometheus_client.CollectorRegistry): Registry for metrics.
        """
        logging.debug(f"Initializing {self.__class__.__name__} data collector")

        self.__registry = registry
        self.__version = utils.getVersion()
        self.__schema = 1.0
        self.__mode = config["trafficstat.internal"]["mode"]
        self.__supported = utils.procfs_available()

    def registerMetrics(self):
        """Register metrics of interest"""

        labels = ["version", "mode", "schema", "supported"]
        self.__info = Gauge("trafficstat_info", "Info metric", labelnames=labels, registry=self.__registry)
        self.__info.labels(
            version=self.__version,
            mode=self.__mode,
            schema=self.__schema,
            supported=self.__supported,
        ).set(1)

    def updateMetrics(self):
        """Update registered metrics of interest"""

        return
