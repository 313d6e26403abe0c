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

"""Network traffic statistics

Snapshot queries over the kernel's per-interface counters exposed under
/sys/class/net/<iface>/statistics and the per-UID TCP counters exposed under
/proc/uid_stat/<uid>. Every query re-reads the underlying files; interfaces
can come and go at runtime, so nothing is cached between calls.

All queries return a 64-bit integer, with -1 meaning "unavailable". An
aggregate over zero readable interfaces is -1, whereas a single interface
reporting 0 yields 0.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from trafficstat.utils import procfs_available, read_number, wrap_int64

SYSFS_NET_ROOT = "/sys/class/net"
UID_STAT_ROOT = "/proc/uid_stat"

LOOPBACK_PREFIX = "lo"
RMNET_PREFIX = "rmnet"
FALLBACK_INTERFACE = "ppp0"

TX_PACKETS = "statistics/tx_packets"
RX_PACKETS = "statistics/rx_packets"
TX_BYTES = "statistics/tx_bytes"
RX_BYTES = "statistics/rx_bytes"


class TrafficStats:
    def __init__(
        self,
        sysfs_root: str = SYSFS_NET_ROOT,
        uid_stat_root: str = UID_STAT_ROOT,
        fallback_follows_metric: bool = False,
        supported: Optional[bool] = None,
    ):
        """Initialize traffic statistics queries.

        Args:
            sysfs_root (str): Directory listing one entry per network interface.
            uid_stat_root (str): Directory holding per-UID counter directories.
            fallback_follows_metric (bool): When no radio interface is readable,
                read the requested counter from the fallback interface. By default
                the fallback always reads its tx_packets file, matching the
                historical behavior of mobile statistics.
            supported (bool, optional): Override the platform capability check.
        """
        self.__sysfs_root = Path(sysfs_root)
        self.__uid_stat_root = Path(uid_stat_root)
        self.__fallback_follows_metric = fallback_follows_metric
        self.__supported = procfs_available() if supported is None else supported

        if not self.__supported:
            logging.debug("Network pseudo-filesystem unavailable; all traffic queries return -1")

    @property
    def supported(self) -> bool:
        return self.__supported

    def read_counter(self, path) -> int:
        """Read a single counter file, honoring the platform capability check."""
        if not self.__supported:
            return -1
        return read_number(path)

    def read_interface_total(self, suffix: str, prefix: Optional[str] = None) -> int:
        """Sum a counter file across network interfaces.

        Hidden entries and loopback interfaces are always skipped. Interfaces
        whose counter file is missing or unreadable do not contribute.

        Args:
            suffix (str): Counter file relative to the interface directory,
                e.g. "statistics/tx_bytes".
            prefix (str, optional): Only include interfaces whose name starts
                with this prefix.

        Returns:
            int: Sum of readable counters, or -1 if none could be read or the
            interface directory could not be listed.
        """
        if not self.__supported:
            return -1

        try:
            names = os.listdir(self.__sysfs_root)
        except OSError as e:
            logging.error(f"Can't list {self.__sysfs_root}: {e.strerror or e}")
            return -1

        total = None
        for name in names:
            if name.startswith(".") or name.startswith(LOOPBACK_PREFIX):
                continue
            if prefix is not None and not name.startswith(prefix):
                continue

            value = read_number(self.__sysfs_root / name / suffix)
            if value >= 0:
                total = value if total is None else wrap_int64(total + value)

        return -1 if total is None else total

    def __read_mobile(self, suffix: str) -> int:
        stats = self.read_interface_total(suffix, prefix=RMNET_PREFIX)
        if stats >= 0:
            return stats

        # Legacy point-to-point data interface. Historically this reads
        # tx_packets for every mobile counter.
        fallback_suffix = suffix if self.__fallback_follows_metric else TX_PACKETS
        return self.read_counter(self.__sysfs_root / FALLBACK_INTERFACE / fallback_suffix)

    # --
    # Mobile stats: radio interfaces only, read often.
    # --

    def get_mobile_tx_packets(self) -> int:
        return self.__read_mobile(TX_PACKETS)

    def get_mobile_rx_packets(self) -> int:
        return self.__read_mobile(RX_PACKETS)

    def get_mobile_tx_bytes(self) -> int:
        return self.__read_mobile(TX_BYTES)

    def get_mobile_rx_bytes(self) -> int:
        return self.__read_mobile(RX_BYTES)

    # --
    # Total stats: every non-loopback interface.
    # --

    def get_total_tx_packets(self) -> int:
        return self.read_interface_total(TX_PACKETS)

    def get_total_rx_packets(self) -> int:
        return self.read_interface_total(RX_PACKETS)

    def get_total_tx_bytes(self) -> int:
        return self.read_interface_total(TX_BYTES)

    def get_total_rx_bytes(self) -> int:
        return self.read_interface_total(RX_BYTES)

    # --
    # Per-UID stats
    # --

    def get_uid_rx_bytes(self, uid: int) -> int:
        return self.read_counter(self.__uid_stat_root / f"{int(uid)}" / "tcp_rcv")

    def get_uid_tx_bytes(self, uid: int) -> int:
        return self.read_counter(self.__uid_stat_root / f"{int(uid)}" / "tcp_snd")


# Exposed operation names -> (TrafficStats method, takes uid argument)
# fmt: off
METHODS = (
    ("getMobileTxPackets", "get_mobile_tx_packets", False),
    ("getMobileRxPackets", "get_mobile_rx_packets", False),
    ("getMobileTxBytes",   "get_mobile_tx_bytes",   False),
    ("getMobileRxBytes",   "get_mobile_rx_bytes",   False),
    ("getTotalTxPackets",  "get_total_tx_packets",  False),
    ("getTotalRxPackets",  "get_total_rx_packets",  False),
    ("getTotalTxBytes",    "get_total_tx_bytes",    False),
    ("getTotalRxBytes",    "get_total_rx_bytes",    False),
    ("getUidTxBytes",      "get_uid_tx_bytes",      True),
    ("getUidRxBytes",      "get_uid_rx_bytes",      True),
)
# fmt: on


def stats_from_config(config) -> TrafficStats:
    """Build TrafficStats from the [trafficstat.collectors.traffic] runtime config section."""
    kwargs = {}
    if config.has_section("trafficstat.collectors.traffic"):
        section = config["trafficstat.collectors.traffic"]
        kwargs["sysfs_root"] = section.get("sysfs_root", SYSFS_NET_ROOT)
        kwargs["uid_stat_root"] = section.get("uid_stat_root", UID_STAT_ROOT)
        kwargs["fallback_follows_metric"] = section.getboolean("fallback_follows_metric", False)
    return TrafficStats(**kwargs)


def method_table(stats: TrafficStats) -> dict:
    """Bind the exposed operation names to a TrafficStats instance."""
    return {name: getattr(stats, attr) for name, attr, _ in METHODS}


def register_methods(stats: TrafficStats, register) -> int:
    """Hand every exposed operation to a caller-supplied registration callback.

    Args:
        stats (TrafficStats): Instance backing the operations.
        register (callable): Called as register(name, function, takes_uid).

    Returns:
        int: Number of registered operations.
    """
    for name, attr, takes_uid in METHODS:
        register(name, getattr(stats, attr), takes_uid)
    return len(METHODS)
