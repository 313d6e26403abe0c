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
from pathlib import Path

import pytest

COUNTERS = ["tx_packets", "rx_packets", "tx_bytes", "rx_bytes"]


def add_interface(root: Path, name: str, **counters):
    """Create <root>/<name>/statistics/<counter> files with the given values."""
    stats_dir = root / name / "statistics"
    stats_dir.mkdir(parents=True, exist_ok=True)
    for counter, value in counters.items():
        (stats_dir / counter).write_text(f"{value}\n")
    return stats_dir


@pytest.fixture
def net_root(tmp_path):
    """Fake /sys/class/net with lo, rmnet0, rmnet1 and wlan0."""
    root = tmp_path / "net"
    root.mkdir()
    add_interface(root, "lo", tx_packets=9, rx_packets=9, tx_bytes=999, rx_bytes=999)
    add_interface(root, "rmnet0", tx_packets=4, rx_packets=8, tx_bytes=100, rx_bytes=200)
    add_interface(root, "rmnet1", tx_packets=2, rx_packets=3, tx_bytes=50, rx_bytes=70)
    add_interface(root, "wlan0", tx_packets=1, rx_packets=5, tx_bytes=10, rx_bytes=30)
    return root


@pytest.fixture
def uid_root(tmp_path):
    """Fake /proc/uid_stat with a single UID."""
    root = tmp_path / "uid_stat"
    uid_dir = root / "10001"
    uid_dir.mkdir(parents=True)
    (uid_dir / "tcp_rcv").write_text("12345\n")
    (uid_dir / "tcp_snd").write_text("678\n")
    return root


@pytest.fixture
def runtime_config(net_root, uid_root):
    config = configparser.ConfigParser()
    config["trafficstat.collectors"] = {
        "enable_traffic": "True",
        "enable_activity": "True",
        "enable_info": "False",
    }
    config["trafficstat.collectors.traffic"] = {
        "sysfs_root": str(net_root),
        "uid_stat_root": str(uid_root),
        "uids": "10001, 20002",
    }
    return config
