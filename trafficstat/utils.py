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

"""Shared helpers: counter file reader, runtime config and logging support."""

import configparser
import importlib.metadata
import logging
import os
import platform
import re
import sys
from pathlib import Path

# Counter files hold at most a 64-bit decimal value; 80 bytes leaves room for
# sign, whitespace and a trailing newline.
NUMBER_BUFSIZE = 80

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_leading_int = re.compile(rb"[ \t\n\r\f\v]*([+-]?[0-9]+)")


def parse_decimal(data: bytes) -> int:
    """Parse leading decimal digits the way atoll() does.

    Leading whitespace and an optional sign are accepted and parsing stops at
    the first non-digit. Input without any digits yields 0. Values outside the
    signed 64-bit range saturate at the boundary.
    """
    match = _leading_int.match(data)
    if not match:
        return 0
    value = int(match.group(1))
    return max(INT64_MIN, min(INT64_MAX, value))


def wrap_int64(value: int) -> int:
    """Wrap an integer to signed 64-bit two's complement."""
    return ((value - INT64_MIN) % 2**64) + INT64_MIN


def read_number(path) -> int:
    """Read an ASCII decimal counter from a file.

    Args:
        path (str | Path): Counter file to read.

    Returns:
        int: Parsed value, or -1 if the file is missing or unreadable. Missing
        files are expected (interfaces come and go) and are not logged.
    """
    try:
        f = open(path, "rb")
    except FileNotFoundError:
        return -1
    except OSError as e:
        logging.error(f"Can't open {path}: {e.strerror or e}")
        return -1

    with f:
        try:
            data = f.read(NUMBER_BUFSIZE - 1)
        except OSError as e:
            logging.error(f"Can't read {path}: {e.strerror or e}")
            return -1

    return parse_decimal(data)


def procfs_available() -> bool:
    """Check whether this host exposes the Linux pseudo-filesystems."""
    return platform.system() == "Linux" and os.path.isdir("/proc")


def getVersion():
    """Return installed package version, or "Unknown" when running from a checkout."""
    try:
        return importlib.metadata.version("trafficstat")
    except importlib.metadata.PackageNotFoundError:
        return "Unknown"


def defaultConfigFile() -> Path:
    return Path(__file__).parent / "config" / "trafficstat.default"


def readConfig(configFile=None):
    """Read runtime configuration.

    Falls back to the TRAFFICSTAT_CONFIG environment variable and then to the
    default configuration shipped with the package.

    Args:
        configFile (str, optional): Path to an INI runtime config file.

    Returns:
        configparser.ConfigParser: Parsed runtime configuration.
    """
    if configFile is None:
        configFile = os.environ.get("TRAFFICSTAT_CONFIG", defaultConfigFile())

    config = configparser.ConfigParser()
    if not os.path.isfile(configFile):
        logging.error(f"[ERROR]: Unable to find runtime config file: {configFile}")
        sys.exit(1)

    logging.info(f"Reading runtime-config from {configFile}")
    try:
        config.read(configFile)
    except configparser.Error as e:
        logging.error(f"[ERROR]: Unable to parse runtime config file {configFile}: {e}")
        sys.exit(1)
    return config


def parseIntList(value):
    """Parse a comma/whitespace separated list of integers (e.g. uid lists)."""
    if not value:
        return []
    return [int(x) for x in re.split(r"[,\s]+", value.strip()) if x]


class PrefixFilter(logging.Filter):
    """Prefix log messages, used to indent per-collector registration output."""

    def __init__(self, prefix):
        super().__init__()
        self.prefix = prefix

    def filter(self, record):
        record.msg = self.prefix + str(record.msg)
        return True
