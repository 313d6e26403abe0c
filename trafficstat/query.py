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

"""Command-line access to network traffic statistics.

Examples:

    trafficstat-query getTotalTxBytes
    trafficstat-query getUidRxBytes 10001
    trafficstat-query --metrics
    trafficstat-query --serve
"""

import argparse
import logging
import sys
import time

from trafficstat import utils
from trafficstat.collector_activity import ACTIVITY
from trafficstat.monitor import Monitor
from trafficstat.traffic_stats import METHODS, TrafficStats, method_table, stats_from_config


def build_parser():
    parser = argparse.ArgumentParser(description="Query network traffic statistics")
    names = [name for name, _, _ in METHODS]
    parser.add_argument("operation", nargs="?", choices=names, help="Operation to run")
    parser.add_argument("uid", nargs="?", type=int, help="User identifier for per-UID operations")
    parser.add_argument("--configfile", type=str, help="Runtime config file", default=None)
    parser.add_argument("--logfile", type=str, help="Log to this file instead of stdout", default=None)
    parser.add_argument("--list", action="store_true", help="List available operations")
    parser.add_argument("--metrics", action="store_true", help="Print one prometheus sample and exit")
    parser.add_argument("--serve", action="store_true", help="Serve prometheus metrics over HTTP")
    parser.add_argument("--watch", action="store_true", help="Report mobile data activity until interrupted")
    return parser


def run_operation(stats: TrafficStats, operation: str, uid=None) -> int:
    takes_uid = {name: flag for name, _, flag in METHODS}[operation]
    func = method_table(stats)[operation]
    if takes_uid:
        if uid is None:
            raise ValueError(f"{operation} requires a uid argument")
        return func(uid)
    return func()


def watch(collector: ACTIVITY, max_polls=None):
    polls = 0
    while max_polls is None or polls < max_polls:
        activity = collector.poll()
        print(f"{activity.name} sent_since_last_recv={collector.sent_since_last_recv}", flush=True)
        polls += 1
        if max_polls is None or polls < max_polls:
            time.sleep(collector.poll_interval)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list:
        for name, _, takes_uid in METHODS:
            print(f"{name} <uid>" if takes_uid else name)
        return 0

    config = utils.readConfig(args.configfile)

    if args.metrics or args.serve:
        monitor = Monitor(config, logFile=args.logfile, mode="server" if args.serve else "query")
        monitor.initMetrics()
        if args.metrics:
            sys.stdout.write(monitor.updateAllMetrics().decode("utf-8"))
            return 0

        from trafficstat.node_monitoring import create_app

        port = config["trafficstat.collectors"].getint("port", 8001)
        app = create_app(monitor)
        logging.info(f"Serving metrics on port {port}")
        app.run(host="0.0.0.0", port=port)
        return 0

    if args.watch:
        try:
            watch(ACTIVITY(config))
        except KeyboardInterrupt:
            pass
        return 0

    if args.operation is None:
        parser.error("an operation, --list, --metrics, --serve or --watch is required")

    try:
        value = run_operation(stats_from_config(config), args.operation, args.uid)
    except ValueError as e:
        parser.error(str(e))
    print(value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
