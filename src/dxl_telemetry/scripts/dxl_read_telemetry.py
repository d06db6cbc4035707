#!/usr/bin/env python

# Copyright 2024 The HuggingFace Inc. team. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Reads one field from a bus of Dynamixel motors and prints its value in SI units.

Example:

```shell
dxl-read-telemetry \
    --bus.port=/dev/ttyUSB0 \
    --bus.ids="[1, 2, 3]" \
    --bus.models="[mx-64, mx-64, ax-12a]" \
    --data_name=Present_Position \
    --fps=20
```
"""

import logging
import math
import time
from dataclasses import asdict
from pprint import pformat

import draccus

from dxl_telemetry.configs.telemetry import ReadTelemetryConfig
from dxl_telemetry.motors import Reader
from dxl_telemetry.motors.dynamixel import DynamixelMotorsBus
from dxl_telemetry.motors.utils import make_motors_bus_from_config
from dxl_telemetry.utils.utils import init_logging, move_cursor_up


def resolve_mode(mode: str, bus: DynamixelMotorsBus) -> str:
    if mode != "auto":
        return mode
    return "sync" if bus.supports_bulk_read() else "single"


def read_once(reader: Reader, mode: str) -> dict[int, float]:
    if mode == "sync":
        result = reader.sync_read()
        if not result.success:
            logging.warning(f"No fresh data for motors {result.unavailable}.")
        return reader.as_dict()

    values = [math.nan] * len(reader)
    if not reader.read(reader.ids, values):
        logging.warning("Single read interrupted, remaining motors were not read.")
    return dict(zip(reader.ids, values, strict=True))


def display_values(data_name: str, values: dict[int, float]) -> None:
    print("\n" + "-" * 24)
    print(f"{'ID':<6} | {data_name:>15}")
    for id_, value in values.items():
        print(f"{id_:<6} | {value:>15.4f}")
    move_cursor_up(len(values) + 3)


def telemetry_loop(reader: Reader, mode: str, data_name: str, fps: int, duration: float | None = None):
    start = time.perf_counter()
    while True:
        loop_start = time.perf_counter()

        values = read_once(reader, mode)
        display_values(data_name, values)

        dt_s = time.perf_counter() - loop_start
        time.sleep(max(1 / fps - dt_s, 0))

        if duration is not None and time.perf_counter() - start >= duration:
            return


@draccus.wrap()
def read_telemetry(cfg: ReadTelemetryConfig):
    init_logging(log_file=cfg.log_file)
    logging.info(pformat(asdict(cfg)))

    bus = make_motors_bus_from_config(cfg.bus)
    try:
        bus.connect(handshake=cfg.bus.handshake)
        bus.set_timeout(cfg.bus.timeout_ms)
        mode = resolve_mode(cfg.mode, bus)
        logging.info(f"Reading '{cfg.data_name}' in {mode} mode.")
        reader = bus.make_reader(cfg.data_name, rx_error_policy=cfg.rx_error_policy)
        telemetry_loop(reader, mode, cfg.data_name, cfg.fps, cfg.duration_s)
    except KeyboardInterrupt:
        pass
    finally:
        if bus.is_connected:
            bus.disconnect()


def main():
    read_telemetry()


if __name__ == "__main__":
    main()
