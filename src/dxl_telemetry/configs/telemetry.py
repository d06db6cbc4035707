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

from dataclasses import dataclass, field
from pathlib import Path

from dxl_telemetry.motors.dynamixel.tables import AVAILABLE_BAUDRATES, MODEL_CONTROL_TABLE
from dxl_telemetry.motors.fields import Field
from dxl_telemetry.motors.motors_bus import Motor
from dxl_telemetry.motors.single_read import RxErrorPolicy

READ_MODES = ["auto", "sync", "single"]


@dataclass
class MotorsBusConfig:
    # Port to connect to the motors bus (e.g. "/dev/ttyUSB0")
    port: str
    # Motor ids on the bus, in the order in which values are reported
    ids: list[int] = field(default_factory=list)
    # Model name of each motor, parallel to `ids` (e.g. "mx-64")
    models: list[str] = field(default_factory=list)
    protocol_version: float = 1.0
    baudrate: int = 1_000_000
    # Packet timeout in milliseconds
    timeout_ms: int = 1000
    # Ping every motor on connection and check its model number
    handshake: bool = True

    def __post_init__(self):
        if not self.ids:
            raise ValueError("At least one motor id is required.")

        if len(self.ids) != len(self.models):
            raise ValueError(
                f"Expected one model per motor id, got {len(self.ids)} ids and {len(self.models)} models."
            )

        if len(self.ids) != len(set(self.ids)):
            raise ValueError(f"Some motors have the same id: {self.ids}.")

        unknown_models = [model for model in self.models if model not in MODEL_CONTROL_TABLE]
        if unknown_models:
            raise ValueError(
                f"Unknown models {unknown_models}. Available models: {list(MODEL_CONTROL_TABLE)}."
            )

        if self.protocol_version != 1.0:
            raise NotImplementedError(f"Only protocol 1.0 is supported, got {self.protocol_version}.")

        if self.baudrate not in AVAILABLE_BAUDRATES:
            raise ValueError(f"Baudrate {self.baudrate} is not one of {AVAILABLE_BAUDRATES}.")

        if self.timeout_ms <= 0:
            raise ValueError(f"`timeout_ms` must be strictly positive, got {self.timeout_ms}.")

    @property
    def motors(self) -> dict[str, Motor]:
        return {f"motor_{id_}": Motor(id_, model) for id_, model in zip(self.ids, self.models, strict=True)}


@dataclass
class ReadTelemetryConfig:
    bus: MotorsBusConfig
    # Control table entry to read (e.g. "Present_Position", "Present_Temperature")
    data_name: str = Field.PRESENT_POS.value
    # "sync" reads every motor in one bulk read, "single" reads them one by one and "auto" picks "sync"
    # unless a motor can't answer a bulk read.
    mode: str = "auto"
    # What to do with hardware error flags returned by single reads: "ignore" or "surface"
    rx_error_policy: str = RxErrorPolicy.IGNORE.value
    # Limit the maximum frames per second.
    fps: int = 10
    # Stop after this many seconds. By default, read until interrupted.
    duration_s: float | None = None
    log_file: Path | None = None

    def __post_init__(self):
        available_fields = [f.value for f in Field]
        if self.data_name not in available_fields:
            raise ValueError(f"Unknown data name '{self.data_name}'. Available: {available_fields}.")

        if self.mode not in READ_MODES:
            raise ValueError(f"Unknown read mode '{self.mode}'. Available: {READ_MODES}.")

        policies = [p.value for p in RxErrorPolicy]
        if self.rx_error_policy not in policies:
            raise ValueError(f"Unknown rx error policy '{self.rx_error_policy}'. Available: {policies}.")

        if self.fps <= 0:
            raise ValueError(f"`fps` must be strictly positive, got {self.fps}.")

        if self.duration_s is not None and self.duration_s <= 0:
            raise ValueError(f"`duration_s` must be strictly positive, got {self.duration_s}.")