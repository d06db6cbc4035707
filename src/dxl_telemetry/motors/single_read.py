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

from enum import Enum

from dxl_telemetry.errors import UnsupportedByteWidthError

from .motors_bus import PacketHandler, PortHandler


class RxErrorPolicy(str, Enum):
    # Hardware error flags returned along a successful read are logged and the value is kept. Some motors
    # keep reporting an input voltage error while their readings are fine.
    IGNORE = "ignore"
    # Hardware error flags make the read fail like a communication error would.
    SURFACE = "surface"


class SingleReadFallback:
    """
    Reads one register of one motor per transaction, for the models that can't answer a bulk read.

    The SDK primitive matching the register's byte size is chosen once, at construction.
    """

    def __init__(self, port_handler: PortHandler, packet_handler: PacketHandler, address: int, n_bytes: int):
        if n_bytes == 1:
            read_fn = packet_handler.read1ByteTxRx
        elif n_bytes == 2:
            read_fn = packet_handler.read2ByteTxRx
        elif n_bytes == 4:
            read_fn = packet_handler.read4ByteTxRx
        else:
            raise UnsupportedByteWidthError(n_bytes)

        self.port_handler = port_handler
        self.packet_handler = packet_handler
        self.address = address
        self.n_bytes = n_bytes
        self._read_fn = read_fn

    def read_raw(self, motor_id: int) -> tuple[int, int, int]:
        """Returns the raw `(value, comm, error)` triplet of the SDK."""
        return self._read_fn(self.port_handler, motor_id, self.address)
