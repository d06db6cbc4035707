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

import logging

from dxl_telemetry.errors import ParameterRegistrationError

from .motors_bus import GroupBulkRead, PacketHandler, PortHandler

logger = logging.getLogger(__name__)


class BatchedReadSession:
    """
    Drives a bulk read transaction: clear, add every motor, transmit/receive, then extract each motor's data.

    The parameters are rebuilt from scratch by `prepare` before each transaction so that motors added for a
    previous read never take part in the next one.
    """

    def __init__(
        self,
        port_handler: PortHandler,
        packet_handler: PacketHandler,
        bulk_reader: GroupBulkRead | None = None,
    ):
        if bulk_reader is None:
            import dynamixel_sdk as dxl

            bulk_reader = dxl.GroupBulkRead(port_handler, packet_handler)

        self.port_handler = port_handler
        self.packet_handler = packet_handler
        self.bulk_reader = bulk_reader

    def clear(self) -> None:
        self.bulk_reader.clearParam()

    def add(self, motor_id: int, address: int, n_bytes: int) -> bool:
        return self.bulk_reader.addParam(motor_id, address, n_bytes)

    def prepare(self, motor_ids: list[int], address: int, n_bytes: int) -> None:
        self.clear()
        for id_ in motor_ids:
            if not self.add(id_, address, n_bytes):
                raise ParameterRegistrationError(id_, address, n_bytes)

    def transmit(self) -> int:
        return self.bulk_reader.txRxPacket()

    def is_available(self, motor_id: int, address: int, n_bytes: int) -> bool:
        return self.bulk_reader.isAvailable(motor_id, address, n_bytes)

    def get_data(self, motor_id: int, address: int, n_bytes: int) -> int:
        return self.bulk_reader.getData(motor_id, address, n_bytes)

    def unavailable_ids(self, motor_ids: list[int], address: int, n_bytes: int) -> list[int]:
        missing = []
        for id_ in motor_ids:
            if not self.is_available(id_, address, n_bytes):
                logger.error(f"[ID:{id_:03d}] bulk read getData failed @{address=} ({n_bytes=})")
                missing.append(id_)

        return missing
