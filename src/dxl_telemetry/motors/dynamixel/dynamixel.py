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
from copy import deepcopy

from dxl_telemetry.errors import DeviceNotConnectedError

from ..fields import Field
from ..motors_bus import Motor, MotorsBus
from ..reader import Reader
from ..registry import ControlParameterRegistry
from ..single_read import RxErrorPolicy
from .tables import (
    AVAILABLE_BAUDRATES,
    BULK_READ_UNSUPPORTED_MODELS,
    MODEL_CONTROL_TABLE,
    MODEL_MAX_POSITION,
    MODEL_NUMBER_TABLE,
    MODEL_UNIT_TABLE,
)

PROTOCOL_VERSION = 1.0
DEFAULT_BAUDRATE = 1_000_000
DEFAULT_TIMEOUT_MS = 1000

logger = logging.getLogger(__name__)


class DynamixelMotorsBus(MotorsBus):
    """
    The Dynamixel implementation for a MotorsBus, for motors speaking the Protocol 1.0. It relies on the python
    dynamixel sdk to communicate with the motors. For more info, see the Dynamixel SDK Documentation:
    https://emanual.robotis.com/docs/en/software/dynamixel/dynamixel_sdk/sample_code/python_read_write_protocol_1_0/
    """

    available_baudrates = deepcopy(AVAILABLE_BAUDRATES)
    default_baudrate = DEFAULT_BAUDRATE
    default_timeout = DEFAULT_TIMEOUT_MS
    model_ctrl_table = deepcopy(MODEL_CONTROL_TABLE)
    model_unit_table = deepcopy(MODEL_UNIT_TABLE)
    model_number_table = deepcopy(MODEL_NUMBER_TABLE)
    model_max_position_table = deepcopy(MODEL_MAX_POSITION)

    def __init__(
        self,
        port: str,
        motors: dict[str, Motor],
        baudrate: int | None = None,
        protocol_version: float = PROTOCOL_VERSION,
    ):
        super().__init__(port, motors, baudrate)
        import dynamixel_sdk as dxl

        self.protocol_version = protocol_version
        self.port_handler = dxl.PortHandler(self.port)
        self.packet_handler = dxl.PacketHandler(protocol_version)
        self._comm_success = dxl.COMM_SUCCESS
        self._no_error = 0x00

        self.registry = ControlParameterRegistry(
            self.motors,
            self.model_ctrl_table,
            self.model_unit_table,
            self.model_number_table,
            self.model_max_position_table,
        )

    def _handshake(self) -> None:
        self.registry.scanned_models = self.scan_models()

    def supports_bulk_read(self, motors: str | list[str] | None = None) -> bool:
        selected = self._select_motors(motors)
        return not any(m.model in BULK_READ_UNSUPPORTED_MODELS for m in selected.values())

    def make_reader(
        self,
        field: Field | str,
        motors: str | list[str] | None = None,
        *,
        rx_error_policy: RxErrorPolicy | str = RxErrorPolicy.IGNORE,
    ) -> Reader:
        """Build a `Reader` for `field` on the selected motors.

        Args:
            field (Field | str): Field to read (e.g. `Field.PRESENT_POS` or `"Present_Position"`).
            motors (str | list[str] | None, optional): Motor names. `None` (default) selects every motor.
            rx_error_policy (RxErrorPolicy | str, optional): What to do with hardware error flags returned by
                single reads. Defaults to ignoring them.
        """
        if not self.is_connected:
            raise DeviceNotConnectedError(f"{self!r} is not connected. Call `connect()` first.")

        ids = [m.id for m in self._select_motors(motors).values()]
        reader = Reader(
            field,
            ids,
            self.port_handler,
            self.packet_handler,
            self.registry,
            rx_error_policy=rx_error_policy,
        )
        logger.debug(f"Created {reader}")
        return reader
