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

# ruff: noqa: N802
# This noqa is for the Protocols classes: PortHandler, PacketHandler, GroupBulkRead

import abc
import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Protocol

import serial
from deepdiff import DeepDiff

from dxl_telemetry.errors import DeviceAlreadyConnectedError, DeviceNotConnectedError

logger = logging.getLogger(__name__)


def get_ctrl_table(model_ctrl_table: dict[str, dict], model: str) -> dict[str, tuple[int, int]]:
    if model not in model_ctrl_table:
        raise KeyError(f"Control table for {model=} not found.")
    return model_ctrl_table[model]


def get_address(model_ctrl_table: dict[str, dict], model: str, data_name: str) -> tuple[int, int]:
    """Returns the `(address, n_bytes)` of `data_name` in the control table of `model`."""
    ctrl_table = get_ctrl_table(model_ctrl_table, model)
    if data_name not in ctrl_table:
        raise KeyError(f"Address for '{data_name}' not found in {model} control table.")
    return ctrl_table[data_name]


@dataclass
class Motor:
    id: int
    model: str


class PortHandler(Protocol):
    is_open: bool
    port_name: str
    ser: serial.Serial

    def openPort(self) -> bool: ...
    def closePort(self) -> None: ...
    def setBaudRate(self, baudrate: int) -> bool: ...
    def getBaudRate(self) -> int: ...
    def setPacketTimeoutMillis(self, msec: int) -> None: ...


class PacketHandler(Protocol):
    def getTxRxResult(self, result: int) -> str: ...
    def getRxPacketError(self, error: int) -> str: ...
    def ping(self, port: PortHandler, id: int) -> tuple[int, int, int]: ...
    def read1ByteTxRx(self, port: PortHandler, id: int, address: int) -> tuple[int, int, int]: ...
    def read2ByteTxRx(self, port: PortHandler, id: int, address: int) -> tuple[int, int, int]: ...
    def read4ByteTxRx(self, port: PortHandler, id: int, address: int) -> tuple[int, int, int]: ...


class GroupBulkRead(Protocol):
    def clearParam(self) -> None: ...
    def addParam(self, id: int, start_address: int, data_length: int) -> bool: ...
    def txRxPacket(self) -> int: ...
    def isAvailable(self, id: int, address: int, data_length: int) -> bool: ...
    def getData(self, id: int, address: int, data_length: int) -> int: ...


class MotorsBus(abc.ABC):
    """
    A MotorsBus owns the serial port shared by several motors daisy-chained together.

    It opens and closes the port, checks which motors answer and which model they report. Reading registers
    is left to the `Reader` objects built on top of it (see `DynamixelMotorsBus.make_reader`).

    Example of usage for 2 Dynamixel motors connected to the bus:
    ```python
    bus = DynamixelMotorsBus(
        port="/dev/ttyUSB0",
        motors={"shoulder": Motor(1, "mx-64"), "elbow": Motor(2, "mx-64")},
    )
    bus.connect()

    reader = bus.make_reader(Field.PRESENT_POS)
    reader.sync_read()
    print(reader.as_dict())

    bus.disconnect()
    ```
    """

    available_baudrates: list[int]
    default_baudrate: int
    default_timeout: int
    model_ctrl_table: dict[str, dict]
    model_unit_table: dict[str, dict]
    model_number_table: dict[str, int]
    model_max_position_table: dict[int, int]

    def __init__(
        self,
        port: str,
        motors: dict[str, Motor],
        baudrate: int | None = None,
    ):
        self.port = port
        self.motors = motors
        self.baudrate = baudrate if baudrate is not None else self.default_baudrate

        self.port_handler: PortHandler
        self.packet_handler: PacketHandler
        self._comm_success: int
        self._no_error: int

        self._validate_motors()

    def __len__(self):
        return len(self.motors)

    def __repr__(self):
        motors = ", ".join(f"{name}: {m.id} ({m.model})" for name, m in self.motors.items())
        return f"{self.__class__.__name__}(port='{self.port}', motors=[{motors}])"

    @cached_property
    def models(self) -> list[str]:
        return [m.model for m in self.motors.values()]

    @cached_property
    def ids(self) -> list[int]:
        return [m.id for m in self.motors.values()]

    def _select_motors(self, motors: str | list[str] | None) -> dict[str, Motor]:
        if motors is None:
            return dict(self.motors)

        names = [motors] if isinstance(motors, str) else list(motors)
        unknown = [name for name in names if name not in self.motors]
        if unknown:
            raise KeyError(f"Unknown motors {unknown}. Available motors: {list(self.motors)}.")
        return {name: self.motors[name] for name in names}

    def _validate_motors(self) -> None:
        if len(self.ids) != len(set(self.ids)):
            raise ValueError(f"Some motors have the same id!\n{self}")

        for model in self.models:
            get_ctrl_table(self.model_ctrl_table, model)

        if self.baudrate not in self.available_baudrates:
            raise ValueError(f"Baudrate {self.baudrate} is not one of {self.available_baudrates}.")

    def _is_comm_success(self, comm: int) -> bool:
        return comm == self._comm_success

    def _is_error(self, error: int) -> bool:
        return error != self._no_error

    def _shares_ctrl_table(self, model: str, model_nb: int) -> bool:
        """Whether a motor reporting `model_nb` can be read with the control table of `model`."""
        expected_table = self.model_ctrl_table[model]
        candidates = [name for name, nb in self.model_number_table.items() if nb == model_nb]
        return any(not DeepDiff(expected_table, self.model_ctrl_table[name]) for name in candidates)

    def scan_models(self) -> dict[int, int]:
        """Pings every motor and returns the model number each one reports, keyed by id.

        A motor may report another model than the configured one as long as both share the same control table
        (e.g. an xh430-w210 configured as an xm430-w210). Its reported model number is returned so that
        positions get converted with the right resolution.

        Raises:
            RuntimeError: Some motors didn't answer, or reported a model with a different control table.
        """
        found_models = {}
        missing = []
        incompatible = []
        for name, m in self.motors.items():
            model_nb = self.ping(m.id)
            if model_nb is None:
                missing.append(f"  - '{name}' (id={m.id}) did not answer")
                continue

            if not self._shares_ctrl_table(m.model, model_nb):
                incompatible.append(
                    f"  - '{name}' (id={m.id}) is configured as '{m.model}' "
                    f"(model number {self.model_number_table[m.model]}) but reports model number {model_nb}"
                )
                continue

            if model_nb != self.model_number_table[m.model]:
                logger.info(
                    f"'{name}' (id={m.id}) reports model number {model_nb}, configured as '{m.model}'. "
                    "Both share the same control table, using the reported one."
                )
            found_models[m.id] = model_nb

        if missing or incompatible:
            header = f"{self.__class__.__name__} motor check failed on port '{self.port}':"
            raise RuntimeError("\n".join([header, *missing, *incompatible]))

        return found_models

    @property
    def is_connected(self) -> bool:
        return self.port_handler.is_open

    def connect(self, handshake: bool = True) -> None:
        """Opens the port, then applies the baudrate and the default packet timeout.

        Args:
            handshake (bool, optional): Runs `_handshake` to check that every motor answers with a compatible
                model. Defaults to `True`.

        Raises:
            DeviceAlreadyConnectedError: The port is already open.
            ConnectionError: The port could not be opened.
            RuntimeError: The handshake failed. The port is left open, call `disconnect` to close it.
        """
        if self.is_connected:
            raise DeviceAlreadyConnectedError(f"{self!r} is already connected.")

        self._open_port()
        self.set_baudrate(self.baudrate)
        self.set_timeout()
        if handshake:
            self._handshake()
        logger.debug(f"{self.__class__.__name__} connected on '{self.port}'.")

    def _open_port(self) -> None:
        try:
            opened = self.port_handler.openPort()
        except (FileNotFoundError, OSError, serial.SerialException) as e:
            raise ConnectionError(f"Could not connect on port '{self.port}': {e}") from e

        if not opened:
            raise ConnectionError(f"Could not connect on port '{self.port}'. Is it the right port?")

    @abc.abstractmethod
    def _handshake(self) -> None:
        pass

    def disconnect(self) -> None:
        if not self.is_connected:
            raise DeviceNotConnectedError(f"{self!r} is not connected. Call `connect()` first.")

        self.port_handler.closePort()
        logger.debug(f"{self.__class__.__name__} disconnected from '{self.port}'.")

    def set_timeout(self, timeout_ms: int | None = None) -> None:
        """Sets the packet timeout in milliseconds, `default_timeout` if None."""
        self.port_handler.setPacketTimeoutMillis(self.default_timeout if timeout_ms is None else timeout_ms)

    def get_baudrate(self) -> int:
        return self.port_handler.getBaudRate()

    def set_baudrate(self, baudrate: int) -> None:
        current = self.get_baudrate()
        if current == baudrate:
            return

        logger.info(f"Changing bus baudrate from {current} to {baudrate}.")
        self.port_handler.setBaudRate(baudrate)
        if self.get_baudrate() != baudrate:
            raise RuntimeError(f"Failed to set the bus baudrate to {baudrate}.")

    def ping(self, motor_id: int, raise_on_error: bool = False) -> int | None:
        """Returns the model number reported by `motor_id`, or None if it didn't answer cleanly.

        With `raise_on_error`, a communication failure raises a `ConnectionError` and an error flag in the
        status packet raises a `RuntimeError`.
        """
        model_nb, comm, error = self.packet_handler.ping(self.port_handler, motor_id)
        if not self._is_comm_success(comm):
            msg = self.packet_handler.getTxRxResult(comm)
            logger.debug(f"Ping of id={motor_id} failed: {msg}")
            if raise_on_error:
                raise ConnectionError(msg)
            return None

        if self._is_error(error):
            msg = self.packet_handler.getRxPacketError(error)
            logger.debug(f"Ping of id={motor_id} returned an error flag: {msg}")
            if raise_on_error:
                raise RuntimeError(msg)
            return None

        return model_nb
