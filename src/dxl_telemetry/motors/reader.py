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
from collections.abc import MutableSequence
from dataclasses import dataclass, field

import numpy as np

from dxl_telemetry.errors import ConfigurationError, UnknownMotorError, UnsupportedByteWidthError

from .bulk_read import BatchedReadSession
from .decoder import ValueDecoder
from .fields import Field
from .motors_bus import GroupBulkRead, PacketHandler, PortHandler
from .registry import ControlParameterRegistry, ControlParameters
from .single_read import RxErrorPolicy, SingleReadFallback

logger = logging.getLogger(__name__)


@dataclass
class SyncReadResult:
    comm_ok: bool
    # Motors whose data was missing from the response. Their slot in the reader kept its previous value.
    unavailable: list[int] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.comm_ok and not self.unavailable


class Reader:
    """
    Reads one field from a fixed set of motors and converts it to SI units.

    The register address and byte size are resolved once, at construction, and must be the same for every
    motor handled by the reader. Two acquisition modes are available:
        - `sync_read`: one bulk read transaction for all the motors. Results are stored in the reader, one
          slot per motor in the order of `ids`. Communication and per-motor failures are logged and the
          motors that did answer are still updated.
        - `read`: one transaction per motor, for the models which can't answer a bulk read (e.g. AX-12A).
          Results are written to a caller-provided sequence and the call stops at the first communication
          failure.

    Example:
    ```python
    reader = Reader(Field.PRESENT_POS, [1, 2], bus.port_handler, bus.packet_handler, bus.registry)
    result = reader.sync_read()
    if not result.success:
        print(f"No data from {result.unavailable}")
    print(reader.as_dict())
    ```

    Raises:
        ConfigurationError: Subclasses of it are raised for an empty or duplicated list of ids, motors
            disagreeing on the register layout, an unsupported byte size, an unknown motor model or a motor
            which could not be added to a bulk read.
    """

    def __init__(
        self,
        field: Field | str,
        ids: list[int],
        port_handler: PortHandler,
        packet_handler: PacketHandler,
        registry: ControlParameterRegistry,
        *,
        rx_error_policy: RxErrorPolicy | str = RxErrorPolicy.IGNORE,
        bulk_reader: GroupBulkRead | None = None,
    ):
        import dynamixel_sdk as dxl

        self.field = Field(field)
        self.ids = list(ids)
        if not self.ids:
            raise ConfigurationError("A reader needs at least one motor id.")
        if len(self.ids) != len(set(self.ids)):
            raise ConfigurationError(f"Some motor ids are listed more than once: {self.ids}.")

        self.port_handler = port_handler
        self.packet_handler = packet_handler
        self.registry = registry
        self.rx_error_policy = RxErrorPolicy(rx_error_policy)
        self._comm_success = dxl.COMM_SUCCESS
        self._no_error = 0x00

        self.address, self.n_bytes = self.registry.assert_same_layout(self.ids, self.field)
        if self.n_bytes not in (1, 2, 4):
            raise UnsupportedByteWidthError(self.n_bytes)

        self._params: dict[int, ControlParameters] = {id_: registry.lookup(id_, self.field) for id_ in self.ids}
        self._id_to_slot = {id_: slot for slot, id_ in enumerate(self.ids)}
        self._data = np.full(len(self.ids), np.nan, dtype=np.float64)

        self.decoder = ValueDecoder(self.field, registry.model_max_position)
        if self.field.is_position:
            # Every motor of a position reader needs a known max position.
            for id_, params in self._params.items():
                self.decoder.get_max_position(params.model_nb, id_)

        self.session = BatchedReadSession(port_handler, packet_handler, bulk_reader)
        self.fallback = SingleReadFallback(port_handler, packet_handler, self.address, self.n_bytes)

    def __len__(self):
        return len(self.ids)

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(field='{self.field.value}', ids={self.ids}, "
            f"address={self.address}, n_bytes={self.n_bytes})"
        )

    @property
    def data(self) -> np.ndarray:
        """Read-only view on the last values obtained with `sync_read`, one slot per motor. NaN until read."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def slot(self, motor_id: int) -> int:
        slot = self._id_to_slot.get(motor_id)
        if slot is None:
            raise UnknownMotorError(motor_id, self.ids)
        return slot

    def value(self, motor_id: int) -> float:
        return float(self._data[self.slot(motor_id)])

    def as_dict(self) -> dict[int, float]:
        return {id_: float(self._data[slot]) for id_, slot in self._id_to_slot.items()}

    def _is_comm_success(self, comm: int) -> bool:
        return comm == self._comm_success

    def _is_error(self, error: int) -> bool:
        return error != self._no_error

    def _decode(self, motor_id: int, value: int) -> float:
        params = self._params[motor_id]
        return self.decoder.decode(value, params.model_nb, params.unit, motor_id)

    def sync_read(self, ids: list[int] | None = None) -> SyncReadResult:
        """Read the field of several motors in a single bulk read transaction.

        Args:
            ids (list[int] | None, optional): Motors to read. `None` (default) reads every motor of the reader.

        Returns:
            SyncReadResult: Whether the transaction succeeded and which motors didn't provide any data.
        """
        ids = self.ids if ids is None else list(ids)
        for id_ in ids:
            self.slot(id_)

        self.session.prepare(ids, self.address, self.n_bytes)

        comm = self.session.transmit()
        comm_ok = self._is_comm_success(comm)
        if not comm_ok:
            logger.warning(
                f"Bulk read of '{self.field.value}' on {ids=} failed: "
                + self.packet_handler.getTxRxResult(comm)
            )

        # Availability is checked per motor whatever the transaction result.
        unavailable = self.session.unavailable_ids(ids, self.address, self.n_bytes)
        for id_ in ids:
            if id_ in unavailable:
                continue
            value = self.session.get_data(id_, self.address, self.n_bytes)
            self._data[self._id_to_slot[id_]] = self._decode(id_, value)

        return SyncReadResult(comm_ok=comm_ok, unavailable=unavailable)

    def read(self, ids: list[int], output: MutableSequence[float]) -> bool:
        """Read the field of several motors, one transaction per motor.

        Args:
            ids (list[int]): Motors to read.
            output (MutableSequence[float]): Receives the value of `ids[i]` at index `i`.

        Returns:
            bool: `True` if every motor was read, `False` as soon as one read fails. The remaining motors are
                not read and their entries of `output` are left untouched.
        """
        for i, id_ in enumerate(ids):
            self.slot(id_)
            value, comm, error = self.fallback.read_raw(id_)

            if not self._is_comm_success(comm):
                logger.error(
                    f"Failed to read '{self.field.value}' on {id_=}: " + self.packet_handler.getTxRxResult(comm)
                )
                return False

            if self._is_error(error):
                if self.rx_error_policy is RxErrorPolicy.SURFACE:
                    logger.error(
                        f"Failed to read '{self.field.value}' on {id_=}: "
                        + self.packet_handler.getRxPacketError(error)
                    )
                    return False
                logger.debug(
                    f"Ignoring error flag on {id_=}: " + self.packet_handler.getRxPacketError(error)
                )

            output[i] = self._decode(id_, value)

        return True
