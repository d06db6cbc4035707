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
import math

import numpy as np
import pytest

from dxl_telemetry.errors import (
    ByteWidthMismatchError,
    ConfigurationError,
    ParameterRegistrationError,
    UnknownModelError,
    UnknownMotorError,
)
from dxl_telemetry.motors import Field, Motor, Reader, RxErrorPolicy, SyncReadResult
from tests.mocks.mock_dynamixel_sdk import COMM_RX_TIMEOUT, ERRBIT_VOLTAGE

try:
    import dynamixel_sdk  # noqa: F401
except (ImportError, ModuleNotFoundError):
    pytest.skip("dynamixel_sdk not available", allow_module_level=True)

MX_UNIT = 2 * math.pi / 4096
AX_UNIT = math.radians(300) / 1023
MX_MAX_POSITION = 4095
AX_MAX_POSITION = 1023
# Present_Position of the mx-64
ADDR, N_BYTES = 36, 2
SENTINEL = -1.0


def mx_angle(raw: int) -> float:
    return (raw - MX_MAX_POSITION / 2) * MX_UNIT


@pytest.fixture
def motors_on_bus(packet_handler):
    for id_, position in [(1, 1000), (2, 2000), (3, 3000)]:
        packet_handler.add_motor(id_, 310, {ADDR: position, 43: 30 + id_})
    return packet_handler


@pytest.fixture
def make_reader(port_handler, packet_handler, bulk_reader, registry, motors_on_bus):
    def _make_reader(field=Field.PRESENT_POS, ids=(1, 2, 3), reader_registry=None, **kwargs) -> Reader:
        return Reader(
            field,
            list(ids),
            port_handler,
            packet_handler,
            reader_registry if reader_registry is not None else registry,
            bulk_reader=bulk_reader,
            **kwargs,
        )

    return _make_reader


def test_construction(make_reader):
    reader = make_reader()

    assert reader.address == ADDR
    assert reader.n_bytes == N_BYTES
    assert len(reader) == 3
    assert reader.rx_error_policy is RxErrorPolicy.IGNORE
    assert np.isnan(reader.data).all()


def test_construction_empty_ids(make_reader):
    with pytest.raises(ConfigurationError, match="at least one motor id"):
        make_reader(ids=[])


def test_construction_duplicate_ids(make_reader):
    with pytest.raises(ConfigurationError, match="listed more than once"):
        make_reader(ids=[1, 2, 1])


def test_construction_unknown_id(make_reader):
    with pytest.raises(UnknownMotorError):
        make_reader(ids=[1, 9])


def test_construction_byte_width_mismatch(make_reader, make_registry):
    registry = make_registry({"mx": Motor(1, "mx-64"), "xm": Motor(2, "xm430-w210")})

    with pytest.raises(ByteWidthMismatchError):
        make_reader(ids=[1, 2], reader_registry=registry)


def test_sync_read(make_reader):
    reader = make_reader()

    result = reader.sync_read()

    assert result == SyncReadResult(comm_ok=True, unavailable=[])
    assert result.success
    assert reader.as_dict() == {1: mx_angle(1000), 2: mx_angle(2000), 3: mx_angle(3000)}
    assert reader.value(2) == mx_angle(2000)
    assert reader.data.tolist() == [mx_angle(1000), mx_angle(2000), mx_angle(3000)]


def test_sync_read_clears_params_before_each_transaction(make_reader, bulk_reader):
    reader = make_reader()

    reader.sync_read()
    reader.sync_read([3, 1])

    assert bulk_reader.calls[:5] == [
        ("clearParam",),
        ("addParam", 1, ADDR, N_BYTES),
        ("addParam", 2, ADDR, N_BYTES),
        ("addParam", 3, ADDR, N_BYTES),
        ("txRxPacket", (1, 2, 3)),
    ]
    second_call = bulk_reader.calls.index(("clearParam",), 1)
    assert bulk_reader.calls[second_call : second_call + 4] == [
        ("clearParam",),
        ("addParam", 3, ADDR, N_BYTES),
        ("addParam", 1, ADDR, N_BYTES),
        ("txRxPacket", (3, 1)),
    ]


def test_sync_read_subset(make_reader):
    reader = make_reader()

    reader.sync_read([2])

    assert reader.value(2) == mx_angle(2000)
    assert math.isnan(reader.value(1))
    assert math.isnan(reader.value(3))


def test_sync_read_partial_availability(make_reader, packet_handler, bulk_reader, caplog):
    bulk_reader.keep_partial_data = True
    reader = make_reader()
    reader.sync_read()

    packet_handler.silent_ids.add(2)
    packet_handler.registers[1][ADDR] = 1100
    packet_handler.registers[2][ADDR] = 2200
    packet_handler.registers[3][ADDR] = 3300
    with caplog.at_level(logging.WARNING):
        result = reader.sync_read()

    assert not result.comm_ok
    assert result.unavailable == [2]
    assert not result.success
    # Motor 2 keeps its previous value, the others are still updated.
    assert reader.as_dict() == {1: mx_angle(1100), 2: mx_angle(2000), 3: mx_angle(3300)}
    assert "[ID:002] bulk read getData failed" in caplog.text


def test_sync_read_comm_failure_continues(make_reader, bulk_reader, caplog):
    reader = make_reader()
    bulk_reader.tx_result = COMM_RX_TIMEOUT
    bulk_reader.keep_partial_data = True

    with caplog.at_level(logging.WARNING):
        result = reader.sync_read()

    assert result == SyncReadResult(comm_ok=False, unavailable=[])
    assert "Bulk read of 'Present_Position' on ids=[1, 2, 3] failed" in caplog.text
    assert reader.as_dict() == {1: mx_angle(1000), 2: mx_angle(2000), 3: mx_angle(3000)}


def test_sync_read_failed_transaction_keeps_previous_values(make_reader, packet_handler, caplog):
    reader = make_reader()
    reader.sync_read()

    packet_handler.silent_ids.add(2)
    packet_handler.registers[1][ADDR] = 1100
    with caplog.at_level(logging.WARNING):
        result = reader.sync_read()

    assert result == SyncReadResult(comm_ok=False, unavailable=[1, 2, 3])
    assert reader.as_dict() == {1: mx_angle(1000), 2: mx_angle(2000), 3: mx_angle(3000)}
    assert "Bulk read of 'Present_Position' on ids=[1, 2, 3] failed" in caplog.text


def test_sync_read_checks_availability_after_failed_transaction(make_reader, bulk_reader, packet_handler):
    reader = make_reader()
    packet_handler.silent_ids.update({1, 2, 3})

    result = reader.sync_read()

    assert result.unavailable == [1, 2, 3]
    assert [c for c in bulk_reader.calls if c[0] == "isAvailable"] == [
        ("isAvailable", 1),
        ("isAvailable", 2),
        ("isAvailable", 3),
    ]
    assert np.isnan(reader.data).all()


def test_sync_read_multi_turn_overflow(make_reader, packet_handler):
    packet_handler.registers[1][ADDR] = 30000
    reader = make_reader()

    reader.sync_read()

    assert reader.value(1) == pytest.approx((30000 - 65535 - MX_MAX_POSITION / 2) * MX_UNIT)
    assert reader.value(1) < 0


def test_sync_read_unknown_id(make_reader, bulk_reader):
    reader = make_reader(ids=[1, 2])

    with pytest.raises(UnknownMotorError):
        reader.sync_read([1, 3])

    assert bulk_reader.calls == []


def test_sync_read_registration_failure(make_reader):
    reader = make_reader()

    with pytest.raises(ParameterRegistrationError):
        reader.sync_read([1, 1])


def test_construction_unknown_model(make_reader, registry, bulk_reader):
    registry.scanned_models = {2: 9999}

    with pytest.raises(UnknownModelError, match=r"Model number 9999 \(motor id=2\)"):
        make_reader()

    assert bulk_reader.calls == []


def test_unknown_model_linear_field(make_reader, registry):
    registry.scanned_models = {2: 9999}
    reader = make_reader(field=Field.PRESENT_TEMPERATURE)

    assert reader.sync_read().success
    assert reader.value(2) == 32.0


def test_sync_read_linear_field(make_reader):
    reader = make_reader(field=Field.PRESENT_TEMPERATURE)

    reader.sync_read()

    assert (reader.address, reader.n_bytes) == (43, 1)
    assert reader.as_dict() == {1: 31.0, 2: 32.0, 3: 33.0}


def test_data_is_read_only(make_reader):
    reader = make_reader()

    with pytest.raises(ValueError):
        reader.data[0] = 1.0


def test_slot(make_reader):
    reader = make_reader(ids=[3, 1])

    assert reader.slot(3) == 0
    assert reader.slot(1) == 1
    with pytest.raises(UnknownMotorError, match="Motor id=2 is not handled"):
        reader.slot(2)


def test_read(make_reader, packet_handler):
    reader = make_reader()
    output = [SENTINEL] * 3

    assert reader.read([1, 2, 3], output) == 1
    assert output == [mx_angle(1000), mx_angle(2000), mx_angle(3000)]
    assert packet_handler.single_reads == [(1, ADDR, N_BYTES), (2, ADDR, N_BYTES), (3, ADDR, N_BYTES)]


def test_read_does_not_touch_the_reader_store(make_reader):
    reader = make_reader()

    reader.read([1, 2, 3], [SENTINEL] * 3)

    assert np.isnan(reader.data).all()


def test_read_stops_at_first_comm_failure(make_reader, packet_handler, caplog):
    reader = make_reader()
    packet_handler.silent_ids.add(2)
    output = [SENTINEL] * 3

    with caplog.at_level(logging.ERROR):
        assert reader.read([1, 2, 3], output) == 0

    assert output == [mx_angle(1000), SENTINEL, SENTINEL]
    # Motor 3 is never attempted
    assert [id_ for id_, _, _ in packet_handler.single_reads] == [1, 2]
    assert "Failed to read 'Present_Position' on id_=2" in caplog.text


def test_read_ignores_error_flag_by_default(make_reader, packet_handler):
    packet_handler.error_flags[2] = ERRBIT_VOLTAGE
    reader = make_reader()
    output = [SENTINEL] * 3

    assert reader.read([1, 2, 3], output) is True
    assert output[1] == mx_angle(2000)


def test_read_surfaces_error_flag(make_reader, packet_handler, caplog):
    packet_handler.error_flags[2] = ERRBIT_VOLTAGE
    reader = make_reader(rx_error_policy="surface")
    output = [SENTINEL] * 3

    with caplog.at_level(logging.ERROR):
        assert reader.read([1, 2, 3], output) is False

    assert output == [mx_angle(1000), SENTINEL, SENTINEL]
    assert "Input voltage error!" in caplog.text


def test_read_ax_series(port_handler, packet_handler, bulk_reader, make_registry):
    packet_handler.add_motor(7, 12, {ADDR: 500})
    registry = make_registry({"ax": Motor(7, "ax-12a")})
    reader = Reader(Field.PRESENT_POS, [7], port_handler, packet_handler, registry, bulk_reader=bulk_reader)
    output = [SENTINEL]

    assert reader.read([7], output)
    assert output[0] == pytest.approx((500 - AX_MAX_POSITION / 2) * AX_UNIT)


def test_read_into_numpy_array(make_reader):
    reader = make_reader()
    output = np.zeros(2)

    assert reader.read([3, 1], output)
    np.testing.assert_allclose(output, [mx_angle(3000), mx_angle(1000)])


def test_repr(make_reader):
    assert repr(make_reader(ids=[1])) == "Reader(field='Present_Position', ids=[1], address=36, n_bytes=2)"
