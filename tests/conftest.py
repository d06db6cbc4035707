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

import pytest

from dxl_telemetry.motors import ControlParameterRegistry, Motor
from dxl_telemetry.motors.dynamixel.tables import (
    MODEL_CONTROL_TABLE,
    MODEL_MAX_POSITION,
    MODEL_NUMBER_TABLE,
    MODEL_UNIT_TABLE,
)
from tests.mocks.mock_dynamixel_sdk import MockGroupBulkRead, MockPacketHandler, MockPortHandler


@pytest.fixture
def dummy_motors() -> dict[str, Motor]:
    return {
        "dummy_1": Motor(1, "mx-64"),
        "dummy_2": Motor(2, "mx-64"),
        "dummy_3": Motor(3, "mx-64"),
    }


@pytest.fixture
def make_registry():
    def _make_registry(motors: dict[str, Motor]) -> ControlParameterRegistry:
        return ControlParameterRegistry(
            motors, MODEL_CONTROL_TABLE, MODEL_UNIT_TABLE, MODEL_NUMBER_TABLE, MODEL_MAX_POSITION
        )

    return _make_registry


@pytest.fixture
def registry(dummy_motors, make_registry) -> ControlParameterRegistry:
    return make_registry(dummy_motors)


@pytest.fixture
def port_handler() -> MockPortHandler:
    port_handler = MockPortHandler()
    port_handler.openPort()
    return port_handler


@pytest.fixture
def packet_handler() -> MockPacketHandler:
    return MockPacketHandler()


@pytest.fixture
def bulk_reader(port_handler, packet_handler) -> MockGroupBulkRead:
    return MockGroupBulkRead(port_handler, packet_handler)
