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

import math

import pytest

from dxl_telemetry.errors import ConfigurationError, UnknownModelError
from dxl_telemetry.motors import POSITION_FIELDS, Field, ValueDecoder
from dxl_telemetry.motors.dynamixel.tables import MODEL_MAX_POSITION


@pytest.fixture
def position_decoder() -> ValueDecoder:
    return ValueDecoder(Field.PRESENT_POS, MODEL_MAX_POSITION)


@pytest.mark.parametrize(
    "field, raw, model_nb, unit, expected",
    [
        (Field.PRESENT_POS, 30000, 1030, 0.001, -37.5825),
        (Field.PRESENT_POS, 2048, 1030, 0.001, 0.0005),
        (Field.PRESENT_POS, 500, 12, 0.00325, -0.037375),
        (Field.PRESENT_SPEED, 150, 1030, 0.229, 34.35),
    ],
    ids=["multi-turn overflow", "no overflow", "ax-12a", "velocity"],
)
def test_decode_scenarios(field, raw, model_nb, unit, expected):
    decoder = ValueDecoder(field, MODEL_MAX_POSITION)
    assert decoder.decode(raw, model_nb, unit) == pytest.approx(expected)


@pytest.mark.parametrize(
    "field",
    [f for f in Field if not f.is_position],
)
def test_decode_non_position_is_linear(field):
    decoder = ValueDecoder(field, MODEL_MAX_POSITION)
    unit = 0.229
    for raw in (0, 1, 255, 28672, 28673, 30000, 65535, 2**32 - 1):
        assert decoder.decode(raw, 1030, unit) == raw * unit


def test_decode_non_position_ignores_model():
    decoder = ValueDecoder(Field.PRESENT_TEMPERATURE, MODEL_MAX_POSITION)
    # No model lookup for linear fields
    assert decoder.decode(42, 999_999, 1.0) == 42.0


@pytest.mark.parametrize("field", sorted(POSITION_FIELDS))
@pytest.mark.parametrize("model_nb", sorted(MODEL_MAX_POSITION))
def test_decode_position_formula(field, model_nb):
    decoder = ValueDecoder(field, MODEL_MAX_POSITION)
    max_position = MODEL_MAX_POSITION[model_nb]
    unit = 2 * math.pi / 4096
    for raw in (0, 511, 1023, 4095, 28672):
        assert decoder.decode(raw, model_nb, unit) == (raw - max_position / 2) * unit


def test_decode_position_overflow_boundary(position_decoder):
    unit = 1.0
    assert position_decoder.decode(28672, 1030, unit) == 28672 - 2047.5
    assert position_decoder.decode(28673, 1030, unit) == 28673 - 65535 - 2047.5


@pytest.mark.parametrize("model_nb, expected", [(12, 1023), (310, 4095), (1000, 4095), (1030, 4095)])
def test_get_max_position(position_decoder, model_nb, expected):
    assert position_decoder.get_max_position(model_nb) == expected


def test_decode_unknown_model(position_decoder):
    with pytest.raises(UnknownModelError, match="Model number 9999 \\(motor id=4\\) is unknown") as e:
        position_decoder.decode(100, 9999, 0.001, motor_id=4)

    assert isinstance(e.value, ConfigurationError)
    assert e.value.model_nb == 9999
    assert e.value.motor_id == 4


def test_decoder_accepts_field_name():
    decoder = ValueDecoder("Present_Position", MODEL_MAX_POSITION)
    assert decoder.field is Field.PRESENT_POS
