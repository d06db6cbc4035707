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

from dxl_telemetry.errors import UnknownModelError
from dxl_telemetry.utils.encoding_utils import decode_multi_turn_overflow, position_to_angle

from .fields import Field


class ValueDecoder:
    """
    Converts raw register values of one field into SI units.

    Non-position fields are scaled linearly: `raw * unit`. Position fields first get their multi-turn
    overflow corrected, then are centered on the model's half-turn position:
    `(position - max_position / 2) * unit`.
    """

    def __init__(self, field: Field | str, model_max_position: dict[int, int]):
        self.field = Field(field)
        # {model_number: max raw position}
        self.model_max_position = model_max_position

    def get_max_position(self, model_nb: int, motor_id: int | None = None) -> int:
        max_position = self.model_max_position.get(model_nb)
        if max_position is None:
            raise UnknownModelError(model_nb, motor_id)
        return max_position

    def decode(self, value: int, model_nb: int, unit: float, motor_id: int | None = None) -> float:
        if not self.field.is_position:
            return value * unit

        position = decode_multi_turn_overflow(value)
        max_position = self.get_max_position(model_nb, motor_id)
        return position_to_angle(position, max_position, unit)
