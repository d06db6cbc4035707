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


class Field(str, Enum):
    """Logical quantities a reader can be bound to. Values are the control-table keys."""

    GOAL_POS = "Goal_Position"
    PRESENT_POS = "Present_Position"
    CW_ANGLE_LIMIT = "CW_Angle_Limit"
    CCW_ANGLE_LIMIT = "CCW_Angle_Limit"
    MOVING_SPEED = "Moving_Speed"
    PRESENT_SPEED = "Present_Speed"
    PRESENT_LOAD = "Present_Load"
    PRESENT_VOLTAGE = "Present_Voltage"
    PRESENT_TEMPERATURE = "Present_Temperature"
    TORQUE_LIMIT = "Torque_Limit"
    MULTI_TURN_OFFSET = "Multi_Turn_Offset"
    PRESENT_CURRENT = "Present_Current"

    @property
    def is_position(self) -> bool:
        return self in POSITION_FIELDS


# Registers holding positions: raw values wrap around in multi-turn mode and are centered on the model's
# half-turn when converted to angles.
POSITION_FIELDS = frozenset(
    {
        Field.GOAL_POS,
        Field.PRESENT_POS,
        Field.CW_ANGLE_LIMIT,
        Field.CCW_ANGLE_LIMIT,
    }
)
