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

from ..fields import Field

MODEL_NUMBER = (0, 2)

# Unit helpers
RPM_TO_RAD_S = 2 * math.pi / 60

# data_name: (address, size_byte)
# https://emanual.robotis.com/docs/en/dxl/ax/ax-12a/#control-table-of-eeprom-area
AX_SERIES_CONTROL_TABLE = {
    "Model_Number": MODEL_NUMBER,  # read-only
    "Firmware_Version": (2, 1),
    "ID": (3, 1),
    "Baud_Rate": (4, 1),
    Field.CW_ANGLE_LIMIT.value: (6, 2),
    Field.CCW_ANGLE_LIMIT.value: (8, 2),
    Field.GOAL_POS.value: (30, 2),
    Field.MOVING_SPEED.value: (32, 2),
    Field.TORQUE_LIMIT.value: (34, 2),
    Field.PRESENT_POS.value: (36, 2),
    Field.PRESENT_SPEED.value: (38, 2),
    Field.PRESENT_LOAD.value: (40, 2),
    Field.PRESENT_VOLTAGE.value: (42, 1),
    Field.PRESENT_TEMPERATURE.value: (43, 1),
}

# https://emanual.robotis.com/docs/en/dxl/mx/mx-64/#control-table-of-eeprom-area
MX_SERIES_CONTROL_TABLE = {
    **AX_SERIES_CONTROL_TABLE,
    Field.MULTI_TURN_OFFSET.value: (20, 2),
}

# X series running the Protocol 1.0 firmware keep their own control table. Keys are mapped on the closest
# equivalent register (e.g. position limits for angle limits).
# https://emanual.robotis.com/docs/en/dxl/x/xm430-w210/#control-table
X_SERIES_CONTROL_TABLE = {
    "Model_Number": MODEL_NUMBER,  # read-only
    "Firmware_Version": (6, 1),
    "ID": (7, 1),
    "Baud_Rate": (8, 1),
    Field.MULTI_TURN_OFFSET.value: (20, 4),  # Homing_Offset
    Field.CCW_ANGLE_LIMIT.value: (48, 4),  # Max_Position_Limit
    Field.CW_ANGLE_LIMIT.value: (52, 4),  # Min_Position_Limit
    Field.MOVING_SPEED.value: (112, 4),  # Profile_Velocity
    Field.GOAL_POS.value: (116, 4),
    Field.PRESENT_CURRENT.value: (126, 2),
    Field.PRESENT_SPEED.value: (128, 4),  # Present_Velocity
    Field.PRESENT_POS.value: (132, 4),
    Field.PRESENT_VOLTAGE.value: (144, 2),  # Present_Input_Voltage
    Field.PRESENT_TEMPERATURE.value: (146, 1),
}

# data_name: SI units per raw count
AX_SERIES_UNITS = {
    Field.CW_ANGLE_LIMIT.value: math.radians(300) / 1023,
    Field.CCW_ANGLE_LIMIT.value: math.radians(300) / 1023,
    Field.GOAL_POS.value: math.radians(300) / 1023,
    Field.PRESENT_POS.value: math.radians(300) / 1023,
    Field.MOVING_SPEED.value: 0.111 * RPM_TO_RAD_S,
    Field.PRESENT_SPEED.value: 0.111 * RPM_TO_RAD_S,
    Field.TORQUE_LIMIT.value: 1 / 1023,
    Field.PRESENT_LOAD.value: 1 / 1023,
    Field.PRESENT_VOLTAGE.value: 0.1,
    Field.PRESENT_TEMPERATURE.value: 1.0,
}

MX_SERIES_UNITS = {
    Field.CW_ANGLE_LIMIT.value: 2 * math.pi / 4096,
    Field.CCW_ANGLE_LIMIT.value: 2 * math.pi / 4096,
    Field.GOAL_POS.value: 2 * math.pi / 4096,
    Field.PRESENT_POS.value: 2 * math.pi / 4096,
    Field.MULTI_TURN_OFFSET.value: 2 * math.pi / 4096,
    Field.MOVING_SPEED.value: 0.114 * RPM_TO_RAD_S,
    Field.PRESENT_SPEED.value: 0.114 * RPM_TO_RAD_S,
    Field.TORQUE_LIMIT.value: 1 / 1023,
    Field.PRESENT_LOAD.value: 1 / 1023,
    Field.PRESENT_VOLTAGE.value: 0.1,
    Field.PRESENT_TEMPERATURE.value: 1.0,
}

X_SERIES_UNITS = {
    Field.CW_ANGLE_LIMIT.value: 2 * math.pi / 4096,
    Field.CCW_ANGLE_LIMIT.value: 2 * math.pi / 4096,
    Field.GOAL_POS.value: 2 * math.pi / 4096,
    Field.PRESENT_POS.value: 2 * math.pi / 4096,
    Field.MULTI_TURN_OFFSET.value: 2 * math.pi / 4096,
    Field.MOVING_SPEED.value: 0.229 * RPM_TO_RAD_S,
    Field.PRESENT_SPEED.value: 0.229 * RPM_TO_RAD_S,
    Field.PRESENT_CURRENT.value: 2.69e-3,
    Field.PRESENT_VOLTAGE.value: 0.1,
    Field.PRESENT_TEMPERATURE.value: 1.0,
}

MODEL_CONTROL_TABLE = {
    "ax-12a": AX_SERIES_CONTROL_TABLE,
    "mx-64": MX_SERIES_CONTROL_TABLE,
    "xm430-w210": X_SERIES_CONTROL_TABLE,
    "xh430-w210": X_SERIES_CONTROL_TABLE,
}

MODEL_UNIT_TABLE = {
    "ax-12a": AX_SERIES_UNITS,
    "mx-64": MX_SERIES_UNITS,
    "xm430-w210": X_SERIES_UNITS,
    "xh430-w210": X_SERIES_UNITS,
}

MODEL_RESOLUTION = {
    "ax-12a": 1024,
    "mx-64": 4096,
    "xm430-w210": 4096,
    "xh430-w210": 4096,
}

# {model: model_number}
# https://emanual.robotis.com/docs/en/dxl/protocol1/#ping
MODEL_NUMBER_TABLE = {
    "ax-12a": 12,
    "mx-64": 310,
    "xm430-w210": 1030,
    "xh430-w210": 1000,
}

# {model_number: max raw position}
MODEL_MAX_POSITION = {
    MODEL_NUMBER_TABLE[model]: resolution - 1 for model, resolution in MODEL_RESOLUTION.items()
}

# Models which can't answer a bulk read instruction and must be read one by one.
BULK_READ_UNSUPPORTED_MODELS = ["ax-12a"]

AVAILABLE_BAUDRATES = [
    9_600,
    19_200,
    57_600,
    115_200,
    200_000,
    250_000,
    400_000,
    500_000,
    1_000_000,
]
