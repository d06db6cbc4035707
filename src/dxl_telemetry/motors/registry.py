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

from dataclasses import dataclass
from functools import cached_property

from deepdiff import DeepDiff

from dxl_telemetry.errors import ByteWidthMismatchError, UnknownMotorError

from .fields import Field
from .motors_bus import Motor, get_address, get_ctrl_table


@dataclass(frozen=True)
class ControlParameters:
    address: int
    n_bytes: int
    # SI units per raw count
    unit: float
    model_nb: int


class ControlParameterRegistry:
    """
    Resolves where a field lives in a motor's control table and how to convert it, keyed by motor id.

    The model numbers reported by the motors during a handshake can be registered in `scanned_models`; they
    then take precedence over the numbers expected from the configured model names.
    """

    def __init__(
        self,
        motors: dict[str, Motor],
        model_ctrl_table: dict[str, dict],
        model_unit_table: dict[str, dict],
        model_number_table: dict[str, int],
        model_max_position: dict[int, int],
        scanned_models: dict[int, int] | None = None,
    ):
        self.motors = motors
        self.model_ctrl_table = model_ctrl_table
        self.model_unit_table = model_unit_table
        self.model_number_table = model_number_table
        self.model_max_position = model_max_position
        self.scanned_models = scanned_models if scanned_models else {}

        self._id_to_model_dict = {m.id: m.model for m in self.motors.values()}

        for model in self._id_to_model_dict.values():
            get_ctrl_table(self.model_ctrl_table, model)

    def __contains__(self, motor_id: int) -> bool:
        return motor_id in self._id_to_model_dict

    @property
    def ids(self) -> list[int]:
        return list(self._id_to_model_dict)

    @cached_property
    def has_different_ctrl_tables(self) -> bool:
        models = list(dict.fromkeys(self._id_to_model_dict.values()))
        if len(models) < 2:
            return False

        first_table = self.model_ctrl_table[models[0]]
        return any(
            DeepDiff(first_table, get_ctrl_table(self.model_ctrl_table, model)) for model in models[1:]
        )

    def get_model(self, motor_id: int) -> str:
        model = self._id_to_model_dict.get(motor_id)
        if model is None:
            raise UnknownMotorError(motor_id, self.ids)
        return model

    def lookup_model_id(self, motor_id: int) -> int:
        model = self.get_model(motor_id)
        return self.scanned_models.get(motor_id, self.model_number_table[model])

    def lookup(self, motor_id: int, field: Field | str) -> ControlParameters:
        data_name = Field(field).value
        model = self.get_model(motor_id)
        addr, n_bytes = get_address(self.model_ctrl_table, model, data_name)
        unit = self.model_unit_table[model].get(data_name)
        if unit is None:
            raise KeyError(f"Unit for '{data_name}' not found in {model} unit table.")

        return ControlParameters(
            address=addr,
            n_bytes=n_bytes,
            unit=unit,
            model_nb=self.lookup_model_id(motor_id),
        )

    def assert_same_layout(self, motor_ids: list[int], field: Field | str) -> tuple[int, int]:
        """
        Ensures every motor exposes `field` at the same address with the same byte size, and returns them.

        Raises:
            ByteWidthMismatchError: At least two motors disagree on the register layout.
        """
        field = Field(field)
        if not motor_ids:
            raise ValueError("At least one motor id is required.")

        if not self.has_different_ctrl_tables:
            for id_ in motor_ids:
                self.get_model(id_)
            params = self.lookup(motor_ids[0], field)
            return params.address, params.n_bytes

        layouts = {}
        for id_ in motor_ids:
            params = self.lookup(id_, field)
            layouts[id_] = (params.address, params.n_bytes)

        if len(set(layouts.values())) > 1:
            raise ByteWidthMismatchError(field.value, layouts)

        return next(iter(layouts.values()))
