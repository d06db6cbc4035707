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

from .decoder import ValueDecoder
from .fields import POSITION_FIELDS, Field
from .motors_bus import Motor, MotorsBus
from .reader import Reader, SyncReadResult
from .registry import ControlParameterRegistry, ControlParameters
from .single_read import RxErrorPolicy

__all__ = [
    "ControlParameterRegistry",
    "ControlParameters",
    "Field",
    "Motor",
    "MotorsBus",
    "POSITION_FIELDS",
    "Reader",
    "RxErrorPolicy",
    "SyncReadResult",
    "ValueDecoder",
]
