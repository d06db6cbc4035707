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

# Positions above this value are negative positions which wrapped around in multi-turn mode.
MULTI_TURN_MAX_POSITION = 28672
UINT_OVERFLOW = 65535


def decode_multi_turn_overflow(value: int) -> int:
    """
    Recovers a negative position from its unsigned wire representation.

    Both constants are fixed by the protocol: they do not depend on the register's byte size.
    """
    if value > MULTI_TURN_MAX_POSITION:
        return value - UINT_OVERFLOW
    return value


def position_to_angle(position: int, max_position: int, unit: float) -> float:
    """Converts a (possibly negative) raw position into an angle centered on the half-turn position."""
    return (position - max_position / 2) * unit
