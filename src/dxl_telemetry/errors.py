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


class DeviceNotConnectedError(ConnectionError):
    """Exception raised when the device is not connected."""

    def __init__(self, message="This device is not connected. Try calling `connect()` first."):
        self.message = message
        super().__init__(self.message)


class DeviceAlreadyConnectedError(ConnectionError):
    """Exception raised when the device is already connected."""

    def __init__(
        self,
        message="This device is already connected. Try not calling `connect()` twice.",
    ):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(RuntimeError):
    """Base exception for errors that no amount of retrying on the bus can fix."""

    def __init__(self, message: str = "Invalid motors configuration."):
        self.message = message
        super().__init__(self.message)


class ByteWidthMismatchError(ConfigurationError):
    """Exception raised when the motors handled by one reader expose a field with different layouts."""

    def __init__(self, field: str, layouts: dict[int, tuple[int, int]]):
        self.field = field
        self.layouts = layouts
        super().__init__(
            f"All motors of a reader must expose '{field}' at the same address and byte width. "
            f"Got (id: (address, n_bytes)) {layouts}."
        )


class UnsupportedByteWidthError(ConfigurationError):
    """Exception raised when a register is neither 1, 2 nor 4 bytes long."""

    def __init__(self, n_bytes: int):
        self.n_bytes = n_bytes
        super().__init__(f"Unsupported byte size: {n_bytes}. Expected [1, 2, 4].")


class UnknownModelError(ConfigurationError):
    """Exception raised when no position mapping is known for a motor model."""

    def __init__(self, model_nb: int, motor_id: int | None = None):
        self.model_nb = model_nb
        self.motor_id = motor_id
        on_motor = f" (motor id={motor_id})" if motor_id is not None else ""
        super().__init__(f"Model number {model_nb}{on_motor} is unknown, cannot convert position to angle.")


class UnknownMotorError(ConfigurationError, KeyError):
    """Exception raised when a motor id is not handled by the registry or the reader."""

    def __init__(self, motor_id: int, known_ids: list[int] | None = None):
        self.motor_id = motor_id
        msg = f"Motor id={motor_id} is not handled."
        if known_ids is not None:
            msg += f" Known ids: {known_ids}."
        super().__init__(msg)

    def __str__(self):
        return self.message


class ParameterRegistrationError(ConfigurationError):
    """Exception raised when a motor could not be added to a bulk read transaction."""

    def __init__(self, motor_id: int, address: int, n_bytes: int):
        self.motor_id = motor_id
        super().__init__(
            f"Adding parameters failed for id={motor_id} (@{address=}, {n_bytes=}). "
            "Is the id listed twice in the same read?"
        )
