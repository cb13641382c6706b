"""
I2C Register Transport for the APDS-9960

Thin wrapper around an opened smbus2 bus handle. It performs the three
register transactions the driver needs and turns bus failures into
``TransportError``. It never interprets register contents and never
retries.
"""

import logging

from smbus2 import i2c_msg

from apds9960.hardware.registers import APDS9960_I2C_ADDR

logger = logging.getLogger("hardware.apds9960.transport")


class APDS9960Error(Exception):
    """Base class for errors raised by the APDS-9960 driver."""


class TransportError(APDS9960Error):
    """A bus transaction with the sensor failed."""

    def __init__(self, operation: str, register: int, message: str) -> None:
        self.operation = operation
        self.register = register
        super().__init__(
            f"I2C {operation} of register 0x{register:02X} failed: {message}"
        )


def _check_byte(value: int, name: str) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must fit in one byte, got {value}")


class RegisterTransport:
    """Exclusive register-level access to one device on an SMBus handle."""

    def __init__(self, bus, address: int = APDS9960_I2C_ADDR) -> None:
        """
        Args:
            bus: Opened ``smbus2.SMBus`` (or compatible) handle
            address: 7-bit I2C address of the device
        """
        self.bus = bus
        self.address = address

    def write_byte(self, register: int, value: int) -> None:
        """Write one byte to ``register`` in a single transaction."""
        _check_byte(register, "register")
        _check_byte(value, "value")
        logger.debug(f"write 0x{register:02X} <- 0x{value:02X}")
        try:
            self.bus.write_byte_data(self.address, register, value)
        except OSError as e:
            raise TransportError("write", register, str(e)) from e

    def read_byte(self, register: int) -> int:
        """Read one byte from ``register`` (write address, then read)."""
        _check_byte(register, "register")
        try:
            value = self.bus.read_byte_data(self.address, register)
        except OSError as e:
            raise TransportError("read", register, str(e)) from e
        logger.debug(f"read 0x{register:02X} -> 0x{value:02X}")
        return value

    def read_block(self, register: int, length: int) -> bytes:
        """
        Read ``length`` bytes starting at ``register``.

        Issued as one combined write-then-read transaction so that reads
        longer than the 32-byte SMBus block limit (a full gesture FIFO is
        128 bytes) stay atomic. The device advances its own register
        pointer between bytes.

        Returns:
            The bytes read, in bus order
        """
        _check_byte(register, "register")
        if length < 0:
            raise ValueError(f"length must not be negative, got {length}")
        if length == 0:
            return b""

        write = i2c_msg.write(self.address, [register])
        read = i2c_msg.read(self.address, length)
        try:
            self.bus.i2c_rdwr(write, read)
        except OSError as e:
            raise TransportError("block read", register, str(e)) from e

        data = bytes(list(read))
        logger.debug(f"block read 0x{register:02X} -> {len(data)} bytes")
        return data

    def write_block(self, register: int, data: bytes) -> None:
        """Write ``data`` to consecutive registers starting at ``register``."""
        _check_byte(register, "register")
        for value in data:
            _check_byte(value, "value")

        message = i2c_msg.write(self.address, [register, *data])
        logger.debug(f"block write 0x{register:02X} <- {bytes(data).hex()}")
        try:
            self.bus.i2c_rdwr(message)
        except OSError as e:
            raise TransportError("block write", register, str(e)) from e
