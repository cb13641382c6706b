"""Shared fixtures: an in-memory APDS-9960 on a fake SMBus."""

import ctypes
from collections import deque

import pytest

from apds9960.hardware.apds9960_interface import APDS9960Sensor
from apds9960.hardware.registers import APDS9960_ID_1, Register

I2C_M_RD = 0x0001


class FakeSMBus:
    """
    Register file standing in for an ``smbus2.SMBus`` with an APDS-9960
    attached.

    Gesture data is scripted through ``frames``: each entry is either a
    list of (up, down, left, right) quads the FIFO holds at that poll, or
    None to report that gesture data is no longer valid. GSTATUS and GFLVL
    reflect the head frame; a FIFO block read consumes it.
    """

    def __init__(self, device_id=APDS9960_ID_1, address=0x39):
        self.address = address
        self.registers = [0] * 256
        self.registers[Register.ID] = device_id
        self.frames = deque()
        self.closed = False
        self.log = []
        self.fail_registers = set()

    # Scripting helpers

    def queue_frames(self, *frames):
        self.frames.extend(frames)

    def reads(self):
        return [reg for op, reg, _ in self.log if op in ("read", "block_read")]

    def writes(self, register=None):
        return [
            (reg, value)
            for op, reg, value in self.log
            if op == "write" and (register is None or reg == register)
        ]

    # Register model

    def _check(self, address, register):
        assert address == self.address
        if register in self.fail_registers:
            raise OSError(121, "Remote I/O error")

    def _read_register(self, register):
        if register == Register.GSTATUS:
            valid = bool(self.frames) and self.frames[0] is not None
            return self.registers[register] & 0xFE | int(valid)
        if register == Register.GFLVL:
            if not self.frames or self.frames[0] is None:
                return 0
            level = len(self.frames[0])
            if level == 0:
                self.frames.popleft()
            return level
        return self.registers[register]

    def _drain_fifo(self, length):
        quads = self.frames.popleft() if self.frames else []
        data = [value for quad in quads for value in quad]
        return (data + [0] * length)[:length]

    # smbus2.SMBus API

    def write_byte_data(self, i2c_addr, register, value):
        self._check(i2c_addr, register)
        self.log.append(("write", register, value))
        self.registers[register] = value

    def read_byte_data(self, i2c_addr, register):
        self._check(i2c_addr, register)
        value = self._read_register(register)
        self.log.append(("read", register, value))
        return value

    def i2c_rdwr(self, *messages):
        pointer = None
        for message in messages:
            assert message.addr == self.address
            if message.flags & I2C_M_RD:
                self._check(message.addr, pointer)
                if pointer == Register.GFIFO_U:
                    data = self._drain_fifo(message.len)
                else:
                    data = [self.registers[pointer + i] for i in range(message.len)]
                self.log.append(("block_read", pointer, bytes(data)))
                ctypes.memmove(message.buf, bytes(data), message.len)
            else:
                payload = list(message)
                pointer = payload[0]
                self._check(message.addr, pointer)
                for offset, value in enumerate(payload[1:]):
                    self.log.append(("write", pointer + offset, value))
                    self.registers[pointer + offset] = value

    def close(self):
        self.closed = True


class RecordingSleep:
    """Replacement for ``time.sleep`` that records instead of waiting."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def bus():
    return FakeSMBus()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def sensor(bus, sleep):
    return APDS9960Sensor(bus, sleep=sleep)
