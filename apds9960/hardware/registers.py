"""
APDS-9960 Register Map

Register addresses, bit fields and power-on defaults of the APDS-9960
ambient light / proximity / gesture sensor, taken from the device
datasheet. Every value in this module is part of the wire contract with
the chip and must stay bit-exact.
"""

from enum import IntEnum
from typing import NamedTuple

# APDS-9960 I2C address
APDS9960_I2C_ADDR = 0x39

# Acceptable device IDs (two silicon revisions)
APDS9960_ID_1 = 0xAB
APDS9960_ID_2 = 0x9C
ACCEPTED_DEVICE_IDS = (APDS9960_ID_1, APDS9960_ID_2)

# Wait period (seconds) between FIFO reads
FIFO_PAUSE_TIME = 0.030

# Gesture FIFO depth in quad-samples
FIFO_CAPACITY = 32


class Register(IntEnum):
    """APDS-9960 register addresses."""

    ENABLE = 0x80
    ATIME = 0x81
    WTIME = 0x83
    AILTL = 0x84
    AILTH = 0x85
    AIHTL = 0x86
    AIHTH = 0x87
    PILT = 0x89
    PIHT = 0x8B
    PERS = 0x8C
    CONFIG1 = 0x8D
    PPULSE = 0x8E
    CONTROL = 0x8F
    CONFIG2 = 0x90
    ID = 0x92
    STATUS = 0x93
    CDATAL = 0x94
    CDATAH = 0x95
    RDATAL = 0x96
    RDATAH = 0x97
    GDATAL = 0x98
    GDATAH = 0x99
    BDATAL = 0x9A
    BDATAH = 0x9B
    PDATA = 0x9C
    POFFSET_UR = 0x9D
    POFFSET_DL = 0x9E
    CONFIG3 = 0x9F
    GPENTH = 0xA0
    GEXTH = 0xA1
    GCONF1 = 0xA2
    GCONF2 = 0xA3
    GOFFSET_U = 0xA4
    GOFFSET_D = 0xA5
    GPULSE = 0xA6
    GOFFSET_L = 0xA7
    GOFFSET_R = 0xA9
    GCONF3 = 0xAA
    GCONF4 = 0xAB
    GFLVL = 0xAE
    GSTATUS = 0xAF
    IFORCE = 0xE4
    PICLEAR = 0xE5
    CICLEAR = 0xE6
    AICLEAR = 0xE7
    GFIFO_U = 0xFC
    GFIFO_D = 0xFD
    GFIFO_L = 0xFE
    GFIFO_R = 0xFF


# ENABLE register bits
# Bits: reserved, GEN, PIEN, AIEN, WEN, PEN, AEN, PON
PON = 0x01
AEN = 0x02
PEN = 0x04
WEN = 0x08
AIEN = 0x10
PIEN = 0x20
GEN = 0x40

# GSTATUS register bits
GVALID = 0x01


class Mode(IntEnum):
    """Selectors accepted by ``set_mode``; 0-6 are ENABLE bit positions."""

    POWER = 0
    AMBIENT_LIGHT = 1
    PROXIMITY = 2
    WAIT = 3
    AMBIENT_LIGHT_INT = 4
    PROXIMITY_INT = 5
    GESTURE = 6
    ALL = 7


class LedDrive(IntEnum):
    """LED drive current (CONTROL<7:6>, GCONF2<4:3>)."""

    DRIVE_100MA = 0
    DRIVE_50MA = 1
    DRIVE_25MA = 2
    DRIVE_12_5MA = 3


class ProximityGain(IntEnum):
    """Proximity gain, PGAIN (CONTROL<3:2>)."""

    GAIN_1X = 0
    GAIN_2X = 1
    GAIN_4X = 2
    GAIN_8X = 3


class AmbientLightGain(IntEnum):
    """ALS gain, AGAIN (CONTROL<1:0>)."""

    GAIN_1X = 0
    GAIN_4X = 1
    GAIN_16X = 2
    GAIN_64X = 3


class GestureGain(IntEnum):
    """Gesture gain, GGAIN (GCONF2<6:5>)."""

    GAIN_1X = 0
    GAIN_2X = 1
    GAIN_4X = 2
    GAIN_8X = 3


class LedBoost(IntEnum):
    """LED boost, LED_BOOST (CONFIG2<5:4>)."""

    BOOST_100 = 0
    BOOST_150 = 1
    BOOST_200 = 2
    BOOST_300 = 3


class GestureWaitTime(IntEnum):
    """Gesture wait time, GWTIME (GCONF2<2:0>)."""

    WAIT_0MS = 0
    WAIT_2_8MS = 1
    WAIT_5_6MS = 2
    WAIT_8_4MS = 3
    WAIT_14_0MS = 4
    WAIT_22_4MS = 5
    WAIT_30_8MS = 6
    WAIT_39_2MS = 7


class BitField(NamedTuple):
    """A field of ``width`` bits starting at bit ``shift`` of ``register``."""

    register: int
    width: int
    shift: int

    @property
    def mask(self) -> int:
        return ((1 << self.width) - 1) << self.shift

    @property
    def max_value(self) -> int:
        return (1 << self.width) - 1


class Field:
    """Named bit fields of the configurable registers."""

    LED_DRIVE = BitField(Register.CONTROL, 2, 6)
    PROXIMITY_GAIN = BitField(Register.CONTROL, 2, 2)
    AMBIENT_LIGHT_GAIN = BitField(Register.CONTROL, 2, 0)
    LED_BOOST = BitField(Register.CONFIG2, 2, 4)
    PROXIMITY_GAIN_COMPENSATION = BitField(Register.CONFIG3, 1, 5)
    PROXIMITY_PHOTO_MASK = BitField(Register.CONFIG3, 4, 0)
    GESTURE_GAIN = BitField(Register.GCONF2, 2, 5)
    GESTURE_LED_DRIVE = BitField(Register.GCONF2, 2, 3)
    GESTURE_WAIT_TIME = BitField(Register.GCONF2, 3, 0)
    AMBIENT_LIGHT_INT_ENABLE = BitField(Register.ENABLE, 1, 4)
    PROXIMITY_INT_ENABLE = BitField(Register.ENABLE, 1, 5)
    GESTURE_INT_ENABLE = BitField(Register.GCONF4, 1, 1)
    GESTURE_MODE = BitField(Register.GCONF4, 1, 0)
    GESTURE_VALID = BitField(Register.GSTATUS, 1, 0)


def extract_field(value: int, field: BitField) -> int:
    """Return the bits of ``field`` from a raw register byte."""
    return (value & field.mask) >> field.shift


def insert_field(value: int, field: BitField, data: int) -> int:
    """Return ``value`` with the bits of ``field`` replaced by ``data``.

    Raises:
        ValueError: If ``data`` does not fit in the field width
    """
    if not 0 <= data <= field.max_value:
        raise ValueError(
            f"Value {data} out of range for {field.width}-bit field "
            f"at register 0x{field.register:02X}"
        )
    return (value & ~field.mask & 0xFF) | (data << field.shift)


# Default values
DEFAULT_ATIME = 219  # 103ms
DEFAULT_WTIME = 246  # 27ms
DEFAULT_PROX_PPULSE = 0x87  # 16us, 8 pulses
DEFAULT_GESTURE_PPULSE = 0x89  # 16us, 10 pulses
DEFAULT_POFFSET_UR = 0
DEFAULT_POFFSET_DL = 0
DEFAULT_CONFIG1 = 0x60  # No 12x wait (WTIME) factor
DEFAULT_LDRIVE = LedDrive.DRIVE_100MA
DEFAULT_PGAIN = ProximityGain.GAIN_4X
DEFAULT_AGAIN = AmbientLightGain.GAIN_4X
DEFAULT_PILT = 0  # Low proximity threshold
DEFAULT_PIHT = 50  # High proximity threshold
DEFAULT_AILT = 0xFFFF  # Force interrupt for calibration
DEFAULT_AIHT = 0
DEFAULT_PERS = 0x11  # 2 consecutive prox or ALS for int.
DEFAULT_CONFIG2 = 0x01  # No saturation interrupts or LED boost
DEFAULT_CONFIG3 = 0  # Enable all photodiodes, no SAI
DEFAULT_GPENTH = 40  # Threshold for entering gesture mode
DEFAULT_GEXTH = 30  # Threshold for exiting gesture mode
DEFAULT_GCONF1 = 0x40  # 4 gesture events for int., 1 for exit
DEFAULT_GGAIN = GestureGain.GAIN_4X
DEFAULT_GLDRIVE = LedDrive.DRIVE_100MA
DEFAULT_GWTIME = GestureWaitTime.WAIT_2_8MS
DEFAULT_GOFFSET = 0  # No offset scaling for gesture mode
DEFAULT_GPULSE = 0xC9  # 32us, 10 pulses
DEFAULT_GCONF3 = 0  # All photodiodes active during gesture
DEFAULT_GIEN = 0  # Disable gesture interrupts

# Wait time written while gesture sensing is active
GESTURE_WTIME = 0xFF
