"""
APDS-9960 Sensor Interface

This module provides an interface to the APDS-9960 ambient light, colour,
proximity and gesture sensor over an already opened smbus2 bus handle.

The instance is not thread safe: one owner must serialise all calls,
including the blocking ``read_gesture``.
"""

import time
import logging
from typing import Callable, Optional

from apds9960.hardware import registers as regs
from apds9960.hardware.registers import BitField, Field, Mode, Register
from apds9960.hardware.transport import RegisterTransport
from apds9960.modules.acquisition import GestureAcquisition
from apds9960.modules.gesture import GestureSession, Motion

logger = logging.getLogger("hardware.apds9960")


class APDS9960Sensor:
    """Interface with the APDS-9960 sensor."""

    def __init__(
        self,
        bus,
        i2c_address: int = regs.APDS9960_I2C_ADDR,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the APDS-9960 sensor interface.

        Args:
            bus: Opened smbus2.SMBus handle, owned by the caller
            i2c_address: I2C address of the APDS-9960 sensor
            sleep: Function used to wait between gesture FIFO polls
        """
        self.transport = RegisterTransport(bus, i2c_address)
        self.i2c_address = i2c_address
        self.sleep = sleep
        self.gesture = GestureSession()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> bool:
        """
        Check the device ID and write every register to its default.

        Gesture defaults are written but gesture mode is left disabled.

        Returns:
            True if a supported device answered, False otherwise
        """
        device_id = self.transport.read_byte(Register.ID)
        if device_id not in regs.ACCEPTED_DEVICE_IDS:
            logger.error(f"Unrecognised APDS-9960 device ID 0x{device_id:02X}")
            return False

        # Disable all features
        self.set_mode(Mode.ALL, False)

        # Default values for ambient light and proximity registers
        self.transport.write_byte(Register.ATIME, regs.DEFAULT_ATIME)
        self.transport.write_byte(Register.WTIME, regs.DEFAULT_WTIME)
        self.transport.write_byte(Register.PPULSE, regs.DEFAULT_PROX_PPULSE)
        self.transport.write_byte(Register.POFFSET_UR, regs.DEFAULT_POFFSET_UR)
        self.transport.write_byte(Register.POFFSET_DL, regs.DEFAULT_POFFSET_DL)
        self.transport.write_byte(Register.CONFIG1, regs.DEFAULT_CONFIG1)
        self.set_led_drive(regs.DEFAULT_LDRIVE)
        self.set_proximity_gain(regs.DEFAULT_PGAIN)
        self.set_ambient_light_gain(regs.DEFAULT_AGAIN)
        self.set_proximity_int_low_threshold(regs.DEFAULT_PILT)
        self.set_proximity_int_high_threshold(regs.DEFAULT_PIHT)
        self.set_light_int_low_threshold(regs.DEFAULT_AILT)
        self.set_light_int_high_threshold(regs.DEFAULT_AIHT)
        self.transport.write_byte(Register.PERS, regs.DEFAULT_PERS)
        self.transport.write_byte(Register.CONFIG2, regs.DEFAULT_CONFIG2)
        self.transport.write_byte(Register.CONFIG3, regs.DEFAULT_CONFIG3)

        # Default values for gesture sense registers
        self.set_gesture_enter_threshold(regs.DEFAULT_GPENTH)
        self.set_gesture_exit_threshold(regs.DEFAULT_GEXTH)
        self.transport.write_byte(Register.GCONF1, regs.DEFAULT_GCONF1)
        self.set_gesture_gain(regs.DEFAULT_GGAIN)
        self.set_gesture_led_drive(regs.DEFAULT_GLDRIVE)
        self.set_gesture_wait_time(regs.DEFAULT_GWTIME)
        for register in (
            Register.GOFFSET_U,
            Register.GOFFSET_D,
            Register.GOFFSET_L,
            Register.GOFFSET_R,
        ):
            self.transport.write_byte(register, regs.DEFAULT_GOFFSET)
        self.transport.write_byte(Register.GPULSE, regs.DEFAULT_GPULSE)
        self.transport.write_byte(Register.GCONF3, regs.DEFAULT_GCONF3)
        self.set_gesture_int_enable(regs.DEFAULT_GIEN)

        logger.info(
            f"APDS-9960 sensor initialized successfully (ID 0x{device_id:02X})"
        )
        return True

    def get_mode(self) -> int:
        """Return the raw ENABLE register."""
        return self.transport.read_byte(Register.ENABLE)

    def set_mode(self, mode: int, enable: bool) -> bool:
        """
        Set or clear one feature bit of the ENABLE register.

        Args:
            mode: A ``Mode`` selector; ``Mode.ALL`` switches every feature
            enable: True to turn the feature on

        Returns:
            True once the register has been written
        """
        if not 0 <= mode <= Mode.ALL:
            raise ValueError(f"Invalid mode selector: {mode}")

        value = self.get_mode()
        if mode == Mode.ALL:
            value = 0x7F if enable else 0x00
        elif enable:
            value |= 1 << mode
        else:
            value &= ~(1 << mode) & 0xFF

        self.transport.write_byte(Register.ENABLE, value)
        return True

    def enable_power(self) -> bool:
        return self.set_mode(Mode.POWER, True)

    def disable_power(self) -> bool:
        return self.set_mode(Mode.POWER, False)

    def enable_light_sensor(self, interrupts: bool = False) -> None:
        """Start ambient light and colour sensing."""
        self.set_ambient_light_gain(regs.DEFAULT_AGAIN)
        self.set_ambient_light_int_enable(int(interrupts))
        self.enable_power()
        self.set_mode(Mode.AMBIENT_LIGHT, True)
        logger.info("Ambient light sensor enabled")

    def disable_light_sensor(self) -> None:
        self.set_ambient_light_int_enable(0)
        self.set_mode(Mode.AMBIENT_LIGHT, False)
        logger.info("Ambient light sensor disabled")

    def enable_proximity_sensor(self, interrupts: bool = False) -> None:
        """Start proximity sensing."""
        self.set_proximity_gain(regs.DEFAULT_PGAIN)
        self.set_led_drive(regs.DEFAULT_LDRIVE)
        self.set_proximity_int_enable(int(interrupts))
        self.enable_power()
        self.set_mode(Mode.PROXIMITY, True)
        logger.info("Proximity sensor enabled")

    def disable_proximity_sensor(self) -> None:
        self.set_proximity_int_enable(0)
        self.set_mode(Mode.PROXIMITY, False)
        logger.info("Proximity sensor disabled")

    def enable_gesture_sensor(self, interrupts: bool = False) -> None:
        """
        Start gesture sensing.

        Gesture mode needs the proximity engine and the wait timer running,
        so PON, WEN, PEN and GEN are all switched on.

        Args:
            interrupts: Enable the gesture interrupt output
        """
        self.gesture.reset()
        self.transport.write_byte(Register.WTIME, regs.GESTURE_WTIME)
        self.transport.write_byte(Register.PPULSE, regs.DEFAULT_GESTURE_PPULSE)
        self.set_led_boost(regs.LedBoost.BOOST_300)
        self.set_gesture_int_enable(int(interrupts))
        self.set_gesture_mode(1)
        self.enable_power()
        self.set_mode(Mode.WAIT, True)
        self.set_mode(Mode.PROXIMITY, True)
        self.set_mode(Mode.GESTURE, True)
        logger.info("Gesture sensor enabled")

    def disable_gesture_sensor(self) -> None:
        self.gesture.reset()
        self.set_gesture_int_enable(0)
        self.set_gesture_mode(0)
        self.set_mode(Mode.GESTURE, False)
        logger.info("Gesture sensor disabled")

    # ------------------------------------------------------------------
    # Gesture
    # ------------------------------------------------------------------

    def is_gesture_available(self) -> bool:
        """Return True if the gesture FIFO holds valid data (GVALID)."""
        return bool(self.get_field(Field.GESTURE_VALID))

    def read_gesture(self, cancel=None) -> Optional[Motion]:
        """
        Read and decode one gesture. Blocks until the sensor stops
        reporting valid gesture data.

        Args:
            cancel: Optional ``threading.Event`` (or anything with
                ``is_set()``) checked between FIFO polls

        Returns:
            The decoded motion, or None if no gesture was read
        """
        if not self.is_gesture_available():
            return None

        # Power and gesture engine must both be on
        required = regs.PON | regs.GEN
        if (self.get_mode() & required) != required:
            return None

        acquisition = GestureAcquisition(
            self.transport, self.gesture, sleep=self.sleep, cancel=cancel
        )
        motion = acquisition.run()
        logger.debug(
            f"Gesture read finished after {acquisition.iterations} polls: "
            f"{motion.name if motion is not None else None}"
        )
        return motion

    # ------------------------------------------------------------------
    # Data registers
    # ------------------------------------------------------------------

    def _read_word(self, register: int) -> int:
        low, high = self.transport.read_block(register, 2)
        return low | (high << 8)

    def _write_word(self, register: int, value: int) -> None:
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"Threshold must fit in 16 bits, got {value}")
        self.transport.write_block(register, bytes([value & 0xFF, value >> 8]))

    def read_ambient_light(self) -> int:
        """Clear channel (16-bit)."""
        return self._read_word(Register.CDATAL)

    def read_red_light(self) -> int:
        return self._read_word(Register.RDATAL)

    def read_green_light(self) -> int:
        return self._read_word(Register.GDATAL)

    def read_blue_light(self) -> int:
        return self._read_word(Register.BDATAL)

    def read_proximity(self) -> int:
        """Proximity value, 0 (far) to 255 (near)."""
        return self.transport.read_byte(Register.PDATA)

    # ------------------------------------------------------------------
    # Thresholds and interrupts
    # ------------------------------------------------------------------

    def get_light_int_low_threshold(self) -> int:
        return self._read_word(Register.AILTL)

    def set_light_int_low_threshold(self, threshold: int) -> None:
        self._write_word(Register.AILTL, threshold)

    def get_light_int_high_threshold(self) -> int:
        return self._read_word(Register.AIHTL)

    def set_light_int_high_threshold(self, threshold: int) -> None:
        self._write_word(Register.AIHTL, threshold)

    def get_proximity_int_low_threshold(self) -> int:
        return self.transport.read_byte(Register.PILT)

    def set_proximity_int_low_threshold(self, threshold: int) -> None:
        self.transport.write_byte(Register.PILT, threshold)

    def get_proximity_int_high_threshold(self) -> int:
        return self.transport.read_byte(Register.PIHT)

    def set_proximity_int_high_threshold(self, threshold: int) -> None:
        self.transport.write_byte(Register.PIHT, threshold)

    def get_gesture_enter_threshold(self) -> int:
        return self.transport.read_byte(Register.GPENTH)

    def set_gesture_enter_threshold(self, threshold: int) -> None:
        self.transport.write_byte(Register.GPENTH, threshold)

    def get_gesture_exit_threshold(self) -> int:
        return self.transport.read_byte(Register.GEXTH)

    def set_gesture_exit_threshold(self, threshold: int) -> None:
        self.transport.write_byte(Register.GEXTH, threshold)

    def clear_ambient_light_int(self) -> None:
        """Clear the ALS interrupt latch (the read itself clears it)."""
        self.transport.read_byte(Register.AICLEAR)

    def clear_proximity_int(self) -> None:
        """Clear the proximity interrupt latch."""
        self.transport.read_byte(Register.PICLEAR)

    # ------------------------------------------------------------------
    # Bit fields
    # ------------------------------------------------------------------

    def get_field(self, field: BitField) -> int:
        """Read ``field`` out of its register."""
        return regs.extract_field(self.transport.read_byte(field.register), field)

    def set_field(self, field: BitField, value: int) -> None:
        """Read-modify-write ``field``, leaving the other bits untouched."""
        current = self.transport.read_byte(field.register)
        self.transport.write_byte(
            field.register, regs.insert_field(current, field, int(value))
        )

    def get_led_drive(self) -> int:
        return self.get_field(Field.LED_DRIVE)

    def set_led_drive(self, drive: int) -> None:
        self.set_field(Field.LED_DRIVE, drive)

    def get_proximity_gain(self) -> int:
        return self.get_field(Field.PROXIMITY_GAIN)

    def set_proximity_gain(self, gain: int) -> None:
        self.set_field(Field.PROXIMITY_GAIN, gain)

    def get_ambient_light_gain(self) -> int:
        return self.get_field(Field.AMBIENT_LIGHT_GAIN)

    def set_ambient_light_gain(self, gain: int) -> None:
        self.set_field(Field.AMBIENT_LIGHT_GAIN, gain)

    def get_led_boost(self) -> int:
        return self.get_field(Field.LED_BOOST)

    def set_led_boost(self, boost: int) -> None:
        self.set_field(Field.LED_BOOST, boost)

    def get_proximity_gain_compensation(self) -> int:
        return self.get_field(Field.PROXIMITY_GAIN_COMPENSATION)

    def set_proximity_gain_compensation(self, enable: int) -> None:
        self.set_field(Field.PROXIMITY_GAIN_COMPENSATION, enable)

    def get_proximity_photo_mask(self) -> int:
        return self.get_field(Field.PROXIMITY_PHOTO_MASK)

    def set_proximity_photo_mask(self, mask: int) -> None:
        self.set_field(Field.PROXIMITY_PHOTO_MASK, mask)

    def get_gesture_gain(self) -> int:
        return self.get_field(Field.GESTURE_GAIN)

    def set_gesture_gain(self, gain: int) -> None:
        self.set_field(Field.GESTURE_GAIN, gain)

    def get_gesture_led_drive(self) -> int:
        return self.get_field(Field.GESTURE_LED_DRIVE)

    def set_gesture_led_drive(self, drive: int) -> None:
        self.set_field(Field.GESTURE_LED_DRIVE, drive)

    def get_gesture_wait_time(self) -> int:
        return self.get_field(Field.GESTURE_WAIT_TIME)

    def set_gesture_wait_time(self, wait_time: int) -> None:
        self.set_field(Field.GESTURE_WAIT_TIME, wait_time)

    def get_ambient_light_int_enable(self) -> int:
        return self.get_field(Field.AMBIENT_LIGHT_INT_ENABLE)

    def set_ambient_light_int_enable(self, enable: int) -> None:
        self.set_field(Field.AMBIENT_LIGHT_INT_ENABLE, enable)

    def get_proximity_int_enable(self) -> int:
        return self.get_field(Field.PROXIMITY_INT_ENABLE)

    def set_proximity_int_enable(self, enable: int) -> None:
        self.set_field(Field.PROXIMITY_INT_ENABLE, enable)

    def get_gesture_int_enable(self) -> int:
        return self.get_field(Field.GESTURE_INT_ENABLE)

    def set_gesture_int_enable(self, enable: int) -> None:
        self.set_field(Field.GESTURE_INT_ENABLE, enable)

    def get_gesture_mode(self) -> int:
        return self.get_field(Field.GESTURE_MODE)

    def set_gesture_mode(self, mode: int) -> None:
        self.set_field(Field.GESTURE_MODE, mode)
