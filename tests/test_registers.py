import pytest

from apds9960.hardware.registers import (
    BitField,
    Field,
    LedBoost,
    LedDrive,
    Mode,
    Register,
    extract_field,
    insert_field,
)

ACCESSORS = [
    ("led_drive", Field.LED_DRIVE),
    ("proximity_gain", Field.PROXIMITY_GAIN),
    ("ambient_light_gain", Field.AMBIENT_LIGHT_GAIN),
    ("led_boost", Field.LED_BOOST),
    ("proximity_gain_compensation", Field.PROXIMITY_GAIN_COMPENSATION),
    ("proximity_photo_mask", Field.PROXIMITY_PHOTO_MASK),
    ("gesture_gain", Field.GESTURE_GAIN),
    ("gesture_led_drive", Field.GESTURE_LED_DRIVE),
    ("gesture_wait_time", Field.GESTURE_WAIT_TIME),
    ("ambient_light_int_enable", Field.AMBIENT_LIGHT_INT_ENABLE),
    ("proximity_int_enable", Field.PROXIMITY_INT_ENABLE),
    ("gesture_int_enable", Field.GESTURE_INT_ENABLE),
    ("gesture_mode", Field.GESTURE_MODE),
]


def test_field_positions_match_datasheet():
    assert Field.LED_DRIVE == BitField(Register.CONTROL, 2, 6)
    assert Field.PROXIMITY_GAIN == BitField(Register.CONTROL, 2, 2)
    assert Field.AMBIENT_LIGHT_GAIN == BitField(Register.CONTROL, 2, 0)
    assert Field.LED_BOOST == BitField(Register.CONFIG2, 2, 4)
    assert Field.GESTURE_GAIN == BitField(Register.GCONF2, 2, 5)
    assert Field.GESTURE_LED_DRIVE == BitField(Register.GCONF2, 2, 3)
    assert Field.GESTURE_WAIT_TIME == BitField(Register.GCONF2, 3, 0)
    assert Field.AMBIENT_LIGHT_INT_ENABLE == BitField(Register.ENABLE, 1, 4)
    assert Field.PROXIMITY_INT_ENABLE == BitField(Register.ENABLE, 1, 5)
    assert Field.GESTURE_INT_ENABLE == BitField(Register.GCONF4, 1, 1)
    assert Field.GESTURE_MODE == BitField(Register.GCONF4, 1, 0)


def test_extract_and_insert_field():
    assert extract_field(0b1100_0000, Field.LED_DRIVE) == LedDrive.DRIVE_12_5MA
    assert insert_field(0x01, Field.LED_BOOST, LedBoost.BOOST_300) == 0x31
    assert insert_field(0xFF, Field.PROXIMITY_GAIN, 0) == 0xF3


def test_insert_field_rejects_out_of_range():
    with pytest.raises(ValueError):
        insert_field(0, Field.GESTURE_WAIT_TIME, 8)
    with pytest.raises(ValueError):
        insert_field(0, Field.GESTURE_MODE, -1)


@pytest.mark.parametrize("name, field", ACCESSORS)
@pytest.mark.parametrize("background", [0x00, 0xFF, 0xA5, 0x5A])
def test_field_accessor_round_trip(sensor, bus, name, field, background):
    getter = getattr(sensor, f"get_{name}")
    setter = getattr(sensor, f"set_{name}")

    for value in range(field.max_value + 1):
        bus.registers[field.register] = background
        setter(value)

        assert getter() == value
        assert bus.registers[field.register] & ~field.mask & 0xFF == (
            background & ~field.mask & 0xFF
        )


def test_setter_reads_before_writing(sensor, bus):
    bus.registers[Register.CONTROL] = 0x0F

    sensor.set_led_drive(LedDrive.DRIVE_25MA)

    assert bus.log[0] == ("read", Register.CONTROL, 0x0F)
    assert bus.log[1] == ("write", Register.CONTROL, 0x8F)


@pytest.mark.parametrize("mode", list(Mode)[:-1])
def test_set_mode_single_bit(sensor, bus, mode):
    bus.registers[Register.ENABLE] = 0x00
    assert sensor.set_mode(mode, True)
    assert sensor.get_mode() == 1 << mode

    bus.registers[Register.ENABLE] = 0x7F
    assert sensor.set_mode(mode, False)
    assert sensor.get_mode() == 0x7F & ~(1 << mode)


def test_set_mode_all(sensor, bus):
    bus.registers[Register.ENABLE] = 0x12

    sensor.set_mode(Mode.ALL, True)
    assert sensor.get_mode() == 0x7F

    sensor.set_mode(Mode.ALL, False)
    assert sensor.get_mode() == 0x00


def test_set_mode_rejects_unknown_selector(sensor):
    with pytest.raises(ValueError):
        sensor.set_mode(8, True)


def test_light_thresholds_are_little_endian(sensor, bus):
    sensor.set_light_int_low_threshold(0x1234)
    sensor.set_light_int_high_threshold(0xBEEF)

    assert bus.registers[Register.AILTL] == 0x34
    assert bus.registers[Register.AILTH] == 0x12
    assert bus.registers[Register.AIHTL] == 0xEF
    assert bus.registers[Register.AIHTH] == 0xBE
    assert sensor.get_light_int_low_threshold() == 0x1234
    assert sensor.get_light_int_high_threshold() == 0xBEEF


def test_light_threshold_out_of_range(sensor):
    with pytest.raises(ValueError):
        sensor.set_light_int_low_threshold(0x10000)


def test_proximity_thresholds(sensor, bus):
    sensor.set_proximity_int_low_threshold(5)
    sensor.set_proximity_int_high_threshold(200)

    assert bus.registers[Register.PILT] == 5
    assert bus.registers[Register.PIHT] == 200
    assert sensor.get_proximity_int_low_threshold() == 5
    assert sensor.get_proximity_int_high_threshold() == 200
