"""
APDS-9960 ambient light, proximity and gesture sensor driver.
"""

from apds9960.hardware.apds9960_interface import APDS9960Sensor
from apds9960.hardware.registers import Mode
from apds9960.hardware.transport import APDS9960Error, TransportError
from apds9960.modules.gesture import Motion

__all__ = ["APDS9960Sensor", "APDS9960Error", "Mode", "Motion", "TransportError"]
