"""
Hardware interface package for the APDS-9960 driver.

This package contains modules for:
- I2C register transport over smbus2
- The APDS-9960 register map and default calibration
- The APDS-9960 sensor interface (lifecycle, bit fields, data reads)
"""
