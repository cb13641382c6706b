#!/usr/bin/env python3
"""
Configuration module for the APDS-9960 sensor application.

Provides Pydantic models for application configuration and command-line parsing.
"""

import argparse
from typing import Literal, Optional, Sequence

from pydantic import BaseModel, Field

from apds9960.hardware.registers import APDS9960_I2C_ADDR


class SensorConfig(BaseModel):
    """Application configuration parameters using Pydantic for validation."""

    # APDS-9960 Sensor Config
    i2c_bus: int = Field(default=1, ge=0, description="I2C bus number")
    i2c_address: int = Field(
        default=APDS9960_I2C_ADDR,
        ge=0x08,
        le=0x77,
        description="7-bit I2C address of the APDS-9960 sensor",
    )

    # Sensing Config
    mode: Literal["gesture", "proximity", "light"] = Field(
        default="gesture", description="Sensing function to enable"
    )
    interrupts: bool = Field(
        default=False, description="Enable the interrupt output for the sensing mode"
    )
    poll_interval_sec: float = Field(
        default=0.05, gt=0, description="Interval in seconds between sensor checks"
    )
    max_errors: int = Field(
        default=5,
        ge=1,
        description="Consecutive bus errors before the sensor is reinitialized",
    )

    # Logging Config
    log_level: str = Field(default="info", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Path to log file")


def parse_arguments(argv: Optional[Sequence[str]] = None) -> SensorConfig:
    """Parse command line arguments and create application configuration.

    Only options given on the command line override the Pydantic defaults.

    Args:
        argv: Argument list, defaults to ``sys.argv[1:]``

    Returns:
        SensorConfig: Application configuration based on command line arguments
    """
    parser = argparse.ArgumentParser(
        description="APDS-9960 Gesture Sensor",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Sensor Config
    parser.add_argument("--i2c-bus", type=int, help="I2C bus number")
    parser.add_argument(
        "--i2c-address",
        type=lambda x: int(x, 0),  # Allow hex input (0x39)
        help="I2C address of the APDS-9960 sensor (default: 0x39)",
    )

    # Sensing Config
    parser.add_argument(
        "--mode",
        type=str,
        choices=["gesture", "proximity", "light"],
        help="Sensing function to enable",
    )
    parser.add_argument(
        "--interrupts",
        action="store_true",
        default=None,
        help="Enable the sensor interrupt output",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        help="Interval in seconds between sensor checks",
    )
    parser.add_argument(
        "--max-errors",
        type=int,
        help="Consecutive bus errors before the sensor is reinitialized",
    )

    # Logging Config
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error", "critical"],
        help="Logging level",
    )
    parser.add_argument("--log-file", type=str, help="Path to log file")

    args = parser.parse_args(argv)

    # Prepare a config dict with only specified arguments (ignoring None values)
    config_dict = {}

    if args.i2c_bus is not None:
        config_dict["i2c_bus"] = args.i2c_bus

    if args.i2c_address is not None:
        config_dict["i2c_address"] = args.i2c_address

    if args.mode is not None:
        config_dict["mode"] = args.mode

    if args.interrupts is not None:
        config_dict["interrupts"] = args.interrupts

    if args.poll_interval is not None:
        config_dict["poll_interval_sec"] = args.poll_interval

    if args.max_errors is not None:
        config_dict["max_errors"] = args.max_errors

    if args.log_level is not None:
        config_dict["log_level"] = args.log_level

    if args.log_file is not None:
        config_dict["log_file"] = args.log_file

    # Create and validate config with Pydantic (using defaults for unspecified values)
    return SensorConfig(**config_dict)
