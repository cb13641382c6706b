"""
Main application module for the APDS-9960 sensor.

Opens the I2C bus, initializes the sensor and logs readings from the
selected sensing function until interrupted.
"""

import logging
import signal
import sys
import time
from typing import Any, List, Optional

from smbus2 import SMBus

from apds9960.config import SensorConfig, parse_arguments
from apds9960.gesture_service import GestureSensorService
from apds9960.hardware.apds9960_interface import APDS9960Sensor
from apds9960.hardware.transport import TransportError
from apds9960.modules.gesture import Motion

logger = logging.getLogger(__name__)


def configure_logging(config: SensorConfig) -> None:
    """Configure the root logger from the application configuration."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


class SensorApp:
    """Main application class for the APDS-9960 sensor."""

    def __init__(self, config: SensorConfig) -> None:
        """Initialize the sensor application.

        Args:
            config: Validated application configuration
        """
        self.config = config
        self.bus: Optional[SMBus] = None
        self.sensor: Optional[APDS9960Sensor] = None
        self.gesture_service: Optional[GestureSensorService] = None

        self._running = False
        self._initialized = False

        # Set up signal handlers
        signal.signal(signal.SIGINT, self._handle_signal)
        signal.signal(signal.SIGTERM, self._handle_signal)

    def _handle_signal(self, sig: int, _: Any) -> None:
        """Handle termination signals.

        Args:
            sig: Signal number
        """
        logger.info(f"Received signal {sig}, shutting down")
        self._running = False

    def start(self) -> bool:
        """Open the bus, initialize the sensor and enable the selected mode.

        Returns:
            False if no supported sensor answered
        """
        logger.info(
            f"Opening I2C bus {self.config.i2c_bus}, "
            f"address 0x{self.config.i2c_address:02X}"
        )
        self.bus = SMBus(self.config.i2c_bus)
        self.sensor = APDS9960Sensor(self.bus, i2c_address=self.config.i2c_address)

        if not self.sensor.initialize():
            return False
        self._initialized = True

        if self.config.mode == "gesture":
            self.sensor.enable_gesture_sensor(self.config.interrupts)
            self.gesture_service = GestureSensorService(
                self.sensor,
                poll_interval=self.config.poll_interval_sec,
                callback=self._on_motion,
                max_errors=self.config.max_errors,
                interrupts=self.config.interrupts,
            )
            self.gesture_service.start()
        elif self.config.mode == "proximity":
            self.sensor.enable_proximity_sensor(self.config.interrupts)
        else:
            self.sensor.enable_light_sensor(self.config.interrupts)

        self._running = True
        return True

    def _on_motion(self, motion: Motion) -> None:
        logger.info(f"Gesture: {motion.name}")

    def run(self) -> None:
        """Log readings until a termination signal arrives."""
        while self._running:
            if self.config.mode == "proximity":
                logger.info(f"Proximity: {self.sensor.read_proximity()}")
            elif self.config.mode == "light":
                logger.info(
                    f"Ambient: {self.sensor.read_ambient_light()} "
                    f"R: {self.sensor.read_red_light()} "
                    f"G: {self.sensor.read_green_light()} "
                    f"B: {self.sensor.read_blue_light()}"
                )
            time.sleep(self.config.poll_interval_sec)

    def stop(self) -> None:
        """Disable the sensor and release the bus.

        Safe to call on a partly started app.
        """
        logger.info("Stopping APDS-9960 application")
        self._running = False

        if self.gesture_service and self.gesture_service.running:
            self.gesture_service.stop()

        if self.sensor and self._initialized:
            try:
                if self.config.mode == "gesture":
                    self.sensor.disable_gesture_sensor()
                elif self.config.mode == "proximity":
                    self.sensor.disable_proximity_sensor()
                else:
                    self.sensor.disable_light_sensor()
                self.sensor.disable_power()
            except TransportError as e:
                logger.error(f"Failed to disable sensor: {e}")

        if self.bus:
            self.bus.close()
            self.bus = None

        logger.info("Application stopped")


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the application."""
    config = parse_arguments(argv)
    configure_logging(config)

    app = SensorApp(config)
    try:
        if not app.start():
            logger.critical("No APDS-9960 sensor found")
            sys.exit(1)
        app.run()
    except TransportError as e:
        logger.critical(f"I2C communication failed: {e}")
        sys.exit(1)
    except OSError as e:
        logger.critical(f"Cannot open I2C bus {config.i2c_bus}: {e}")
        sys.exit(1)
    finally:
        app.stop()


if __name__ == "__main__":
    main()
