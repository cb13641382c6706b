"""
Gesture Sensor Service for the APDS-9960.

Runs the blocking gesture read on a dedicated worker thread and hands
decoded motions back to the application.
"""

import logging
import queue
import threading
from typing import Callable, Optional

from apds9960.hardware.apds9960_interface import APDS9960Sensor
from apds9960.modules.gesture import Motion

logger = logging.getLogger("apds9960.gesture_service")


class GestureSensorService:
    """Service for reading gestures from the APDS-9960 in the background."""

    def __init__(
        self,
        sensor: APDS9960Sensor,
        poll_interval: float = 0.05,
        callback: Optional[Callable[[Motion], None]] = None,
        max_errors: int = 5,
        interrupts: bool = False,
    ) -> None:
        """Initialize the gesture sensor service.

        Args:
            sensor: An initialized sensor with gesture sensing enabled
            poll_interval: The interval in seconds between availability checks
            callback: Optional callback function for decoded motions
            max_errors: Consecutive bus errors before the sensor is reinitialized
            interrupts: Gesture interrupt setting used when reinitializing
        """
        self.sensor = sensor
        self.poll_interval = poll_interval
        self.callback = callback
        self.max_errors = max_errors
        self.interrupts = interrupts

        # Single-slot handoff, the newest motion replaces an unread one
        self._motions: "queue.Queue[Motion]" = queue.Queue(maxsize=1)
        self.last_motion: Optional[Motion] = None
        self.error_count = 0

        self._stop_event = threading.Event()
        self._running = False
        self._thread: Optional[threading.Thread] = None

        logger.info("Gesture sensor service initialized")

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start the gesture sensor service in a separate thread."""
        if self._running:
            logger.warning("Gesture sensor service is already running")
            return

        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_service, daemon=True)
        self._thread.start()
        logger.info("Gesture sensor service started")

    def stop(self) -> None:
        """Stop the gesture sensor service."""
        if not self._running:
            logger.warning("Gesture sensor service is not running")
            return

        self._running = False
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2.0)
            logger.info("Gesture sensor service stopped")

    def get_motion(self, timeout: Optional[float] = None) -> Optional[Motion]:
        """Wait for the next decoded motion.

        Args:
            timeout: Seconds to wait, or None to wait forever

        Returns:
            The motion, or None if the timeout expired
        """
        try:
            return self._motions.get(timeout=timeout)
        except queue.Empty:
            return None

    def _run_service(self) -> None:
        """Main loop for the gesture sensor service."""
        while not self._stop_event.is_set():
            try:
                self._process_gesture()
                self.error_count = 0  # Reset error count on success
            except Exception as e:
                self.error_count += 1
                logger.error(f"Error in gesture sensor service: {e}")

                if self.error_count >= self.max_errors:
                    logger.critical(
                        f"Too many errors ({self.error_count}), restarting sensor"
                    )
                    self._reinitialize()

            self._stop_event.wait(self.poll_interval)

    def _process_gesture(self) -> None:
        """Read one gesture if the sensor has data waiting."""
        if not self.sensor.is_gesture_available():
            return

        motion = self.sensor.read_gesture(cancel=self._stop_event)
        if motion is None or motion == Motion.NONE:
            return

        logger.debug(f"Gesture detected: {motion.name}")
        self._publish(motion)

    def _publish(self, motion: Motion) -> None:
        self.last_motion = motion

        try:
            self._motions.get_nowait()
        except queue.Empty:
            pass
        self._motions.put_nowait(motion)

        if self.callback:
            try:
                self.callback(motion)
            except Exception as e:
                logger.error(f"Error in gesture callback: {e}")

    def _reinitialize(self) -> None:
        try:
            if self.sensor.initialize():
                self.sensor.enable_gesture_sensor(self.interrupts)
                self.error_count = 0
                logger.info("Sensor reinitialized successfully")
            else:
                logger.critical("Failed to reinitialize sensor: unrecognised device")
        except Exception as init_error:
            logger.critical(f"Failed to reinitialize sensor: {init_error}")

    def get_status(self) -> dict:
        """Get the current status of the gesture sensor service.

        Returns:
            A dictionary with service status information
        """
        last_motion = self.last_motion
        return {
            "running": self._running,
            "error_count": self.error_count,
            "last_motion": last_motion.name if last_motion is not None else None,
        }
