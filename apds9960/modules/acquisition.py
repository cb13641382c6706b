"""
Gesture Acquisition Loop for the APDS-9960

Drains the gesture FIFO at a fixed cadence while the sensor reports
valid data, feeds each drained batch to the gesture processor and
returns the best decoded motion once the data stream ends.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from apds9960.hardware.registers import (
    FIFO_CAPACITY,
    FIFO_PAUSE_TIME,
    GVALID,
    Register,
)
from apds9960.hardware.transport import RegisterTransport
from apds9960.modules.gesture import (
    GestureSession,
    Motion,
    decode_gesture,
    process_gesture_data,
)

logger = logging.getLogger("apds9960.acquisition")

QUAD_SIZE = 4


class AcquisitionState(Enum):
    COLLECTING = "collecting"
    FINISHED = "finished"


def split_quads(block: bytes, session: GestureSession) -> int:
    """
    Append the (up, down, left, right) quads of a FIFO block to the batch.

    Trailing bytes that do not form a full quad are ignored.

    Returns:
        The number of quads appended
    """
    count = len(block) // QUAD_SIZE
    for i in range(0, count * QUAD_SIZE, QUAD_SIZE):
        session.batch.append_quad(block[i], block[i + 1], block[i + 2], block[i + 3])
    return count


class GestureAcquisition:
    """One blocking gesture-read session, run as a small state machine."""

    def __init__(
        self,
        transport: RegisterTransport,
        session: GestureSession,
        sleep: Callable[[float], None] = time.sleep,
        cancel=None,
        pause_time: float = FIFO_PAUSE_TIME,
    ) -> None:
        """
        Args:
            transport: Register access to the sensor
            session: Gesture session state to accumulate into
            sleep: Function used to wait between FIFO polls
            cancel: Optional object with ``is_set()``, checked once per poll
            pause_time: Seconds between FIFO polls
        """
        self.transport = transport
        self.session = session
        self.sleep = sleep
        self.cancel = cancel
        self.pause_time = pause_time

        self.state = AcquisitionState.COLLECTING
        self.result: Optional[Motion] = None
        self.iterations = 0

    def run(self) -> Optional[Motion]:
        """Poll until the session finishes and return its motion.

        The session is reset if a poll raises, so a failed read never
        leaks partial deltas into the next one.
        """
        try:
            while self.state is AcquisitionState.COLLECTING:
                self.step()
        except BaseException:
            self.session.reset()
            self.state = AcquisitionState.FINISHED
            raise
        return self.result

    def step(self) -> None:
        """Execute one poll of the FIFO."""
        if self.state is AcquisitionState.FINISHED:
            return

        self.iterations += 1

        # Wait some time to collect next batch of FIFO data
        self.sleep(self.pause_time)

        if self.cancel is not None and self.cancel.is_set():
            logger.debug("Gesture read cancelled")
            self.session.reset()
            self._finish(None)
            return

        gstatus = self.transport.read_byte(Register.GSTATUS)
        if gstatus & GVALID:
            self._collect()
        else:
            self._conclude()

    def _collect(self) -> None:
        fifo_level = self.transport.read_byte(Register.GFLVL)
        logger.debug(f"FIFO level: {fifo_level}")
        if fifo_level == 0:
            return

        fifo_level = min(fifo_level, FIFO_CAPACITY)
        block = self.transport.read_block(Register.GFIFO_U, fifo_level * QUAD_SIZE)
        if len(block) == 0:
            logger.debug("Empty FIFO read, no gesture")
            self.session.reset()
            self._finish(None)
            return

        if split_quads(block, self.session) == 0:
            return

        # Filter and process gesture data, decode near/far state
        if process_gesture_data(self.session) and decode_gesture(self.session):
            logger.debug(f"Decoded motion: {self.session.motion.name}")

        self.session.batch.rewind()

    def _conclude(self) -> None:
        # Determine best guessed gesture and clean up
        self.sleep(self.pause_time)
        decode_gesture(self.session)
        motion = self.session.motion
        self.session.reset()
        logger.debug(f"Gesture session finished: {motion.name}")
        self._finish(motion)

    def _finish(self, result: Optional[Motion]) -> None:
        self.result = result
        self.state = AcquisitionState.FINISHED
