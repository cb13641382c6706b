"""
Gesture Processing Module for the APDS-9960

This module turns batches of raw four-channel photodiode samples into
discrete motions:
- GestureSampleBatch holds the quads drained from the sensor FIFO
- GestureSession carries the directional accumulator across batches
- process_gesture_data() updates the accumulator from one batch
- decode_gesture() maps the accumulator to a Motion

The thresholds are empirically tuned sensitivity constants and are not
configurable.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

from apds9960.hardware.registers import FIFO_CAPACITY

# Gesture parameters
GESTURE_THRESHOLD_OUT = 10
GESTURE_SENSITIVITY_1 = 50
GESTURE_SENSITIVITY_2 = 20
NEAR_COUNT_THRESHOLD = 10
FAR_COUNT_THRESHOLD = 2

# Fewer samples than this (inclusive) carry no usable signal
MIN_GESTURE_SAMPLES = 4

Quad = Tuple[int, int, int, int]


class Motion(IntEnum):
    """Decoded gesture direction."""

    NONE = 0
    LEFT = 1
    RIGHT = 2
    UP = 3
    DOWN = 4
    NEAR = 5
    FAR = 6
    ALL = 7


class SessionState(Enum):
    """Near/far confirmation state of a gesture session."""

    NA = "na"
    NEAR = "near"
    FAR = "far"
    ALL = "all"


def _empty_channel() -> List[int]:
    return [0] * FIFO_CAPACITY


@dataclass
class GestureSampleBatch:
    """Up/down/left/right samples collected since the last processing pass."""

    u_data: List[int] = field(default_factory=_empty_channel)
    d_data: List[int] = field(default_factory=_empty_channel)
    l_data: List[int] = field(default_factory=_empty_channel)
    r_data: List[int] = field(default_factory=_empty_channel)
    index: int = 0
    total_gestures: int = 0

    def append_quad(self, up: int, down: int, left: int, right: int) -> None:
        """Store one sample at the fill index and advance the counters."""
        self.u_data[self.index] = up
        self.d_data[self.index] = down
        self.l_data[self.index] = left
        self.r_data[self.index] = right
        self.index = (self.index + 1) % FIFO_CAPACITY
        self.total_gestures += 1

    def quad(self, i: int) -> Quad:
        return self.u_data[i], self.d_data[i], self.l_data[i], self.r_data[i]

    def rewind(self) -> None:
        """Start a new accumulation window; channel buffers are reused."""
        self.index = 0
        self.total_gestures = 0


@dataclass
class GestureSession:
    """Accumulated state of one gesture-acquisition session."""

    batch: GestureSampleBatch = field(default_factory=GestureSampleBatch)
    ud_delta: int = 0
    lr_delta: int = 0
    ud_count: int = 0
    lr_count: int = 0
    near_count: int = 0
    far_count: int = 0
    state: SessionState = SessionState.NA
    motion: Motion = Motion.NONE

    def reset(self) -> "GestureSession":
        """Return every field to its baseline and return ``self``."""
        self.batch.rewind()
        self.ud_delta = 0
        self.lr_delta = 0
        self.ud_count = 0
        self.lr_count = 0
        self.near_count = 0
        self.far_count = 0
        self.state = SessionState.NA
        self.motion = Motion.NONE
        return self


def _is_in_range(quad: Quad) -> bool:
    return all(value > GESTURE_THRESHOLD_OUT for value in quad)


def _ratio(a: int, b: int) -> int:
    """Signed ``(a - b) * 100 / (a + b)``, truncated toward zero."""
    numerator = (a - b) * 100
    quotient = abs(numerator) // (a + b)
    return quotient if numerator >= 0 else -quotient


def _direction(accumulated: int) -> int:
    if accumulated >= GESTURE_SENSITIVITY_1:
        return 1
    if accumulated <= -GESTURE_SENSITIVITY_1:
        return -1
    return 0


def find_edge_quads(batch: GestureSampleBatch) -> Optional[Tuple[Quad, Quad]]:
    """
    Find the first and last samples with all four channels above the
    out-of-range threshold.

    Returns:
        ``(first, last)`` or None if no sample qualifies
    """
    total = batch.total_gestures
    first = next(
        (batch.quad(i) for i in range(total) if _is_in_range(batch.quad(i))), None
    )
    if first is None:
        return None
    last = next(
        batch.quad(i) for i in range(total - 1, -1, -1) if _is_in_range(batch.quad(i))
    )
    return first, last


def process_gesture_data(session: GestureSession) -> bool:
    """
    Update the directional accumulator of ``session`` from its batch.

    Args:
        session: The active gesture session

    Returns:
        True once a near/far state has been confirmed and the session
        should be decoded, False if there is not enough data yet
    """
    batch = session.batch

    if batch.total_gestures <= MIN_GESTURE_SAMPLES:
        return False
    if batch.total_gestures > FIFO_CAPACITY:
        return False

    edges = find_edge_quads(batch)
    if edges is None:
        return False
    (u_first, d_first, l_first, r_first), (u_last, d_last, l_last, r_last) = edges

    # First vs. last ratio of up/down and left/right
    ud_delta = _ratio(u_last, d_last) - _ratio(u_first, d_first)
    lr_delta = _ratio(l_last, r_last) - _ratio(l_first, r_first)

    session.ud_delta += ud_delta
    session.lr_delta += lr_delta
    session.ud_count = _direction(session.ud_delta)
    session.lr_count = _direction(session.lr_delta)

    still = ud_delta == 0 and lr_delta == 0
    small = (
        abs(ud_delta) < GESTURE_SENSITIVITY_2 and abs(lr_delta) < GESTURE_SENSITIVITY_2
    )
    if not small:
        return False

    if session.ud_count == 0 and session.lr_count == 0:
        if still:
            session.near_count += 1
        else:
            session.far_count += 1

        if (
            session.near_count >= NEAR_COUNT_THRESHOLD
            and session.far_count >= FAR_COUNT_THRESHOLD
        ):
            if still:
                session.state = SessionState.NEAR
            elif ud_delta != 0 and lr_delta != 0:
                session.state = SessionState.FAR
            return True
    else:
        # A swipe is forming; enough stillness cancels it
        if still:
            session.near_count += 1

        if session.near_count >= NEAR_COUNT_THRESHOLD:
            session.ud_count = 0
            session.lr_count = 0
            session.ud_delta = 0
            session.lr_delta = 0

    return False


# (ud_count, lr_count) -> (motion if |ud| wins, motion otherwise)
_SWIPES = {
    (-1, 0): (Motion.UP, Motion.UP),
    (1, 0): (Motion.DOWN, Motion.DOWN),
    (0, 1): (Motion.RIGHT, Motion.RIGHT),
    (0, -1): (Motion.LEFT, Motion.LEFT),
    (-1, 1): (Motion.UP, Motion.RIGHT),
    (1, -1): (Motion.DOWN, Motion.LEFT),
    (-1, -1): (Motion.UP, Motion.LEFT),
    (1, 1): (Motion.DOWN, Motion.RIGHT),
}


def decode_gesture(session: GestureSession) -> bool:
    """
    Resolve the session accumulator into ``session.motion``.

    Diagonal counts are resolved toward the axis with the larger
    accumulated delta. When nothing matches, ``session.motion`` keeps its
    previous value.

    Returns:
        True if a motion was determined
    """
    if session.state == SessionState.NEAR:
        session.motion = Motion.NEAR
        return True
    if session.state == SessionState.FAR:
        session.motion = Motion.FAR
        return True

    candidates = _SWIPES.get((session.ud_count, session.lr_count))
    if candidates is None:
        return False

    vertical, horizontal = candidates
    if abs(session.ud_delta) > abs(session.lr_delta):
        session.motion = vertical
    else:
        session.motion = horizontal
    return True
