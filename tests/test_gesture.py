import copy

import pytest

from apds9960.modules.gesture import (
    GestureSession,
    Motion,
    SessionState,
    decode_gesture,
    process_gesture_data,
)

STILL = (100, 100, 100, 100)
# Both ratios move by +4 between first and last sample
DRIFT_FIRST = (100, 100, 100, 100)
DRIFT_LAST = (110, 100, 110, 100)


def load(session, quads):
    """Put ``quads`` into a freshly rewound batch."""
    session.batch.rewind()
    for quad in quads:
        session.batch.append_quad(*quad)


def feed(session, quads):
    load(session, quads)
    result = process_gesture_data(session)
    session.batch.rewind()
    return result


def test_swipe_up():
    session = GestureSession()
    quads = [(100, 50, 80, 20), (90, 60, 80, 20), (70, 80, 80, 20), (50, 100, 80, 20)]
    quads.append((40, 120, 80, 20))

    assert not feed(session, quads)

    # 33 -> -50 on up/down, unchanged left/right
    assert session.ud_delta == -83
    assert session.lr_delta == 0
    assert session.ud_count == -1
    assert session.lr_count == 0
    assert decode_gesture(session)
    assert session.motion is Motion.UP


def test_ratio_truncates_toward_zero():
    session = GestureSession()

    feed(session, [(50, 100, 50, 50)] + [STILL] * 4)

    # (50 - 100) * 100 / 150 = -33.3, truncated to -33
    assert session.ud_delta == 33


@pytest.mark.parametrize("total", [0, 1, 4])
def test_insufficient_samples_leave_state_unchanged(total):
    session = GestureSession(ud_delta=12, lr_delta=-7, near_count=3, far_count=1)
    load(session, [(200, 20, 20, 200)] * total)
    before = copy.deepcopy(session)

    assert not process_gesture_data(session)
    assert session == before


def test_no_sample_above_threshold():
    session = GestureSession()
    load(session, [(10, 50, 50, 50), (50, 5, 50, 50)] * 3)
    before = copy.deepcopy(session)

    assert not process_gesture_data(session)
    assert session == before


def test_edge_quads_skip_out_of_range_samples():
    session = GestureSession()
    quads = [(0, 0, 0, 0), (100, 50, 80, 20), STILL, (40, 120, 80, 20), (3, 3, 3, 3)]

    feed(session, quads)

    assert session.ud_delta == -83


def test_near_confirmed_after_stillness():
    session = GestureSession()

    assert not feed(session, [DRIFT_FIRST] * 3 + [DRIFT_LAST] * 2)
    assert not feed(session, [DRIFT_FIRST] * 3 + [DRIFT_LAST] * 2)
    assert session.far_count == 2

    for _ in range(9):
        assert not feed(session, [STILL] * 5)
    assert feed(session, [STILL] * 5)

    assert session.near_count == 10
    assert session.state is SessionState.NEAR
    assert decode_gesture(session)
    assert session.motion is Motion.NEAR


def test_far_confirmed_after_drift():
    session = GestureSession()

    for _ in range(10):
        assert not feed(session, [STILL] * 5)
    assert session.near_count == 10
    assert session.state is SessionState.NA

    assert not feed(session, [DRIFT_FIRST] * 3 + [DRIFT_LAST] * 2)
    assert feed(session, [DRIFT_FIRST] * 3 + [DRIFT_LAST] * 2)

    assert session.state is SessionState.FAR
    assert decode_gesture(session)
    assert session.motion is Motion.FAR


def test_confirmation_with_single_axis_drift_keeps_state():
    session = GestureSession(near_count=10, far_count=1)

    # Up/down moves, left/right does not
    assert feed(session, [STILL] * 3 + [(110, 100, 100, 100)] * 2)

    assert session.far_count == 2
    assert session.state is SessionState.NA


def test_stillness_cancels_forming_swipe():
    session = GestureSession()
    feed(session, [(100, 50, 80, 20)] * 2 + [(40, 120, 80, 20)] * 3)
    assert session.ud_count == -1

    for _ in range(10):
        assert not feed(session, [STILL] * 5)

    assert session.ud_count == 0
    assert session.lr_count == 0
    assert session.ud_delta == 0
    assert session.lr_delta == 0
    assert not decode_gesture(session)
    assert session.motion is Motion.NONE


def test_large_per_batch_delta_does_not_count():
    session = GestureSession()

    feed(session, [(100, 50, 50, 50)] * 2 + [(100, 70, 50, 50)] * 3)

    # Up/down moves 33 -> 17, a small shift that counts as far
    assert session.far_count == 1
    feed(session, [(100, 20, 50, 50)] * 2 + [(100, 60, 50, 50)] * 3)
    assert session.far_count == 1
    assert session.near_count == 0


@pytest.mark.parametrize(
    "ud_count, lr_count, ud_delta, lr_delta, motion",
    [
        (-1, 0, -60, 0, Motion.UP),
        (1, 0, 60, 0, Motion.DOWN),
        (0, 1, 0, 60, Motion.RIGHT),
        (0, -1, 0, -60, Motion.LEFT),
        (-1, 1, -90, 60, Motion.UP),
        (-1, 1, -60, 90, Motion.RIGHT),
        (1, -1, 90, -60, Motion.DOWN),
        (1, -1, 60, -90, Motion.LEFT),
        (-1, -1, -90, -60, Motion.UP),
        (-1, -1, -60, -90, Motion.LEFT),
        (1, 1, 90, 60, Motion.DOWN),
        (1, 1, 60, 90, Motion.RIGHT),
        (1, 1, 70, 70, Motion.RIGHT),
    ],
)
def test_decode_directions(ud_count, lr_count, ud_delta, lr_delta, motion):
    session = GestureSession(
        ud_count=ud_count, lr_count=lr_count, ud_delta=ud_delta, lr_delta=lr_delta
    )

    assert decode_gesture(session)
    assert session.motion is motion


def test_decode_near_far_take_precedence():
    session = GestureSession(ud_count=1, state=SessionState.NEAR)
    assert decode_gesture(session)
    assert session.motion is Motion.NEAR

    session = GestureSession(lr_count=-1, state=SessionState.FAR)
    assert decode_gesture(session)
    assert session.motion is Motion.FAR


def test_decode_failure_keeps_previous_motion():
    session = GestureSession(motion=Motion.LEFT)

    assert not decode_gesture(session)
    assert session.motion is Motion.LEFT


def test_reset_returns_baseline():
    session = GestureSession(
        ud_delta=5, lr_delta=6, ud_count=1, lr_count=-1, near_count=3, far_count=4
    )
    session.state = SessionState.FAR
    session.motion = Motion.FAR
    session.batch.append_quad(1, 2, 3, 4)

    assert session.reset() is session
    assert session.batch.index == 0
    assert session.batch.total_gestures == 0
    assert session == GestureSession(batch=session.batch)
