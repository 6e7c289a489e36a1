"""
Tests for the per-axis monitors

Driven by a VirtualClock so debounce intervals elapse without waiting.
"""
import pytest

from integrity_monitor.events import EventKind
from integrity_monitor.monitors import (
    AttentionMonitor,
    DebounceTimer,
    MultiFaceGate,
    ObjectFlagEvaluator,
    PresenceMonitor,
    TimerState,
    horizontal_distance,
)
from integrity_monitor.perception import FaceObservation, ObjectObservation


class TestDebounceTimer:
    """Idle / Pending / Fired transitions"""

    def test_arms_and_fires_once(self, clock):
        fired = []
        timer = DebounceTimer("t", clock, 5.0, lambda: fired.append(clock.now()))

        timer.update(True)
        assert timer.state == TimerState.PENDING
        assert timer.armed_at == 0.0

        clock.advance(4)
        assert fired == []

        clock.advance(1)
        assert fired == [5.0]
        assert timer.state == TimerState.FIRED

        timer.update(True)
        clock.advance(30)
        assert fired == [5.0]

    def test_condition_holding_does_not_rearm(self, clock):
        timer = DebounceTimer("t", clock, 5.0, lambda: None)
        timer.update(True)
        clock.advance(3)
        timer.update(True)

        assert timer.armed_at == 0.0
        assert clock.pending == 1

    def test_clear_cancels_pending_check(self, clock):
        fired = []
        timer = DebounceTimer("t", clock, 5.0, lambda: fired.append(True))

        timer.update(True)
        clock.advance(4)
        timer.update(False)
        clock.advance(10)

        assert fired == []
        assert timer.state == TimerState.IDLE
        assert clock.pending == 0

    def test_fired_returns_to_idle_then_rearms_full_interval(self, clock):
        fired = []
        timer = DebounceTimer("t", clock, 5.0, lambda: fired.append(clock.now()))

        timer.update(True)
        clock.advance(5)
        timer.update(False)
        assert timer.state == TimerState.IDLE

        timer.update(True)
        assert timer.state == TimerState.PENDING
        clock.advance(4)
        assert len(fired) == 1
        clock.advance(1)
        assert fired == [5.0, 10.0]

    def test_stale_check_after_rearm_is_ignored(self, clock):
        fired = []
        timer = DebounceTimer("t", clock, 5.0, lambda: fired.append(clock.now()))

        timer.update(True)
        clock.advance(3)
        timer.update(False)
        timer.update(True)
        clock.advance(2)  # first check would have fired here

        assert fired == []
        clock.advance(3)
        assert fired == [8.0]


class TestPresenceMonitor:
    def test_absence_raises_at_threshold_not_before(self, clock, recorder):
        monitor = PresenceMonitor(clock, 10000, recorder)

        for _ in range(4):  # samples at t = 0, 2, 4, 6
            monitor.observe(0)
            clock.advance(2)
        monitor.observe(0)  # t = 8
        clock.advance(1)
        assert recorder.raised == []

        clock.advance(1)
        assert recorder.raised == [(EventKind.USER_ABSENT, None)]
        assert monitor.state == TimerState.FIRED

    def test_one_face_before_threshold_resets(self, clock, recorder):
        monitor = PresenceMonitor(clock, 10000, recorder)

        monitor.observe(0)
        clock.advance(8)
        monitor.observe(1)
        clock.advance(4)

        assert recorder.raised == []
        assert monitor.state == TimerState.IDLE

    def test_new_absence_needs_full_threshold(self, clock, recorder):
        monitor = PresenceMonitor(clock, 10000, recorder)

        monitor.observe(0)
        clock.advance(9)
        monitor.observe(2)
        monitor.observe(0)
        clock.advance(9)
        assert recorder.raised == []

        clock.advance(1)
        assert len(recorder.raised) == 1

    def test_multiple_faces_count_as_present(self, clock, recorder):
        monitor = PresenceMonitor(clock, 10000, recorder)
        monitor.observe(3)
        assert monitor.state == TimerState.IDLE

    def test_close_discards_pending(self, clock, recorder):
        monitor = PresenceMonitor(clock, 10000, recorder)
        monitor.observe(0)
        monitor.close()
        clock.advance(20)
        assert recorder.raised == []


class TestHorizontalDistance:
    def test_distance_from_eye_midpoint(self):
        face = FaceObservation.from_points({
            "noseTip": (100, 0), "leftEye": (80, 0), "rightEye": (90, 0)
        })
        assert horizontal_distance(face) == 15

    def test_missing_keypoint(self):
        face = FaceObservation.from_points({"noseTip": (100, 0), "leftEye": (80, 0)})
        assert horizontal_distance(face) is None


class TestAttentionMonitor:
    def make(self, clock, recorder, policy="exactly_one"):
        return AttentionMonitor(clock, threshold=35, debounce_ms=5000, raise_event=recorder, face_policy=policy)

    def test_small_offset_never_arms(self, clock, recorder):
        monitor = self.make(clock, recorder)
        face = FaceObservation.from_points({
            "noseTip": (100, 0), "leftEye": (80, 0), "rightEye": (90, 0)
        })

        for _ in range(30):
            monitor.observe([face])
            clock.advance(2)

        assert monitor.state == TimerState.IDLE
        assert recorder.raised == []

    def test_sustained_turn_raises(self, clock, recorder, make_face):
        monitor = self.make(clock, recorder)

        monitor.observe([make_face(offset=-40)])
        clock.advance(2)
        monitor.observe([make_face(offset=-50)])
        clock.advance(3)

        assert recorder.raised == [(EventKind.USER_LOOKING_AWAY, None)]

    def test_offset_exactly_at_threshold_does_not_arm(self, clock, recorder, make_face):
        monitor = self.make(clock, recorder)
        monitor.observe([make_face(offset=35)])
        assert monitor.state == TimerState.IDLE

    def test_looking_back_cancels(self, clock, recorder, make_face):
        monitor = self.make(clock, recorder)

        monitor.observe([make_face(offset=40)])
        clock.advance(4)
        monitor.observe([make_face(offset=0)])
        clock.advance(10)

        assert recorder.raised == []

    def test_no_face_forces_idle(self, clock, recorder, make_face):
        monitor = self.make(clock, recorder)

        monitor.observe([make_face(offset=40)])
        monitor.observe([])
        clock.advance(10)

        assert monitor.state == TimerState.IDLE
        assert recorder.raised == []

    def test_missing_keypoints_leave_state_unchanged(self, clock, recorder, make_face):
        monitor = self.make(clock, recorder)
        partial = FaceObservation.from_points({"noseTip": (200, 0)})

        monitor.observe([partial])
        assert monitor.state == TimerState.IDLE

        monitor.observe([make_face(offset=40)])
        clock.advance(2)
        monitor.observe([partial])
        assert monitor.state == TimerState.PENDING

        clock.advance(3)
        assert recorder.raised == [(EventKind.USER_LOOKING_AWAY, None)]

    def test_exactly_one_policy_ignores_crowded_frames(self, clock, recorder, make_face):
        monitor = self.make(clock, recorder)

        monitor.observe([make_face(offset=40)])
        monitor.observe([make_face(offset=40), make_face(offset=40)])

        assert monitor.state == TimerState.IDLE

    def test_at_least_one_policy_uses_first_face(self, clock, recorder, make_face):
        monitor = self.make(clock, recorder, policy="at_least_one")

        monitor.observe([make_face(offset=40), make_face(offset=0)])
        clock.advance(5)

        assert recorder.raised == [(EventKind.USER_LOOKING_AWAY, None)]

    def test_unknown_policy(self, clock, recorder):
        with pytest.raises(ValueError):
            self.make(clock, recorder, policy="sometimes")


class TestMultiFaceGate:
    def test_immediate_raises_every_crowded_sample(self, clock, recorder):
        gate = MultiFaceGate(clock, recorder, policy="immediate")

        gate.observe(2)
        gate.observe(3)
        gate.observe(1)
        gate.observe(2)

        assert recorder.raised == [(EventKind.MULTIPLE_FACES_DETECTED, None)] * 3
        assert gate.state == TimerState.FIRED

    def test_immediate_clears_on_single_face(self, clock, recorder):
        gate = MultiFaceGate(clock, recorder, policy="immediate")
        gate.observe(2)
        gate.observe(1)
        assert gate.state == TimerState.IDLE

    def test_debounced_requires_persistence(self, clock, recorder):
        gate = MultiFaceGate(clock, recorder, policy="debounced", debounce_ms=2000)

        gate.observe(2)
        clock.advance(1)
        gate.observe(1)
        clock.advance(5)
        assert recorder.raised == []

        gate.observe(2)
        clock.advance(2)
        assert recorder.raised == [(EventKind.MULTIPLE_FACES_DETECTED, None)]

    def test_debounced_single_frame_is_suppressed(self, clock, recorder):
        gate = MultiFaceGate(clock, recorder, policy="debounced", debounce_ms=2000)
        gate.observe(2)
        gate.observe(0)
        clock.advance(3)
        assert recorder.raised == []

    def test_unknown_policy(self, clock, recorder):
        with pytest.raises(ValueError):
            MultiFaceGate(clock, recorder, policy="eventually")


class TestObjectFlagEvaluator:
    def make(self, recorder):
        return ObjectFlagEvaluator({"cellPhone": 0.6, "book": 0.65}, recorder)

    def test_confident_phone_flagged(self, recorder):
        self.make(recorder).observe([ObjectObservation("cellPhone", 0.9)])
        assert recorder.raised == [(EventKind.SUSPICIOUS_OBJECT_DETECTED, "cellPhone")]

    def test_low_confidence_ignored(self, recorder):
        self.make(recorder).observe([ObjectObservation("cellPhone", 0.4)])
        assert recorder.raised == []

    def test_threshold_is_exclusive_and_per_class(self, recorder):
        evaluator = self.make(recorder)
        assert evaluator.flagged([ObjectObservation("cellPhone", 0.6)]) == []
        assert evaluator.flagged([ObjectObservation("book", 0.62)]) == []
        assert evaluator.flagged([ObjectObservation("book", 0.7)]) == ["book"]

    def test_unlisted_class_ignored(self, recorder):
        self.make(recorder).observe([ObjectObservation("laptop", 0.99)])
        assert recorder.raised == []

    def test_observation_order_preserved(self, recorder):
        self.make(recorder).observe([
            ObjectObservation("book", 0.9),
            ObjectObservation("cellPhone", 0.9),
        ])
        assert [c for _, c in recorder.raised] == ["book", "cellPhone"]

    def test_empty_set_rejected(self, recorder):
        with pytest.raises(ValueError):
            ObjectFlagEvaluator({}, recorder)
