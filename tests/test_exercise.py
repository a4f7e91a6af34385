import math

import pytest

from skeleton_coach.motion.core.data_types import (
    FrameEdges, JointType, Point3D, Skeleton, SkeletonFrame, SkeletonTrackingState,
)
from skeleton_coach.motion.core.exceptions import InvalidToleranceError
from skeleton_coach.motion.core.exercise import (
    DEFAULT_REPETITION_TARGET,
    DEFAULT_TOLERANCE,
    POSE_RULES,
    ExercisePhase,
    ExerciseSession,
    ExerciseStateMachine,
    Outcome,
    feedback_for,
)

from conftest import pose_sample


def run_cycles(machine, session, cycle_samples, count):
    for _ in range(count):
        for sample in cycle_samples:
            machine.step(session, sample)


# =============================================
# SESSION
# =============================================

def test_new_session_defaults():
    session = ExerciseSession()
    assert session.phase == ExercisePhase.ARMS_CROSS
    assert session.repetitions == 0
    assert session.tolerance == DEFAULT_TOLERANCE
    assert session.repetition_target == DEFAULT_REPETITION_TARGET == 4
    assert session.feedback == feedback_for(ExercisePhase.ARMS_CROSS)


@pytest.mark.parametrize("value", [0, 0.0, -0.1, -5, math.nan])
def test_session_rejects_non_positive_tolerance(value):
    with pytest.raises(InvalidToleranceError):
        ExerciseSession(tolerance=value)


def test_set_tolerance_rejects_non_positive_and_keeps_old_value():
    session = ExerciseSession(tolerance=0.2)
    with pytest.raises(ValueError):
        session.set_tolerance(0)
    assert session.get_tolerance() == 0.2


def test_repetition_target_must_be_positive():
    with pytest.raises(ValueError):
        ExerciseSession(repetition_target=0)


def test_session_ids_are_unique():
    assert ExerciseSession().session_id != ExerciseSession().session_id


def test_to_dict_uses_lowercase_phase_names():
    state = ExerciseSession(tolerance=0.15).to_dict()
    assert state["phase"] == "arms_cross"
    assert state["tolerance"] == 0.15
    assert state["repetitions"] == 0


# =============================================
# STATE MACHINE
# =============================================

def test_arms_cross_advances_to_hands_on_head(arms_cross_sample):
    machine = ExerciseStateMachine()
    session = ExerciseSession()

    result = machine.step(session, arms_cross_sample)

    assert result.evaluated and result.success and result.advanced
    assert session.phase == ExercisePhase.HANDS_ON_HEAD
    assert "hands on your head" in session.feedback
    assert result.feedback == session.feedback


def test_failed_check_keeps_phase(standing_sample):
    machine = ExerciseStateMachine()
    session = ExerciseSession()

    result = machine.step(session, standing_sample)

    assert result.evaluated and not result.success and not result.advanced
    assert session.phase == ExercisePhase.ARMS_CROSS
    assert session.feedback == feedback_for(ExercisePhase.ARMS_CROSS, Outcome.FAILURE)


def test_only_current_phase_rule_is_checked(hands_on_head_sample, hands_down_sample):
    machine = ExerciseStateMachine()
    session = ExerciseSession()

    machine.step(session, hands_on_head_sample)
    machine.step(session, hands_down_sample)

    assert session.phase == ExercisePhase.ARMS_CROSS


def test_at_most_one_transition_per_frame():
    # Satisfies all three rules at once
    everything = pose_sample({
        JointType.WRIST_LEFT: (-0.8, 0.52, 2.0),
        JointType.HAND_LEFT: (-0.05, 0.75, 2.0),
        JointType.WRIST_RIGHT: (0.23, 0.53, 2.0),
        JointType.ELBOW_RIGHT: (0.22, 0.25, 2.0),
        JointType.HAND_RIGHT: (0.05, 0.72, 2.0),
    })
    machine = ExerciseStateMachine()
    session = ExerciseSession()

    assert all(rule(everything, 0.1) for rule in POSE_RULES.values())

    machine.step(session, everything)
    assert session.phase == ExercisePhase.HANDS_ON_HEAD
    machine.step(session, everything)
    assert session.phase == ExercisePhase.HANDS_DOWN
    machine.step(session, everything)
    assert session.phase == ExercisePhase.ARMS_CROSS
    assert session.repetitions == 1


def test_hands_down_completes_a_repetition(cycle_samples):
    machine = ExerciseStateMachine()
    session = ExerciseSession()

    run_cycles(machine, session, cycle_samples, 1)

    assert session.phase == ExercisePhase.ARMS_CROSS
    assert session.repetitions == 1
    assert session.feedback == feedback_for(ExercisePhase.HANDS_DOWN, Outcome.SUCCESS)


def test_four_cycles_complete_the_exercise(cycle_samples, arms_cross_sample):
    calls = []

    def counting(rule):
        def wrapper(sample, tolerance):
            calls.append(rule.__name__)
            return rule(sample, tolerance)
        return wrapper

    machine = ExerciseStateMachine({phase: counting(rule) for phase, rule in POSE_RULES.items()})
    session = ExerciseSession()

    run_cycles(machine, session, cycle_samples, 4)

    assert session.phase == ExercisePhase.COMPLETE
    assert session.is_complete
    assert session.repetitions == 4
    assert session.feedback == "The exercise is finished"

    evaluated = len(calls)
    result = machine.step(session, arms_cross_sample)

    assert len(calls) == evaluated
    assert not result.evaluated
    assert result.phase == ExercisePhase.COMPLETE
    assert session.repetitions == 4


def test_complete_after_custom_target(cycle_samples):
    machine = ExerciseStateMachine()
    session = ExerciseSession(repetition_target=2)

    run_cycles(machine, session, cycle_samples, 1)
    assert session.phase == ExercisePhase.ARMS_CROSS
    run_cycles(machine, session, cycle_samples, 1)
    assert session.phase == ExercisePhase.COMPLETE


def test_loop_variant_never_completes(cycle_samples):
    machine = ExerciseStateMachine()
    session = ExerciseSession(repetition_target=None)

    run_cycles(machine, session, cycle_samples, 6)

    assert session.phase == ExercisePhase.ARMS_CROSS
    assert session.repetitions == 6


def test_tolerance_change_applies_to_next_frame(make_sample):
    # Right wrist 8 cm above the shoulder
    sample = make_sample(wrist_right=(0.8, 0.58, 2.0), wrist_left=(-0.8, 0.52, 2.0))
    machine = ExerciseStateMachine()
    session = ExerciseSession(tolerance=0.05)

    machine.step(session, sample)
    assert session.phase == ExercisePhase.ARMS_CROSS

    session.set_tolerance(0.1)
    machine.step(session, sample)
    assert session.phase == ExercisePhase.HANDS_ON_HEAD


def test_reset_restarts_and_keeps_tolerance(cycle_samples):
    machine = ExerciseStateMachine()
    session = ExerciseSession(tolerance=0.2)
    run_cycles(machine, session, cycle_samples, 4)

    session.reset()

    assert session.phase == ExercisePhase.ARMS_CROSS
    assert session.repetitions == 0
    assert session.tolerance == 0.2
    assert session.feedback == feedback_for(ExercisePhase.ARMS_CROSS)


def test_callbacks_fire_on_transitions(cycle_samples, standing_sample):
    changes = []
    repetitions = []
    machine = ExerciseStateMachine()
    machine.set_on_phase_change(lambda old, new: changes.append((old, new)))
    machine.set_on_repetition(repetitions.append)
    session = ExerciseSession()

    machine.step(session, standing_sample)
    run_cycles(machine, session, cycle_samples, 1)

    assert changes == [
        (ExercisePhase.ARMS_CROSS, ExercisePhase.HANDS_ON_HEAD),
        (ExercisePhase.HANDS_ON_HEAD, ExercisePhase.HANDS_DOWN),
        (ExercisePhase.HANDS_DOWN, ExercisePhase.ARMS_CROSS),
    ]
    assert repetitions == [1]


def test_sessions_are_independent(arms_cross_sample):
    machine = ExerciseStateMachine()
    first, second = ExerciseSession(), ExerciseSession()

    machine.step(first, arms_cross_sample)

    assert first.phase == ExercisePhase.HANDS_ON_HEAD
    assert second.phase == ExercisePhase.ARMS_CROSS


# =============================================
# SKELETON FRAMES
# =============================================

def _skeleton(sample, state=SkeletonTrackingState.TRACKED):
    return Skeleton(state, Point3D(0.0, 0.0, 2.0), sample, FrameEdges.NONE)


def test_process_frame_without_tracked_body(arms_cross_sample):
    machine = ExerciseStateMachine()
    session = ExerciseSession()
    frame = SkeletonFrame(
        timestamp_ms=0,
        skeletons=(_skeleton(arms_cross_sample, SkeletonTrackingState.POSITION_ONLY),),
    )

    assert machine.process_frame(session, SkeletonFrame()) is None
    assert machine.process_frame(session, frame) is None
    assert session.phase == ExercisePhase.ARMS_CROSS


def test_process_frame_uses_first_tracked_body(arms_cross_sample, standing_sample):
    machine = ExerciseStateMachine()
    session = ExerciseSession()
    frame = SkeletonFrame(skeletons=(
        _skeleton(standing_sample, SkeletonTrackingState.POSITION_ONLY),
        _skeleton(arms_cross_sample),
        _skeleton(standing_sample),
    ))

    result = machine.process_frame(session, frame)

    assert result is not None and result.advanced
    assert session.phase == ExercisePhase.HANDS_ON_HEAD
