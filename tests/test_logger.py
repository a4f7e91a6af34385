import json

from skeleton_coach.motion.core.exercise import ExerciseSession, ExerciseStateMachine
from skeleton_coach.motion.utils.logger import (
    LogCategory,
    LogLevel,
    create_session_logger,
)


def test_logger_does_not_touch_disk_until_saved(tmp_path):
    log_dir = tmp_path / "logs"
    logger = create_session_logger("abc", str(log_dir))
    logger.info(LogCategory.SYSTEM, "Session started")

    assert not log_dir.exists()
    assert len(logger.entries) == 1


def test_save_session_log_writes_json(tmp_path):
    logger = create_session_logger("abc", str(tmp_path))
    logger.info(LogCategory.SYSTEM, "Session started", {"tolerance": 0.1})
    logger.warning(LogCategory.SENSOR, "No body in view")

    path = logger.save_session_log()

    assert path.parent == tmp_path
    assert path.name.startswith("session_abc_")
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["session_id"] == "abc"
    assert [e["level"] for e in saved["entries"]] == ["info", "warning"]
    assert saved["entries"][0]["data"] == {"tolerance": 0.1}
    assert saved["entries"][1]["category"] == "sensor"


def test_log_step_counts_failed_checks_until_transition(tmp_path, standing_sample, arms_cross_sample):
    machine = ExerciseStateMachine()
    session = ExerciseSession()
    logger = create_session_logger(session.session_id, str(tmp_path))

    logger.log_step(1, machine.step(session, standing_sample), session.tolerance)
    logger.log_step(2, machine.step(session, standing_sample), session.tolerance)
    assert logger.entries == []
    assert logger.failed_checks == {"arms_cross": 2}

    logger.log_step(3, machine.step(session, arms_cross_sample), session.tolerance)

    (advanced,) = logger.entries
    assert advanced.level == LogLevel.INFO
    assert advanced.category == LogCategory.PHASE
    assert advanced.data["previous_phase"] == "arms_cross"
    assert advanced.data["phase"] == "hands_on_head"
    assert advanced.data["frame_number"] == 3
    assert advanced.data["failed_checks"] == 2
    assert logger.failed_checks == {}


def test_many_failed_frames_keep_log_small(tmp_path, standing_sample):
    machine = ExerciseStateMachine()
    session = ExerciseSession()
    logger = create_session_logger(session.session_id, str(tmp_path))

    for frame_number in range(1, 5001):
        logger.log_step(frame_number, machine.step(session, standing_sample), session.tolerance)

    assert len(logger.entries) == 0

    saved = json.loads(logger.save_session_log().read_text(encoding="utf-8"))
    assert len(saved["entries"]) == 1
    assert saved["entries"][0]["category"] == "pose"
    assert saved["entries"][0]["data"] == {"arms_cross": 5000}
