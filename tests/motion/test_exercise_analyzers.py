import pytest

from motion_service.models import (
    ArmRaiseAnalyzer,
    ArmRaiseState,
    ExerciseType,
    FormQuality,
    JointType,
    KneeRaiseAnalyzer,
    Landmark,
    PlankHoldAnalyzer,
    PushUpAnalyzer,
    SquatArmRaiseAnalyzer,
    StaticLungeAnalyzer,
    TorsoTwistAnalyzer,
    TorsoTwistState,
    create_exercise_analyzer,
)

from .conftest import (
    FakeClock,
    arm_raise_frame,
    knee_raise_frame,
    lunge_frame,
    make_frame,
    plank_frame,
    push_up_frame,
    squat_frame,
    torso_twist_frame,
)


def feed(analyzer, frames):
    return [analyzer.analyze(frame) for frame in frames]


# ═══════════════════════════════════════════════════════════════════════════════
# FACTORY
# ═══════════════════════════════════════════════════════════════════════════════

class TestFactory:

    @pytest.mark.parametrize("key, variant", [
        ("arm_raise", ArmRaiseAnalyzer),
        ("torso_twist", TorsoTwistAnalyzer),
        ("knee_raise", KneeRaiseAnalyzer),
        ("high_knee_raise", KneeRaiseAnalyzer),
        ("squat_arm_raise", SquatArmRaiseAnalyzer),
        ("push_up", PushUpAnalyzer),
        ("static_lunge", StaticLungeAnalyzer),
        ("plank_hold", PlankHoldAnalyzer),
    ])
    def test_builds_variant_for_key(self, key, variant):
        analyzer = create_exercise_analyzer(key)
        assert isinstance(analyzer, variant)
        assert analyzer.definition.id == key

    def test_accepts_enum(self):
        analyzer = create_exercise_analyzer(ExerciseType.TORSO_TWIST)
        assert analyzer.get_state().stage == "center"

    def test_unknown_key_raises(self):
        with pytest.raises(ValueError):
            create_exercise_analyzer("jumping_jack")

    def test_mismatched_state_raises(self):
        state = TorsoTwistState(exercise_type=ExerciseType.TORSO_TWIST, stage="center", previous_stage="center")
        with pytest.raises(ValueError):
            create_exercise_analyzer("arm_raise", state=state)

    def test_injected_state_is_used(self):
        state = ArmRaiseState(
            exercise_type=ExerciseType.ARM_RAISE, stage="up", previous_stage="down",
            reps=4, waiting_for_down=True,
        )
        analyzer = create_exercise_analyzer("arm_raise", state=state)
        result = analyzer.analyze(arm_raise_frame(10))
        assert result.reps == 5
        assert result.rep_completed
        assert state.reps == 5


# ═══════════════════════════════════════════════════════════════════════════════
# ARM RAISE
# ═══════════════════════════════════════════════════════════════════════════════

class TestArmRaise:

    def test_measures_arm_angles(self):
        result = create_exercise_analyzer("arm_raise").analyze(arm_raise_frame(120, 100))
        assert result.angles["left_arm"] == pytest.approx(120, abs=0.1)
        assert result.angles["right_arm"] == pytest.approx(100, abs=0.1)
        assert result.angles["average"] == pytest.approx(110, abs=0.1)

    def test_starts_idle(self):
        assert create_exercise_analyzer("arm_raise").get_state().stage == "idle"

    def test_round_trip_counts_once(self):
        analyzer = create_exercise_analyzer("arm_raise")
        results = feed(analyzer, [arm_raise_frame(a) for a in (10, 10, 160, 160, 10, 10)])

        assert [r.stage for r in results] == ["down", "down", "up", "up", "down", "down"]
        assert [r.reps for r in results] == [0, 0, 0, 0, 1, 1]
        assert [r.rep_completed for r in results] == [False, False, False, False, True, False]

    def test_hysteresis_band_never_counts(self):
        analyzer = create_exercise_analyzer("arm_raise")
        results = feed(analyzer, [arm_raise_frame(a) for a in (151, 149, 151, 149, 151, 149)])

        assert all(r.stage == "up" for r in results)
        assert results[-1].reps == 0

    def test_mid_band_keeps_stage(self):
        analyzer = create_exercise_analyzer("arm_raise")
        feed(analyzer, [arm_raise_frame(10)])
        result = analyzer.analyze(arm_raise_frame(100))
        assert result.stage == "down"

    def test_idle_to_down_does_not_count(self):
        analyzer = create_exercise_analyzer("arm_raise")
        result = analyzer.analyze(arm_raise_frame(20))
        assert result.stage == "down"
        assert result.reps == 0

    def test_reps_never_decrease(self):
        analyzer = create_exercise_analyzer("arm_raise")
        angles = [10, 160, 10, 100, 160, 120, 10, 170, 30, 80, 160, 10]
        reps = [r.reps for r in feed(analyzer, [arm_raise_frame(a) for a in angles])]
        assert reps == sorted(reps)
        assert reps[-1] == 4

    def test_previous_stage_tracks_changes(self):
        analyzer = create_exercise_analyzer("arm_raise")
        feed(analyzer, [arm_raise_frame(a) for a in (10, 160, 160)])
        state = analyzer.get_state()
        assert state.stage == "up"
        assert state.previous_stage == "down"

    def test_good_form(self):
        result = create_exercise_analyzer("arm_raise").analyze(arm_raise_frame(160))
        assert result.form_feedback.quality == FormQuality.GOOD
        assert result.form_feedback.score == 100
        assert result.form_feedback.issues == []

    def test_asymmetric_arms_penalized(self):
        result = create_exercise_analyzer("arm_raise").analyze(arm_raise_frame(160, 100))
        feedback = result.form_feedback
        assert feedback.score == 80
        assert feedback.quality == FormQuality.GOOD
        assert feedback.issues == ["arms asymmetric"]
        assert feedback.suggestions == ["raise both arms evenly"]

    def test_asymmetry_and_uneven_shoulders(self):
        frame = arm_raise_frame(160, 100, left_shoulder_y=0.30, right_shoulder_y=0.40)
        feedback = create_exercise_analyzer("arm_raise").analyze(frame).form_feedback
        assert feedback.score == 65
        assert feedback.quality == FormQuality.WARN
        assert "shoulders uneven" in feedback.issues

    def test_reset_restores_initial_state(self):
        analyzer = create_exercise_analyzer("arm_raise")
        feed(analyzer, [arm_raise_frame(a) for a in (160, 10, 160)])
        analyzer.reset()
        state = analyzer.get_state()
        assert state.stage == "idle"
        assert state.reps == 0
        assert state.waiting_for_down is False

    def test_evaluate_form_does_not_move_stage(self):
        analyzer = create_exercise_analyzer("arm_raise")
        feedback = analyzer.evaluate_form(arm_raise_frame(160))
        assert feedback.quality == FormQuality.GOOD
        assert analyzer.get_state().stage == "idle"


# ═══════════════════════════════════════════════════════════════════════════════
# VISIBILITY GATE
# ═══════════════════════════════════════════════════════════════════════════════

class TestVisibilityGate:

    def test_low_visibility_joint_blocks_frame(self):
        analyzer = create_exercise_analyzer("arm_raise")
        feed(analyzer, [arm_raise_frame(10), arm_raise_frame(160)])

        hidden = arm_raise_frame(10, hidden={JointType.LEFT_ELBOW: 0.2})
        result = analyzer.analyze(hidden)

        assert result.is_visible is False
        assert result.stage == "up"
        assert result.reps == 0
        assert result.angles == {}
        assert result.form_feedback.quality == FormQuality.WARN
        assert result.form_feedback.score == 0
        assert result.form_feedback.issues == ["body not fully visible"]

    def test_visibility_at_threshold_is_not_enough(self):
        analyzer = create_exercise_analyzer("arm_raise")
        result = analyzer.analyze(arm_raise_frame(160, hidden={JointType.RIGHT_HIP: 0.3}))
        assert result.is_visible is False

    def test_missing_visibility_counts_as_visible(self):
        result = create_exercise_analyzer("arm_raise").analyze(arm_raise_frame(160, visibility=None))
        assert result.is_visible is True
        assert result.stage == "up"

    def test_short_frame_is_not_visible(self):
        analyzer = create_exercise_analyzer("knee_raise")
        result = analyzer.analyze([Landmark(0.5, 0.5, 0.9)] * 20)
        assert result.is_visible is False
        assert result.stage == "idle"

    def test_invisible_frame_leaves_form_counters(self):
        analyzer = create_exercise_analyzer("knee_raise")
        analyzer.analyze(knee_raise_frame(175, lean=0.1))
        assert analyzer.get_state().consecutive_warnings == 1
        analyzer.analyze(make_frame(visibility=0.1))
        assert analyzer.get_state().consecutive_warnings == 1

    def test_custom_threshold(self):
        analyzer = create_exercise_analyzer("arm_raise", visibility_threshold=0.95)
        assert analyzer.analyze(arm_raise_frame(160)).is_visible is False


# ═══════════════════════════════════════════════════════════════════════════════
# TORSO TWIST
# ═══════════════════════════════════════════════════════════════════════════════

class TestTorsoTwist:

    def test_stage_from_offset(self):
        analyzer = create_exercise_analyzer("torso_twist")
        stages = [r.stage for r in feed(analyzer, [torso_twist_frame(o) for o in (0.0, 0.2, -0.2, 0.05)])]
        assert stages == ["center", "left", "right", "center"]

    def test_offset_inside_threshold_is_center(self):
        analyzer = create_exercise_analyzer("torso_twist")
        assert analyzer.analyze(torso_twist_frame(0.119)).stage == "center"
        assert analyzer.analyze(torso_twist_frame(-0.119)).stage == "center"

    def test_return_to_center_counts(self):
        analyzer = create_exercise_analyzer("torso_twist")
        results = feed(analyzer, [torso_twist_frame(o) for o in (0.0, 0.2, 0.0, -0.2, 0.0)])
        assert [r.reps for r in results] == [0, 0, 1, 1, 2]
        assert results[2].rep_completed
        assert results[4].rep_completed

    def test_side_to_side_counts_once_on_center(self):
        analyzer = create_exercise_analyzer("torso_twist")
        results = feed(analyzer, [torso_twist_frame(o) for o in (0.2, -0.2, 0.2, 0.0)])
        assert [r.reps for r in results] == [0, 0, 0, 1]

    def test_staying_centered_never_counts(self):
        analyzer = create_exercise_analyzer("torso_twist")
        results = feed(analyzer, [torso_twist_frame(o) for o in (0.0, 0.1, -0.1, 0.0, 0.05)])
        assert results[-1].reps == 0

    def test_last_direction_cleared_after_rep(self):
        analyzer = create_exercise_analyzer("torso_twist")
        feed(analyzer, [torso_twist_frame(-0.2)])
        assert analyzer.get_state().last_twist_direction == "right"
        feed(analyzer, [torso_twist_frame(0.0)])
        assert analyzer.get_state().last_twist_direction is None

    def test_hip_rotation_and_tilt_penalized(self):
        frame = torso_twist_frame(0.2, hip_width=0.04, shoulder_tilt=0.1)
        feedback = create_exercise_analyzer("torso_twist").analyze(frame).form_feedback
        assert feedback.score == 60
        assert feedback.quality == FormQuality.WARN
        assert feedback.issues == ["hips rotating", "shoulders tilted"]

    def test_reset_returns_to_center(self):
        analyzer = create_exercise_analyzer("torso_twist")
        feed(analyzer, [torso_twist_frame(0.2)])
        analyzer.reset()
        assert analyzer.get_state().stage == "center"
        assert analyzer.get_state().last_twist_direction is None


# ═══════════════════════════════════════════════════════════════════════════════
# KNEE RAISE
# ═══════════════════════════════════════════════════════════════════════════════

class TestKneeRaise:

    def test_measures_hip_angles(self):
        result = create_exercise_analyzer("knee_raise").analyze(knee_raise_frame(60, 170))
        assert result.angles["left_hip"] == pytest.approx(60, abs=0.1)
        assert result.angles["right_hip"] == pytest.approx(170, abs=0.1)

    def test_single_leg_rep(self):
        analyzer = create_exercise_analyzer("knee_raise")
        results = feed(analyzer, [knee_raise_frame(a) for a in (175, 60, 120, 175)])
        assert [r.stage for r in results] == ["down", "up", "up", "down"]
        assert [r.reps for r in results] == [0, 0, 0, 1]

    def test_legs_count_independently(self):
        analyzer = create_exercise_analyzer("knee_raise")
        results = feed(analyzer, [
            knee_raise_frame(60, 175),
            knee_raise_frame(175, 175),
            knee_raise_frame(175, 60),
            knee_raise_frame(175, 175),
        ])
        assert [r.reps for r in results] == [0, 1, 1, 2]

    def test_both_legs_lowering_together_count_twice(self):
        analyzer = create_exercise_analyzer("knee_raise")
        feed(analyzer, [knee_raise_frame(60, 60)])
        result = analyzer.analyze(knee_raise_frame(175, 175))
        assert result.reps == 2
        assert result.rep_completed

    def test_stage_up_while_any_leg_up(self):
        analyzer = create_exercise_analyzer("knee_raise")
        result = analyzer.analyze(knee_raise_frame(175, 60))
        state = analyzer.get_state()
        assert result.stage == "up"
        assert state.left_leg_stage == "down"
        assert state.right_leg_stage == "up"

    def test_high_knee_uses_stricter_up_angle(self):
        analyzer = create_exercise_analyzer("high_knee_raise")
        assert analyzer.analyze(knee_raise_frame(75)).stage == "down"
        assert analyzer.analyze(knee_raise_frame(65)).stage == "up"

    def test_low_knee_penalized_while_up(self):
        analyzer = create_exercise_analyzer("knee_raise")
        feed(analyzer, [knee_raise_frame(60)])
        feedback = analyzer.analyze(knee_raise_frame(120)).form_feedback
        assert feedback.score == 80
        assert feedback.issues == ["knee not lifted high enough"]

    def test_leaning_and_low_knee_stack(self):
        analyzer = create_exercise_analyzer("knee_raise")
        feed(analyzer, [knee_raise_frame(60)])

        results = feed(analyzer, [knee_raise_frame(120, lean=0.1)] * 3)

        assert all(r.stage == "up" for r in results)
        assert results[-1].form_feedback.score == 55
        assert results[-1].form_feedback.quality == FormQuality.WARN
        assert results[-1].form_feedback.issues == ["torso leaning", "knee not lifted high enough"]
        assert analyzer.get_state().consecutive_warnings == 3
        assert analyzer.get_state().consecutive_bad_forms == 0

    def test_good_frame_resets_form_counters(self):
        analyzer = create_exercise_analyzer("knee_raise")
        feed(analyzer, [knee_raise_frame(60)] + [knee_raise_frame(120, lean=0.1)] * 2)
        result = analyzer.analyze(knee_raise_frame(175))

        state = analyzer.get_state()
        assert result.form_feedback.quality == FormQuality.GOOD
        assert state.consecutive_bad_forms == 0
        assert state.consecutive_warnings == 0
        assert state.last_form_quality == FormQuality.GOOD

    def test_lean_alone_is_warning(self):
        analyzer = create_exercise_analyzer("knee_raise")
        results = feed(analyzer, [knee_raise_frame(175, lean=0.1)] * 2)
        assert results[-1].form_feedback.score == 75
        assert results[-1].form_feedback.quality == FormQuality.WARN
        assert analyzer.get_state().consecutive_warnings == 2

    def test_reset_lowers_both_legs(self):
        analyzer = create_exercise_analyzer("knee_raise")
        feed(analyzer, [knee_raise_frame(60, 60)])
        analyzer.reset()
        state = analyzer.get_state()
        assert (state.stage, state.left_leg_stage, state.right_leg_stage) == ("idle", "down", "down")


# ═══════════════════════════════════════════════════════════════════════════════
# SQUAT WITH ARM RAISE
# ═══════════════════════════════════════════════════════════════════════════════

class TestSquatArmRaise:

    def test_down_then_up_counts(self):
        analyzer = create_exercise_analyzer("squat_arm_raise")
        results = feed(analyzer, [squat_frame(a) for a in (175, 100, 140, 170)])
        assert [r.stage for r in results] == ["up", "down", "down", "up"]
        assert [r.reps for r in results] == [0, 0, 0, 1]

    def test_arms_low_in_squat_penalized(self):
        analyzer = create_exercise_analyzer("squat_arm_raise")
        feedback = analyzer.analyze(squat_frame(100, arm_angle=60)).form_feedback
        assert feedback.issues == ["arms not overhead"]
        assert feedback.score == 80

    def test_uneven_knees_penalized(self):
        analyzer = create_exercise_analyzer("squat_arm_raise")
        analyzer.analyze(squat_frame(100))
        feedback = analyzer.analyze(squat_frame(100, arm_angle=60, right_knee_angle=140)).form_feedback
        assert feedback.score == 65
        assert feedback.quality == FormQuality.WARN


# ═══════════════════════════════════════════════════════════════════════════════
# PUSH-UP
# ═══════════════════════════════════════════════════════════════════════════════

class TestPushUp:

    def test_measures_elbow_and_body_angles(self):
        result = create_exercise_analyzer("push_up").analyze(push_up_frame(120))
        assert result.angles["average_elbow"] == pytest.approx(120, abs=0.1)
        assert result.angles["body_angle"] == pytest.approx(180, abs=0.1)

    def test_down_then_up_counts(self):
        analyzer = create_exercise_analyzer("push_up")
        results = feed(analyzer, [push_up_frame(a) for a in (170, 80, 120, 170)])
        assert [r.stage for r in results] == ["up", "down", "down", "up"]
        assert [r.reps for r in results] == [0, 0, 0, 1]
        assert results[-1].hold_seconds is None

    def test_straight_body_is_good(self):
        feedback = create_exercise_analyzer("push_up").analyze(push_up_frame(170)).form_feedback
        assert feedback.score == 100
        assert feedback.quality == FormQuality.GOOD

    def test_sagging_hips_penalized(self):
        feedback = create_exercise_analyzer("push_up").analyze(push_up_frame(170, sag=0.05)).form_feedback
        assert feedback.score == 75
        assert feedback.quality == FormQuality.WARN
        assert feedback.issues == ["hips sagging"]

    def test_piked_hips_penalized(self):
        feedback = create_exercise_analyzer("push_up").analyze(push_up_frame(170, sag=-0.05)).form_feedback
        assert feedback.score == 75
        assert feedback.issues == ["hips too high"]


# ═══════════════════════════════════════════════════════════════════════════════
# STATIC LUNGE
# ═══════════════════════════════════════════════════════════════════════════════

class TestStaticLunge:

    def test_bent_leg_holds(self):
        analyzer = create_exercise_analyzer("static_lunge")
        result = analyzer.analyze(lunge_frame(120, 175), timestamp_ms=0)
        assert result.stage == "hold"
        assert analyzer.get_state().active_leg == "left"

    def test_more_bent_leg_is_front_leg(self):
        analyzer = create_exercise_analyzer("static_lunge")
        analyzer.analyze(lunge_frame(150, 110), timestamp_ms=0)
        assert analyzer.get_state().active_leg == "right"

    @pytest.mark.parametrize("knee", [99, 161])
    def test_outside_tolerance_is_idle(self, knee):
        analyzer = create_exercise_analyzer("static_lunge")
        result = analyzer.analyze(lunge_frame(knee, 175), timestamp_ms=0)
        assert result.stage == "idle"
        assert analyzer.get_state().active_leg is None

    def test_rep_every_five_seconds_of_hold(self):
        analyzer = create_exercise_analyzer("static_lunge")
        results = [analyzer.analyze(lunge_frame(120, 175), timestamp_ms=t) for t in (0, 2500, 5000, 7500, 10000)]
        assert [r.reps for r in results] == [0, 0, 1, 1, 2]
        assert [r.rep_completed for r in results] == [False, False, True, False, True]
        assert results[-1].hold_seconds == pytest.approx(10.0)

    def test_hold_time_accumulates_across_breaks(self):
        analyzer = create_exercise_analyzer("static_lunge")
        analyzer.analyze(lunge_frame(120, 175), timestamp_ms=0)
        analyzer.analyze(lunge_frame(175, 175), timestamp_ms=3000)
        analyzer.analyze(lunge_frame(120, 175), timestamp_ms=8000)
        result = analyzer.analyze(lunge_frame(120, 175), timestamp_ms=10000)
        assert result.hold_seconds == pytest.approx(5.0)
        assert result.reps == 1

    def test_standing_penalized(self):
        feedback = create_exercise_analyzer("static_lunge").analyze(lunge_frame(175, 175), timestamp_ms=0).form_feedback
        assert feedback.score == 70
        assert feedback.quality == FormQuality.WARN
        assert feedback.issues == ["not in lunge position"]

    def test_frames_without_timestamp_use_clock(self):
        clock = FakeClock(start=50_000.0)
        analyzer = create_exercise_analyzer("static_lunge", clock=clock)
        analyzer.analyze(lunge_frame(120, 175))
        clock.advance(5000)
        result = analyzer.analyze(lunge_frame(120, 175))
        assert result.hold_seconds == pytest.approx(5.0)
        assert result.reps == 1

    def test_reset_clears_hold(self):
        analyzer = create_exercise_analyzer("static_lunge")
        results = [analyzer.analyze(lunge_frame(120, 175), timestamp_ms=t) for t in (0, 6000)]
        assert results[-1].reps == 1
        analyzer.reset()
        state = analyzer.get_state()
        assert (state.stage, state.reps, state.holding, state.hold_seconds) == ("idle", 0, False, 0.0)


# ═══════════════════════════════════════════════════════════════════════════════
# PLANK HOLD
# ═══════════════════════════════════════════════════════════════════════════════

class TestPlankHold:

    def test_straight_plank_earns_rep_after_five_seconds(self):
        analyzer = create_exercise_analyzer("plank_hold")
        results = [analyzer.analyze(plank_frame(), timestamp_ms=t) for t in range(0, 6000, 1000)]
        assert all(r.stage == "hold" for r in results)
        assert [r.reps for r in results] == [0, 0, 0, 0, 0, 1]
        assert results[-1].to_dict()["hold_seconds"] == 5.0

    def test_smoothing_and_hysteresis_delay_hold_break(self):
        analyzer = create_exercise_analyzer("plank_hold")
        for t in (0, 1000, 2000):
            analyzer.analyze(plank_frame(), timestamp_ms=t)

        still_holding = analyzer.analyze(plank_frame(sag=0.1), timestamp_ms=3000)
        broken = analyzer.analyze(plank_frame(sag=0.1), timestamp_ms=4000)

        assert still_holding.stage == "hold"
        assert still_holding.angles["body_deviation"] == pytest.approx(10.9, abs=0.1)
        assert broken.stage == "idle"
        assert broken.hold_seconds == pytest.approx(4.0)
        assert broken.form_feedback.issues == ["hips sagging"]
        assert broken.form_feedback.score == 70

    def test_hidden_frame_ends_hold(self):
        analyzer = create_exercise_analyzer("plank_hold")
        for t in (0, 1000, 2000, 3000):
            analyzer.analyze(plank_frame(), timestamp_ms=t)

        hidden = analyzer.analyze(plank_frame(visibility=0.1), timestamp_ms=4000)
        assert not hidden.is_visible
        assert hidden.stage == "idle"
        assert hidden.hold_seconds == pytest.approx(4.0)

        back = [analyzer.analyze(plank_frame(), timestamp_ms=t) for t in (10000, 11000)]
        assert [r.hold_seconds for r in back] == pytest.approx([4.0, 5.0])
        assert [r.reps for r in back] == [0, 1]

    def test_piked_plank_penalized(self):
        analyzer = create_exercise_analyzer("plank_hold")
        feedback = analyzer.evaluate_form(plank_frame(sag=-0.1))
        assert feedback.issues == ["hips too high"]

    def test_state_dict_lists_recent_angles(self):
        analyzer = create_exercise_analyzer("plank_hold")
        for t in range(0, 9000, 1000):
            analyzer.analyze(plank_frame(), timestamp_ms=t)
        data = analyzer.get_state().to_dict()
        assert len(data["body_angles"]) == 7
        assert data["holding"] is True
