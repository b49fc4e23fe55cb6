"""
MOTIONCOACH Motion Service - Exercise Analyzers

Per-exercise stage detection and rep counting over single landmark frames.

Each variant is a standalone class exposing the same surface
(analyze / evaluate_form / reset / get_state) and keeps its progress in an
explicit state dataclass that callers may construct and inject. Stage changes
are threshold rules with a hysteresis band: readings between the two cut-offs
never move the stage.
"""

import logging
import math
import time
from collections import deque
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Deque, Dict, Mapping, Optional, Protocol, Union

from .geometry import (
    Frame,
    JointType,
    Landmark,
    calculate_angle,
    calculate_midpoint,
    get_landmark,
)
from .exercise_catalog import (
    CoachMessages,
    ENGLISH_MESSAGES,
    ExerciseDefinition,
    ExerciseType,
    get_exercise_definition,
    parse_exercise_type,
)
from .form_evaluator import (
    FormCheck,
    FormFeedback,
    FormQuality,
    grade_form,
    not_visible_feedback,
)

logger = logging.getLogger(__name__)


DEFAULT_VISIBILITY_THRESHOLD = 0.3

# Form penalties
ASYMMETRY_PENALTY = 20
SHOULDER_LEVEL_PENALTY = 15
HIP_ROTATION_PENALTY = 25
LEAN_PENALTY = 25
KNEE_LIFT_PENALTY = 20
ARMS_LOW_PENALTY = 20
KNEE_SYMMETRY_PENALTY = 15
BODY_LINE_PENALTY = 25
PLANK_LINE_PENALTY = 30
LUNGE_POSITION_PENALTY = 30

# Frames averaged into the plank body angle
PLANK_SMOOTHING_WINDOW = 7


# ═══════════════════════════════════════════════════════════════════════════════
# STATE AND RESULT TYPES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class AnalyzerState:
    """Progress of one analyzer through an exercise session."""
    exercise_type: ExerciseType
    stage: str
    previous_stage: str
    reps: int = 0
    last_form_quality: FormQuality = FormQuality.GOOD
    consecutive_warnings: int = 0
    consecutive_bad_forms: int = 0

    def set_stage(self, stage: str):
        if stage != self.stage:
            self.previous_stage = self.stage
            self.stage = stage

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["exercise_type"] = self.exercise_type.value
        data["last_form_quality"] = self.last_form_quality.value
        return data


@dataclass
class ArmRaiseState(AnalyzerState):
    # Set on reaching "up"; a rep needs it on the way back down
    waiting_for_down: bool = False


@dataclass
class TorsoTwistState(AnalyzerState):
    last_twist_direction: Optional[str] = None


@dataclass
class KneeRaiseState(AnalyzerState):
    left_leg_stage: str = "down"
    right_leg_stage: str = "down"


@dataclass
class HoldState(AnalyzerState):
    """Hold timer of a timed exercise; hold_seconds covers finished holds only."""
    holding: bool = False
    hold_started_ms: Optional[float] = None
    hold_seconds: float = 0.0

    def held_seconds(self, now_ms: float) -> float:
        if self.holding and self.hold_started_ms is not None:
            return self.hold_seconds + max(0.0, now_ms - self.hold_started_ms) / 1000.0
        return self.hold_seconds

    def start_hold(self, now_ms: float):
        if not self.holding:
            self.holding = True
            self.hold_started_ms = now_ms

    def stop_hold(self, now_ms: float):
        if self.holding:
            self.hold_seconds = self.held_seconds(now_ms)
            self.holding = False
            self.hold_started_ms = None


@dataclass
class StaticLungeState(HoldState):
    active_leg: Optional[str] = None


@dataclass
class PlankHoldState(HoldState):
    body_angles: Deque[float] = field(default_factory=lambda: deque(maxlen=PLANK_SMOOTHING_WINDOW))

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["body_angles"] = [round(a, 2) for a in self.body_angles]
        return data


@dataclass
class AnalysisResult:
    """Per-frame analyzer output."""
    stage: str
    reps: int
    rep_completed: bool
    form_feedback: FormFeedback
    angles: Dict[str, float] = field(default_factory=dict)
    is_visible: bool = True
    # Accumulated hold time for timed exercises
    hold_seconds: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "reps": self.reps,
            "rep_completed": self.rep_completed,
            "form_feedback": self.form_feedback.to_dict(),
            "angles": {name: round(value, 2) for name, value in self.angles.items()},
            "is_visible": self.is_visible,
            "hold_seconds": None if self.hold_seconds is None else round(self.hold_seconds, 2),
        }


class ExerciseAnalyzer(Protocol):
    """Surface shared by every analyzer variant."""
    definition: ExerciseDefinition
    messages: CoachMessages
    visibility_threshold: float

    def analyze(self, frame: Frame, timestamp_ms: Optional[float] = None) -> AnalysisResult: ...

    def evaluate_form(self, frame: Frame) -> FormFeedback: ...

    def reset(self) -> None: ...

    def get_state(self) -> AnalyzerState: ...


# ═══════════════════════════════════════════════════════════════════════════════
# SHARED FRAME HANDLING
# ═══════════════════════════════════════════════════════════════════════════════

def is_frame_visible(frame: Frame, joints, threshold: float = DEFAULT_VISIBILITY_THRESHOLD) -> bool:
    """True when every joint is present with visibility unset or above threshold."""
    for joint in joints:
        landmark = get_landmark(frame, joint)
        if landmark is None:
            return False
        if landmark.visibility is not None and landmark.visibility <= threshold:
            return False
    return True


def initial_state(definition: ExerciseDefinition, state_cls=AnalyzerState) -> AnalyzerState:
    return state_cls(
        exercise_type=definition.exercise_type,
        stage=definition.initial_stage,
        previous_stage=definition.initial_stage,
    )


def _checked_state(definition: ExerciseDefinition, state: Optional[AnalyzerState], state_cls) -> AnalyzerState:
    if state is None:
        return initial_state(definition, state_cls)
    if state.exercise_type != definition.exercise_type or not isinstance(state, state_cls):
        raise ValueError(
            f"State for '{state.exercise_type.value}' cannot drive a '{definition.id}' analyzer"
        )
    return state


def analyze_frame(analyzer, frame: Frame) -> AnalysisResult:
    """
    Run one frame through an analyzer variant.

    Frames failing the visibility gate return before any geometry is computed,
    leaving stage and rep count untouched.
    """
    state = analyzer.get_state()

    if not is_frame_visible(frame, analyzer.definition.required_landmarks, analyzer.visibility_threshold):
        return AnalysisResult(
            stage=state.stage,
            reps=state.reps,
            rep_completed=False,
            form_feedback=not_visible_feedback(analyzer.messages.not_visible),
            angles={},
            is_visible=False,
        )

    angles = analyzer.measure(frame)
    stage_before = state.stage
    completed = analyzer.advance(angles)

    if state.stage != stage_before:
        logger.debug(f"{analyzer.definition.id}: {stage_before} -> {state.stage}")
    if completed:
        state.reps += completed
        logger.debug(f"{analyzer.definition.id}: rep counted (total {state.reps})")

    form_feedback = analyzer.score_form(frame, angles)

    return AnalysisResult(
        stage=state.stage,
        reps=state.reps,
        rep_completed=completed > 0,
        form_feedback=form_feedback,
        angles=angles,
        is_visible=True,
    )


def analyze_timed_frame(analyzer, frame: Frame, timestamp_ms: Optional[float]) -> AnalysisResult:
    """
    Run one frame through a timed (hold) variant.

    A frame failing the visibility gate ends the running hold at its own
    timestamp and drops the stage to idle; hidden time never counts as held.
    """
    state = analyzer.get_state()
    now = analyzer.clock() if timestamp_ms is None else timestamp_ms

    if not is_frame_visible(frame, analyzer.definition.required_landmarks, analyzer.visibility_threshold):
        state.stop_hold(now)
        state.set_stage("idle")

    analyzer.now_ms = now
    result = analyze_frame(analyzer, frame)
    result.hold_seconds = state.held_seconds(now)
    return result


def earned_hold_reps(definition: ExerciseDefinition, state: HoldState, now_ms: float) -> int:
    """Reps newly earned by accumulated hold time: one per hold_rep_seconds."""
    earned = math.floor(state.held_seconds(now_ms) / definition.threshold("hold_rep_seconds"))
    return max(0, earned - state.reps)


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


def _point(frame: Frame, joint: JointType) -> Landmark:
    return frame[joint.value]


def _body_line(frame: Frame):
    """Shoulder, hip and ankle midpoints of a side-view frame."""
    shoulder = calculate_midpoint(_point(frame, JointType.LEFT_SHOULDER), _point(frame, JointType.RIGHT_SHOULDER))
    hip = calculate_midpoint(_point(frame, JointType.LEFT_HIP), _point(frame, JointType.RIGHT_HIP))
    ankle = calculate_midpoint(_point(frame, JointType.LEFT_ANKLE), _point(frame, JointType.RIGHT_ANKLE))
    return shoulder, hip, ankle


def body_line_rule(frame: Frame) -> str:
    """
    Name the body-line fault of a side-view frame.

    "hips_sagging" when the hip midpoint sits below the shoulder-ankle line
    (image y grows downward), "hips_piked" otherwise.
    """
    shoulder, hip, ankle = _body_line(frame)
    span = ankle.x - shoulder.x
    if abs(span) < 1e-6:
        line_y = (shoulder.y + ankle.y) / 2
    else:
        line_y = shoulder.y + (ankle.y - shoulder.y) * (hip.x - shoulder.x) / span
    return "hips_sagging" if hip.y > line_y else "hips_piked"


# ═══════════════════════════════════════════════════════════════════════════════
# ARM RAISE
# ═══════════════════════════════════════════════════════════════════════════════

class ArmRaiseAnalyzer:
    """
    Both arms raised overhead and lowered to the sides.

    Arm elevation is the hip-shoulder-elbow angle averaged over both arms. A rep
    is a clean up -> down traversal: reaching "up" arms the counter and the
    next drop to "down" directly from "up" counts it.
    """

    def __init__(
        self,
        definition: ExerciseDefinition,
        messages: Optional[CoachMessages] = None,
        visibility_threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
        state: Optional[ArmRaiseState] = None,
    ):
        self.definition = definition
        self.messages = messages or ENGLISH_MESSAGES
        self.visibility_threshold = visibility_threshold
        self.state = _checked_state(definition, state, ArmRaiseState)

    @property
    def required_landmarks(self):
        return self.definition.required_landmarks

    def get_state(self) -> ArmRaiseState:
        return self.state

    def reset(self):
        self.state = initial_state(self.definition, ArmRaiseState)

    def analyze(self, frame: Frame, timestamp_ms: Optional[float] = None) -> AnalysisResult:
        return analyze_frame(self, frame)

    def measure(self, frame: Frame) -> Dict[str, float]:
        left = calculate_angle(
            _point(frame, JointType.LEFT_HIP),
            _point(frame, JointType.LEFT_SHOULDER),
            _point(frame, JointType.LEFT_ELBOW),
        )
        right = calculate_angle(
            _point(frame, JointType.RIGHT_HIP),
            _point(frame, JointType.RIGHT_SHOULDER),
            _point(frame, JointType.RIGHT_ELBOW),
        )
        return {"left_arm": left, "right_arm": right, "average": (left + right) / 2}

    def advance(self, angles: Dict[str, float]) -> int:
        state = self.state
        average = angles["average"]

        if average >= self.definition.threshold("up_angle"):
            state.set_stage("up")
            state.waiting_for_down = True
        elif average <= self.definition.threshold("down_angle"):
            completed = 0
            if state.waiting_for_down and state.stage == "up":
                completed = 1
                state.waiting_for_down = False
            state.set_stage("down")
            return completed

        return 0

    def evaluate_form(self, frame: Frame) -> FormFeedback:
        if not is_frame_visible(frame, self.required_landmarks, self.visibility_threshold):
            return not_visible_feedback(self.messages.not_visible)
        return self.score_form(frame, self.measure(frame))

    def score_form(self, frame: Frame, angles: Dict[str, float]) -> FormFeedback:
        check = FormCheck()
        rules = self.messages.form[self.definition.id]

        if abs(angles["left_arm"] - angles["right_arm"]) > self.definition.threshold("symmetry_diff"):
            check.penalize(ASYMMETRY_PENALTY, rules["asymmetric"])

        shoulder_gap = abs(_point(frame, JointType.LEFT_SHOULDER).y - _point(frame, JointType.RIGHT_SHOULDER).y)
        if shoulder_gap > self.definition.threshold("shoulder_level_diff"):
            check.penalize(SHOULDER_LEVEL_PENALTY, rules["shoulder_uneven"])

        return grade_form(check, self.state)


# ═══════════════════════════════════════════════════════════════════════════════
# TORSO TWIST
# ═══════════════════════════════════════════════════════════════════════════════

class TorsoTwistAnalyzer:
    """
    Upper-body rotation with the hips kept square.

    The stage comes from the horizontal offset of the shoulder midpoint from the
    hip midpoint. A rep counts when the torso returns to center after visiting
    a side.
    """

    def __init__(
        self,
        definition: ExerciseDefinition,
        messages: Optional[CoachMessages] = None,
        visibility_threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
        state: Optional[TorsoTwistState] = None,
    ):
        self.definition = definition
        self.messages = messages or ENGLISH_MESSAGES
        self.visibility_threshold = visibility_threshold
        self.state = _checked_state(definition, state, TorsoTwistState)

    @property
    def required_landmarks(self):
        return self.definition.required_landmarks

    def get_state(self) -> TorsoTwistState:
        return self.state

    def reset(self):
        self.state = initial_state(self.definition, TorsoTwistState)

    def analyze(self, frame: Frame, timestamp_ms: Optional[float] = None) -> AnalysisResult:
        return analyze_frame(self, frame)

    def measure(self, frame: Frame) -> Dict[str, float]:
        left_shoulder = _point(frame, JointType.LEFT_SHOULDER)
        right_shoulder = _point(frame, JointType.RIGHT_SHOULDER)
        left_hip = _point(frame, JointType.LEFT_HIP)
        right_hip = _point(frame, JointType.RIGHT_HIP)

        shoulder_mid = calculate_midpoint(left_shoulder, right_shoulder)
        hip_mid = calculate_midpoint(left_hip, right_hip)

        return {
            "twist_offset": shoulder_mid.x - hip_mid.x,
            "shoulder_tilt": abs(left_shoulder.y - right_shoulder.y),
            "hip_width": abs(left_hip.x - right_hip.x),
        }

    def advance(self, angles: Dict[str, float]) -> int:
        state = self.state
        offset = angles["twist_offset"]
        threshold = self.definition.threshold("twist_threshold")

        if offset > threshold:
            stage = "left"
        elif offset < -threshold:
            stage = "right"
        else:
            stage = "center"

        completed = 0
        if stage == "center":
            if state.stage != "center" and state.last_twist_direction is not None:
                completed = 1
                state.last_twist_direction = None
        else:
            state.last_twist_direction = stage

        state.set_stage(stage)
        return completed

    def evaluate_form(self, frame: Frame) -> FormFeedback:
        if not is_frame_visible(frame, self.required_landmarks, self.visibility_threshold):
            return not_visible_feedback(self.messages.not_visible)
        return self.score_form(frame, self.measure(frame))

    def score_form(self, frame: Frame, angles: Dict[str, float]) -> FormFeedback:
        check = FormCheck()
        rules = self.messages.form[self.definition.id]

        # Hips turning with the torso collapse their apparent width
        if angles["hip_width"] < self.definition.threshold("min_hip_width"):
            check.penalize(HIP_ROTATION_PENALTY, rules["hip_moving"])

        if angles["shoulder_tilt"] > self.definition.threshold("shoulder_level_diff"):
            check.penalize(SHOULDER_LEVEL_PENALTY, rules["shoulder_drop"])

        return grade_form(check, self.state)


# ═══════════════════════════════════════════════════════════════════════════════
# KNEE RAISE
# ═══════════════════════════════════════════════════════════════════════════════

class KneeRaiseAnalyzer:
    """
    Alternating knee raises (also drives the high-knee variant).

    Each leg runs its own up/down sub-stage from the shoulder-hip-knee angle and
    contributes a rep on its own up -> down transition, so both legs lowering in
    the same frame count twice.
    """

    def __init__(
        self,
        definition: ExerciseDefinition,
        messages: Optional[CoachMessages] = None,
        visibility_threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
        state: Optional[KneeRaiseState] = None,
    ):
        self.definition = definition
        self.messages = messages or ENGLISH_MESSAGES
        self.visibility_threshold = visibility_threshold
        self.state = _checked_state(definition, state, KneeRaiseState)

    @property
    def required_landmarks(self):
        return self.definition.required_landmarks

    def get_state(self) -> KneeRaiseState:
        return self.state

    def reset(self):
        self.state = initial_state(self.definition, KneeRaiseState)

    def analyze(self, frame: Frame, timestamp_ms: Optional[float] = None) -> AnalysisResult:
        return analyze_frame(self, frame)

    def measure(self, frame: Frame) -> Dict[str, float]:
        return {
            "left_hip": calculate_angle(
                _point(frame, JointType.LEFT_SHOULDER),
                _point(frame, JointType.LEFT_HIP),
                _point(frame, JointType.LEFT_KNEE),
            ),
            "right_hip": calculate_angle(
                _point(frame, JointType.RIGHT_SHOULDER),
                _point(frame, JointType.RIGHT_HIP),
                _point(frame, JointType.RIGHT_KNEE),
            ),
        }

    def _next_leg_stage(self, current: str, angle: float) -> str:
        if angle < self.definition.threshold("up_angle"):
            return "up"
        if angle > self.definition.threshold("down_angle"):
            return "down"
        return current

    def advance(self, angles: Dict[str, float]) -> int:
        state = self.state
        completed = 0

        left = self._next_leg_stage(state.left_leg_stage, angles["left_hip"])
        if state.left_leg_stage == "up" and left == "down":
            completed += 1
        state.left_leg_stage = left

        right = self._next_leg_stage(state.right_leg_stage, angles["right_hip"])
        if state.right_leg_stage == "up" and right == "down":
            completed += 1
        state.right_leg_stage = right

        state.set_stage("up" if "up" in (left, right) else "down")
        return completed

    def evaluate_form(self, frame: Frame) -> FormFeedback:
        if not is_frame_visible(frame, self.required_landmarks, self.visibility_threshold):
            return not_visible_feedback(self.messages.not_visible)
        return self.score_form(frame, self.measure(frame))

    def score_form(self, frame: Frame, angles: Dict[str, float]) -> FormFeedback:
        check = FormCheck()
        rules = self.messages.form[self.definition.id]

        shoulder_mid = calculate_midpoint(
            _point(frame, JointType.LEFT_SHOULDER), _point(frame, JointType.RIGHT_SHOULDER)
        )
        hip_mid = calculate_midpoint(_point(frame, JointType.LEFT_HIP), _point(frame, JointType.RIGHT_HIP))
        if abs(shoulder_mid.x - hip_mid.x) > self.definition.threshold("lean_threshold"):
            check.penalize(LEAN_PENALTY, rules["leaning"])

        if self.state.stage == "up":
            # Knee-below-hip gap of the best raised leg (image y grows downward)
            raised = []
            if self.state.left_leg_stage == "up":
                raised.append((JointType.LEFT_KNEE, JointType.LEFT_HIP))
            if self.state.right_leg_stage == "up":
                raised.append((JointType.RIGHT_KNEE, JointType.RIGHT_HIP))
            lift_gap = min((_point(frame, knee).y - _point(frame, hip).y for knee, hip in raised), default=0.0)
            if lift_gap > self.definition.threshold("knee_lift_ratio"):
                check.penalize(KNEE_LIFT_PENALTY, rules["knee_low"])

        return grade_form(check, self.state)


# ═══════════════════════════════════════════════════════════════════════════════
# SQUAT WITH ARM RAISE
# ═══════════════════════════════════════════════════════════════════════════════

class SquatArmRaiseAnalyzer:
    """Squat with arms held overhead; a rep is one down -> up traversal of the knees."""

    def __init__(
        self,
        definition: ExerciseDefinition,
        messages: Optional[CoachMessages] = None,
        visibility_threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
        state: Optional[AnalyzerState] = None,
    ):
        self.definition = definition
        self.messages = messages or ENGLISH_MESSAGES
        self.visibility_threshold = visibility_threshold
        self.state = _checked_state(definition, state, AnalyzerState)

    @property
    def required_landmarks(self):
        return self.definition.required_landmarks

    def get_state(self) -> AnalyzerState:
        return self.state

    def reset(self):
        self.state = initial_state(self.definition, AnalyzerState)

    def analyze(self, frame: Frame, timestamp_ms: Optional[float] = None) -> AnalysisResult:
        return analyze_frame(self, frame)

    def measure(self, frame: Frame) -> Dict[str, float]:
        left_knee = calculate_angle(
            _point(frame, JointType.LEFT_HIP),
            _point(frame, JointType.LEFT_KNEE),
            _point(frame, JointType.LEFT_ANKLE),
        )
        right_knee = calculate_angle(
            _point(frame, JointType.RIGHT_HIP),
            _point(frame, JointType.RIGHT_KNEE),
            _point(frame, JointType.RIGHT_ANKLE),
        )
        left_arm = calculate_angle(
            _point(frame, JointType.LEFT_HIP),
            _point(frame, JointType.LEFT_SHOULDER),
            _point(frame, JointType.LEFT_ELBOW),
        )
        right_arm = calculate_angle(
            _point(frame, JointType.RIGHT_HIP),
            _point(frame, JointType.RIGHT_SHOULDER),
            _point(frame, JointType.RIGHT_ELBOW),
        )
        return {
            "left_knee": left_knee,
            "right_knee": right_knee,
            "average_knee": (left_knee + right_knee) / 2,
            "average_arm": (left_arm + right_arm) / 2,
        }

    def advance(self, angles: Dict[str, float]) -> int:
        state = self.state
        knee = angles["average_knee"]

        if knee <= self.definition.threshold("knee_down_angle"):
            stage = "down"
        elif knee >= self.definition.threshold("knee_up_angle"):
            stage = "up"
        else:
            stage = state.stage

        completed = 1 if state.stage == "down" and stage == "up" else 0
        state.set_stage(stage)
        return completed

    def evaluate_form(self, frame: Frame) -> FormFeedback:
        if not is_frame_visible(frame, self.required_landmarks, self.visibility_threshold):
            return not_visible_feedback(self.messages.not_visible)
        return self.score_form(frame, self.measure(frame))

    def score_form(self, frame: Frame, angles: Dict[str, float]) -> FormFeedback:
        check = FormCheck()
        rules = self.messages.form[self.definition.id]

        if self.state.stage == "down" and angles["average_arm"] < self.definition.threshold("arm_up_angle"):
            check.penalize(ARMS_LOW_PENALTY, rules["arms_low"])

        if abs(angles["left_knee"] - angles["right_knee"]) > self.definition.threshold("knee_symmetry_diff"):
            check.penalize(KNEE_SYMMETRY_PENALTY, rules["knee_uneven"])

        return grade_form(check, self.state)


# ═══════════════════════════════════════════════════════════════════════════════
# PUSH-UP
# ═══════════════════════════════════════════════════════════════════════════════

class PushUpAnalyzer:
    """
    Side-view push-up.

    The stage follows the shoulder-elbow-wrist angle averaged over both arms;
    a rep is one down -> up press. Form checks the shoulder-hip-ankle line.
    """

    def __init__(
        self,
        definition: ExerciseDefinition,
        messages: Optional[CoachMessages] = None,
        visibility_threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
        state: Optional[AnalyzerState] = None,
    ):
        self.definition = definition
        self.messages = messages or ENGLISH_MESSAGES
        self.visibility_threshold = visibility_threshold
        self.state = _checked_state(definition, state, AnalyzerState)

    @property
    def required_landmarks(self):
        return self.definition.required_landmarks

    def get_state(self) -> AnalyzerState:
        return self.state

    def reset(self):
        self.state = initial_state(self.definition, AnalyzerState)

    def analyze(self, frame: Frame, timestamp_ms: Optional[float] = None) -> AnalysisResult:
        return analyze_frame(self, frame)

    def measure(self, frame: Frame) -> Dict[str, float]:
        left_elbow = calculate_angle(
            _point(frame, JointType.LEFT_SHOULDER),
            _point(frame, JointType.LEFT_ELBOW),
            _point(frame, JointType.LEFT_WRIST),
        )
        right_elbow = calculate_angle(
            _point(frame, JointType.RIGHT_SHOULDER),
            _point(frame, JointType.RIGHT_ELBOW),
            _point(frame, JointType.RIGHT_WRIST),
        )
        return {
            "left_elbow": left_elbow,
            "right_elbow": right_elbow,
            "average_elbow": (left_elbow + right_elbow) / 2,
            "body_angle": calculate_angle(*_body_line(frame)),
        }

    def advance(self, angles: Dict[str, float]) -> int:
        state = self.state
        elbow = angles["average_elbow"]

        if elbow < self.definition.threshold("elbow_down_angle"):
            stage = "down"
        elif elbow > self.definition.threshold("elbow_up_angle"):
            stage = "up"
        else:
            stage = state.stage

        completed = 1 if state.stage == "down" and stage == "up" else 0
        state.set_stage(stage)
        return completed

    def evaluate_form(self, frame: Frame) -> FormFeedback:
        if not is_frame_visible(frame, self.required_landmarks, self.visibility_threshold):
            return not_visible_feedback(self.messages.not_visible)
        return self.score_form(frame, self.measure(frame))

    def score_form(self, frame: Frame, angles: Dict[str, float]) -> FormFeedback:
        check = FormCheck()
        rules = self.messages.form[self.definition.id]

        if 180.0 - angles["body_angle"] > self.definition.threshold("body_alignment"):
            check.penalize(BODY_LINE_PENALTY, rules[body_line_rule(frame)])

        return grade_form(check, self.state)


# ═══════════════════════════════════════════════════════════════════════════════
# STATIC LUNGE (TIMED)
# ═══════════════════════════════════════════════════════════════════════════════

class StaticLungeAnalyzer:
    """
    Lunge held in place.

    The user is holding while either hip-knee-ankle angle sits inside
    front_knee_angle +/- knee_tolerance (inclusive); when both legs qualify the
    more bent one is the front leg. Every hold_rep_seconds of accumulated hold
    counts as one rep.
    """

    def __init__(
        self,
        definition: ExerciseDefinition,
        messages: Optional[CoachMessages] = None,
        visibility_threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
        state: Optional[StaticLungeState] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.definition = definition
        self.messages = messages or ENGLISH_MESSAGES
        self.visibility_threshold = visibility_threshold
        self.state = _checked_state(definition, state, StaticLungeState)
        self.clock = clock or _wall_clock_ms
        self.now_ms = 0.0

    @property
    def required_landmarks(self):
        return self.definition.required_landmarks

    def get_state(self) -> StaticLungeState:
        return self.state

    def reset(self):
        self.state = initial_state(self.definition, StaticLungeState)

    def analyze(self, frame: Frame, timestamp_ms: Optional[float] = None) -> AnalysisResult:
        return analyze_timed_frame(self, frame, timestamp_ms)

    def measure(self, frame: Frame) -> Dict[str, float]:
        return {
            "left_knee": calculate_angle(
                _point(frame, JointType.LEFT_HIP),
                _point(frame, JointType.LEFT_KNEE),
                _point(frame, JointType.LEFT_ANKLE),
            ),
            "right_knee": calculate_angle(
                _point(frame, JointType.RIGHT_HIP),
                _point(frame, JointType.RIGHT_KNEE),
                _point(frame, JointType.RIGHT_ANKLE),
            ),
        }

    def front_leg(self, angles: Dict[str, float]) -> Optional[str]:
        target = self.definition.threshold("front_knee_angle")
        tolerance = self.definition.threshold("knee_tolerance")
        left, right = angles["left_knee"], angles["right_knee"]
        left_ok = target - tolerance <= left <= target + tolerance
        right_ok = target - tolerance <= right <= target + tolerance

        if left_ok and right_ok:
            return "left" if left < right else "right"
        if left_ok:
            return "left"
        if right_ok:
            return "right"
        return None

    def advance(self, angles: Dict[str, float]) -> int:
        state = self.state
        state.active_leg = self.front_leg(angles)

        if state.active_leg is None:
            state.stop_hold(self.now_ms)
            state.set_stage("idle")
        else:
            state.start_hold(self.now_ms)
            state.set_stage("hold")

        return earned_hold_reps(self.definition, state, self.now_ms)

    def evaluate_form(self, frame: Frame) -> FormFeedback:
        if not is_frame_visible(frame, self.required_landmarks, self.visibility_threshold):
            return not_visible_feedback(self.messages.not_visible)
        return self.score_form(frame, self.measure(frame))

    def score_form(self, frame: Frame, angles: Dict[str, float]) -> FormFeedback:
        check = FormCheck()
        rules = self.messages.form[self.definition.id]

        if self.front_leg(angles) is None:
            check.penalize(LUNGE_POSITION_PENALTY, rules["not_in_position"])

        return grade_form(check, self.state)


# ═══════════════════════════════════════════════════════════════════════════════
# PLANK HOLD (TIMED)
# ═══════════════════════════════════════════════════════════════════════════════

class PlankHoldAnalyzer:
    """
    Side-view plank held with a straight body.

    The shoulder-hip-ankle angle is averaged over the last few frames. The hold
    runs while its deviation from 180 degrees stays under body_alignment_max,
    relaxed by hold_hysteresis once holding. Every hold_rep_seconds of
    accumulated hold counts as one rep.
    """

    def __init__(
        self,
        definition: ExerciseDefinition,
        messages: Optional[CoachMessages] = None,
        visibility_threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
        state: Optional[PlankHoldState] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.definition = definition
        self.messages = messages or ENGLISH_MESSAGES
        self.visibility_threshold = visibility_threshold
        self.state = _checked_state(definition, state, PlankHoldState)
        self.clock = clock or _wall_clock_ms
        self.now_ms = 0.0

    @property
    def required_landmarks(self):
        return self.definition.required_landmarks

    def get_state(self) -> PlankHoldState:
        return self.state

    def reset(self):
        self.state = initial_state(self.definition, PlankHoldState)

    def analyze(self, frame: Frame, timestamp_ms: Optional[float] = None) -> AnalysisResult:
        return analyze_timed_frame(self, frame, timestamp_ms)

    def measure(self, frame: Frame) -> Dict[str, float]:
        return {"body_angle": calculate_angle(*_body_line(frame))}

    def advance(self, angles: Dict[str, float]) -> int:
        state = self.state
        state.body_angles.append(angles["body_angle"])
        smoothed = sum(state.body_angles) / len(state.body_angles)
        angles["smoothed_body_angle"] = smoothed
        angles["body_deviation"] = 180.0 - smoothed

        limit = self.definition.threshold("body_alignment_max")
        if state.holding:
            limit += self.definition.threshold("hold_hysteresis")

        if angles["body_deviation"] < limit:
            state.start_hold(self.now_ms)
            state.set_stage("hold")
        else:
            state.stop_hold(self.now_ms)
            state.set_stage("idle")

        return earned_hold_reps(self.definition, state, self.now_ms)

    def evaluate_form(self, frame: Frame) -> FormFeedback:
        if not is_frame_visible(frame, self.required_landmarks, self.visibility_threshold):
            return not_visible_feedback(self.messages.not_visible)
        return self.score_form(frame, self.measure(frame))

    def score_form(self, frame: Frame, angles: Dict[str, float]) -> FormFeedback:
        check = FormCheck()
        rules = self.messages.form[self.definition.id]

        deviation = angles.get("body_deviation", 180.0 - angles["body_angle"])
        if deviation > self.definition.threshold("body_alignment_max"):
            check.penalize(PLANK_LINE_PENALTY, rules[body_line_rule(frame)])

        return grade_form(check, self.state)


# ═══════════════════════════════════════════════════════════════════════════════
# FACTORY
# ═══════════════════════════════════════════════════════════════════════════════

ANALYZER_VARIANTS: Mapping[ExerciseType, type] = {
    ExerciseType.ARM_RAISE: ArmRaiseAnalyzer,
    ExerciseType.TORSO_TWIST: TorsoTwistAnalyzer,
    ExerciseType.KNEE_RAISE: KneeRaiseAnalyzer,
    ExerciseType.HIGH_KNEE_RAISE: KneeRaiseAnalyzer,
    ExerciseType.SQUAT_ARM_RAISE: SquatArmRaiseAnalyzer,
    ExerciseType.PUSH_UP: PushUpAnalyzer,
    ExerciseType.STATIC_LUNGE: StaticLungeAnalyzer,
    ExerciseType.PLANK_HOLD: PlankHoldAnalyzer,
}


def create_exercise_analyzer(
    exercise_type: Union[ExerciseType, str],
    messages: Optional[CoachMessages] = None,
    visibility_threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
    state: Optional[AnalyzerState] = None,
    clock: Optional[Callable[[], float]] = None,
) -> ExerciseAnalyzer:
    """
    Build the analyzer variant for an exercise key.

    Timed variants read `clock` (ms) for frames analyzed without a timestamp.

    Raises:
        ValueError: unknown exercise key, or a state built for another exercise
    """
    exercise = parse_exercise_type(exercise_type)
    definition = get_exercise_definition(exercise)
    variant = ANALYZER_VARIANTS[exercise]
    extra = {"clock": clock} if definition.timed else {}
    return variant(
        definition,
        messages=messages,
        visibility_threshold=visibility_threshold,
        state=state,
        **extra,
    )
