"""
MOTIONCOACH Motion Service - Exercise Catalog

Static, read-only exercise configuration: stage vocabularies, thresholds,
difficulty levels, target poses for corrective guidance, and the localized
coaching message tables. Everything here is built once at import and never mutated.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple, Union
from enum import Enum

from .geometry import JointType, Landmark


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════════

class ExerciseType(Enum):
    """Supported exercise types."""
    ARM_RAISE = "arm_raise"
    TORSO_TWIST = "torso_twist"
    KNEE_RAISE = "knee_raise"
    HIGH_KNEE_RAISE = "high_knee_raise"
    SQUAT_ARM_RAISE = "squat_arm_raise"
    PUSH_UP = "push_up"
    STATIC_LUNGE = "static_lunge"
    PLANK_HOLD = "plank_hold"


class CameraView(Enum):
    """Camera orientation the exercise expects."""
    FRONT = "front"
    SIDE = "side"


class DifficultyLevel(Enum):
    """Tempo difficulty presets."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


# ═══════════════════════════════════════════════════════════════════════════════
# EXERCISE DEFINITIONS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ExerciseDefinition:
    """Immutable per-exercise configuration."""
    exercise_type: ExerciseType
    name: str
    name_th: str
    description: str
    camera_view: CameraView
    stages: Tuple[str, ...]
    initial_stage: str
    required_landmarks: Tuple[JointType, ...]
    thresholds: Mapping[str, float] = field(default_factory=lambda: _frozen({}))
    # Reps come from accumulated hold time instead of stage traversals
    timed: bool = False

    @property
    def id(self) -> str:
        return self.exercise_type.value

    def threshold(self, key: str) -> float:
        return self.thresholds[key]

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "name_th": self.name_th,
            "description": self.description,
            "camera_view": self.camera_view.value,
            "stages": list(self.stages),
            "initial_stage": self.initial_stage,
            "required_landmarks": [j.joint_name for j in self.required_landmarks],
            "thresholds": dict(self.thresholds),
            "timed": self.timed,
        }


_UPPER_BODY = (
    JointType.LEFT_SHOULDER, JointType.RIGHT_SHOULDER,
    JointType.LEFT_ELBOW, JointType.RIGHT_ELBOW,
    JointType.LEFT_HIP, JointType.RIGHT_HIP,
)

_TORSO = (
    JointType.LEFT_SHOULDER, JointType.RIGHT_SHOULDER,
    JointType.LEFT_HIP, JointType.RIGHT_HIP,
)

_HIPS_AND_KNEES = _TORSO + (JointType.LEFT_KNEE, JointType.RIGHT_KNEE)


EXERCISES: Mapping[ExerciseType, ExerciseDefinition] = _frozen({
    ExerciseType.ARM_RAISE: ExerciseDefinition(
        exercise_type=ExerciseType.ARM_RAISE,
        name="Arm Raise",
        name_th="ยกแขนขึ้น-ลง",
        description="Raise both arms up and down",
        camera_view=CameraView.FRONT,
        stages=("idle", "up", "down"),
        initial_stage="idle",
        required_landmarks=_UPPER_BODY,
        thresholds=_frozen({
            "up_angle": 150.0,
            "down_angle": 50.0,
            "symmetry_diff": 40.0,
            "shoulder_level_diff": 0.05,
        }),
    ),
    ExerciseType.TORSO_TWIST: ExerciseDefinition(
        exercise_type=ExerciseType.TORSO_TWIST,
        name="Torso Twist",
        name_th="บิดลำตัวซ้าย-ขวา",
        description="Twist torso left and right",
        camera_view=CameraView.FRONT,
        stages=("center", "left", "right"),
        initial_stage="center",
        required_landmarks=_TORSO,
        thresholds=_frozen({
            "twist_threshold": 0.12,
            "min_hip_width": 0.08,
            "shoulder_level_diff": 0.05,
        }),
    ),
    ExerciseType.KNEE_RAISE: ExerciseDefinition(
        exercise_type=ExerciseType.KNEE_RAISE,
        name="Knee Raise",
        name_th="ยกเข่าสลับ",
        description="Alternate knee raises",
        camera_view=CameraView.FRONT,
        stages=("idle", "up", "down"),
        initial_stage="idle",
        required_landmarks=_HIPS_AND_KNEES,
        thresholds=_frozen({
            "up_angle": 80.0,
            "down_angle": 160.0,
            "lean_threshold": 0.08,
            "knee_lift_ratio": 0.05,
        }),
    ),
    ExerciseType.HIGH_KNEE_RAISE: ExerciseDefinition(
        exercise_type=ExerciseType.HIGH_KNEE_RAISE,
        name="High Knee Raise",
        name_th="ยกเข่าสูงในท่ายืน",
        description="Raise knee above waist level while standing",
        camera_view=CameraView.FRONT,
        stages=("idle", "up", "down"),
        initial_stage="idle",
        required_landmarks=_HIPS_AND_KNEES,
        thresholds=_frozen({
            "up_angle": 70.0,
            "down_angle": 160.0,
            "lean_threshold": 0.08,
            "knee_lift_ratio": 0.0,
        }),
    ),
    ExerciseType.SQUAT_ARM_RAISE: ExerciseDefinition(
        exercise_type=ExerciseType.SQUAT_ARM_RAISE,
        name="Squat with Arm Raise",
        name_th="สควอตพร้อมยกแขนเหนือศีรษะ",
        description="Perform a squat while raising arms overhead",
        camera_view=CameraView.FRONT,
        stages=("idle", "down", "up"),
        initial_stage="idle",
        required_landmarks=_UPPER_BODY + (
            JointType.LEFT_KNEE, JointType.RIGHT_KNEE,
            JointType.LEFT_ANKLE, JointType.RIGHT_ANKLE,
        ),
        thresholds=_frozen({
            "knee_down_angle": 110.0,
            "knee_up_angle": 160.0,
            "arm_up_angle": 120.0,
            "knee_symmetry_diff": 25.0,
        }),
    ),
    ExerciseType.PUSH_UP: ExerciseDefinition(
        exercise_type=ExerciseType.PUSH_UP,
        name="Push-up",
        name_th="วิดพื้น",
        description="Full push-up with a straight body line",
        camera_view=CameraView.SIDE,
        stages=("idle", "up", "down"),
        initial_stage="idle",
        required_landmarks=_UPPER_BODY + (
            JointType.LEFT_WRIST, JointType.RIGHT_WRIST,
            JointType.LEFT_ANKLE, JointType.RIGHT_ANKLE,
        ),
        thresholds=_frozen({
            "elbow_down_angle": 90.0,
            "elbow_up_angle": 160.0,
            "body_alignment": 15.0,
        }),
    ),
    ExerciseType.STATIC_LUNGE: ExerciseDefinition(
        exercise_type=ExerciseType.STATIC_LUNGE,
        name="Static Lunge",
        name_th="ลันจ์อยู่กับที่",
        description="Hold a lunge with the front knee bent",
        camera_view=CameraView.SIDE,
        stages=("idle", "hold"),
        initial_stage="idle",
        required_landmarks=(
            JointType.LEFT_HIP, JointType.RIGHT_HIP,
            JointType.LEFT_KNEE, JointType.RIGHT_KNEE,
            JointType.LEFT_ANKLE, JointType.RIGHT_ANKLE,
        ),
        thresholds=_frozen({
            "front_knee_angle": 130.0,
            "knee_tolerance": 30.0,
            "hold_rep_seconds": 5.0,
        }),
        timed=True,
    ),
    ExerciseType.PLANK_HOLD: ExerciseDefinition(
        exercise_type=ExerciseType.PLANK_HOLD,
        name="Plank Hold",
        name_th="ท่าแพลงค์",
        description="Hold a plank with shoulders, hips and ankles in line",
        camera_view=CameraView.SIDE,
        stages=("idle", "hold"),
        initial_stage="idle",
        required_landmarks=_TORSO + (JointType.LEFT_ANKLE, JointType.RIGHT_ANKLE),
        thresholds=_frozen({
            "body_alignment_max": 10.0,
            "hold_hysteresis": 5.0,
            "hold_rep_seconds": 5.0,
        }),
        timed=True,
    ),
})

# Default workout sequence
EXERCISE_ORDER: Tuple[ExerciseType, ...] = (
    ExerciseType.ARM_RAISE,
    ExerciseType.TORSO_TWIST,
    ExerciseType.KNEE_RAISE,
)


def parse_exercise_type(exercise: Union[ExerciseType, str]) -> ExerciseType:
    """Resolve an exercise key; raises ValueError for unknown keys."""
    if isinstance(exercise, ExerciseType):
        return exercise
    try:
        return ExerciseType(exercise)
    except ValueError:
        raise ValueError(
            f"Unknown exercise type '{exercise}'. Valid types: {[e.value for e in ExerciseType]}"
        )


def get_exercise_definition(exercise: Union[ExerciseType, str]) -> ExerciseDefinition:
    """Look up the static definition for an exercise key."""
    return EXERCISES[parse_exercise_type(exercise)]


# ═══════════════════════════════════════════════════════════════════════════════
# DIFFICULTY LEVELS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DifficultySettings:
    """Per-level pacing and target settings."""
    level: DifficultyLevel
    duration_seconds: int
    min_reps: int
    up_duration: float
    down_duration: float
    form_strictness: float
    rest_seconds: int

    @property
    def tempo(self) -> str:
        return format_tempo(self.up_duration, self.down_duration)

    def to_dict(self) -> Dict:
        return {
            "level": self.level.value,
            "duration_seconds": self.duration_seconds,
            "min_reps": self.min_reps,
            "tempo": self.tempo,
            "up_duration": self.up_duration,
            "down_duration": self.down_duration,
            "form_strictness": self.form_strictness,
            "rest_seconds": self.rest_seconds,
        }


def format_tempo(up_duration: float, down_duration: float) -> str:
    """Render an "up-down" cadence such as "2-2" or "1.5-1.5"."""
    return f"{up_duration:g}-{down_duration:g}"


DIFFICULTY_LEVELS: Mapping[DifficultyLevel, DifficultySettings] = _frozen({
    DifficultyLevel.BEGINNER: DifficultySettings(
        DifficultyLevel.BEGINNER, duration_seconds=30, min_reps=5,
        up_duration=3.0, down_duration=3.0, form_strictness=0.6, rest_seconds=15,
    ),
    DifficultyLevel.INTERMEDIATE: DifficultySettings(
        DifficultyLevel.INTERMEDIATE, duration_seconds=45, min_reps=10,
        up_duration=2.0, down_duration=2.0, form_strictness=0.75, rest_seconds=10,
    ),
    DifficultyLevel.ADVANCED: DifficultySettings(
        DifficultyLevel.ADVANCED, duration_seconds=60, min_reps=15,
        up_duration=1.5, down_duration=1.5, form_strictness=0.85, rest_seconds=5,
    ),
    DifficultyLevel.EXPERT: DifficultySettings(
        DifficultyLevel.EXPERT, duration_seconds=90, min_reps=20,
        up_duration=1.0, down_duration=1.0, form_strictness=0.95, rest_seconds=0,
    ),
})


def get_difficulty_settings(level: Union[DifficultyLevel, str]) -> DifficultySettings:
    """Look up a difficulty preset; raises ValueError for unknown levels."""
    if not isinstance(level, DifficultyLevel):
        try:
            level = DifficultyLevel(level)
        except ValueError:
            raise ValueError(
                f"Unknown difficulty level '{level}'. Valid levels: {[d.value for d in DifficultyLevel]}"
            )
    return DIFFICULTY_LEVELS[level]


# ═══════════════════════════════════════════════════════════════════════════════
# ANALYZER TUNING
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TempoConfig:
    tolerance: float = 0.5
    beat_interval_ms: float = 500.0
    min_rep_duration: float = 1.0
    max_rep_duration: float = 10.0
    buffer_size: int = 10
    min_reps_to_evaluate: int = 2
    min_reps_for_consistency: int = 3
    too_fast_factor: float = 0.5
    too_slow_factor: float = 1.5
    inconsistent_below: float = 0.6
    perfect_consistency: float = 0.85
    unbalanced_up_ratio: float = 1.5
    unbalanced_down_ratio: float = 0.67
    feedback_every_reps: int = 5


@dataclass(frozen=True)
class MotionConfig:
    history_size: int = 30
    window_size: int = 10
    min_samples: int = 5
    moving_velocity: float = 0.01
    too_fast_velocity: float = 0.3
    too_slow_velocity: float = 0.02
    jerky_variance: float = 0.05
    feedback_interval_ms: float = 3000.0
    praise_probability: float = 0.15


@dataclass(frozen=True)
class CorrectionConfig:
    min_visibility: float = 0.5
    direction_threshold: float = 0.03
    warn_distance: float = 0.05
    error_distance: float = 0.08


TEMPO_CONFIG = TempoConfig()
MOTION_CONFIG = MotionConfig()
CORRECTION_CONFIG = CorrectionConfig()


# ═══════════════════════════════════════════════════════════════════════════════
# TARGET POSES
# ═══════════════════════════════════════════════════════════════════════════════

TargetPose = Mapping[JointType, Landmark]


def _pose(**joints: Tuple[float, float]) -> TargetPose:
    return _frozen({
        JointType[name.upper()]: Landmark(x=x, y=y)
        for name, (x, y) in joints.items()
    })


_KNEE_DOWN = _pose(
    left_hip=(0.55, 0.55), left_knee=(0.55, 0.75), left_ankle=(0.55, 0.95),
    right_hip=(0.45, 0.55), right_knee=(0.45, 0.75), right_ankle=(0.45, 0.95),
)

TARGET_POSES: Mapping[ExerciseType, Mapping[str, TargetPose]] = _frozen({
    ExerciseType.ARM_RAISE: _frozen({
        "up": _pose(
            left_shoulder=(0.6, 0.35), right_shoulder=(0.4, 0.35),
            left_elbow=(0.7, 0.2), right_elbow=(0.3, 0.2),
            left_wrist=(0.75, 0.1), right_wrist=(0.25, 0.1),
        ),
        "down": _pose(
            left_shoulder=(0.6, 0.35), right_shoulder=(0.4, 0.35),
            left_elbow=(0.65, 0.5), right_elbow=(0.35, 0.5),
            left_wrist=(0.68, 0.65), right_wrist=(0.32, 0.65),
        ),
    }),
    ExerciseType.TORSO_TWIST: _frozen({
        "center": _pose(left_shoulder=(0.6, 0.35), right_shoulder=(0.4, 0.35)),
        "left": _pose(left_shoulder=(0.55, 0.35), right_shoulder=(0.35, 0.38)),
        "right": _pose(left_shoulder=(0.65, 0.38), right_shoulder=(0.45, 0.35)),
    }),
    ExerciseType.KNEE_RAISE: _frozen({
        "up": _pose(
            left_hip=(0.55, 0.55), left_knee=(0.55, 0.45), left_ankle=(0.52, 0.55),
            right_hip=(0.45, 0.55), right_knee=(0.45, 0.75), right_ankle=(0.45, 0.95),
        ),
        "down": _KNEE_DOWN,
    }),
    ExerciseType.HIGH_KNEE_RAISE: _frozen({
        "up": _pose(
            left_hip=(0.55, 0.55), left_knee=(0.55, 0.4), left_ankle=(0.52, 0.55),
            right_hip=(0.45, 0.55), right_knee=(0.45, 0.75), right_ankle=(0.45, 0.95),
        ),
        "down": _KNEE_DOWN,
    }),
    ExerciseType.SQUAT_ARM_RAISE: _frozen({
        "down": _pose(
            left_hip=(0.55, 0.65), left_knee=(0.55, 0.8), left_ankle=(0.55, 0.95),
            right_hip=(0.45, 0.65), right_knee=(0.45, 0.8), right_ankle=(0.45, 0.95),
            left_shoulder=(0.6, 0.4), right_shoulder=(0.4, 0.4),
            left_wrist=(0.7, 0.25), right_wrist=(0.3, 0.25),
        ),
        "up": _pose(
            left_hip=(0.55, 0.55), left_knee=(0.55, 0.75), left_ankle=(0.55, 0.95),
            right_hip=(0.45, 0.55), right_knee=(0.45, 0.75), right_ankle=(0.45, 0.95),
            left_shoulder=(0.6, 0.35), right_shoulder=(0.4, 0.35),
            left_wrist=(0.75, 0.08), right_wrist=(0.25, 0.08),
        ),
    }),
    # Side view, head toward -x; both sides overlap
    ExerciseType.PUSH_UP: _frozen({
        "up": _pose(
            left_shoulder=(0.35, 0.5), right_shoulder=(0.35, 0.5),
            left_elbow=(0.35, 0.6), right_elbow=(0.35, 0.6),
            left_wrist=(0.35, 0.7), right_wrist=(0.35, 0.7),
            left_hip=(0.6, 0.55), right_hip=(0.6, 0.55),
        ),
        "down": _pose(
            left_shoulder=(0.35, 0.62), right_shoulder=(0.35, 0.62),
            left_elbow=(0.42, 0.62), right_elbow=(0.42, 0.62),
            left_wrist=(0.35, 0.7), right_wrist=(0.35, 0.7),
            left_hip=(0.6, 0.64), right_hip=(0.6, 0.64),
        ),
    }),
    ExerciseType.STATIC_LUNGE: _frozen({
        "hold": _pose(
            left_hip=(0.5, 0.55), left_knee=(0.62, 0.7), left_ankle=(0.62, 0.9),
            right_hip=(0.5, 0.55), right_knee=(0.42, 0.8), right_ankle=(0.32, 0.9),
        ),
    }),
    ExerciseType.PLANK_HOLD: _frozen({
        "hold": _pose(
            left_shoulder=(0.35, 0.55), right_shoulder=(0.35, 0.55),
            left_hip=(0.6, 0.58), right_hip=(0.6, 0.58),
            left_ankle=(0.85, 0.61), right_ankle=(0.85, 0.61),
        ),
    }),
})


def get_target_pose(exercise: ExerciseType, stage: str) -> Optional[TargetPose]:
    """Declared target joints for an exercise stage, or None."""
    return TARGET_POSES.get(exercise, {}).get(stage)


# ═══════════════════════════════════════════════════════════════════════════════
# COACHING MESSAGES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FormMessage:
    """Issue description plus corrective suggestion for one form rule."""
    issue: str
    suggestion: str


@dataclass(frozen=True)
class CoachMessages:
    """One locale's coaching strings. Templates use str.format with {count}."""
    locale: str
    welcome: str
    start_exercise: Mapping[str, str]
    rep_count: str
    target_reached: str
    halfway: str
    almost_done: str
    exercise_complete: str
    session_complete: str
    good_form: Tuple[str, ...]
    warn_form: Tuple[str, ...]
    bad_form: Tuple[str, ...]
    tempo: Mapping[str, str]
    movement: Mapping[str, str]
    form: Mapping[str, Mapping[str, FormMessage]]
    not_visible: FormMessage
    beat_count: Tuple[str, ...]
    direction_hints: Mapping[str, str]

    def form_message(self, exercise_id: str, rule: str) -> FormMessage:
        return self.form[exercise_id][rule]


_KNEE_FORM_EN = _frozen({
    "leaning": FormMessage("torso leaning", "stand tall, don't lean"),
    "knee_low": FormMessage("knee not lifted high enough", "lift your knee higher"),
})

_BODY_LINE_FORM_EN = _frozen({
    "hips_sagging": FormMessage("hips sagging", "lift your hips in line with your body"),
    "hips_piked": FormMessage("hips too high", "lower your hips in line with your body"),
})

ENGLISH_MESSAGES = CoachMessages(
    locale="en",
    welcome="Hello! Let's get moving.",
    start_exercise=_frozen({
        "arm_raise": "Start the arm raise now!",
        "torso_twist": "Start the torso twist now!",
        "knee_raise": "Start the alternating knee raise now!",
        "high_knee_raise": "Start the standing high knee raise now!",
        "squat_arm_raise": "Start the squat with arm raise now!",
        "push_up": "Start the push-up now!",
        "static_lunge": "Step into a lunge and hold it!",
        "plank_hold": "Get into a plank and hold it!",
    }),
    rep_count="{count} reps done!",
    target_reached="Target reached: {count} reps! Great work!",
    halfway="Halfway there! Keep going!",
    almost_done="Almost done! Push through!",
    exercise_complete="Great job! You did {count} reps!",
    session_complete="Excellent! You finished every exercise!",
    good_form=(
        "Great job!",
        "Very good!",
        "Beautiful form!",
        "Well done!",
        "Excellent!",
        "Getting better every rep!",
    ),
    warn_form=(
        "Watch your form a little",
        "Try to extend fully",
        "Slow down a bit",
        "Adjust your form slightly",
    ),
    bad_form=(
        "Pause and reset your form",
        "Let's try that again",
        "Take a short break, then try again",
    ),
    tempo=_frozen({
        "too_fast": "Too fast! Slow down and count 1-2-3-4",
        "too_fast_mild": "Try going a little slower",
        "too_slow": "A bit slow, pick up the pace",
        "too_slow_mild": "Try going a little faster",
        "inconsistent": "Try to keep an even rhythm",
        "unbalanced_up": "Lower as slowly as you raise",
        "unbalanced_down": "Raise as slowly as you lower",
        "perfect": "Perfect tempo! Excellent!",
        "good": "Good rhythm, keep it up!",
    }),
    movement=_frozen({
        "too_fast": "Too fast! Control the movement",
        "too_slow": "Try moving a little faster",
        "jerky": "Try to move more smoothly",
        "smooth": "Very smooth movement!",
        "no_motion": "Start moving whenever you're ready!",
    }),
    form=_frozen({
        "arm_raise": _frozen({
            "asymmetric": FormMessage("arms asymmetric", "raise both arms evenly"),
            "shoulder_uneven": FormMessage("shoulders uneven", "keep your shoulders level"),
        }),
        "torso_twist": _frozen({
            "hip_moving": FormMessage("hips rotating", "lock hips, twist torso only"),
            "shoulder_drop": FormMessage("shoulders tilted", "keep shoulders parallel to the floor"),
        }),
        "knee_raise": _KNEE_FORM_EN,
        "high_knee_raise": _KNEE_FORM_EN,
        "squat_arm_raise": _frozen({
            "arms_low": FormMessage("arms not overhead", "raise your arms overhead"),
            "knee_uneven": FormMessage("knees bending unevenly", "bend both knees evenly"),
        }),
        "push_up": _BODY_LINE_FORM_EN,
        "static_lunge": _frozen({
            "not_in_position": FormMessage(
                "not in lunge position", "step one leg forward and bend the knee to about 90 degrees"
            ),
        }),
        "plank_hold": _BODY_LINE_FORM_EN,
    }),
    not_visible=FormMessage("body not fully visible", "please show full body"),
    beat_count=("one", "two", "three", "four"),
    direction_hints=_frozen({
        "left": "move left",
        "right": "move right",
        "up": "move up",
        "down": "move down",
    }),
)

_KNEE_FORM_TH = _frozen({
    "leaning": FormMessage("ลำตัวเอน", "ยืนตรงๆ อย่าเอนตัวครับ"),
    "knee_low": FormMessage("ยกเข่าไม่สูงพอ", "ยกเข่าให้สูงกว่านี้ครับ"),
})

_BODY_LINE_FORM_TH = _frozen({
    "hips_sagging": FormMessage("สะโพกตก", "ยกสะโพกขึ้นให้ตรงกับลำตัวครับ"),
    "hips_piked": FormMessage("สะโพกสูงเกินไป", "ลดสะโพกลงให้ตรงกับลำตัวครับ"),
})

THAI_MESSAGES = CoachMessages(
    locale="th",
    welcome="สวัสดีครับ! พร้อมออกกำลังกายกันเถอะ",
    start_exercise=_frozen({
        "arm_raise": "เริ่มท่ายกแขนขึ้น-ลง ได้เลยครับ!",
        "torso_twist": "เริ่มท่าบิดลำตัว ได้เลยครับ!",
        "knee_raise": "เริ่มท่ายกเข่าสลับ ได้เลยครับ!",
        "high_knee_raise": "เริ่มท่ายกเข่าสูงในท่ายืน ได้เลยครับ!",
        "squat_arm_raise": "เริ่มท่าสควอตพร้อมยกแขน ได้เลยครับ!",
        "push_up": "เริ่มท่าวิดพื้น ได้เลยครับ!",
        "static_lunge": "ก้าวขาเข้าท่าลันจ์แล้วค้างไว้ครับ!",
        "plank_hold": "เข้าท่าแพลงค์แล้วค้างไว้ครับ!",
    }),
    rep_count="ครบ {count} ครั้งแล้วครับ!",
    target_reached="ครบ {count} ครั้งแล้ว! เยี่ยมมาก!",
    halfway="ผ่านไปครึ่งทางแล้ว! สู้ๆ ครับ!",
    almost_done="เหลืออีกนิดเดียวครับ! สู้ๆ!",
    exercise_complete="เยี่ยมมาก! ทำได้ {count} ครั้งครับ!",
    session_complete="ยอดเยี่ยมครับ! ออกกำลังกายครบทุกท่าแล้ว!",
    good_form=(
        "เยี่ยมมากครับ!",
        "ดีมากครับ!",
        "ฟอร์มสวยมาก!",
        "เก่งมากครับ!",
        "ทำได้ดีมาก!",
        "ดีขึ้นเรื่อยๆ ครับ!",
    ),
    warn_form=(
        "ระวังฟอร์มนิดนึงนะครับ",
        "พยายามยืดให้เต็มที่ครับ",
        "ช้าลงหน่อยครับ",
        "ปรับฟอร์มอีกนิดครับ",
    ),
    bad_form=(
        "หยุดก่อนครับ ปรับฟอร์มใหม่",
        "ลองใหม่อีกครั้งครับ",
        "พักสักครู่แล้วลองใหม่นะครับ",
    ),
    tempo=_frozen({
        "too_fast": "เร็วเกินไป! ลดความเร็วลงครับ นับ 1-2-3-4",
        "too_fast_mild": "ลองช้าลงอีกนิดครับ",
        "too_slow": "ช้าไปครับ เพิ่มความเร็วหน่อย",
        "too_slow_mild": "ลองเร็วขึ้นอีกนิดครับ",
        "inconsistent": "พยายามทำให้จังหวะสม่ำเสมอครับ",
        "unbalanced_up": "ลองลดลงช้าๆ เท่ากับขึ้นครับ",
        "unbalanced_down": "ลองยกขึ้นช้าๆ เท่ากับลงครับ",
        "perfect": "จังหวะสมบูรณ์แบบ! เยี่ยมมาก!",
        "good": "จังหวะดีครับ ทำต่อไป!",
    }),
    movement=_frozen({
        "too_fast": "เร็วเกินไป! ลดความเร็วลงครับ ควบคุมการเคลื่อนไหว",
        "too_slow": "ลองเพิ่มความเร็วขึ้นอีกหน่อยครับ",
        "jerky": "พยายามเคลื่อนไหวให้ราบรื่นขึ้นครับ",
        "smooth": "การเคลื่อนไหวราบรื่นดีมาก!",
        "no_motion": "เริ่มเคลื่อนไหวได้เลยครับ สู้ๆ!",
    }),
    form=_frozen({
        "arm_raise": _frozen({
            "asymmetric": FormMessage("แขนสองข้างยกไม่เท่ากัน", "ยกแขนให้เท่ากันทั้งสองข้างครับ"),
            "shoulder_uneven": FormMessage("ไหล่ไม่เสมอกัน", "ระวังไหล่ให้เสมอกันครับ"),
        }),
        "torso_twist": _frozen({
            "hip_moving": FormMessage("สะโพกบิดตาม", "ล็อคสะโพกไว้ บิดแค่ลำตัวครับ"),
            "shoulder_drop": FormMessage("ไหล่เอียง", "ไหล่ให้ขนานพื้นครับ"),
        }),
        "knee_raise": _KNEE_FORM_TH,
        "high_knee_raise": _KNEE_FORM_TH,
        "squat_arm_raise": _frozen({
            "arms_low": FormMessage("แขนไม่อยู่เหนือศีรษะ", "ยกแขนขึ้นเหนือศีรษะครับ"),
            "knee_uneven": FormMessage("เข่าสองข้างย่อไม่เท่ากัน", "ย่อเข่าให้เท่ากันทั้งสองข้างครับ"),
        }),
        "push_up": _BODY_LINE_FORM_TH,
        "static_lunge": _frozen({
            "not_in_position": FormMessage("ยังไม่อยู่ในท่าลันจ์", "ก้าวขาไปข้างหน้า งอเข่าประมาณ 90 องศาแล้วค้างไว้ครับ"),
        }),
        "plank_hold": _BODY_LINE_FORM_TH,
    }),
    not_visible=FormMessage("มองไม่เห็นร่างกายทั้งหมด", "กรุณาถอยให้กล้องเห็นทั้งตัวครับ"),
    beat_count=("หนึ่ง", "สอง", "สาม", "สี่"),
    direction_hints=_frozen({
        "left": "ขยับซ้าย",
        "right": "ขยับขวา",
        "up": "ยกขึ้น",
        "down": "ลดลง",
    }),
)

COACH_MESSAGES: Mapping[str, CoachMessages] = _frozen({
    ENGLISH_MESSAGES.locale: ENGLISH_MESSAGES,
    THAI_MESSAGES.locale: THAI_MESSAGES,
})


def get_coach_messages(locale: str = "en") -> CoachMessages:
    """Message table for a locale; raises ValueError for unknown locales."""
    messages = COACH_MESSAGES.get(locale)
    if messages is None:
        raise ValueError(f"Unknown message locale '{locale}'. Valid locales: {list(COACH_MESSAGES)}")
    return messages
