"""
MOTIONCOACH Motion Service Models

Deterministic landmark-based exercise analysis: stage detection, rep counting,
form scoring, tempo tracking, motion quality, and pose corrections.
"""

from .geometry import (
    JointType,
    Landmark,
    Frame,
    calculate_angle,
    calculate_distance,
    calculate_midpoint,
    get_landmark,
)

from .exercise_catalog import (
    ExerciseType,
    ExerciseDefinition,
    CameraView,
    DifficultyLevel,
    DifficultySettings,
    CoachMessages,
    FormMessage,
    EXERCISES,
    EXERCISE_ORDER,
    DIFFICULTY_LEVELS,
    TARGET_POSES,
    get_exercise_definition,
    get_difficulty_settings,
    get_coach_messages,
    get_target_pose,
)

from .form_evaluator import (
    FormQuality,
    FormFeedback,
    FormCheck,
    classify_score,
)

from .exercise_analyzers import (
    AnalyzerState,
    ArmRaiseState,
    TorsoTwistState,
    KneeRaiseState,
    HoldState,
    StaticLungeState,
    PlankHoldState,
    AnalysisResult,
    ExerciseAnalyzer,
    ArmRaiseAnalyzer,
    TorsoTwistAnalyzer,
    KneeRaiseAnalyzer,
    SquatArmRaiseAnalyzer,
    PushUpAnalyzer,
    StaticLungeAnalyzer,
    PlankHoldAnalyzer,
    create_exercise_analyzer,
)

from .tempo_analyzer import (
    TempoAnalyzer,
    TempoPhase,
    TempoQuality,
    TempoSnapshot,
    TempoState,
    RepTiming,
)

from .motion_analyzer import (
    MotionAnalyzer,
    MotionSnapshot,
    MotionSpeed,
    MotionSmoothness,
)

from .corrections import (
    JointCorrection,
    calculate_corrections,
    get_target_stage,
    describe_direction,
)

from .exercise_session import (
    ExerciseSession,
    ExerciseSessionHandler,
    SessionState,
    CoachEvent,
    CoachEventType,
    get_session_handler,
)

__all__ = [
    # Geometry
    "JointType",
    "Landmark",
    "Frame",
    "calculate_angle",
    "calculate_distance",
    "calculate_midpoint",
    "get_landmark",
    # Catalog
    "ExerciseType",
    "ExerciseDefinition",
    "CameraView",
    "DifficultyLevel",
    "DifficultySettings",
    "CoachMessages",
    "FormMessage",
    "EXERCISES",
    "EXERCISE_ORDER",
    "DIFFICULTY_LEVELS",
    "TARGET_POSES",
    "get_exercise_definition",
    "get_difficulty_settings",
    "get_coach_messages",
    "get_target_pose",
    # Form
    "FormQuality",
    "FormFeedback",
    "FormCheck",
    "classify_score",
    # Analyzers
    "AnalyzerState",
    "ArmRaiseState",
    "TorsoTwistState",
    "KneeRaiseState",
    "HoldState",
    "StaticLungeState",
    "PlankHoldState",
    "AnalysisResult",
    "ExerciseAnalyzer",
    "ArmRaiseAnalyzer",
    "TorsoTwistAnalyzer",
    "KneeRaiseAnalyzer",
    "SquatArmRaiseAnalyzer",
    "PushUpAnalyzer",
    "StaticLungeAnalyzer",
    "PlankHoldAnalyzer",
    "create_exercise_analyzer",
    # Tempo
    "TempoAnalyzer",
    "TempoPhase",
    "TempoQuality",
    "TempoSnapshot",
    "TempoState",
    "RepTiming",
    # Motion
    "MotionAnalyzer",
    "MotionSnapshot",
    "MotionSpeed",
    "MotionSmoothness",
    # Corrections
    "JointCorrection",
    "calculate_corrections",
    "get_target_stage",
    "describe_direction",
    # Session
    "ExerciseSession",
    "ExerciseSessionHandler",
    "SessionState",
    "CoachEvent",
    "CoachEventType",
    "get_session_handler",
]
