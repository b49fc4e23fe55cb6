"""
MOTIONCOACH Motion Service - Correction Calculator

Compares a live frame with the declared target pose of an exercise stage and
returns per-joint offsets and coarse direction hints for corrective overlays.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from .geometry import Frame, Landmark, calculate_distance, get_landmark
from .exercise_catalog import (
    CORRECTION_CONFIG,
    CoachMessages,
    CorrectionConfig,
    ExerciseType,
    get_exercise_definition,
    get_target_pose,
    parse_exercise_type,
)


@dataclass
class JointCorrection:
    """Offset of one joint from its target position."""
    joint_name: str
    current_pos: Landmark
    target_pos: Landmark
    distance: float
    direction: List[str] = field(default_factory=list)
    severity: str = "ok"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "joint_name": self.joint_name,
            "current_pos": {"x": self.current_pos.x, "y": self.current_pos.y},
            "target_pos": {"x": self.target_pos.x, "y": self.target_pos.y},
            "distance": round(self.distance, 4),
            "direction": list(self.direction),
            "severity": self.severity,
        }


def calculate_corrections(
    frame: Frame,
    exercise_type: Union[ExerciseType, str],
    target_stage: str,
    config: CorrectionConfig = CORRECTION_CONFIG,
) -> List[JointCorrection]:
    """
    Per-joint corrections toward the target pose of a stage.

    Joints missing from the frame or seen with visibility at or below
    config.min_visibility are skipped. Stages without a declared pose give [].
    """
    target_pose = get_target_pose(parse_exercise_type(exercise_type), target_stage)
    if not target_pose:
        return []

    corrections = []
    for joint, target in target_pose.items():
        current = get_landmark(frame, joint)
        if current is None:
            continue
        if current.visibility is not None and current.visibility <= config.min_visibility:
            continue

        dx = target.x - current.x
        dy = target.y - current.y
        distance = calculate_distance(current, target)

        direction = []
        if dx < -config.direction_threshold:
            direction.append("left")
        elif dx > config.direction_threshold:
            direction.append("right")
        if dy < -config.direction_threshold:
            direction.append("up")
        elif dy > config.direction_threshold:
            direction.append("down")

        if distance > config.error_distance:
            severity = "error"
        elif distance > config.warn_distance:
            severity = "warn"
        else:
            severity = "ok"

        corrections.append(JointCorrection(
            joint_name=joint.joint_name,
            current_pos=Landmark(x=current.x, y=current.y),
            target_pos=target,
            distance=distance,
            direction=direction,
            severity=severity,
        ))

    return corrections


def get_target_stage(exercise_type: Union[ExerciseType, str], current_stage: str) -> str:
    """Stage whose pose the user should move toward next."""
    exercise = parse_exercise_type(exercise_type)
    if get_exercise_definition(exercise).timed:
        return "hold"
    if exercise == ExerciseType.TORSO_TWIST:
        return "left" if current_stage == "center" else "center"
    return "down" if current_stage == "up" else "up"


def describe_direction(direction: List[str], messages: CoachMessages) -> List[str]:
    """Localized hint text for direction keys."""
    return [messages.direction_hints[d] for d in direction]
