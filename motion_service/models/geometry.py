"""
MOTIONCOACH Motion Service - Geometric Kernel

Landmark types and pure 2D geometry over normalized camera-space points.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence
from enum import Enum


ANGLE_EPSILON = 1e-6


# ═══════════════════════════════════════════════════════════════════════════════
# LANDMARK TYPES
# ═══════════════════════════════════════════════════════════════════════════════

class JointType(Enum):
    """Full-body landmark indices (33-point pose schema)."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32

    @property
    def joint_name(self) -> str:
        """Lower-case key used by target poses ("left_shoulder")."""
        return self.name.lower()


NUM_LANDMARKS = len(JointType)


@dataclass(frozen=True)
class Landmark:
    """A single 2D pose landmark; visibility is None when the estimator omits it."""
    x: float
    y: float
    visibility: Optional[float] = None

    def to_numpy(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)


# One frame is an ordered sequence indexed by JointType values
Frame = Sequence[Landmark]


def get_landmark(frame: Frame, joint: JointType) -> Optional[Landmark]:
    """Landmark for a joint, or None when the frame is too short to hold it."""
    if joint.value >= len(frame):
        return None
    return frame[joint.value]


# ═══════════════════════════════════════════════════════════════════════════════
# GEOMETRY
# ═══════════════════════════════════════════════════════════════════════════════

def calculate_angle(a: Landmark, b: Landmark, c: Landmark) -> float:
    """
    Calculate angle at vertex b formed by rays b->a and b->c.

    Degenerate inputs (a or c coincident with b) stay finite: the epsilon in the
    denominator drives the cosine to 0 instead of dividing by zero.

    Returns:
        Angle in degrees (0-180)
    """
    ba = a.to_numpy() - b.to_numpy()
    bc = c.to_numpy() - b.to_numpy()

    cosine_angle = np.dot(ba, bc) / (np.linalg.norm(ba) * np.linalg.norm(bc) + ANGLE_EPSILON)
    cosine_angle = np.clip(cosine_angle, -1.0, 1.0)

    return float(np.degrees(np.arccos(cosine_angle)))


def calculate_distance(a: Landmark, b: Landmark) -> float:
    """Euclidean distance in normalized coordinate space."""
    return float(np.linalg.norm(a.to_numpy() - b.to_numpy()))


def calculate_midpoint(a: Landmark, b: Landmark) -> Landmark:
    """Arithmetic mean of two points. The result carries no visibility."""
    mid = (a.to_numpy() + b.to_numpy()) / 2
    return Landmark(x=float(mid[0]), y=float(mid[1]))
