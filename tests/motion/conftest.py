"""
Shared landmark-frame builders for the motion service tests.

Builders place joints so that the measured angles equal the requested values:
the reference joint sits straight above or below the vertex and the moving
joint is rotated away from that axis by the requested angle.
"""

import math
from typing import Dict, List, Optional

import pytest

from motion_service.models import JointType, Landmark


NEUTRAL_POSE: Dict[JointType, tuple] = {
    JointType.NOSE: (0.5, 0.15),
    JointType.LEFT_SHOULDER: (0.6, 0.35),
    JointType.RIGHT_SHOULDER: (0.4, 0.35),
    JointType.LEFT_ELBOW: (0.62, 0.5),
    JointType.RIGHT_ELBOW: (0.38, 0.5),
    JointType.LEFT_WRIST: (0.63, 0.65),
    JointType.RIGHT_WRIST: (0.37, 0.65),
    JointType.LEFT_HIP: (0.55, 0.6),
    JointType.RIGHT_HIP: (0.45, 0.6),
    JointType.LEFT_KNEE: (0.55, 0.78),
    JointType.RIGHT_KNEE: (0.45, 0.78),
    JointType.LEFT_ANKLE: (0.55, 0.95),
    JointType.RIGHT_ANKLE: (0.45, 0.95),
}


def make_frame(
    overrides: Optional[Dict[JointType, tuple]] = None,
    visibility: Optional[float] = 0.9,
    hidden: Optional[Dict[JointType, Optional[float]]] = None,
) -> List[Landmark]:
    """Full 33-landmark frame; `hidden` overrides per-joint visibility."""
    positions = dict(NEUTRAL_POSE)
    positions.update(overrides or {})
    hidden = hidden or {}

    frame = []
    for joint in JointType:
        x, y = positions.get(joint, (0.5, 0.5))
        frame.append(Landmark(x=x, y=y, visibility=hidden.get(joint, visibility)))
    return frame


def _rotate(origin: tuple, axis: tuple, angle_deg: float, side: float, length: float) -> tuple:
    """Point at `length` from origin, rotated `angle_deg` from unit axis toward side."""
    theta = math.radians(angle_deg)
    ax, ay = axis
    # Perpendicular to the axis, pointing to +x for side=+1
    px, py = -ay, ax
    if px * side < 0 or (px == 0 and py * side < 0):
        px, py = -px, -py
    dx = ax * math.cos(theta) + px * math.sin(theta)
    dy = ay * math.cos(theta) + py * math.sin(theta)
    return (origin[0] + length * dx, origin[1] + length * dy)


def arm_raise_frame(
    left_angle: float,
    right_angle: Optional[float] = None,
    left_shoulder_y: float = 0.35,
    right_shoulder_y: float = 0.35,
    **kwargs,
) -> List[Landmark]:
    """Hip-shoulder-elbow angles equal to left_angle / right_angle."""
    right_angle = left_angle if right_angle is None else right_angle
    left_shoulder = (0.6, left_shoulder_y)
    right_shoulder = (0.4, right_shoulder_y)
    overrides = {
        JointType.LEFT_SHOULDER: left_shoulder,
        JointType.RIGHT_SHOULDER: right_shoulder,
        JointType.LEFT_HIP: (0.6, left_shoulder_y + 0.25),
        JointType.RIGHT_HIP: (0.4, right_shoulder_y + 0.25),
        JointType.LEFT_ELBOW: _rotate(left_shoulder, (0.0, 1.0), left_angle, +1, 0.15),
        JointType.RIGHT_ELBOW: _rotate(right_shoulder, (0.0, 1.0), right_angle, -1, 0.15),
    }
    return make_frame(overrides, **kwargs)


def torso_twist_frame(
    offset: float,
    hip_width: float = 0.1,
    shoulder_tilt: float = 0.0,
    **kwargs,
) -> List[Landmark]:
    """Shoulder midpoint shifted horizontally by `offset` from the hip midpoint."""
    overrides = {
        JointType.LEFT_HIP: (0.5 + hip_width / 2, 0.6),
        JointType.RIGHT_HIP: (0.5 - hip_width / 2, 0.6),
        JointType.LEFT_SHOULDER: (0.5 + offset + 0.1, 0.35 + shoulder_tilt),
        JointType.RIGHT_SHOULDER: (0.5 + offset - 0.1, 0.35),
    }
    return make_frame(overrides, **kwargs)


def knee_raise_frame(
    left_angle: float,
    right_angle: float = 175.0,
    lean: float = 0.0,
    **kwargs,
) -> List[Landmark]:
    """
    Knees rotated `*_angle` degrees from straight up around the hips.

    With lean=0 the shoulders sit directly above the hips so the measured
    shoulder-hip-knee angle equals the requested one.
    """
    left_hip, right_hip = (0.6, 0.6), (0.4, 0.6)
    overrides = {
        JointType.LEFT_SHOULDER: (0.6 + lean, 0.35),
        JointType.RIGHT_SHOULDER: (0.4 + lean, 0.35),
        JointType.LEFT_HIP: left_hip,
        JointType.RIGHT_HIP: right_hip,
        JointType.LEFT_KNEE: _rotate(left_hip, (0.0, -1.0), left_angle, +1, 0.2),
        JointType.RIGHT_KNEE: _rotate(right_hip, (0.0, -1.0), right_angle, -1, 0.2),
    }
    return make_frame(overrides, **kwargs)


def squat_frame(knee_angle: float, arm_angle: float = 170.0, right_knee_angle: Optional[float] = None, **kwargs):
    """Hip-knee-ankle angles of knee_angle and hip-shoulder-elbow angles of arm_angle."""
    right_knee_angle = knee_angle if right_knee_angle is None else right_knee_angle
    left_hip, right_hip = (0.55, 0.6), (0.45, 0.6)
    left_knee, right_knee = (0.55, 0.78), (0.45, 0.78)
    left_shoulder, right_shoulder = (0.55, 0.35), (0.45, 0.35)
    overrides = {
        JointType.LEFT_HIP: left_hip,
        JointType.RIGHT_HIP: right_hip,
        JointType.LEFT_KNEE: left_knee,
        JointType.RIGHT_KNEE: right_knee,
        JointType.LEFT_ANKLE: _rotate(left_knee, (0.0, -1.0), knee_angle, +1, 0.18),
        JointType.RIGHT_ANKLE: _rotate(right_knee, (0.0, -1.0), right_knee_angle, -1, 0.18),
        JointType.LEFT_SHOULDER: left_shoulder,
        JointType.RIGHT_SHOULDER: right_shoulder,
        JointType.LEFT_ELBOW: _rotate(left_shoulder, (0.0, 1.0), arm_angle, +1, 0.15),
        JointType.RIGHT_ELBOW: _rotate(right_shoulder, (0.0, 1.0), arm_angle, -1, 0.15),
    }
    return make_frame(overrides, **kwargs)


def push_up_frame(elbow_angle: float, sag: float = 0.0, **kwargs) -> List[Landmark]:
    """
    Side view, head toward -x, both sides overlapping.

    Shoulder-elbow-wrist angles equal elbow_angle. The body runs level from
    shoulder to ankle; `sag` drops the hips (negative lifts them).
    """
    shoulder, elbow = (0.35, 0.5), (0.35, 0.65)
    wrist = _rotate(elbow, (0.0, -1.0), elbow_angle, +1, 0.15)
    hip, ankle = (0.6, 0.5 + sag), (0.85, 0.5)
    overrides = {
        JointType.LEFT_SHOULDER: shoulder,
        JointType.RIGHT_SHOULDER: shoulder,
        JointType.LEFT_ELBOW: elbow,
        JointType.RIGHT_ELBOW: elbow,
        JointType.LEFT_WRIST: wrist,
        JointType.RIGHT_WRIST: wrist,
        JointType.LEFT_HIP: hip,
        JointType.RIGHT_HIP: hip,
        JointType.LEFT_ANKLE: ankle,
        JointType.RIGHT_ANKLE: ankle,
    }
    return make_frame(overrides, **kwargs)


def plank_frame(sag: float = 0.0, **kwargs) -> List[Landmark]:
    """Plank on straight arms; `sag` as in push_up_frame."""
    return push_up_frame(175.0, sag=sag, **kwargs)


def lunge_frame(left_knee: float, right_knee: float, **kwargs) -> List[Landmark]:
    """Hip-knee-ankle angles of left_knee / right_knee."""
    return squat_frame(left_knee, right_knee_angle=right_knee, **kwargs)


class StubRandom:
    """Random source returning a fixed value."""

    def __init__(self, value: float):
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value

    def choice(self, seq):
        return seq[0]


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock(start=1_000_000.0)
