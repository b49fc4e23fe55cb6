"""
MOTIONCOACH Motion Service - Motion Quality Analyzer

Speed and smoothness of a single tracked point (usually a wrist), derived from
a short rolling position history. Runs independently of exercise stage.
"""

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional
from enum import Enum

import numpy as np

from .exercise_catalog import CoachMessages, ENGLISH_MESSAGES, MOTION_CONFIG, MotionConfig

logger = logging.getLogger(__name__)


class MotionSpeed(Enum):
    NORMAL = "normal"
    TOO_FAST = "too_fast"
    TOO_SLOW = "too_slow"


class MotionSmoothness(Enum):
    SMOOTH = "smooth"
    JERKY = "jerky"


@dataclass(frozen=True)
class MotionSample:
    x: float
    y: float
    timestamp: float  # ms


@dataclass
class MotionState:
    history: Deque[MotionSample] = field(default_factory=lambda: deque(maxlen=MOTION_CONFIG.history_size))
    last_feedback_time: Optional[float] = None


@dataclass
class MotionSnapshot:
    """Motion quality at one point in time."""
    speed: MotionSpeed = MotionSpeed.NORMAL
    smoothness: MotionSmoothness = MotionSmoothness.SMOOTH
    is_moving: bool = False
    feedback: Optional[str] = None
    avg_velocity: float = 0.0
    velocity_variance: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "speed": self.speed.value,
            "smoothness": self.smoothness.value,
            "is_moving": self.is_moving,
            "feedback": self.feedback,
            "avg_velocity": round(self.avg_velocity, 4),
            "velocity_variance": round(self.velocity_variance, 4),
        }


class MotionAnalyzer:
    """
    Velocity-based motion quality with rate-limited coaching feedback.

    The praise branch draws from an injectable random source so callers can
    seed or stub it.
    """

    def __init__(
        self,
        config: MotionConfig = MOTION_CONFIG,
        messages: Optional[CoachMessages] = None,
        rng: Optional[random.Random] = None,
        state: Optional[MotionState] = None,
    ):
        self.config = config
        self.messages = messages or ENGLISH_MESSAGES
        self.rng = rng or random.Random()
        self.state = state or self._new_state()

    def _new_state(self) -> MotionState:
        return MotionState(history=deque(maxlen=self.config.history_size))

    def update(self, x: float, y: float, timestamp: float):
        """Append a position sample (timestamp in ms); oldest samples fall off."""
        self.state.history.append(MotionSample(x=x, y=y, timestamp=timestamp))

    def _velocities(self) -> List[float]:
        recent = list(self.state.history)[-self.config.window_size:]
        velocities = []
        for prev, curr in zip(recent, recent[1:]):
            time_diff = (curr.timestamp - prev.timestamp) / 1000.0
            if time_diff > 0:
                distance = float(np.hypot(curr.x - prev.x, curr.y - prev.y))
                velocities.append(distance / time_diff)
        return velocities

    def analyze(self, now_ms: Optional[float] = None) -> MotionSnapshot:
        """
        Classify recent motion.

        Args:
            now_ms: Time used for the feedback rate limit; defaults to the
                newest sample's timestamp

        Returns:
            MotionSnapshot (defaults while fewer than min_samples are held)
        """
        cfg = self.config
        history = self.state.history

        if len(history) < cfg.min_samples:
            return MotionSnapshot()

        velocities = self._velocities()
        avg_velocity = float(np.mean(velocities)) if velocities else 0.0
        variance = float(np.var(velocities)) if len(velocities) > 2 else 0.0

        is_moving = avg_velocity > cfg.moving_velocity

        speed = MotionSpeed.NORMAL
        if avg_velocity > cfg.too_fast_velocity:
            speed = MotionSpeed.TOO_FAST
        elif avg_velocity < cfg.too_slow_velocity and is_moving:
            speed = MotionSpeed.TOO_SLOW

        smoothness = MotionSmoothness.JERKY if variance > cfg.jerky_variance else MotionSmoothness.SMOOTH

        now = history[-1].timestamp if now_ms is None else now_ms
        feedback = None
        if self._feedback_allowed(now):
            feedback = self._pick_feedback(is_moving, speed, smoothness)
            if feedback is not None:
                self.state.last_feedback_time = now

        return MotionSnapshot(
            speed=speed,
            smoothness=smoothness,
            is_moving=is_moving,
            feedback=feedback,
            avg_velocity=avg_velocity,
            velocity_variance=variance,
        )

    def _feedback_allowed(self, now: float) -> bool:
        last = self.state.last_feedback_time
        return last is None or now - last > self.config.feedback_interval_ms

    def _pick_feedback(self, is_moving: bool, speed: MotionSpeed, smoothness: MotionSmoothness) -> Optional[str]:
        text = self.messages.movement
        if not is_moving:
            return text["no_motion"]
        if speed == MotionSpeed.TOO_FAST:
            return text["too_fast"]
        if speed == MotionSpeed.TOO_SLOW:
            return text["too_slow"]
        if smoothness == MotionSmoothness.JERKY:
            return text["jerky"]
        if self.rng.random() < self.config.praise_probability:
            return text["smooth"]
        return None

    def get_state(self) -> MotionState:
        return self.state

    def reset(self):
        self.state = self._new_state()
