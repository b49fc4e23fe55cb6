"""
MOTIONCOACH Motion Service - Tempo Analyzer

Tracks the rhythm of repetitions independently of exercise type.

The analyzer is fed the stage label reported by an exercise analyzer on every
frame and walks a four-phase cycle:

    idle -> going_up -> at_peak -> going_down -> idle

Closing a cycle records a RepTiming (kept in a rolling buffer of the most
recent reps), from which tempo quality and a consistency score are derived
against the ideal cadence of the configured difficulty level.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, Optional, Union
from enum import Enum

import numpy as np

from .exercise_catalog import (
    CoachMessages,
    DifficultyLevel,
    ENGLISH_MESSAGES,
    TEMPO_CONFIG,
    TempoConfig,
    format_tempo,
    get_difficulty_settings,
)

logger = logging.getLogger(__name__)


UP_STAGES = frozenset({"up", "left", "right"})
DOWN_STAGES = frozenset({"down", "center"})


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


class TempoPhase(Enum):
    IDLE = "idle"
    GOING_UP = "going_up"
    AT_PEAK = "at_peak"
    GOING_DOWN = "going_down"


class TempoQuality(Enum):
    PERFECT = "perfect"
    GOOD = "good"
    TOO_FAST = "too_fast"
    TOO_SLOW = "too_slow"
    INCONSISTENT = "inconsistent"


@dataclass(frozen=True)
class RepTiming:
    """Timing of one completed repetition (timestamps in ms, durations in s)."""
    rep_number: int
    start_time: float
    peak_time: float
    end_time: float
    up_duration: float
    down_duration: float
    total_duration: float
    tempo_ratio: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rep_number": self.rep_number,
            "up_duration": round(self.up_duration, 2),
            "down_duration": round(self.down_duration, 2),
            "total_duration": round(self.total_duration, 2),
            "tempo_ratio": round(self.tempo_ratio, 2),
        }


@dataclass
class TempoState:
    """Mutable tempo progress owned by one TempoAnalyzer."""
    phase: TempoPhase = TempoPhase.IDLE
    phase_start_time: Optional[float] = None
    rep_start_time: Optional[float] = None
    rep_peak_time: Optional[float] = None
    rep_timings: Deque[RepTiming] = field(default_factory=lambda: deque(maxlen=TEMPO_CONFIG.buffer_size))
    beat_count: int = 1
    last_beat_time: Optional[float] = None
    rep_count: int = 0


@dataclass
class TempoSnapshot:
    """Tempo metrics at one point in time."""
    current_phase: TempoPhase
    phase_duration: float
    avg_rep_duration: float
    avg_up_duration: float
    avg_down_duration: float
    tempo_quality: TempoQuality
    consistency_score: float
    recommended_tempo: str
    feedback: str
    beat_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_phase": self.current_phase.value,
            "phase_duration": round(self.phase_duration, 2),
            "avg_rep_duration": round(self.avg_rep_duration, 2),
            "avg_up_duration": round(self.avg_up_duration, 2),
            "avg_down_duration": round(self.avg_down_duration, 2),
            "tempo_quality": self.tempo_quality.value,
            "consistency_score": round(self.consistency_score, 3),
            "recommended_tempo": self.recommended_tempo,
            "feedback": self.feedback,
            "beat_count": self.beat_count,
        }


class TempoAnalyzer:
    """
    Rep-tempo tracker for one exercise session.

    A fresh instance is required per exercise; stage vocabularies differ between
    exercises, so state is never carried across a switch.
    """

    def __init__(
        self,
        difficulty: Union[DifficultyLevel, str] = DifficultyLevel.INTERMEDIATE,
        config: TempoConfig = TEMPO_CONFIG,
        messages: Optional[CoachMessages] = None,
        clock: Optional[Callable[[], float]] = None,
        state: Optional[TempoState] = None,
    ):
        """
        Args:
            difficulty: Level selecting the ideal up/down durations
            config: Tolerances and buffer sizes
            messages: Coaching strings for feedback
            clock: Millisecond clock used when analyze() is not given a time
            state: Existing TempoState to continue from
        """
        self.config = config
        self.messages = messages or ENGLISH_MESSAGES
        self.clock = clock or _wall_clock_ms
        self.state = state or self._new_state()
        self.set_difficulty(difficulty)

    def _new_state(self) -> TempoState:
        return TempoState(rep_timings=deque(maxlen=self.config.buffer_size))

    # ═══════════════════════════════════════════════════════════════════════════
    # CONFIGURATION
    # ═══════════════════════════════════════════════════════════════════════════

    def set_difficulty(self, difficulty: Union[DifficultyLevel, str]):
        """Switch ideal durations; raises ValueError for unknown levels."""
        settings = get_difficulty_settings(difficulty)
        self.difficulty = settings.level
        self.ideal_up_duration = settings.up_duration
        self.ideal_down_duration = settings.down_duration
        logger.debug(f"Tempo difficulty set to {self.difficulty.value} ({self.recommended_tempo})")

    @property
    def ideal_total_duration(self) -> float:
        return self.ideal_up_duration + self.ideal_down_duration

    @property
    def recommended_tempo(self) -> str:
        return format_tempo(self.ideal_up_duration, self.ideal_down_duration)

    # ═══════════════════════════════════════════════════════════════════════════
    # PHASE TRACKING
    # ═══════════════════════════════════════════════════════════════════════════

    def update_phase(self, stage: str, timestamp: float) -> Optional[RepTiming]:
        """
        Advance the phase machine with the stage reported for one frame.

        Args:
            stage: Stage label from the exercise analyzer
            timestamp: Frame time in milliseconds

        Returns:
            The RepTiming recorded if this frame closed a valid rep, else None
        """
        state = self.state
        recorded = None

        if stage in UP_STAGES:
            if state.phase == TempoPhase.GOING_UP:
                self._enter(TempoPhase.AT_PEAK, timestamp)
                state.rep_peak_time = timestamp
            elif state.phase != TempoPhase.AT_PEAK:
                self._enter(TempoPhase.GOING_UP, timestamp)
                state.rep_start_time = timestamp
        elif stage in DOWN_STAGES:
            if state.phase == TempoPhase.AT_PEAK:
                self._enter(TempoPhase.GOING_DOWN, timestamp)
            elif state.phase == TempoPhase.GOING_DOWN:
                recorded = self._complete_rep(timestamp)
                self._enter(TempoPhase.IDLE, timestamp)

        self._update_beat(timestamp)
        return recorded

    def _enter(self, phase: TempoPhase, timestamp: float):
        self.state.phase = phase
        self.state.phase_start_time = timestamp

    def _complete_rep(self, end_time: float) -> Optional[RepTiming]:
        state = self.state
        start_time, peak_time = state.rep_start_time, state.rep_peak_time
        state.rep_start_time = None
        state.rep_peak_time = None

        if start_time is None or peak_time is None:
            return None

        up_duration = (peak_time - start_time) / 1000.0
        down_duration = (end_time - peak_time) / 1000.0
        total_duration = up_duration + down_duration

        if total_duration < self.config.min_rep_duration or total_duration > self.config.max_rep_duration:
            logger.debug(f"Discarding rep timing of {total_duration:.2f}s (outside valid range)")
            return None

        state.rep_count += 1
        timing = RepTiming(
            rep_number=state.rep_count,
            start_time=start_time,
            peak_time=peak_time,
            end_time=end_time,
            up_duration=up_duration,
            down_duration=down_duration,
            total_duration=total_duration,
            tempo_ratio=up_duration / (down_duration or 1.0),
        )
        state.rep_timings.append(timing)

        logger.debug(
            f"Rep {timing.rep_number} timed: up {up_duration:.2f}s / down {down_duration:.2f}s"
        )
        return timing

    def _update_beat(self, timestamp: float):
        state = self.state
        if state.last_beat_time is None:
            state.last_beat_time = timestamp
            return
        if timestamp - state.last_beat_time >= self.config.beat_interval_ms:
            state.beat_count = state.beat_count % 4 + 1
            state.last_beat_time = timestamp

    # ═══════════════════════════════════════════════════════════════════════════
    # ANALYSIS
    # ═══════════════════════════════════════════════════════════════════════════

    def analyze(self, now_ms: Optional[float] = None) -> TempoSnapshot:
        """Compute the tempo snapshot over the rolling rep buffer."""
        state = self.state
        now = self.clock() if now_ms is None else now_ms

        phase_duration = 0.0
        if state.phase_start_time is not None:
            phase_duration = max(0.0, (now - state.phase_start_time) / 1000.0)

        timings = list(state.rep_timings)
        if timings:
            avg_total = float(np.mean([t.total_duration for t in timings]))
            avg_up = float(np.mean([t.up_duration for t in timings]))
            avg_down = float(np.mean([t.down_duration for t in timings]))
        else:
            avg_total = avg_up = avg_down = 0.0

        consistency = self.calculate_consistency()
        quality, feedback = self._evaluate_tempo(avg_total, avg_up, avg_down, consistency)

        return TempoSnapshot(
            current_phase=state.phase,
            phase_duration=phase_duration,
            avg_rep_duration=avg_total,
            avg_up_duration=avg_up,
            avg_down_duration=avg_down,
            tempo_quality=quality,
            consistency_score=consistency,
            recommended_tempo=self.recommended_tempo,
            feedback=feedback,
            beat_count=state.beat_count,
        )

    def calculate_consistency(self) -> float:
        """1 - stddev(total durations) / ideal total, floored at 0."""
        timings = self.state.rep_timings
        if len(timings) < self.config.min_reps_for_consistency:
            return 1.0

        std_dev = float(np.std([t.total_duration for t in timings]))
        return max(0.0, 1.0 - std_dev / self.ideal_total_duration)

    def _evaluate_tempo(self, avg_total: float, avg_up: float, avg_down: float, consistency: float):
        if len(self.state.rep_timings) < self.config.min_reps_to_evaluate:
            return TempoQuality.GOOD, ""

        cfg = self.config
        text = self.messages.tempo
        ideal = self.ideal_total_duration

        if avg_total < ideal * cfg.too_fast_factor:
            return TempoQuality.TOO_FAST, text["too_fast"]
        if avg_total < ideal - cfg.tolerance:
            return TempoQuality.TOO_FAST, text["too_fast_mild"]

        if avg_total > ideal * cfg.too_slow_factor:
            return TempoQuality.TOO_SLOW, text["too_slow"]
        if avg_total > ideal + cfg.tolerance:
            return TempoQuality.TOO_SLOW, text["too_slow_mild"]

        if consistency < cfg.inconsistent_below:
            return TempoQuality.INCONSISTENT, text["inconsistent"]

        ratio = avg_up / (avg_down or 1.0)
        if ratio > cfg.unbalanced_up_ratio:
            return TempoQuality.GOOD, text["unbalanced_up"]
        if ratio < cfg.unbalanced_down_ratio:
            return TempoQuality.GOOD, text["unbalanced_down"]

        if abs(avg_total - ideal) < cfg.tolerance * 0.5 and consistency > cfg.perfect_consistency:
            return TempoQuality.PERFECT, text["perfect"]

        return TempoQuality.GOOD, text["good"]

    # ═══════════════════════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════════════════════

    def should_give_feedback(self) -> bool:
        """True on every Nth timed rep."""
        count = self.state.rep_count
        return count > 0 and count % self.config.feedback_every_reps == 0

    def get_beat_text(self) -> str:
        return self.messages.beat_count[self.state.beat_count - 1]

    def get_rep_count(self) -> int:
        return self.state.rep_count

    def get_state(self) -> TempoState:
        return self.state

    def reset(self):
        self.state = self._new_state()
