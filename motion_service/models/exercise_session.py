"""
MOTIONCOACH Motion Service - Exercise Session Handler

Wires one exercise analyzer, tempo analyzer and motion analyzer per session,
runs every landmark frame through them, and emits structured coaching events
for the speech/UI layer.
"""

import logging
import math
import random
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Union
from datetime import datetime
from enum import Enum

from core.config import settings

from .geometry import Frame, JointType, get_landmark
from .exercise_catalog import (
    CoachMessages,
    CORRECTION_CONFIG,
    DifficultyLevel,
    DifficultySettings,
    ExerciseType,
    get_coach_messages,
    get_difficulty_settings,
    parse_exercise_type,
)
from .exercise_analyzers import AnalysisResult, ExerciseAnalyzer, create_exercise_analyzer
from .tempo_analyzer import TempoAnalyzer
from .motion_analyzer import MotionAnalyzer, MotionSnapshot
from .corrections import calculate_corrections, get_target_stage

logger = logging.getLogger(__name__)


# Consecutive bad-form frames before a bad_form event fires
BAD_FORM_STREAK = 3

# Point fed to the motion analyzer
TRACKED_JOINT = JointType.LEFT_WRIST


class SessionState(Enum):
    """Exercise session states."""
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class CoachEventType(Enum):
    """Structured signals for the coaching layer."""
    EXERCISE_START = "exercise_start"
    REP_COMPLETED = "rep_completed"
    HALFWAY = "halfway"
    TARGET_REPS_REACHED = "target_reps_reached"
    BAD_FORM = "bad_form"
    TEMPO_FEEDBACK = "tempo_feedback"
    MOVEMENT_FEEDBACK = "movement_feedback"
    EXERCISE_COMPLETE = "exercise_complete"
    SESSION_COMPLETE = "session_complete"


@dataclass
class CoachEvent:
    type: CoachEventType
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "message": self.message, "data": self.data}


@dataclass
class ExerciseRecord:
    """Result of one exercise within a session."""
    exercise_type: ExerciseType
    difficulty: DifficultyLevel
    reps: int
    target_reps: int
    avg_form_score: float
    avg_rep_duration: float
    consistency_score: float
    start_time: float
    end_time: float

    @property
    def duration_seconds(self) -> float:
        return max(0.0, (self.end_time - self.start_time) / 1000.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exercise": self.exercise_type.value,
            "difficulty": self.difficulty.value,
            "reps": self.reps,
            "target_reps": self.target_reps,
            "avg_form_score": round(self.avg_form_score, 1),
            "avg_rep_duration": round(self.avg_rep_duration, 2),
            "consistency_score": round(self.consistency_score, 3),
            "duration_seconds": round(self.duration_seconds, 1),
        }


@dataclass
class ExerciseSession:
    """One user's live session and the analyzer trio it owns."""
    session_id: str
    user_id: str
    exercise_type: ExerciseType
    difficulty: DifficultySettings
    analyzer: ExerciseAnalyzer = field(repr=False)
    tempo: TempoAnalyzer = field(repr=False)
    motion: MotionAnalyzer = field(repr=False)
    state: SessionState = SessionState.ACTIVE

    # Timing (ms); last_activity is handler-clock time, last_frame_ms frame time
    start_time: float = 0.0
    exercise_start_time: float = 0.0
    end_time: Optional[float] = None
    last_activity: float = 0.0
    last_frame_ms: Optional[float] = None

    # Current exercise progress
    frames_processed: int = 0
    form_score_total: float = 0.0
    form_samples: int = 0
    halfway_announced: bool = False
    target_reached: bool = False

    completed_exercises: List[ExerciseRecord] = field(default_factory=list)

    @property
    def reps(self) -> int:
        return self.analyzer.get_state().reps

    @property
    def avg_form_score(self) -> float:
        return self.form_score_total / self.form_samples if self.form_samples else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "exercise_type": self.exercise_type.value,
            "difficulty": self.difficulty.level.value,
            "state": self.state.value,
            "reps": self.reps,
            "target_reps": self.difficulty.min_reps,
            "target_reached": self.target_reached,
            "avg_form_score": round(self.avg_form_score, 1),
            "frames_processed": self.frames_processed,
            "analyzer_state": self.analyzer.get_state().to_dict(),
            "recommended_tempo": self.tempo.recommended_tempo,
            "completed_exercises": [r.to_dict() for r in self.completed_exercises],
        }


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


class ExerciseSessionHandler:
    """
    Manages live exercise sessions.

    Features:
    - Per-session analyzer / tempo / motion trio
    - Coaching events (reps, milestones, sustained bad form, tempo, movement)
    - Corrective pose guidance toward the next stage
    - Exercise switching with fresh per-exercise state
    - Session summary generation
    """

    def __init__(
        self,
        messages: Optional[CoachMessages] = None,
        visibility_threshold: Optional[float] = None,
        enable_corrections: Optional[bool] = None,
        max_sessions: Optional[int] = None,
        idle_timeout_seconds: Optional[float] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.messages = messages or get_coach_messages(settings.MESSAGE_LOCALE)
        self.visibility_threshold = (
            settings.VISIBILITY_THRESHOLD if visibility_threshold is None else visibility_threshold
        )
        self.enable_corrections = (
            settings.ENABLE_CORRECTIONS if enable_corrections is None else enable_corrections
        )
        self.max_sessions = settings.MAX_ACTIVE_SESSIONS if max_sessions is None else max_sessions
        self.idle_timeout_seconds = (
            settings.SESSION_IDLE_TIMEOUT_SECONDS if idle_timeout_seconds is None else idle_timeout_seconds
        )
        self.correction_config = replace(CORRECTION_CONFIG, min_visibility=settings.CORRECTION_MIN_VISIBILITY)
        self.rng = rng or random.Random()
        self.clock = clock or _wall_clock_ms
        self.active_sessions: Dict[str, ExerciseSession] = {}

    # ═══════════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════════

    def create_session(
        self,
        user_id: str,
        exercise_type: Union[ExerciseType, str],
        difficulty: Union[DifficultyLevel, str, None] = None,
    ) -> ExerciseSession:
        """
        Create and start a new exercise session.

        Idle sessions are evicted first when the registry is full.

        Raises:
            ValueError: unknown exercise or difficulty, or registry full
        """
        if len(self.active_sessions) >= self.max_sessions:
            self._evict_for_capacity()
        if len(self.active_sessions) >= self.max_sessions:
            raise ValueError(f"Session limit reached ({self.max_sessions})")

        exercise = parse_exercise_type(exercise_type)
        level = get_difficulty_settings(difficulty or settings.DEFAULT_DIFFICULTY)
        now = self.clock()

        session = ExerciseSession(
            session_id=str(uuid.uuid4())[:8],
            user_id=user_id,
            exercise_type=exercise,
            difficulty=level,
            analyzer=self._build_analyzer(exercise),
            tempo=self._build_tempo(level),
            motion=MotionAnalyzer(messages=self.messages, rng=self.rng),
            start_time=now,
            exercise_start_time=now,
            last_activity=now,
        )
        self.active_sessions[session.session_id] = session

        logger.info(
            f"Session {session.session_id} created for user {user_id}: "
            f"{exercise.value} ({level.level.value})"
        )
        return session

    def _build_analyzer(self, exercise: ExerciseType) -> ExerciseAnalyzer:
        return create_exercise_analyzer(
            exercise,
            messages=self.messages,
            visibility_threshold=self.visibility_threshold,
            clock=self.clock,
        )

    def _build_tempo(self, level: DifficultySettings) -> TempoAnalyzer:
        return TempoAnalyzer(difficulty=level.level, messages=self.messages, clock=self.clock)

    def get_session(self, session_id: str) -> ExerciseSession:
        """Get session by ID; raises KeyError if unknown."""
        session = self.active_sessions.get(session_id)
        if session is None:
            raise KeyError(f"Session not found: {session_id}")
        return session

    def get_session_status(self, session_id: str) -> Dict[str, Any]:
        return self.get_session(session_id).to_dict()

    def pause_session(self, session_id: str) -> Dict[str, Any]:
        session = self.get_session(session_id)
        if session.state != SessionState.ACTIVE:
            raise ValueError("Session not active")
        session.state = SessionState.PAUSED
        session.last_activity = self.clock()
        return {"status": "paused", "session_id": session_id}

    def resume_session(self, session_id: str) -> Dict[str, Any]:
        session = self.get_session(session_id)
        if session.state != SessionState.PAUSED:
            raise ValueError("Session not paused")
        session.state = SessionState.ACTIVE
        session.last_activity = self.clock()
        return {"status": "resumed", "session_id": session_id}

    def cleanup_session(self, session_id: str):
        """Remove session from active sessions."""
        if self.active_sessions.pop(session_id, None) is not None:
            logger.info(f"Session {session_id} cleaned up")

    def _evict_for_capacity(self):
        """
        Free registry slots.

        Drops every session idle past the timeout; if the registry is still
        full, drops the least recently used paused or completed session.
        Active sessions inside the timeout are never evicted.
        """
        now = self.clock()
        timeout_ms = self.idle_timeout_seconds * 1000.0

        for session_id, session in list(self.active_sessions.items()):
            if now - session.last_activity >= timeout_ms:
                logger.info(f"Evicting idle session {session_id}")
                self.cleanup_session(session_id)

        if len(self.active_sessions) < self.max_sessions:
            return

        inactive = [s for s in self.active_sessions.values() if s.state != SessionState.ACTIVE]
        if inactive:
            oldest = min(inactive, key=lambda s: s.last_activity)
            logger.info(f"Evicting {oldest.state.value} session {oldest.session_id}")
            self.cleanup_session(oldest.session_id)

    @staticmethod
    def _require_open(session: ExerciseSession):
        if session.state == SessionState.COMPLETED:
            raise ValueError(f"Session {session.session_id} already completed")

    # ═══════════════════════════════════════════════════════════════════════════
    # FRAME PROCESSING
    # ═══════════════════════════════════════════════════════════════════════════

    def process_frame(
        self,
        session_id: str,
        frame: Frame,
        timestamp_ms: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Run one landmark frame through the session's analyzers.

        Args:
            session_id: Active session ID
            frame: Landmarks indexed by JointType values
            timestamp_ms: Frame time (defaults to the handler clock)

        Returns:
            Real-time feedback dict
        """
        session = self.get_session(session_id)

        if session.state != SessionState.ACTIVE:
            return {"session_id": session_id, "state": session.state.value, "message": "Session not active"}

        timestamp = self.clock() if timestamp_ms is None else timestamp_ms
        session.frames_processed += 1
        session.last_frame_ms = timestamp
        session.last_activity = self.clock()

        result = session.analyzer.analyze(frame, timestamp)
        response: Dict[str, Any] = {
            "session_id": session_id,
            "exercise": session.exercise_type.value,
            "timestamp": timestamp,
            "analysis": result.to_dict(),
            "tempo": None,
            "motion": None,
            "target_stage": None,
            "corrections": [],
            "events": [],
        }

        if not result.is_visible:
            return response

        session.form_score_total += result.form_feedback.score
        session.form_samples += 1

        rep_timing = session.tempo.update_phase(result.stage, timestamp)
        tempo_snapshot = session.tempo.analyze(timestamp)
        response["tempo"] = tempo_snapshot.to_dict()

        tracked = get_landmark(frame, TRACKED_JOINT)
        if tracked is not None:
            session.motion.update(tracked.x, tracked.y, timestamp)
        motion_snapshot = session.motion.analyze(timestamp)
        response["motion"] = motion_snapshot.to_dict()

        if self.enable_corrections:
            target_stage = get_target_stage(session.exercise_type, result.stage)
            response["target_stage"] = target_stage
            corrections = calculate_corrections(
                frame, session.exercise_type, target_stage, self.correction_config
            )
            response["corrections"] = [c.to_dict() for c in corrections]

        events = self._collect_events(session, result, motion_snapshot)
        if rep_timing is not None and session.tempo.should_give_feedback() and tempo_snapshot.feedback:
            events.append(CoachEvent(
                CoachEventType.TEMPO_FEEDBACK,
                tempo_snapshot.feedback,
                {"tempo_quality": tempo_snapshot.tempo_quality.value},
            ))
        response["events"] = [e.to_dict() for e in events]

        return response

    def _collect_events(
        self,
        session: ExerciseSession,
        result: AnalysisResult,
        motion: MotionSnapshot,
    ) -> List[CoachEvent]:
        events = []
        target = session.difficulty.min_reps

        if result.rep_completed:
            events.append(CoachEvent(
                CoachEventType.REP_COMPLETED,
                self.messages.rep_count.format(count=result.reps),
                {"reps": result.reps},
            ))

            if not session.target_reached and result.reps >= target:
                session.target_reached = True
                events.append(CoachEvent(
                    CoachEventType.TARGET_REPS_REACHED,
                    self.messages.target_reached.format(count=result.reps),
                    {"reps": result.reps, "target": target},
                ))
            elif not session.halfway_announced and result.reps >= math.ceil(target / 2):
                session.halfway_announced = True
                events.append(CoachEvent(CoachEventType.HALFWAY, self.messages.halfway, {"reps": result.reps}))

        if session.analyzer.get_state().consecutive_bad_forms == BAD_FORM_STREAK:
            suggestions = result.form_feedback.suggestions
            message = suggestions[0] if suggestions else self.rng.choice(self.messages.bad_form)
            events.append(CoachEvent(
                CoachEventType.BAD_FORM,
                message,
                {"score": result.form_feedback.score, "issues": list(result.form_feedback.issues)},
            ))

        if motion.feedback is not None:
            events.append(CoachEvent(
                CoachEventType.MOVEMENT_FEEDBACK,
                motion.feedback,
                {"speed": motion.speed.value, "smoothness": motion.smoothness.value},
            ))

        return events

    # ═══════════════════════════════════════════════════════════════════════════
    # EXERCISE CONTROL
    # ═══════════════════════════════════════════════════════════════════════════

    def switch_exercise(
        self,
        session_id: str,
        exercise_type: Union[ExerciseType, str],
        difficulty: Union[DifficultyLevel, str, None] = None,
    ) -> Dict[str, Any]:
        """Close the current exercise and start another with fresh analyzer state."""
        session = self.get_session(session_id)
        self._require_open(session)
        exercise = parse_exercise_type(exercise_type)
        level = get_difficulty_settings(difficulty) if difficulty else session.difficulty

        self._close_exercise(session)

        session.exercise_type = exercise
        session.difficulty = level
        session.analyzer = self._build_analyzer(exercise)
        self._restart_exercise(session)

        logger.info(f"Session {session_id} switched to {exercise.value}")

        event = CoachEvent(
            CoachEventType.EXERCISE_START,
            self.messages.start_exercise[exercise.value],
            {"exercise": exercise.value, "target": level.min_reps},
        )
        return {
            "status": "switched",
            "session_id": session_id,
            "exercise": exercise.value,
            "difficulty": level.level.value,
            "events": [event.to_dict()],
        }

    def reset_exercise(self, session_id: str) -> Dict[str, Any]:
        """Restart the current exercise from zero reps."""
        session = self.get_session(session_id)
        self._require_open(session)
        session.analyzer.reset()
        self._restart_exercise(session)
        return {"status": "reset", "session_id": session_id, "exercise": session.exercise_type.value}

    def _restart_exercise(self, session: ExerciseSession):
        session.tempo = self._build_tempo(session.difficulty)
        session.motion.reset()
        session.exercise_start_time = self.clock()
        session.last_activity = session.exercise_start_time
        session.last_frame_ms = None
        session.frames_processed = 0
        session.form_score_total = 0.0
        session.form_samples = 0
        session.halfway_announced = False
        session.target_reached = False

    def _close_exercise(self, session: ExerciseSession):
        # Tempo figures stay on the time base of the frames that produced them
        tempo = session.tempo.analyze(session.last_frame_ms)
        session.completed_exercises.append(ExerciseRecord(
            exercise_type=session.exercise_type,
            difficulty=session.difficulty.level,
            reps=session.reps,
            target_reps=session.difficulty.min_reps,
            avg_form_score=session.avg_form_score,
            avg_rep_duration=tempo.avg_rep_duration,
            consistency_score=tempo.consistency_score,
            start_time=session.exercise_start_time,
            end_time=self.clock(),
        ))

    # ═══════════════════════════════════════════════════════════════════════════
    # COMPLETION
    # ═══════════════════════════════════════════════════════════════════════════

    def complete_session(self, session_id: str) -> Dict[str, Any]:
        """
        Complete a session and generate its summary.

        Returns complete session summary.
        """
        session = self.get_session(session_id)
        if session.state != SessionState.COMPLETED:
            self._close_exercise(session)
            session.state = SessionState.COMPLETED
            session.end_time = self.clock()
            logger.info(f"Session {session_id} completed with {self._total_reps(session)} reps")

        return self._generate_summary(session)

    @staticmethod
    def _total_reps(session: ExerciseSession) -> int:
        return sum(r.reps for r in session.completed_exercises)

    def _generate_summary(self, session: ExerciseSession) -> Dict[str, Any]:
        records = session.completed_exercises
        total_reps = self._total_reps(session)
        target_total = sum(r.target_reps for r in records)
        completion_rate = (total_reps / target_total * 100) if target_total > 0 else 0.0

        scored = [r for r in records if r.reps > 0]
        avg_form = sum(r.avg_form_score for r in scored) / len(scored) if scored else 0.0
        duration = ((session.end_time or self.clock()) - session.start_time) / 1000.0

        if completion_rate >= 100 and avg_form >= 85:
            performance = "excellent"
        elif completion_rate >= 80 and avg_form >= 70:
            performance = "good"
        elif completion_rate >= 60:
            performance = "fair"
        else:
            performance = "needs_improvement"

        if len(records) > 1:
            event = CoachEvent(CoachEventType.SESSION_COMPLETE, self.messages.session_complete)
        else:
            event = CoachEvent(
                CoachEventType.EXERCISE_COMPLETE,
                self.messages.exercise_complete.format(count=total_reps),
            )
        event.data = {"total_reps": total_reps, "exercises": len(records)}

        return {
            "status": "completed",
            "session_id": session.session_id,
            "user_id": session.user_id,
            "summary": {
                "total_reps": total_reps,
                "target_reps": target_total,
                "completion_rate": round(completion_rate, 1),
                "avg_form_score": round(avg_form, 1),
                "duration_seconds": round(max(0.0, duration), 1),
                "performance_rating": performance,
                "message": event.message,
            },
            "exercises": [r.to_dict() for r in records],
            "recommendations": self._get_recommendations(records, completion_rate, avg_form),
            "events": [event.to_dict()],
            "completed_at": datetime.now().isoformat(),
        }

    def _get_recommendations(
        self,
        records: List[ExerciseRecord],
        completion_rate: float,
        avg_form: float,
    ) -> List[str]:
        """Generate recommendations based on session performance."""
        recommendations = []

        if records and avg_form < 70:
            recommendations.append("Focus on maintaining proper form over completing more reps")

        if any(r.reps >= 3 and r.consistency_score < 0.6 for r in records):
            recommendations.append("Work on an even rhythm; follow the beat count")

        if completion_rate < 80:
            recommendations.append("Try an easier difficulty level in your next session")
        elif completion_rate >= 100 and avg_form >= 85:
            recommendations.append("You're ready for the next difficulty level")

        if not recommendations:
            recommendations.append("Great progress! Maintain this consistency")

        return recommendations


# ═══════════════════════════════════════════════════════════════════════════════
# MODULE-LEVEL SINGLETON
# ═══════════════════════════════════════════════════════════════════════════════

_handler_instance: Optional[ExerciseSessionHandler] = None

def get_session_handler() -> ExerciseSessionHandler:
    """Get or create the global session handler instance."""
    global _handler_instance
    if _handler_instance is None:
        _handler_instance = ExerciseSessionHandler()
    return _handler_instance
