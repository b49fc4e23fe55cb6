"""
MOTIONCOACH Motion Service Router

Endpoints for exercise catalog lookup, live analysis sessions, and a
WebSocket stream that accepts landmark frames from the client-side pose model.
"""

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from shared.utils import handle_exceptions, log_execution_time, success_response

from .models import (
    DIFFICULTY_LEVELS,
    EXERCISE_ORDER,
    EXERCISES,
    ExerciseSessionHandler,
    Landmark,
    SessionState,
    get_session_handler,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_services() -> ExerciseSessionHandler:
    """Get the session handler (singleton)."""
    return get_session_handler()


# ============= Pydantic Models =============

class LandmarkModel(BaseModel):
    x: float
    y: float
    visibility: Optional[float] = None


class FrameRequest(BaseModel):
    landmarks: List[LandmarkModel]
    timestamp_ms: Optional[float] = None

    def to_frame(self) -> List[Landmark]:
        return [Landmark(x=lm.x, y=lm.y, visibility=lm.visibility) for lm in self.landmarks]


class StartSessionRequest(BaseModel):
    user_id: str
    exercise_type: str = "arm_raise"
    difficulty: Optional[str] = None


class SwitchExerciseRequest(BaseModel):
    exercise_type: str
    difficulty: Optional[str] = None


class FrameBatchRequest(BaseModel):
    frames: List[FrameRequest] = Field(default_factory=list)


# ============= Catalog Endpoints =============

@router.get("/exercises")
async def list_exercises():
    """List supported exercises with their stages and thresholds."""
    return success_response({
        "exercises": [definition.to_dict() for definition in EXERCISES.values()],
        "default_order": [e.value for e in EXERCISE_ORDER],
    })


@router.get("/difficulty-levels")
async def list_difficulty_levels():
    """List difficulty presets (tempo, targets, rest)."""
    return success_response({
        "levels": [level.to_dict() for level in DIFFICULTY_LEVELS.values()],
    })


# ============= Session Endpoints =============

@router.post("/sessions")
@handle_exceptions
async def start_session(request: StartSessionRequest):
    """
    Start a new analysis session.

    Returns a session ID for frame submission or the WebSocket stream.
    """
    handler = get_services()
    session = handler.create_session(
        user_id=request.user_id,
        exercise_type=request.exercise_type,
        difficulty=request.difficulty,
    )

    return {
        "status": "created",
        "session_id": session.session_id,
        "user_id": request.user_id,
        "exercise_type": session.exercise_type.value,
        "difficulty": session.difficulty.to_dict(),
        "websocket_url": f"/api/motion/ws/session/{session.session_id}",
    }


@router.post("/sessions/{session_id}/frames")
@handle_exceptions
async def submit_frame(session_id: str, request: FrameRequest):
    """Analyze one landmark frame."""
    return get_services().process_frame(session_id, request.to_frame(), request.timestamp_ms)


@router.post("/sessions/{session_id}/frames/batch")
@handle_exceptions
@log_execution_time
async def submit_frames(session_id: str, request: FrameBatchRequest):
    """Analyze several frames in order; returns one result per frame."""
    handler = get_services()
    results = [
        handler.process_frame(session_id, frame.to_frame(), frame.timestamp_ms)
        for frame in request.frames
    ]
    return {"session_id": session_id, "results": results}


@router.post("/sessions/{session_id}/exercise")
@handle_exceptions
async def switch_exercise(session_id: str, request: SwitchExerciseRequest):
    """Switch the session to another exercise (fresh analyzer and tempo state)."""
    return get_services().switch_exercise(session_id, request.exercise_type, request.difficulty)


@router.post("/sessions/{session_id}/reset")
@handle_exceptions
async def reset_exercise(session_id: str):
    return get_services().reset_exercise(session_id)


@router.post("/sessions/{session_id}/pause")
@handle_exceptions
async def pause_session(session_id: str):
    return get_services().pause_session(session_id)


@router.post("/sessions/{session_id}/resume")
@handle_exceptions
async def resume_session(session_id: str):
    return get_services().resume_session(session_id)


@router.get("/sessions/{session_id}")
@handle_exceptions
async def get_session_status(session_id: str):
    return get_services().get_session_status(session_id)


@router.post("/sessions/{session_id}/complete")
@handle_exceptions
async def complete_session(session_id: str):
    """Complete a session and return its summary."""
    handler = get_services()
    summary = handler.complete_session(session_id)
    handler.cleanup_session(session_id)
    return summary


# ============= WebSocket Stream =============

@router.websocket("/ws/session/{session_id}")
async def session_stream(websocket: WebSocket, session_id: str):
    """
    Real-time analysis over a WebSocket.

    Client sends JSON frames ({"landmarks": [...], "timestamp_ms": ...});
    the server answers each with a FRAME_RESULT message.
    """
    await websocket.accept()
    handler = get_services()

    try:
        session = handler.get_session(session_id)
    except KeyError:
        await websocket.send_json({
            "type": "ERROR",
            "message": f"Session {session_id} not found"
        })
        await websocket.close()
        return

    try:
        await websocket.send_json({
            "type": "SESSION_STARTED",
            "session_id": session_id,
            "exercise_type": session.exercise_type.value,
            "target_reps": session.difficulty.min_reps,
            "recommended_tempo": session.tempo.recommended_tempo,
        })

        while True:
            text = await websocket.receive_text()

            # ValidationError and JSONDecodeError are both ValueErrors
            try:
                frame = FrameRequest.model_validate(json.loads(text))
            except (ValueError, TypeError) as e:
                await websocket.send_json({"type": "ERROR", "message": f"Invalid frame: {e}"})
                continue

            try:
                result = handler.process_frame(session_id, frame.to_frame(), frame.timestamp_ms)
            except KeyError:
                await websocket.send_json({
                    "type": "ERROR",
                    "message": f"Session {session_id} ended"
                })
                await websocket.close()
                return

            await websocket.send_json({"type": "FRAME_RESULT", **result})

    except WebSocketDisconnect:
        logger.info(f"Session {session_id} stream disconnected")
        if session.state == SessionState.ACTIVE:
            session.state = SessionState.PAUSED
