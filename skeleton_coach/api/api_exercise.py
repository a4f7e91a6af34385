"""
Exercise API Module for SKELETON COACH.

REST and WebSocket endpoints for remote clients that run their own
skeleton tracking and submit joint samples frame by frame.

WebSocket protocol (`/exercise/sessions/{session_id}/stream`), one JSON
object per message:

    client -> server
        {"type": "frame", "joints": {"<joint_type>": {"x", "y", "z", "tracking_state"}}}
        {"type": "set_tolerance", "tolerance": 0.15}
        {"type": "reset"}
        {"type": "end_session"}

    server -> client
        {"type": "step", "data": {...}}             after every frame
        {"type": "exercise_completed", "data": {...}}
        {"type": "session", "data": {...}}          after set_tolerance / reset
        {"type": "session_ended", "data": {...}}
        {"type": "error", "message": "..."}
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from skeleton_coach.helpers.exception_handler import CustomException
from skeleton_coach.schemas.sche_base import DataResponse
from skeleton_coach.schemas.sche_exercise import (
    FrameIn, SessionCreateRequest, SessionEndResponse, SessionResponse,
    StepResponse, ToleranceUpdateRequest,
)
from skeleton_coach.services.srv_exercise import ExerciseService, get_exercise_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('/sessions', response_model=DataResponse[SessionResponse])
def create_session(
    request: SessionCreateRequest,
    exercise_service: ExerciseService = Depends(get_exercise_service)
) -> Any:
    session = exercise_service.create_session(
        tolerance=request.tolerance,
        repetition_target=request.repetition_target,
        loop=request.loop,
    )
    return DataResponse().success_response(data=session)


@router.get('/sessions/{session_id}', response_model=DataResponse[SessionResponse])
def get_session(
    session_id: str,
    exercise_service: ExerciseService = Depends(get_exercise_service)
) -> Any:
    return DataResponse().success_response(data=exercise_service.get_state(session_id))


@router.put('/sessions/{session_id}/tolerance', response_model=DataResponse[SessionResponse])
def update_tolerance(
    session_id: str,
    request: ToleranceUpdateRequest,
    exercise_service: ExerciseService = Depends(get_exercise_service)
) -> Any:
    session = exercise_service.set_tolerance(session_id, request.tolerance)
    return DataResponse().success_response(data=session)


@router.post('/sessions/{session_id}/frames', response_model=DataResponse[StepResponse])
def submit_frame(
    session_id: str,
    frame: FrameIn,
    exercise_service: ExerciseService = Depends(get_exercise_service)
) -> Any:
    step = exercise_service.process_frame(session_id, frame.to_sample())
    return DataResponse().success_response(data=step)


@router.post('/sessions/{session_id}/reset', response_model=DataResponse[SessionResponse])
def reset_session(
    session_id: str,
    exercise_service: ExerciseService = Depends(get_exercise_service)
) -> Any:
    return DataResponse().success_response(data=exercise_service.reset_session(session_id))


@router.delete('/sessions/{session_id}', response_model=DataResponse[SessionEndResponse])
def end_session(
    session_id: str,
    exercise_service: ExerciseService = Depends(get_exercise_service)
) -> Any:
    return DataResponse().success_response(data=exercise_service.end_session(session_id))


@router.websocket('/sessions/{session_id}/stream')
async def exercise_stream_websocket(
    websocket: WebSocket,
    session_id: str,
    exercise_service: ExerciseService = Depends(get_exercise_service)
):
    """
    WebSocket endpoint for real-time exercise guidance.

    Every frame message is classified against the current phase and
    answered with the step result and the guide points of the new phase.
    """
    await websocket.accept()

    try:
        exercise_service.get_session(session_id)
    except CustomException as e:
        await websocket.send_json({"type": "error", "message": e.message})
        await websocket.close()
        return

    try:
        while True:
            try:
                data = json.loads(await websocket.receive_text())
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(data, dict):
                await websocket.send_json({"type": "error", "message": "Expected a JSON object"})
                continue
            message_type = data.get("type")

            try:
                if message_type == "frame":
                    frame = FrameIn.model_validate({"joints": data.get("joints", {})})
                    step = exercise_service.process_frame(session_id, frame.to_sample())
                    await websocket.send_json({"type": "step", "data": step})
                    if step["advanced"] and step["phase"] == "complete":
                        await websocket.send_json({
                            "type": "exercise_completed",
                            "data": exercise_service.get_state(session_id),
                        })

                elif message_type == "set_tolerance":
                    request = ToleranceUpdateRequest.model_validate(data)
                    state = exercise_service.set_tolerance(session_id, request.tolerance)
                    await websocket.send_json({"type": "session", "data": state})

                elif message_type == "reset":
                    state = exercise_service.reset_session(session_id)
                    await websocket.send_json({"type": "session", "data": state})

                elif message_type == "end_session":
                    summary = exercise_service.end_session(session_id)
                    await websocket.send_json({"type": "session_ended", "data": summary})
                    await websocket.close()
                    break

                else:
                    await websocket.send_json({
                        "type": "error",
                        "message": f"Unknown message type: {message_type}",
                    })

            except ValidationError as e:
                await websocket.send_json({"type": "error", "message": str(e)})
            except CustomException as e:
                await websocket.send_json({"type": "error", "message": e.message})
                if e.http_code == 404:
                    await websocket.close()
                    break

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for session {session_id}")
