"""Session management endpoints - list and revoke the caller's sessions."""

from fastapi import APIRouter

from teamtodo.auth.middleware import CurrentUserDep, SessionManagerDep
from teamtodo.schemas.session import DeviceInfo, RevokeOthersResponse, SessionInfo
from teamtodo.utils.user_agent import format_last_active, parse_user_agent

router = APIRouter()


@router.get("/sessions", response_model=list[SessionInfo])
async def list_sessions(current: CurrentUserDep, manager: SessionManagerDep):
    """Active sessions for the caller, current session first."""
    current_id = manager.current_session_id()
    now = manager.clock()
    records = await manager.list_sessions(current.user_id)
    infos = []
    for record in records:
        device = parse_user_agent(record.user_agent)
        infos.append(
            SessionInfo(
                id=record.id,
                device=DeviceInfo(
                    device_type=device.device_type,
                    browser=device.browser,
                    os=device.os,
                    display_name=device.display_name,
                ),
                last_active=format_last_active(record.last_active_at, now),
                created_at=record.created_at,
                is_current=record.id == current_id,
            )
        )
    infos.sort(key=lambda info: not info.is_current)
    return infos


@router.delete("/sessions/{session_id}")
async def revoke_session(
    session_id: str, current: CurrentUserDep, manager: SessionManagerDep
):
    await manager.revoke_session(current.user_id, session_id)
    return {"success": True}


@router.delete("/sessions", response_model=RevokeOthersResponse)
async def revoke_other_sessions(current: CurrentUserDep, manager: SessionManagerDep):
    """Sign out everywhere else."""
    revoked = await manager.revoke_other_sessions(current.user_id)
    return RevokeOthersResponse(revoked_count=revoked)
