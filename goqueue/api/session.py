"""顾问会话 API 接口

共享口令只是界面层拦截，不是真正的认证。
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from goqueue.api.dependencies import get_dashboard
from goqueue.core.dashboard import Dashboard
from goqueue.models import Department

# 创建路由
router = APIRouter()


class LoginRequest(BaseModel):
    """登录请求"""

    name: str
    department: Department = Department.EDUCATION_ABROAD
    password: Optional[str] = None


def _session_info(dashboard: Dashboard) -> dict:
    state = dashboard.state
    return {
        "advisor": state.advisor.model_dump(mode="json") if state.advisor else None,
        "view_mode": state.view_mode.value,
        "login_required": state.login_required,
    }


@router.get("/session")
async def get_session(dashboard: Dashboard = Depends(get_dashboard)):
    """当前登录的顾问"""
    return _session_info(dashboard)


@router.post("/session/login")
async def login(request: LoginRequest, dashboard: Dashboard = Depends(get_dashboard)):
    """顾问登录；口令错误或姓名为空时返回 401"""
    if not dashboard.login(request.name, request.department, request.password):
        raise HTTPException(status_code=401, detail=dashboard.state.login_error)
    return _session_info(dashboard)


@router.post("/session/logout")
async def logout(dashboard: Dashboard = Depends(get_dashboard)):
    """顾问登出"""
    dashboard.logout()
    return _session_info(dashboard)
