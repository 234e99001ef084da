"""排队 API 接口"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from goqueue.api.dependencies import get_dashboard
from goqueue.core.dashboard import Dashboard
from goqueue.core.errors import TicketNotFoundError
from goqueue.models import CheckInForm, Department, Ticket, TicketDraft

# 创建路由
router = APIRouter()


def serialize_ticket(ticket: Optional[Ticket]) -> Optional[Dict[str, Any]]:
    """工单转为 JSON 字典（附带展示用标签）"""
    if ticket is None:
        return None
    data = ticket.model_dump(mode="json")
    data["display_tags"] = ticket.display_tags
    return data


def _notification_message(dashboard: Dashboard) -> Optional[str]:
    notification = dashboard.active_notification()
    return notification.message if notification else None


def _check_in(
    dashboard: Dashboard,
    draft: TicketDraft,
    background_tasks: BackgroundTasks,
) -> Dict[str, Any]:
    """签到并在后台执行 AI 分析"""
    ticket_id = dashboard.check_in(draft)
    if dashboard.queue_config.auto_enrich:
        problem = dashboard.get_ticket(ticket_id).problem
        background_tasks.add_task(dashboard.enrich, ticket_id, problem)
    return {"ticket_id": ticket_id}


@router.get("/queue")
async def get_queue(dashboard: Dashboard = Depends(get_dashboard)):
    """按部门返回等待队列"""
    return {
        "departments": [
            {
                "department": dept.value,
                "tickets": [serialize_ticket(t) for t in dashboard.list_by_department(dept)],
            }
            for dept in Department
        ],
        "total": len(dashboard.list_waiting()),
    }


@router.get("/tickets")
async def list_tickets(
    department: Optional[Department] = None,
    dashboard: Dashboard = Depends(get_dashboard),
):
    """等待中的学生，可按部门过滤（保持队列顺序）"""
    if department is None:
        tickets = dashboard.list_waiting()
    else:
        tickets = dashboard.list_by_department(department)
    return {"tickets": [serialize_ticket(t) for t in tickets]}


@router.post("/tickets", status_code=201)
async def check_in(
    draft: TicketDraft,
    background_tasks: BackgroundTasks,
    dashboard: Dashboard = Depends(get_dashboard),
):
    """签到（缺失字段使用默认值）"""
    return _check_in(dashboard, draft, background_tasks)


@router.post("/tickets/form", status_code=201)
async def submit_form(
    form: CheckInForm,
    background_tasks: BackgroundTasks,
    dashboard: Dashboard = Depends(get_dashboard),
):
    """手动签到表单（类别 + 补充说明）"""
    return _check_in(dashboard, form.to_draft(), background_tasks)


@router.post("/tickets/simulate", status_code=201)
async def simulate(dashboard: Dashboard = Depends(get_dashboard)):
    """AI 生成一个演示学生并签到"""
    ticket_id = await dashboard.simulate()
    if ticket_id is None:
        raise HTTPException(status_code=503, detail=Dashboard.SAMPLE_UNAVAILABLE_MESSAGE)
    return {"ticket_id": ticket_id}


@router.get("/tickets/{ticket_id}")
async def get_ticket(ticket_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    """获取工单（等待或已接待）"""
    try:
        return serialize_ticket(dashboard.get_ticket(ticket_id))
    except TicketNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/tickets/{ticket_id}/help")
async def help_ticket(ticket_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    """接待学生（需顾问登录）；工单不在等待队列时 ticket 为 null"""
    if dashboard.state.advisor is None:
        dashboard.prompt_login()
        raise HTTPException(status_code=401, detail="Advisor login required")

    ticket = dashboard.help(ticket_id)
    return {
        "ticket": serialize_ticket(ticket),
        "notification": _notification_message(dashboard) if ticket else None,
    }


@router.post("/tickets/{ticket_id}/retract")
async def retract_ticket(ticket_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    """撤回接待（需顾问登录），工单回到队尾"""
    if dashboard.state.advisor is None:
        raise HTTPException(status_code=401, detail="Advisor login required")

    ticket = dashboard.retract(ticket_id)
    return {
        "ticket": serialize_ticket(ticket),
        "notification": _notification_message(dashboard) if ticket else None,
    }


@router.post("/tickets/{ticket_id}/removal")
async def request_removal(ticket_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    """离队第一步：返回待确认信息"""
    request = dashboard.request_removal(ticket_id)
    if request is None:
        raise HTTPException(status_code=404, detail=f"Ticket not waiting: {ticket_id}")
    return request.model_dump()


@router.post("/removal/confirm")
async def confirm_removal(dashboard: Dashboard = Depends(get_dashboard)):
    """离队第二步：执行删除；工单已不在队列时 ticket 为 null"""
    ticket = dashboard.confirm_removal()
    return {
        "ticket": serialize_ticket(ticket),
        "notification": _notification_message(dashboard) if ticket else None,
    }


@router.post("/removal/cancel")
async def cancel_removal(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.cancel_removal()
    return {"message": "cancelled"}


@router.get("/history")
async def get_history(dashboard: Dashboard = Depends(get_dashboard)):
    """已接待记录（最新在前）"""
    return {"tickets": [serialize_ticket(t) for t in dashboard.list_history()]}


@router.get("/notification")
async def get_notification(dashboard: Dashboard = Depends(get_dashboard)):
    notification = dashboard.active_notification()
    return {"notification": notification.model_dump(mode="json") if notification else None}


@router.delete("/notification")
async def dismiss_notification(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.dismiss_notification()
    return {"notification": None}
