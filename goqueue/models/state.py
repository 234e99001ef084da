"""看板应用状态

所有界面相关状态集中在 AppState 中，由 Dashboard 独占持有；
状态迁移通过纯函数返回新的 AppState。
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from goqueue.models.ticket import Advisor, Ticket


class ViewMode(str, Enum):
    """视图模式"""
    QUEUE = "queue"
    HISTORY = "history"  # 仅顾问可见


class QueueState(BaseModel):
    """排队状态

    Attributes:
        waiting: 等待队列（按到达顺序）
        helped: 已接待记录（最新接待的在前）
    """
    waiting: List[Ticket] = Field(default_factory=list)
    helped: List[Ticket] = Field(default_factory=list)


class Notification(BaseModel):
    """提示消息（到期后自动隐藏）"""
    message: str
    shown_at: datetime = Field(default_factory=datetime.now)

    def is_visible(self, timeout_seconds: float, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now()
        return (now - self.shown_at).total_seconds() < timeout_seconds


class RemovalRequest(BaseModel):
    """待确认的移除操作"""
    ticket_id: str
    message: str


class AppState(BaseModel):
    """看板应用状态"""
    queue: QueueState = Field(default_factory=QueueState)
    advisor: Optional[Advisor] = None
    view_mode: ViewMode = ViewMode.QUEUE
    notification: Optional[Notification] = None
    pending_removal: Optional[RemovalRequest] = None
    login_required: bool = False  # 需要弹出登录框
    login_error: Optional[str] = None
    is_simulating: bool = False

    @property
    def is_advisor_logged_in(self) -> bool:
        return self.advisor is not None
