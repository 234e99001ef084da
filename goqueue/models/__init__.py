"""数据模型模块

组织结构：
- ticket: 工单领域模型 (Ticket, Department, Enrichment, etc.)
- state: 看板状态模型 (AppState, QueueState, etc.)
"""
# 工单领域模型
from goqueue.models.ticket import (
    Department,
    Priority,
    TicketStatus,
    DEPARTMENT_CATEGORIES,
    DEPARTMENT_STYLES,
    Enrichment,
    HelpRecord,
    Advisor,
    TicketDraft,
    CheckInForm,
    Ticket,
)

# 看板状态模型
from goqueue.models.state import (
    ViewMode,
    QueueState,
    Notification,
    RemovalRequest,
    AppState,
)

__all__ = [
    # 工单模型
    "Department",
    "Priority",
    "TicketStatus",
    "DEPARTMENT_CATEGORIES",
    "DEPARTMENT_STYLES",
    "Enrichment",
    "HelpRecord",
    "Advisor",
    "TicketDraft",
    "CheckInForm",
    "Ticket",
    # 状态模型
    "ViewMode",
    "QueueState",
    "Notification",
    "RemovalRequest",
    "AppState",
]
