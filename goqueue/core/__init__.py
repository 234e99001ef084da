"""排队核心

核心组件：
- QueueStore: 排队状态迁移（纯函数）
- AdvisorSession: 顾问登录 / 登出
- EnrichmentClient: AI 工单分析
- Dashboard: 看板主控，持有 AppState
"""

from goqueue.core.errors import (
    GoQueueError,
    UnauthorizedError,
    TicketNotFoundError,
    InvalidCredentialsError,
    EnrichmentUnavailableError,
)
from goqueue.core.queue_store import QueueStore
from goqueue.core.session import AdvisorSession
from goqueue.core.enrichment import EnrichmentClient, STATIC_FALLBACK
from goqueue.core.dashboard import Dashboard

__all__ = [
    "GoQueueError",
    "UnauthorizedError",
    "TicketNotFoundError",
    "InvalidCredentialsError",
    "EnrichmentUnavailableError",
    "QueueStore",
    "AdvisorSession",
    "EnrichmentClient",
    "STATIC_FALLBACK",
    "Dashboard",
]
