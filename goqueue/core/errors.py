"""错误类型

均不致命：Dashboard 会把它们转换为登录提示、表单错误或静默忽略。
"""


class GoQueueError(Exception):
    """基类"""


class UnauthorizedError(GoQueueError):
    """需要顾问登录的操作在未登录时执行"""


class TicketNotFoundError(GoQueueError):
    """工单不存在（仅显式查询时抛出，状态迁移中静默忽略）"""

    def __init__(self, ticket_id: str):
        super().__init__(f"Ticket not found: {ticket_id}")
        self.ticket_id = ticket_id


class InvalidCredentialsError(GoQueueError):
    """登录信息无效"""


class EnrichmentUnavailableError(GoQueueError):
    """AI 分析失败或返回无法解析的数据"""
