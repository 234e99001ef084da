"""Dashboard - 看板主控

持有唯一的 AppState，把界面意图（签到、接待、撤回、离队、登录等）
转换为 QueueStore / AdvisorSession 的状态迁移，并生成提示消息。
"""
import logging
from datetime import datetime
from typing import List, Optional

from goqueue.core.enrichment import STATIC_FALLBACK, EnrichmentClient
from goqueue.core.errors import InvalidCredentialsError, UnauthorizedError
from goqueue.core.queue_store import QueueStore
from goqueue.core.session import AdvisorSession
from goqueue.models import (
    AppState,
    CheckInForm,
    Department,
    Notification,
    RemovalRequest,
    Ticket,
    TicketDraft,
    ViewMode,
)
from goqueue.services.llm_service import LLMService
from goqueue.utils.config import Config, QueueConfig

logger = logging.getLogger(__name__)


class Dashboard:
    """看板主控

    单线程事件循环下唯一的写入方：每个意图在一次同步调用中完成状态替换。
    异步的 AI 调用返回后重新读取当前状态再写入（先检查后写入），
    因此过期的分析结果不会复活已离开等待队列的工单。
    """

    SAMPLE_UNAVAILABLE_MESSAGE = "Could not generate a sample student."

    def __init__(
        self,
        enrichment_client: Optional[EnrichmentClient] = None,
        session: Optional[AdvisorSession] = None,
        queue_config: Optional[QueueConfig] = None,
        store: Optional[QueueStore] = None,
    ):
        """初始化

        Args:
            enrichment_client: AI 分析客户端（默认不启用 AI）
            session: 顾问会话（默认不校验口令）
            queue_config: 排队配置
            store: 排队状态迁移
        """
        self.enrichment_client = enrichment_client or EnrichmentClient()
        self.session = session or AdvisorSession()
        self.queue_config = queue_config or QueueConfig()
        self.store = store or QueueStore()
        self.state = AppState()

    @classmethod
    def from_config(cls, config: Config) -> "Dashboard":
        """按配置创建看板（没有 llm 配置时不启用 AI）"""
        llm_service = LLMService(config) if config.llm is not None else None
        return cls(
            enrichment_client=EnrichmentClient(llm_service),
            session=AdvisorSession(password=config.session.password),
            queue_config=config.queue,
        )

    # ===== 签到 =====

    def check_in(self, draft: TicketDraft, now: Optional[datetime] = None) -> str:
        """签到（不调用 AI）"""
        ticket_id, queue = self.store.check_in(self.state.queue, draft, now=now)
        self._set(queue=queue)
        return ticket_id

    def submit_check_in(self, form: CheckInForm) -> str:
        """手动签到表单提交"""
        return self.check_in(form.to_draft())

    async def check_in_and_enrich(self, draft: TicketDraft) -> str:
        """签到，并在开启自动分析时等待 AI 结果写入"""
        ticket_id = self.check_in(draft)
        if self.queue_config.auto_enrich:
            await self.enrich(ticket_id, self.store.get(self.state.queue, ticket_id).problem)
        return ticket_id

    async def enrich(self, ticket_id: str, problem_text: str) -> None:
        """为工单写入 AI 分析结果

        AI 不可用时按配置使用静态兜底结果或保持未分析状态。
        """
        enrichment = await self.enrichment_client.analyze(problem_text)
        if enrichment is None:
            if not self.queue_config.enrichment_fallback:
                return
            enrichment = STATIC_FALLBACK

        # await 之后重新读取当前状态
        self._set(queue=self.store.apply_enrichment(self.state.queue, ticket_id, enrichment))

    async def simulate(self) -> Optional[str]:
        """生成并签到一个演示学生

        Returns:
            新工单 ID；生成失败时返回 None
        """
        self._set(is_simulating=True)
        try:
            draft = await self.enrichment_client.generate_sample()
            if draft is None:
                self.notify(self.SAMPLE_UNAVAILABLE_MESSAGE)
                return None
            return await self.check_in_and_enrich(draft)
        finally:
            self._set(is_simulating=False)

    # ===== 接待 / 撤回 / 离队 =====

    def help(self, ticket_id: str, now: Optional[datetime] = None) -> Optional[Ticket]:
        """接待学生；未登录时弹出登录提示"""
        advisor = self.state.advisor
        try:
            ticket, queue = self.store.help(self.state.queue, ticket_id, advisor, now=now)
        except UnauthorizedError:
            self.prompt_login()
            return None

        if ticket is None:
            return None

        self._set(queue=queue)
        self.notify(
            f"{advisor.name} from {advisor.department.value} "
            f"is going to help {ticket.name} in a minute"
        )
        return ticket

    def retract(self, ticket_id: str) -> Optional[Ticket]:
        """撤回接待；未登录时静默忽略"""
        try:
            ticket, queue = self.store.retract(self.state.queue, ticket_id, self.state.advisor)
        except UnauthorizedError:
            logger.debug(f"撤回忽略（未登录）: {ticket_id}")
            return None

        if ticket is None:
            return None

        self._set(queue=queue)
        self.notify(f"{ticket.name} was returned to the Queue.")
        return ticket

    def request_removal(self, ticket_id: str) -> Optional[RemovalRequest]:
        """离队第一步：生成待确认请求"""
        ticket = self.store.find_waiting(self.state.queue, ticket_id)
        if ticket is None:
            return None

        if self.state.advisor is not None:
            message = f"Are you sure you want to discharge {ticket.name} from the queue?"
        else:
            message = f"Are you sure you want to leave the queue, {ticket.name}?"

        request = RemovalRequest(ticket_id=ticket_id, message=message)
        self._set(pending_removal=request)
        return request

    def confirm_removal(self) -> Optional[Ticket]:
        """离队第二步：执行删除（工单可能已被接待，此时忽略）"""
        request = self.state.pending_removal
        self._set(pending_removal=None)
        if request is None:
            return None

        ticket, queue = self.store.remove(self.state.queue, request.ticket_id)
        if ticket is None:
            return None

        self._set(queue=queue)
        self.notify(f"{ticket.name} has left the queue.")
        return ticket

    def cancel_removal(self) -> None:
        self._set(pending_removal=None)

    # ===== 顾问会话 =====

    def login(
        self,
        name: str,
        department: Department,
        password: Optional[str] = None,
    ) -> bool:
        """登录

        Returns:
            是否成功；失败原因写入 state.login_error
        """
        try:
            self.state = self.session.login(self.state, name, department, password)
        except InvalidCredentialsError as e:
            self._set(login_error=str(e))
            return False
        return True

    def logout(self) -> None:
        self.state = self.session.logout(self.state)

    def prompt_login(self) -> None:
        """弹出登录提示"""
        self._set(login_required=True, login_error=None)

    def close_login(self) -> None:
        self._set(login_required=False, login_error=None)

    def set_view(self, mode: ViewMode) -> bool:
        """切换视图；历史记录仅顾问可见"""
        if mode == ViewMode.HISTORY and self.state.advisor is None:
            self.prompt_login()
            return False
        self._set(view_mode=mode)
        return True

    # ===== 提示消息 =====

    def notify(self, message: str, now: Optional[datetime] = None) -> None:
        logger.info(f"通知: {message}")
        self._set(notification=Notification(message=message, shown_at=now or datetime.now()))

    def active_notification(self, now: Optional[datetime] = None) -> Optional[Notification]:
        """当前可见的提示（超过显示时长自动隐藏）"""
        notification = self.state.notification
        if notification is None:
            return None
        if not notification.is_visible(self.queue_config.notification_seconds, now=now):
            return None
        return notification

    def dismiss_notification(self) -> None:
        self._set(notification=None)

    # ===== 查询 =====

    def get_ticket(self, ticket_id: str) -> Ticket:
        return self.store.get(self.state.queue, ticket_id)

    def list_waiting(self) -> List[Ticket]:
        return list(self.state.queue.waiting)

    def list_by_department(self, department: Department) -> List[Ticket]:
        return self.store.list_by_department(self.state.queue, department)

    def list_history(self) -> List[Ticket]:
        return self.store.list_history(self.state.queue)

    def _set(self, **changes) -> None:
        """替换应用状态"""
        self.state = self.state.model_copy(update=changes)
