"""QueueStore - 排队状态迁移

签到 → 等待 → 已接待 → 撤回 / 移除。
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from goqueue.core.errors import TicketNotFoundError, UnauthorizedError
from goqueue.models import (
    Advisor,
    Department,
    Enrichment,
    HelpRecord,
    QueueState,
    Ticket,
    TicketDraft,
    TicketStatus,
)

logger = logging.getLogger(__name__)


class QueueStore:
    """排队状态迁移

    所有方法都是纯函数：接收当前 QueueState，返回结果和新的 QueueState，
    不修改传入的状态。操作不存在的工单时原样返回（幂等、静默）。

    约束：
    1. 工单创建后恰好属于 waiting / helped 之一
    2. waiting 中的工单没有接待记录，helped 中的工单必有接待记录
    3. 优先级只用于展示，不参与排序
    """

    # 签到默认值
    DEFAULT_NAME = "Unknown"
    DEFAULT_UNIVERSITY_ID = "000-00-000"
    DEFAULT_DEPARTMENT = Department.INTL_ADMISSIONS
    DEFAULT_PROBLEM = "General Inquiry"

    def check_in(
        self,
        state: QueueState,
        draft: TicketDraft,
        now: Optional[datetime] = None,
    ) -> Tuple[str, QueueState]:
        """签到

        Args:
            state: 当前排队状态
            draft: 签到信息（缺失字段使用默认值）
            now: 签到时间（默认当前时间）

        Returns:
            (新工单 ID, 更新后的状态)
        """
        ticket = Ticket(
            name=draft.name or self.DEFAULT_NAME,
            university_id=draft.university_id or self.DEFAULT_UNIVERSITY_ID,
            department=draft.department or self.DEFAULT_DEPARTMENT,
            problem=draft.problem or self.DEFAULT_PROBLEM,
            check_in_time=now or datetime.now(),
            tags=list(draft.tags),
        )
        logger.info(f"签到: {ticket.id} {ticket.name} -> {ticket.department.value}")
        new_state = state.model_copy(update={"waiting": state.waiting + [ticket]})
        return ticket.id, new_state

    def apply_enrichment(
        self,
        state: QueueState,
        ticket_id: str,
        enrichment: Enrichment,
    ) -> QueueState:
        """写入 AI 分析结果

        只有工单仍在等待队列中才写入；已被接待或移除的工单直接丢弃结果。
        """
        if self.find_waiting(state, ticket_id) is None:
            logger.debug(f"工单 {ticket_id} 已不在等待队列，丢弃分析结果")
            return state

        waiting = [
            t.model_copy(update={"enrichment": enrichment}) if t.id == ticket_id else t
            for t in state.waiting
        ]
        return state.model_copy(update={"waiting": waiting})

    def help(
        self,
        state: QueueState,
        ticket_id: str,
        advisor: Optional[Advisor],
        now: Optional[datetime] = None,
    ) -> Tuple[Optional[Ticket], QueueState]:
        """接待学生：从等待队列移到已接待记录最前面

        Returns:
            (被接待的工单, 更新后的状态)；工单不在等待队列时返回 (None, 原状态)

        Raises:
            UnauthorizedError: 没有登录的顾问
        """
        if advisor is None:
            raise UnauthorizedError("Advisor login required to help a student")

        ticket = self.find_waiting(state, ticket_id)
        if ticket is None:
            logger.debug(f"接待忽略: {ticket_id} 不在等待队列")
            return None, state

        helped = ticket.model_copy(update={
            "status": TicketStatus.COMPLETED,
            "help": HelpRecord(helped_by=advisor.name, helped_at=now or datetime.now()),
        })
        logger.info(f"接待: {ticket.id} {ticket.name} by {advisor.name}")
        new_state = state.model_copy(update={
            "waiting": [t for t in state.waiting if t.id != ticket_id],
            "helped": [helped] + state.helped,
        })
        return helped, new_state

    def retract(
        self,
        state: QueueState,
        ticket_id: str,
        advisor: Optional[Advisor],
    ) -> Tuple[Optional[Ticket], QueueState]:
        """撤回接待：清除接待记录，放回等待队列末尾（不恢复原位置）

        Raises:
            UnauthorizedError: 没有登录的顾问
        """
        if advisor is None:
            raise UnauthorizedError("Advisor login required to retract")

        ticket = self.find_helped(state, ticket_id)
        if ticket is None:
            logger.debug(f"撤回忽略: {ticket_id} 不在已接待记录")
            return None, state

        restored = ticket.model_copy(update={
            "status": TicketStatus.WAITING,
            "help": None,
        })
        logger.info(f"撤回: {ticket.id} {ticket.name}")
        new_state = state.model_copy(update={
            "waiting": state.waiting + [restored],
            "helped": [t for t in state.helped if t.id != ticket_id],
        })
        return restored, new_state

    def remove(
        self,
        state: QueueState,
        ticket_id: str,
    ) -> Tuple[Optional[Ticket], QueueState]:
        """从等待队列永久删除（离队 / 劝离），不保留记录"""
        ticket = self.find_waiting(state, ticket_id)
        if ticket is None:
            logger.debug(f"移除忽略: {ticket_id} 不在等待队列")
            return None, state

        logger.info(f"离队: {ticket.id} {ticket.name}")
        new_state = state.model_copy(update={
            "waiting": [t for t in state.waiting if t.id != ticket_id],
        })
        return ticket, new_state

    # ===== 查询 =====

    def find_waiting(self, state: QueueState, ticket_id: str) -> Optional[Ticket]:
        return next((t for t in state.waiting if t.id == ticket_id), None)

    def find_helped(self, state: QueueState, ticket_id: str) -> Optional[Ticket]:
        return next((t for t in state.helped if t.id == ticket_id), None)

    def get(self, state: QueueState, ticket_id: str) -> Ticket:
        """按 ID 查询工单（等待或已接待）

        Raises:
            TicketNotFoundError: 工单不存在
        """
        ticket = self.find_waiting(state, ticket_id) or self.find_helped(state, ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    def list_by_department(self, state: QueueState, department: Department) -> List[Ticket]:
        """指定部门的等待学生（保持队列顺序）"""
        return [t for t in state.waiting if t.department == department]

    def list_history(self, state: QueueState) -> List[Ticket]:
        """已接待记录，按接待时间倒序；没有接待时间的排最后"""
        return sorted(
            state.helped,
            key=lambda t: t.helped_at or datetime.min,
            reverse=True,
        )
