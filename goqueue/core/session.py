"""顾问会话状态迁移"""
import logging
from typing import Optional

from goqueue.core.errors import InvalidCredentialsError
from goqueue.models import Advisor, AppState, Department, ViewMode

logger = logging.getLogger(__name__)


class AdvisorSession:
    """顾问登录 / 登出

    同一时间最多一名顾问登录，没有过期和多租户。
    共享口令只是界面层的拦截，不是真正的身份认证。
    """

    def __init__(self, password: Optional[str] = None):
        """初始化

        Args:
            password: 所有部门共用的口令，None 表示不校验
        """
        self.password = password

    def login(
        self,
        state: AppState,
        name: str,
        department: Department,
        password: Optional[str] = None,
    ) -> AppState:
        """登录

        Returns:
            更新后的状态（设置顾问，清除登录提示和错误）

        Raises:
            InvalidCredentialsError: 口令错误或姓名为空
        """
        if self.password is not None and password != self.password:
            logger.info(f"登录失败（口令错误）: {name}")
            raise InvalidCredentialsError("Incorrect password.")

        if not name or not name.strip():
            raise InvalidCredentialsError("Please enter your name.")

        advisor = Advisor(name=name, department=department)
        logger.info(f"顾问登录: {advisor.name} ({advisor.department.value})")
        return state.model_copy(update={
            "advisor": advisor,
            "login_required": False,
            "login_error": None,
        })

    def logout(self, state: AppState) -> AppState:
        """登出：无条件清除顾问，并回到默认的排队视图"""
        if state.advisor is not None:
            logger.info(f"顾问登出: {state.advisor.name}")
        return state.model_copy(update={
            "advisor": None,
            "view_mode": ViewMode.QUEUE,
        })
