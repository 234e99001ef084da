"""API 共享依赖

整个进程只有一个看板实例（状态只存在内存中，服务重启后丢失）。
"""
from typing import Optional

from goqueue.core.dashboard import Dashboard
from goqueue.utils.config import load_config

_dashboard: Optional[Dashboard] = None


def get_dashboard() -> Dashboard:
    """获取看板单例（首次调用时按配置创建）"""
    global _dashboard
    if _dashboard is None:
        _dashboard = Dashboard.from_config(load_config())
    return _dashboard
