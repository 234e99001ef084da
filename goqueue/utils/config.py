"""配置加载模块"""
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel


class LLMConfig(BaseModel):
    """LLM 配置（OpenAI 兼容接口）"""
    api_base: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    api_key: str = ""
    model: str = "gemini-2.5-flash"
    temperature: float = 0.7
    max_tokens: int = 1024
    timeout: float = 30  # 秒
    system_prompt: str = ""


class QueueConfig(BaseModel):
    """排队配置"""
    auto_enrich: bool = True  # 签到后自动调用 AI 打标签
    enrichment_fallback: bool = True  # AI 不可用时使用静态兜底结果
    notification_seconds: float = 5.0  # 通知自动消失时间


class SessionConfig(BaseModel):
    """顾问登录配置"""
    # 所有部门共用的口令，仅做界面层拦截；None 表示不校验
    password: Optional[str] = "departmentname"


class WebConfig(BaseModel):
    """Web 服务配置"""
    host: str = "127.0.0.1"
    port: int = 8000


class Config(BaseModel):
    """全局配置"""
    llm: Optional[LLMConfig] = None
    queue: QueueConfig = QueueConfig()
    session: SessionConfig = SessionConfig()
    web: WebConfig = WebConfig()


def load_config(config_path: Optional[str] = None) -> Config:
    """
    加载配置文件

    Args:
        config_path: 配置文件路径，默认按以下顺序查找：
                     1. 环境变量 CONFIG_PATH
                     2. 项目根目录的 config.yaml

    Returns:
        Config: 配置对象

    Raises:
        FileNotFoundError: 显式指定的配置文件不存在
    """
    explicit = config_path is not None

    if config_path is None:
        # 优先从环境变量读取
        config_path = os.environ.get("CONFIG_PATH")
        explicit = config_path is not None

    if config_path is None:
        # 默认使用项目根目录的 config.yaml
        project_root = Path(__file__).parent.parent.parent
        config_path = project_root / "config.yaml"

    config_path = Path(config_path)

    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(
                f"配置文件不存在: {config_path}\n"
                f"请复制 config.yaml.example 并修改为 config.yaml"
            )
        # 默认位置没有配置文件：使用内置默认值（不启用 AI）
        return Config()

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    return Config(**config_dict)
