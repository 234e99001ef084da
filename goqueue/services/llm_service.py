"""LLM API 调用服务

使用 OpenAI SDK 调用兼容 OpenAI API 的 LLM 服务（默认 Gemini 的兼容端点）
"""
import re
from typing import Dict, List, Optional

from openai import AsyncOpenAI

from goqueue.utils.config import Config


# 匹配 <think>...</think> 标签（支持多行）
THINK_TAG_PATTERN = re.compile(r"<think>.*?</think>\s*", re.DOTALL)


class LLMService:
    """LLM 服务封装

    只做单次调用（带超时），失败直接抛出，由调用方决定如何降级。
    """

    DEFAULT_TIMEOUT = 30  # 秒

    def __init__(self, config: Config):
        """
        初始化 LLM 服务

        Args:
            config: 全局配置对象（必须包含 llm 配置）
        """
        if config.llm is None:
            raise ValueError("缺少 llm 配置")

        self.config = config
        self.model = config.llm.model
        self.temperature = config.llm.temperature
        self.max_tokens = config.llm.max_tokens
        self.system_prompt = config.llm.system_prompt
        self.timeout = getattr(config.llm, "timeout", self.DEFAULT_TIMEOUT)

        # 异步客户端（延迟初始化）
        self._async_client: Optional[AsyncOpenAI] = None

    @property
    def async_client(self) -> AsyncOpenAI:
        """获取异步客户端（延迟初始化）"""
        if self._async_client is None:
            self._async_client = AsyncOpenAI(
                api_key=self.config.llm.api_key,
                base_url=self.config.llm.api_base,
            )
        return self._async_client

    async def _generate(
        self,
        messages: List[Dict[str, str]],
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False,
    ) -> str:
        """内部方法：生成回复

        Args:
            messages: 对话消息列表 [{"role": "user", "content": "..."}, ...]
            system_prompt: 系统提示（可选，覆盖默认）
            temperature: 温度参数（可选，覆盖默认）
            json_mode: 是否要求返回 JSON 对象

        Returns:
            生成的回复文本
        """
        full_messages = []

        if system_prompt is None:
            system_prompt = self.system_prompt

        if system_prompt:
            full_messages.append({"role": "system", "content": system_prompt})

        full_messages.extend(messages)

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.async_client.chat.completions.create(
            model=self.model,
            messages=full_messages,
            temperature=temperature if temperature is not None else self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
            **kwargs,
        )
        if not response.choices:
            return ""
        return self._clean_response(response.choices[0].message.content)

    def _clean_response(self, content: str) -> str:
        """清理 LLM 响应

        - 去除 <think>...</think> 标签（模型的思考过程）
        - 去除首尾空白
        """
        if not content:
            return ""
        content = THINK_TAG_PATTERN.sub("", content)
        return content.strip()

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """生成回复（单轮对话）"""
        messages = [{"role": "user", "content": prompt}]
        return await self._generate(messages, system_prompt=system_prompt)

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """生成 JSON 回复（单轮对话）

        Returns:
            JSON 文本（未解析，可能为空或不合法，由调用方校验）
        """
        messages = [{"role": "user", "content": prompt}]
        return await self._generate(
            messages,
            system_prompt=system_prompt,
            temperature=temperature,
            json_mode=True,
        )
