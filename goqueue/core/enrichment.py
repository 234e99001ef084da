"""AI 工单分析

基于 LLM 给学生的问题打标签、判断优先级、生成摘要，
以及为演示生成随机学生。
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from goqueue.core.errors import EnrichmentUnavailableError
from goqueue.models import (
    DEPARTMENT_CATEGORIES,
    Department,
    Enrichment,
    Priority,
    TicketDraft,
)
from goqueue.models.ticket import OTHER_CATEGORY
from goqueue.services.llm_service import LLMService

logger = logging.getLogger(__name__)


# AI 不可用时的静态兜底结果
STATIC_FALLBACK = Enrichment(
    tags=["General Inquiry"],
    priority=Priority.MEDIUM,
    summary="Check details",
)

MAX_TAGS = 3
MAX_SUMMARY_WORDS = 6


def _strip_code_fence(response: str) -> str:
    """清理 markdown 代码块"""
    response = response.strip()
    if response.startswith("```"):
        response = re.sub(r'^```\w*\n?', '', response)
        response = re.sub(r'\n?```$', '', response)
    return response.strip()


def _load_json_object(response: str) -> Dict[str, Any]:
    """解析 JSON 对象

    Raises:
        EnrichmentUnavailableError: 空响应或不是 JSON 对象
    """
    response = _strip_code_fence(response or "")
    if not response:
        raise EnrichmentUnavailableError("LLM 返回为空")

    try:
        data = json.loads(response)
    except json.JSONDecodeError as e:
        raise EnrichmentUnavailableError(f"JSON 解析失败: {e}") from e

    if not isinstance(data, dict):
        raise EnrichmentUnavailableError(f"期望 JSON 对象，实际为 {type(data).__name__}")
    return data


class EnrichmentClient:
    """工单分析客户端

    两个操作都不会向调用方抛出异常：网络错误、空响应、格式错误
    一律返回 None（表示不可用），由 Dashboard 决定是否使用兜底结果。
    """

    ANALYZE_PROMPT = """Analyze the following student inquiry for an international office dashboard.
Inquiry: "{problem}"

Tasks:
1. Generate 1-3 short keyword tags. Use STANDARD categories if applicable:
   - "Resolve Holds", "Transcripts", "Application Help", "Visa/I-20", "Travel Sig", "Funding", "Program Info".
2. Determine priority level (High, Medium, Low). Visa/Legal deadlines are High. General info is Low.
3. Create a very brief summary (max 6 words).

Return only a JSON object:
{{"tags": ["..."], "priority": "High" | "Medium" | "Low", "summary": "..."}}"""

    SAMPLE_PROMPT = """Generate a realistic university student profile for a check-in system at the University of South Florida Global Student Center.

You MUST RANDOMLY select one of the following departments:
{departments}

The 'problem' and 'tag' MUST be consistent with the department:
{categories}

Return only a JSON object with:
- name (Full Name, diverse international names)
- universityId (Format: U-number e.g., U12345678)
- department (The randomly selected department, spelled exactly as above)
- problem (The specific scenario detail)
- tag (The category chosen from the list above)"""

    def __init__(self, llm_service: Optional[LLMService] = None):
        """初始化

        Args:
            llm_service: LLM 服务；None 表示未配置 AI，所有操作直接返回 None
        """
        self.llm_service = llm_service

    @property
    def is_available(self) -> bool:
        return self.llm_service is not None

    async def analyze(self, problem_text: str) -> Optional[Enrichment]:
        """分析问题描述

        Args:
            problem_text: 学生的问题描述

        Returns:
            分析结果；不可用时返回 None
        """
        problem_text = (problem_text or "").strip()
        if not problem_text or self.llm_service is None:
            return None

        prompt = self.ANALYZE_PROMPT.format(problem=problem_text)
        try:
            response = await self.llm_service.generate_json(prompt)
            return self._parse_analysis(response)
        except EnrichmentUnavailableError as e:
            logger.warning(f"工单分析结果无效: {e}")
            return None
        except Exception as e:
            logger.warning(f"工单分析调用失败: {type(e).__name__}: {e}")
            return None

    async def generate_sample(self) -> Optional[TicketDraft]:
        """生成一个随机的演示学生

        Returns:
            签到草稿；不可用时返回 None
        """
        if self.llm_service is None:
            return None

        try:
            response = await self.llm_service.generate_json(self._build_sample_prompt())
            return self._parse_sample(response)
        except EnrichmentUnavailableError as e:
            logger.warning(f"演示学生数据无效: {e}")
            return None
        except Exception as e:
            logger.warning(f"演示学生生成失败: {type(e).__name__}: {e}")
            return None

    def _build_sample_prompt(self) -> str:
        """构建演示学生 prompt（部门和类别取自同一张表）"""
        departments = "\n".join(
            f"{i}. {dept.value}" for i, dept in enumerate(Department, 1)
        )
        categories = "\n".join(
            f"- {dept.value}: Categories: "
            + ", ".join(f'"{c}"' for c in cats if c != OTHER_CATEGORY)
            for dept, cats in DEPARTMENT_CATEGORIES.items()
        )
        return self.SAMPLE_PROMPT.format(departments=departments, categories=categories)

    def _parse_analysis(self, response: str) -> Enrichment:
        """解析分析结果

        Raises:
            EnrichmentUnavailableError: 数据不完整或不合法
        """
        data = _load_json_object(response)

        tags = self._parse_tags(data.get("tags"))
        if not tags:
            raise EnrichmentUnavailableError("缺少 tags")

        priority_str = str(data.get("priority", "")).strip().capitalize()
        try:
            priority = Priority(priority_str)
        except ValueError as e:
            raise EnrichmentUnavailableError(f"未知优先级: {data.get('priority')!r}") from e

        summary = data.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            raise EnrichmentUnavailableError("缺少 summary")
        summary = " ".join(summary.split()[:MAX_SUMMARY_WORDS])

        return Enrichment(tags=tags, priority=priority, summary=summary)

    def _parse_tags(self, raw: Any) -> List[str]:
        """解析标签：去空、去重，最多 3 个"""
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, list):
            return []

        tags: List[str] = []
        for item in raw:
            if not isinstance(item, str):
                continue
            tag = item.strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags[:MAX_TAGS]

    def _parse_sample(self, response: str) -> TicketDraft:
        """解析演示学生

        Raises:
            EnrichmentUnavailableError: 数据不完整或部门未知
        """
        data = _load_json_object(response)

        try:
            department = Department(str(data.get("department", "")).strip())
        except ValueError as e:
            raise EnrichmentUnavailableError(f"未知部门: {data.get('department')!r}") from e

        name = data.get("name")
        problem = data.get("problem")
        if not isinstance(name, str) or not name.strip():
            raise EnrichmentUnavailableError("缺少 name")
        if not isinstance(problem, str) or not problem.strip():
            raise EnrichmentUnavailableError("缺少 problem")

        university_id = data.get("universityId")
        tags = self._parse_tags(data.get("tag") or data.get("tags"))[:1]

        return TicketDraft(
            name=name.strip(),
            university_id=university_id.strip() if isinstance(university_id, str) else None,
            department=department,
            problem=problem.strip(),
            tags=tags,
        )
