"""EnrichmentClient 单元测试"""
import json
from unittest.mock import AsyncMock, Mock

import pytest

from goqueue.core import STATIC_FALLBACK, EnrichmentClient, EnrichmentUnavailableError
from goqueue.models import DEPARTMENT_CATEGORIES, Department, Priority


@pytest.fixture
def llm_service():
    service = Mock()
    service.generate_json = AsyncMock()
    return service


@pytest.fixture
def client(llm_service):
    return EnrichmentClient(llm_service)


class TestAnalyze:
    """工单分析测试"""

    @pytest.mark.asyncio
    async def test_analyze_success(self, client, llm_service):
        llm_service.generate_json.return_value = json.dumps({
            "tags": ["Visa/I-20", "Travel Sig"],
            "priority": "High",
            "summary": "Urgent travel signature needed",
        })

        result = await client.analyze("My I-20 expired and I fly out Friday")

        assert result.tags == ["Visa/I-20", "Travel Sig"]
        assert result.priority == Priority.HIGH
        assert result.summary == "Urgent travel signature needed"

        prompt = llm_service.generate_json.call_args[0][0]
        assert "My I-20 expired and I fly out Friday" in prompt

    @pytest.mark.asyncio
    async def test_analyze_code_fence(self, client, llm_service):
        """测试: 清理 markdown 代码块"""
        llm_service.generate_json.return_value = (
            '```json\n{"tags": ["Transcripts"], "priority": "Low", "summary": "Drop off"}\n```'
        )
        result = await client.analyze("Drop off transcripts")
        assert result.tags == ["Transcripts"]
        assert result.priority == Priority.LOW

    @pytest.mark.asyncio
    async def test_analyze_normalizes_priority_case(self, client, llm_service):
        llm_service.generate_json.return_value = json.dumps({
            "tags": ["Funding"], "priority": "medium", "summary": "Scholarship question",
        })
        result = await client.analyze("Scholarship")
        assert result.priority == Priority.MEDIUM

    @pytest.mark.asyncio
    async def test_analyze_caps_tags_and_summary(self, client, llm_service):
        """测试: 最多 3 个标签，摘要最多 6 个词"""
        llm_service.generate_json.return_value = json.dumps({
            "tags": ["A", "B", "A", "C", "D"],
            "priority": "Low",
            "summary": "one two three four five six seven eight",
        })
        result = await client.analyze("text")
        assert result.tags == ["A", "B", "C"]
        assert result.summary == "one two three four five six"

    @pytest.mark.asyncio
    async def test_analyze_single_tag_string(self, client, llm_service):
        llm_service.generate_json.return_value = json.dumps({
            "tags": "Program Info", "priority": "Low", "summary": "Info",
        })
        result = await client.analyze("text")
        assert result.tags == ["Program Info"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        "",
        "not json",
        "[1, 2, 3]",
        json.dumps({"tags": [], "priority": "High", "summary": "x"}),
        json.dumps({"tags": ["a"], "priority": "Urgent", "summary": "x"}),
        json.dumps({"tags": ["a"], "priority": "High"}),
        json.dumps({"tags": ["a"], "priority": "High", "summary": "   "}),
    ])
    async def test_analyze_invalid_response(self, client, llm_service, response):
        """测试: 无效响应返回 None"""
        llm_service.generate_json.return_value = response
        assert await client.analyze("text") is None

    @pytest.mark.asyncio
    async def test_analyze_llm_error(self, client, llm_service):
        """测试: 网络错误返回 None，不抛出"""
        llm_service.generate_json.side_effect = TimeoutError("timeout")
        assert await client.analyze("text") is None

    @pytest.mark.asyncio
    async def test_analyze_empty_text(self, client, llm_service):
        """测试: 空文本不调用 LLM"""
        assert await client.analyze("   ") is None
        llm_service.generate_json.assert_not_called()

    @pytest.mark.asyncio
    async def test_analyze_without_llm(self):
        client = EnrichmentClient()
        assert client.is_available is False
        assert await client.analyze("text") is None


class TestGenerateSample:
    """演示学生生成测试"""

    @pytest.mark.asyncio
    async def test_generate_sample_success(self, client, llm_service):
        llm_service.generate_json.return_value = json.dumps({
            "name": "Amara Okafor",
            "universityId": "U48213377",
            "department": "International Student Support",
            "problem": "Needs a travel signature before winter break",
            "tag": "I-20 Travel Signature",
        })

        draft = await client.generate_sample()

        assert draft.name == "Amara Okafor"
        assert draft.university_id == "U48213377"
        assert draft.department == Department.INTL_STUDENT_SUPPORT
        assert draft.problem == "Needs a travel signature before winter break"
        assert draft.tags == ["I-20 Travel Signature"]

    @pytest.mark.asyncio
    async def test_generate_sample_without_id(self, client, llm_service):
        """测试: 缺少学号时保留为空，签到时补默认值"""
        llm_service.generate_json.return_value = json.dumps({
            "name": "Lars Berg",
            "department": "Education Abroad",
            "problem": "Semester in Spain",
        })
        draft = await client.generate_sample()
        assert draft.university_id is None
        assert draft.tags == []

    @pytest.mark.asyncio
    async def test_generate_sample_unknown_department(self, client, llm_service):
        """测试: 未知部门返回 None"""
        llm_service.generate_json.return_value = json.dumps({
            "name": "Lars Berg",
            "department": "Housing",
            "problem": "Roommate issue",
        })
        assert await client.generate_sample() is None

    @pytest.mark.asyncio
    async def test_generate_sample_llm_error(self, client, llm_service):
        llm_service.generate_json.side_effect = ConnectionError("offline")
        assert await client.generate_sample() is None

    @pytest.mark.asyncio
    async def test_generate_sample_without_llm(self):
        assert await EnrichmentClient().generate_sample() is None

    def test_sample_prompt_lists_every_department(self, client):
        prompt = client._build_sample_prompt()
        for dept, categories in DEPARTMENT_CATEGORIES.items():
            assert dept.value in prompt
            for category in categories:
                if category != "Other":
                    assert category in prompt


class TestParsing:
    """解析辅助方法测试"""

    def test_parse_analysis_raises(self, client):
        with pytest.raises(EnrichmentUnavailableError):
            client._parse_analysis('{"tags": ["a"]}')

    def test_parse_tags_skips_non_strings(self, client):
        assert client._parse_tags(["a", 1, None, " ", "b"]) == ["a", "b"]

    def test_parse_tags_invalid(self, client):
        assert client._parse_tags(None) == []
        assert client._parse_tags({"a": 1}) == []

    def test_static_fallback(self):
        assert STATIC_FALLBACK.tags == ["General Inquiry"]
        assert STATIC_FALLBACK.priority == Priority.MEDIUM
        assert STATIC_FALLBACK.summary == "Check details"
