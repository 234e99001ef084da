"""排队工单数据模型

Ticket 对应前台签到的一名学生。AI 字段（标签/优先级/摘要）整体存放在
Enrichment 中，帮助记录（顾问/时间）整体存放在 HelpRecord 中，
避免出现“只有一半字段”的中间状态。
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, List, Mapping, Optional, TypeVar

from pydantic import BaseModel, Field, model_validator


class Department(str, Enum):
    """服务部门（封闭集合）"""
    EDUCATION_ABROAD = "Education Abroad"
    INTL_ADMISSIONS = "International Admissions"
    GLOBAL_LEARNING = "Global Learning"
    INTL_STUDENT_SUPPORT = "International Student Support"


class Priority(str, Enum):
    """优先级（仅用于展示，不影响排队顺序）"""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TicketStatus(str, Enum):
    """工单状态"""
    WAITING = "waiting"
    COMPLETED = "completed"


T = TypeVar("T")


def exhaustive(table: Mapping[Department, T], name: str) -> Dict[Department, T]:
    """校验部门映射表覆盖所有部门

    Raises:
        ValueError: 缺少或多出部门
    """
    missing = set(Department) - set(table)
    extra = set(table) - set(Department)
    if missing or extra:
        raise ValueError(
            f"{name} 必须覆盖所有部门: "
            f"缺少 {sorted(d.value for d in missing)}, 多出 {sorted(map(str, extra))}"
        )
    return dict(table)


OTHER_CATEGORY = "Other"

# 手动签到表单可选的咨询类别
DEPARTMENT_CATEGORIES: Dict[Department, List[str]] = exhaustive({
    Department.INTL_ADMISSIONS: [
        "Drop off Transcripts",
        "Resolve Registration Holds",
        "Check Application Status",
        "Submit Missing Documents",
        OTHER_CATEGORY,
    ],
    Department.EDUCATION_ABROAD: [
        "Program Inquiry",
        "Application Help",
        "Scholarship & Funding",
        "Course Equivalency",
        OTHER_CATEGORY,
    ],
    Department.INTL_STUDENT_SUPPORT: [
        "I-20 Travel Signature",
        "OPT/CPT Inquiry",
        "Visa Status Update",
        "Social Security Letter",
        OTHER_CATEGORY,
    ],
    Department.GLOBAL_LEARNING: [
        "Global Citizens Award",
        "Peace Corps Info",
        "GCP Portfolio Review",
        OTHER_CATEGORY,
    ],
}, "DEPARTMENT_CATEGORIES")

# 终端看板中每个部门列的颜色
DEPARTMENT_STYLES: Dict[Department, str] = exhaustive({
    Department.EDUCATION_ABROAD: "blue",
    Department.INTL_ADMISSIONS: "green",
    Department.GLOBAL_LEARNING: "dark_orange",
    Department.INTL_STUDENT_SUPPORT: "purple",
}, "DEPARTMENT_STYLES")


class Enrichment(BaseModel):
    """AI 分析结果（标签、优先级、摘要必须同时存在）"""
    tags: List[str] = Field(min_length=1, max_length=3)
    priority: Priority
    summary: str = Field(min_length=1)


class HelpRecord(BaseModel):
    """接待记录"""
    helped_by: str
    helped_at: datetime = Field(default_factory=datetime.now)


class Advisor(BaseModel):
    """当前登录的顾问"""
    name: str
    department: Department


class TicketDraft(BaseModel):
    """签到时提供的部分信息，缺失字段在签到时补默认值"""
    name: Optional[str] = None
    university_id: Optional[str] = None
    department: Optional[Department] = None
    problem: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class CheckInForm(BaseModel):
    """手动签到表单

    类别必须属于所选部门；问题描述由类别和补充说明拼接而成。
    """
    name: str = Field(min_length=1)
    university_id: str = Field(min_length=1)
    department: Department = Department.INTL_ADMISSIONS
    category: str
    description: str = ""

    @model_validator(mode="after")
    def _check_category(self) -> "CheckInForm":
        if self.category not in DEPARTMENT_CATEGORIES[self.department]:
            raise ValueError(
                f"'{self.category}' 不是 {self.department.value} 的咨询类别"
            )
        return self

    @property
    def problem(self) -> str:
        """拼接问题描述"""
        description = self.description.strip()
        if self.category == OTHER_CATEGORY:
            return description
        if description:
            return f"{self.category}: {description}"
        return self.category

    def to_draft(self) -> TicketDraft:
        """转换为签到草稿（所选类别作为唯一的用户标签）"""
        return TicketDraft(
            name=self.name,
            university_id=self.university_id,
            department=self.department,
            problem=self.problem,
            tags=[self.category],
        )


def new_ticket_id() -> str:
    """生成工单 ID"""
    return uuid.uuid4().hex[:12]


class Ticket(BaseModel):
    """排队工单

    Attributes:
        id: 工单 ID（创建后不变）
        name: 学生姓名
        university_id: 学号
        department: 所属部门
        problem: 问题描述
        check_in_time: 签到时间
        status: waiting / completed
        tags: 用户选择的类别标签
        enrichment: AI 分析结果，未分析时为 None
        help: 接待记录，仅 completed 状态存在
    """
    id: str = Field(default_factory=new_ticket_id)
    name: str
    university_id: str
    department: Department
    problem: str
    check_in_time: datetime = Field(default_factory=datetime.now)
    status: TicketStatus = TicketStatus.WAITING
    tags: List[str] = Field(default_factory=list)
    enrichment: Optional[Enrichment] = None
    help: Optional[HelpRecord] = None

    @model_validator(mode="after")
    def _check_help_record(self) -> "Ticket":
        if (self.status == TicketStatus.COMPLETED) != (self.help is not None):
            raise ValueError("completed 状态必须且只能带有接待记录")
        return self

    @property
    def is_enriched(self) -> bool:
        return self.enrichment is not None

    @property
    def priority(self) -> Optional[Priority]:
        return self.enrichment.priority if self.enrichment else None

    @property
    def ai_summary(self) -> Optional[str]:
        return self.enrichment.summary if self.enrichment else None

    @property
    def helped_by(self) -> Optional[str]:
        return self.help.helped_by if self.help else None

    @property
    def helped_at(self) -> Optional[datetime]:
        return self.help.helped_at if self.help else None

    @property
    def display_tags(self) -> List[str]:
        """用户标签在前，AI 标签去重追加"""
        tags = list(self.tags)
        if self.enrichment:
            tags.extend(t for t in self.enrichment.tags if t not in tags)
        return tags

    def waited_minutes(self, now: Optional[datetime] = None) -> int:
        """已等待分钟数"""
        now = now or datetime.now()
        seconds = (now - self.check_in_time).total_seconds()
        return max(0, int(seconds // 60))
