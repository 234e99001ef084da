"""看板渲染逻辑

所有方法返回 Rich 可渲染对象，由调用方决定如何输出。
"""
from datetime import datetime
from typing import Dict, List, Optional

from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from goqueue.models import (
    DEPARTMENT_STYLES,
    Advisor,
    Department,
    Notification,
    Priority,
    Ticket,
)


class DashboardRenderer:
    """看板渲染器"""

    LOGO = """
 ██████╗ ██╗      ██████╗ ██████╗  █████╗ ██╗          ██████╗
██╔════╝ ██║     ██╔═══██╗██╔══██╗██╔══██╗██║         ██╔═══██╗
██║  ███╗██║     ██║   ██║██████╔╝███████║██║         ██║   ██║
██║   ██║██║     ██║   ██║██╔══██╗██╔══██║██║         ██║▄▄ ██║
╚██████╔╝███████╗╚██████╔╝██████╔╝██║  ██║███████╗    ╚██████╔╝
 ╚═════╝ ╚══════╝ ╚═════╝ ╚═════╝ ╚═╝  ╚═╝╚══════╝     ╚══▀▀═╝
"""

    PRIORITY_STYLES: Dict[Priority, str] = {
        Priority.HIGH: "bold red",
        Priority.MEDIUM: "yellow",
        Priority.LOW: "green",
    }

    # 短 ID 长度（命令中可用任意唯一前缀）
    SHORT_ID_LENGTH = 6

    def __init__(self, console: Console = None):
        """初始化渲染器

        Args:
            console: Rich Console 实例
        """
        self.console = console or Console()

    def get_logo(self) -> str:
        return self.LOGO.strip("\n")

    def short_id(self, ticket: Ticket) -> str:
        return ticket.id[:self.SHORT_ID_LENGTH]

    def render_status_bar(
        self,
        advisor: Optional[Advisor],
        waiting: int,
        helped: int,
    ) -> Text:
        """渲染状态栏：当前顾问、等待人数、已接待人数"""
        text = Text()
        text.append("顾问 ", style="dim")
        if advisor:
            text.append(advisor.name, style="bold green")
            text.append(f" ({advisor.department.value})", style="dim")
        else:
            text.append("未登录", style="yellow")
        text.append("  │  ", style="dim")
        text.append("等待 ", style="dim")
        text.append(str(waiting), style="bold")
        text.append("  │  ", style="dim")
        text.append("已接待 ", style="dim")
        text.append(str(helped), style="bold")
        return text

    def render_ticket_card(
        self,
        ticket: Ticket,
        now: Optional[datetime] = None,
    ) -> Group:
        """渲染单个学生卡片"""
        header = Text()
        header.append(ticket.name, style="bold")
        header.append(f"  {ticket.university_id}", style="dim")
        header.append(f"  [{self.short_id(ticket)}]", style="cyan")
        header.append(f"  {ticket.waited_minutes(now)}m", style="dim")

        parts = [header, Text(ticket.problem)]

        tags = ticket.display_tags
        if tags:
            parts.append(Text(" ".join(f"#{t}" for t in tags), style="blue"))

        if ticket.enrichment:
            ai_line = Text()
            ai_line.append(
                ticket.enrichment.priority.value,
                style=self.PRIORITY_STYLES[ticket.enrichment.priority],
            )
            ai_line.append(f"  {ticket.enrichment.summary}", style="italic dim")
            parts.append(ai_line)

        return Group(*parts)

    def render_department_column(
        self,
        department: Department,
        tickets: List[Ticket],
        now: Optional[datetime] = None,
    ) -> Panel:
        """渲染部门列"""
        style = DEPARTMENT_STYLES[department]
        if tickets:
            body_parts = []
            for i, ticket in enumerate(tickets):
                if i:
                    body_parts.append(Text(""))
                body_parts.append(self.render_ticket_card(ticket, now))
            body = Group(*body_parts)
        else:
            body = Text("No students waiting", style="dim italic")

        return Panel(
            body,
            title=f"[bold {style}]{department.value}[/bold {style}] ({len(tickets)})",
            title_align="left",
            border_style=style,
            width=40,
        )

    def render_queue(
        self,
        columns: Dict[Department, List[Ticket]],
        now: Optional[datetime] = None,
    ) -> Columns:
        """渲染排队看板（每个部门一列）"""
        panels = [
            self.render_department_column(dept, columns.get(dept, []), now)
            for dept in Department
        ]
        return Columns(panels)

    def render_history(self, tickets: List[Ticket]) -> Table:
        """渲染已接待记录表"""
        table = Table(title="Helped Students", title_justify="left", expand=True)
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Student")
        table.add_column("Department")
        table.add_column("Issue & Category")
        table.add_column("Helped By", style="green")
        table.add_column("Time Completed", no_wrap=True)

        if not tickets:
            table.caption = "No students have been helped yet."
            return table

        for ticket in tickets:
            issue = ticket.problem
            if ticket.display_tags:
                issue += "\n" + " ".join(f"#{t}" for t in ticket.display_tags)
            helped_at = ticket.helped_at.strftime("%H:%M") if ticket.helped_at else "-"
            table.add_row(
                self.short_id(ticket),
                f"{ticket.name}\n{ticket.university_id}",
                ticket.department.value,
                issue,
                ticket.helped_by or "-",
                helped_at,
            )
        return table

    def render_notification(self, notification: Notification) -> Panel:
        return Panel(
            Text(notification.message),
            border_style="green",
            title="通知",
            title_align="left",
        )

    def render_help(self) -> Panel:
        """渲染帮助信息"""
        text = Text()
        commands = [
            ("/help", "显示帮助"),
            ("/status", "显示当前状态"),
            ("/queue", "显示排队看板"),
            ("/history", "显示已接待记录（需顾问登录）"),
            ("/checkin", "学生签到"),
            ("/simulate", "AI 生成一个演示学生"),
            ("/login", "顾问登录"),
            ("/logout", "顾问登出"),
            ("/assist <id>", "接待学生（需顾问登录）"),
            ("/remove <id>", "离队 / 劝离（需确认）"),
            ("/retract <id>", "撤回接待，放回队尾（需顾问登录）"),
            ("/dismiss", "关闭通知"),
            ("/exit", "退出"),
        ]
        for i, (command, desc) in enumerate(commands):
            if i:
                text.append("\n")
            text.append(f"{command:<16}", style="bold cyan")
            text.append(desc)
        return Panel(text, title="可用命令", title_align="left", border_style="dim")
