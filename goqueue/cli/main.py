"""CLI 主程序

使用 Rich 库在终端中显示排队看板。

运行方式：
    python -m goqueue cli
"""
import asyncio
from datetime import datetime
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.padding import Padding
from rich.text import Text

from goqueue.cli.rendering import DashboardRenderer
from goqueue.core.dashboard import Dashboard
from goqueue.models import (
    DEPARTMENT_CATEGORIES,
    CheckInForm,
    Department,
    Ticket,
    ViewMode,
)
from goqueue.utils.config import Config, load_config


class DashboardCLI:
    """终端排队看板

    斜杠命令驱动的交互循环，每条命令执行后重新渲染看板。
    """

    def __init__(
        self,
        dashboard: Optional[Dashboard] = None,
        config: Optional[Config] = None,
        console: Optional[Console] = None,
    ):
        """初始化

        Args:
            dashboard: 看板主控（默认按配置创建）
            config: 全局配置（默认从 config.yaml 加载）
            console: Rich Console 实例
        """
        self.console = console or Console()
        if dashboard is None:
            dashboard = Dashboard.from_config(config or load_config())
        self.dashboard = dashboard
        self.renderer = DashboardRenderer(self.console)

        # 所有异步调用共用一个事件循环（AsyncOpenAI 客户端绑定在循环上）
        self._loop = asyncio.new_event_loop()

        self._commands: Dict[str, Callable[[List[str]], bool]] = {
            "/help": self._cmd_help,
            "/status": self._cmd_status,
            "/queue": self._cmd_queue,
            "/history": self._cmd_history,
            "/checkin": self._cmd_checkin,
            "/simulate": self._cmd_simulate,
            "/login": self._cmd_login,
            "/logout": self._cmd_logout,
            "/assist": self._cmd_assist,
            "/remove": self._cmd_remove,
            "/retract": self._cmd_retract,
            "/dismiss": self._cmd_dismiss,
            "/exit": self._cmd_exit,
        }

    def _print_indented(self, content, num_spaces: int = 2) -> None:
        """打印带缩进的 Rich 对象"""
        self.console.print(Padding(content, (0, 0, 0, num_spaces)))

    def _run(self, coro):
        return self._loop.run_until_complete(coro)

    def run(self):
        """运行 CLI 主循环"""
        self.console.print()
        self.console.print(Text(self.renderer.get_logo(), style="bold green"))
        self.console.print(Text("Global Student Center 排队看板", style="bold green"))
        self.console.print(Text(f"可用命令: {' '.join(self._commands)}", style="dim"))
        self.console.print()
        self._render()

        try:
            while True:
                try:
                    user_input = self.console.input("[bold green]> [/bold green]").strip()
                except EOFError:
                    self.console.print(Text("\n再见！\n", style="blue"))
                    break

                if not user_input:
                    continue

                if self._handle_command(user_input):
                    break

        except KeyboardInterrupt:
            self.console.print(Text("\n再见！\n", style="blue"))
        finally:
            self._loop.close()

    def _handle_command(self, command_line: str) -> bool:
        """处理命令，返回 True 表示退出"""
        parts = command_line.split()
        command = parts[0].lower()

        handler = self._commands.get(command)
        if handler is None:
            text = Text()
            text.append(f"未知命令: {command}", style="red")
            text.append("，输入 /help 查看可用命令")
            self.console.print(text)
            return False

        if handler(parts[1:]):
            return True

        self._show_login_error()
        self._show_notification()
        return False

    # ===== 渲染 =====

    def _render(self, now: Optional[datetime] = None) -> None:
        """按当前视图渲染看板"""
        state = self.dashboard.state
        self.console.print(self.renderer.render_status_bar(
            state.advisor,
            waiting=len(state.queue.waiting),
            helped=len(state.queue.helped),
        ))
        self.console.print()

        if state.view_mode == ViewMode.HISTORY:
            self.console.print(self.renderer.render_history(self.dashboard.list_history()))
        else:
            columns = {dept: self.dashboard.list_by_department(dept) for dept in Department}
            self.console.print(self.renderer.render_queue(columns, now))

    def _show_notification(self) -> None:
        notification = self.dashboard.active_notification()
        if notification:
            self.console.print(self.renderer.render_notification(notification))

    def _show_login_error(self) -> None:
        state = self.dashboard.state
        if state.login_required:
            self._print_indented(Text("此操作需要顾问登录，请使用 /login", style="yellow"))
            self.dashboard.close_login()

    # ===== 工具方法 =====

    def _resolve_ticket(self, args: List[str], tickets: List[Ticket]) -> Optional[Ticket]:
        """按 ID 前缀查找工单"""
        if not args:
            self.console.print(Text("请提供工单 ID", style="red"))
            return None

        prefix = args[0]
        matches = [t for t in tickets if t.id.startswith(prefix)]
        if not matches:
            self.console.print(Text(f"找不到工单: {prefix}", style="red"))
            return None
        if len(matches) > 1:
            self.console.print(Text(f"ID 前缀不唯一: {prefix}", style="red"))
            return None
        return matches[0]

    def _ask(self, label: str, default: str = "") -> str:
        suffix = f" [{default}]" if default else ""
        value = self.console.input(f"  {label}{suffix}: ").strip()
        return value or default

    def _choose(self, label: str, options: List[str], default: int = 0) -> str:
        """从编号列表中选择"""
        for i, option in enumerate(options, 1):
            self._print_indented(Text(f"{i}. {option}"), num_spaces=4)
        raw = self._ask(label, str(default + 1))
        try:
            index = int(raw) - 1
        except ValueError:
            index = default
        if not 0 <= index < len(options):
            index = default
        return options[index]

    def _choose_department(self, label: str, default: Department) -> Department:
        departments = [d.value for d in Department]
        value = self._choose(label, departments, departments.index(default.value))
        return Department(value)

    # ===== 命令 =====

    def _cmd_help(self, args: List[str]) -> bool:
        self.console.print(self.renderer.render_help())
        return False

    def _cmd_status(self, args: List[str]) -> bool:
        state = self.dashboard.state
        self.console.print(self.renderer.render_status_bar(
            state.advisor,
            waiting=len(state.queue.waiting),
            helped=len(state.queue.helped),
        ))
        return False

    def _cmd_queue(self, args: List[str]) -> bool:
        self.dashboard.set_view(ViewMode.QUEUE)
        self._render()
        return False

    def _cmd_history(self, args: List[str]) -> bool:
        if self.dashboard.set_view(ViewMode.HISTORY):
            self._render()
        return False

    def _cmd_checkin(self, args: List[str]) -> bool:
        """手动签到"""
        self.console.print(Text("学生签到", style="bold"))
        name = self._ask("Full Name")
        university_id = self._ask("University ID")
        department = self._choose_department("Department", Department.INTL_ADMISSIONS)
        category = self._choose("Category of Inquiry", DEPARTMENT_CATEGORIES[department])
        description = self._ask("Additional Details (optional)")

        try:
            form = CheckInForm(
                name=name,
                university_id=university_id,
                department=department,
                category=category,
                description=description,
            )
        except ValidationError as e:
            self.console.print(Text(f"签到信息无效: {e.errors()[0]['msg']}", style="red"))
            return False

        draft = form.to_draft()
        self._print_indented(Text("正在签到...", style="dim"))
        self._run(self.dashboard.check_in_and_enrich(draft))
        self._render()
        return False

    def _cmd_simulate(self, args: List[str]) -> bool:
        self._print_indented(Text("正在生成演示学生...", style="dim"))
        self._run(self.dashboard.simulate())
        self._render()
        return False

    def _cmd_login(self, args: List[str]) -> bool:
        self.console.print(Text("Advisor Log-in", style="bold"))
        name = self._ask("Your Name / Username")
        department = self._choose_department("Your Department", Department.EDUCATION_ABROAD)
        password = None
        if self.dashboard.session.password is not None:
            password = self.console.input("  Department Password: ", password=True)

        if self.dashboard.login(name, department, password):
            self._print_indented(Text(f"已登录: {name}", style="green"))
        else:
            self._print_indented(Text(self.dashboard.state.login_error or "", style="red"))
        return False

    def _cmd_logout(self, args: List[str]) -> bool:
        self.dashboard.logout()
        self._print_indented(Text("已登出", style="green"))
        self._render()
        return False

    def _cmd_assist(self, args: List[str]) -> bool:
        ticket = self._resolve_ticket(args, self.dashboard.list_waiting())
        if ticket:
            self.dashboard.help(ticket.id)
            if self.dashboard.state.advisor:
                self._render()
        return False

    def _cmd_remove(self, args: List[str]) -> bool:
        ticket = self._resolve_ticket(args, self.dashboard.list_waiting())
        if ticket is None:
            return False

        request = self.dashboard.request_removal(ticket.id)
        if request is None:
            return False

        answer = self._ask(f"{request.message} (y/N)").lower()
        if answer in ("y", "yes"):
            self.dashboard.confirm_removal()
            self._render()
        else:
            self.dashboard.cancel_removal()
        return False

    def _cmd_retract(self, args: List[str]) -> bool:
        if self.dashboard.state.advisor is None:
            self.dashboard.prompt_login()
            return False
        ticket = self._resolve_ticket(args, self.dashboard.list_history())
        if ticket:
            self.dashboard.retract(ticket.id)
            self._render()
        return False

    def _cmd_dismiss(self, args: List[str]) -> bool:
        self.dashboard.dismiss_notification()
        return False

    def _cmd_exit(self, args: List[str]) -> bool:
        self.console.print(Text("再见！", style="blue"))
        return True


def main(config_path: Optional[str] = None):
    """主入口"""
    cli = DashboardCLI(config=load_config(config_path))
    cli.run()


if __name__ == "__main__":
    main()
