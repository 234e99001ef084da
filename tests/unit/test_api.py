"""API 接口单元测试"""
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from goqueue.api.dependencies import get_dashboard
from goqueue.api.main import app
from goqueue.core import AdvisorSession, Dashboard
from goqueue.models import Department, Enrichment, Priority, TicketDraft

ENRICHMENT = Enrichment(tags=["Transcripts"], priority=Priority.LOW, summary="Transcript drop-off")


@pytest.fixture
def enrichment_client():
    client = Mock()
    client.analyze = AsyncMock(return_value=ENRICHMENT)
    client.generate_sample = AsyncMock(return_value=None)
    return client


@pytest.fixture
def dashboard(enrichment_client):
    return Dashboard(
        enrichment_client=enrichment_client,
        session=AdvisorSession(password="departmentname"),
    )


@pytest.fixture
def client(dashboard):
    app.dependency_overrides[get_dashboard] = lambda: dashboard
    yield TestClient(app)
    app.dependency_overrides.clear()


def _login(client):
    response = client.post("/api/session/login", json={
        "name": "Dr. Rocky",
        "department": "International Admissions",
        "password": "departmentname",
    })
    assert response.status_code == 200


class TestBasics:
    """基础接口测试"""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestCheckIn:
    """签到接口测试"""

    def test_check_in_enriches_in_background(self, client, dashboard):
        response = client.post("/api/tickets", json={
            "name": "Ada Lovelace",
            "university_id": "U11112222",
            "department": "International Admissions",
            "problem": "Drop off transcripts",
        })
        assert response.status_code == 201
        ticket_id = response.json()["ticket_id"]

        # TestClient 在返回前执行后台任务
        ticket = client.get(f"/api/tickets/{ticket_id}").json()
        assert ticket["name"] == "Ada Lovelace"
        assert ticket["status"] == "waiting"
        assert ticket["enrichment"]["priority"] == "Low"
        assert ticket["display_tags"] == ["Transcripts"]

    def test_check_in_defaults(self, client):
        ticket_id = client.post("/api/tickets", json={}).json()["ticket_id"]
        ticket = client.get(f"/api/tickets/{ticket_id}").json()
        assert ticket["name"] == "Unknown"
        assert ticket["department"] == "International Admissions"

    def test_form(self, client):
        response = client.post("/api/tickets/form", json={
            "name": "Jane Doe",
            "university_id": "U12345678",
            "department": "Education Abroad",
            "category": "Program Inquiry",
            "description": "Summer in Japan",
        })
        assert response.status_code == 201
        ticket = client.get(f"/api/tickets/{response.json()['ticket_id']}").json()
        assert ticket["problem"] == "Program Inquiry: Summer in Japan"
        assert ticket["tags"] == ["Program Inquiry"]

    def test_form_invalid_category(self, client):
        response = client.post("/api/tickets/form", json={
            "name": "Jane Doe",
            "university_id": "U12345678",
            "department": "Education Abroad",
            "category": "Visa Status Update",
        })
        assert response.status_code == 422

    def test_simulate_unavailable(self, client):
        response = client.post("/api/tickets/simulate")
        assert response.status_code == 503

    def test_simulate(self, client, enrichment_client):
        enrichment_client.generate_sample.return_value = TicketDraft(
            name="Amara Okafor",
            department=Department.INTL_STUDENT_SUPPORT,
            problem="Needs a travel signature",
        )
        response = client.post("/api/tickets/simulate")
        assert response.status_code == 201
        ticket = client.get(f"/api/tickets/{response.json()['ticket_id']}").json()
        assert ticket["name"] == "Amara Okafor"


class TestQueue:
    """排队查询测试"""

    def test_queue_grouped_by_department(self, client, dashboard):
        dashboard.check_in(TicketDraft(name="A", department=Department.GLOBAL_LEARNING))
        dashboard.check_in(TicketDraft(name="B", department=Department.EDUCATION_ABROAD))

        data = client.get("/api/queue").json()

        assert data["total"] == 2
        assert [d["department"] for d in data["departments"]] == [d.value for d in Department]
        by_dept = {d["department"]: d["tickets"] for d in data["departments"]}
        assert [t["name"] for t in by_dept["Global Learning"]] == ["A"]
        assert by_dept["International Student Support"] == []

    def test_filter_by_department(self, client, dashboard):
        dashboard.check_in(TicketDraft(name="A", department=Department.GLOBAL_LEARNING))
        dashboard.check_in(TicketDraft(name="B", department=Department.EDUCATION_ABROAD))

        data = client.get("/api/tickets", params={"department": "Education Abroad"}).json()
        assert [t["name"] for t in data["tickets"]] == ["B"]

    def test_ticket_not_found(self, client):
        assert client.get("/api/tickets/missing").status_code == 404


class TestHelpAndRetract:
    """接待 / 撤回接口测试"""

    def test_help_requires_login(self, client, dashboard):
        ticket_id = dashboard.check_in(TicketDraft(name="Ada Lovelace"))

        response = client.post(f"/api/tickets/{ticket_id}/help")

        assert response.status_code == 401
        assert dashboard.state.login_required is True
        assert len(dashboard.list_waiting()) == 1

    def test_help(self, client, dashboard):
        _login(client)
        ticket_id = dashboard.check_in(TicketDraft(name="Ada Lovelace"))

        data = client.post(f"/api/tickets/{ticket_id}/help").json()

        assert data["ticket"]["status"] == "completed"
        assert data["ticket"]["help"]["helped_by"] == "Dr. Rocky"
        assert "is going to help Ada Lovelace" in data["notification"]

        history = client.get("/api/history").json()["tickets"]
        assert [t["id"] for t in history] == [ticket_id]

    def test_help_unknown(self, client):
        _login(client)
        data = client.post("/api/tickets/missing/help").json()
        assert data == {"ticket": None, "notification": None}

    def test_retract(self, client, dashboard):
        _login(client)
        id_a = dashboard.check_in(TicketDraft(name="A"))
        id_b = dashboard.check_in(TicketDraft(name="B"))
        client.post(f"/api/tickets/{id_a}/help")

        data = client.post(f"/api/tickets/{id_a}/retract").json()

        assert data["notification"] == "A was returned to the Queue."
        assert [t.id for t in dashboard.list_waiting()] == [id_b, id_a]

    def test_retract_requires_login(self, client):
        assert client.post("/api/tickets/x/retract").status_code == 401


class TestRemoval:
    """离队接口测试"""

    def test_two_phase_removal(self, client, dashboard):
        ticket_id = dashboard.check_in(TicketDraft(name="Ada Lovelace"))

        request = client.post(f"/api/tickets/{ticket_id}/removal").json()
        assert request["ticket_id"] == ticket_id
        assert "leave the queue" in request["message"]

        data = client.post("/api/removal/confirm").json()
        assert data["ticket"]["id"] == ticket_id
        assert data["notification"] == "Ada Lovelace has left the queue."
        assert dashboard.list_waiting() == []

    def test_cancel(self, client, dashboard):
        ticket_id = dashboard.check_in(TicketDraft(name="Ada Lovelace"))
        client.post(f"/api/tickets/{ticket_id}/removal")
        client.post("/api/removal/cancel")

        assert client.post("/api/removal/confirm").json()["ticket"] is None
        assert len(dashboard.list_waiting()) == 1

    def test_removal_not_waiting(self, client):
        assert client.post("/api/tickets/missing/removal").status_code == 404


class TestSession:
    """会话接口测试"""

    def test_login_logout(self, client):
        assert client.get("/api/session").json()["advisor"] is None

        _login(client)
        data = client.get("/api/session").json()
        assert data["advisor"] == {"name": "Dr. Rocky", "department": "International Admissions"}

        data = client.post("/api/session/logout").json()
        assert data["advisor"] is None
        assert data["view_mode"] == "queue"

    def test_wrong_password(self, client):
        response = client.post("/api/session/login", json={
            "name": "Dr. Rocky", "password": "wrong",
        })
        assert response.status_code == 401
        assert response.json()["detail"] == "Incorrect password."

    def test_empty_name(self, client):
        response = client.post("/api/session/login", json={
            "name": "", "password": "departmentname",
        })
        assert response.status_code == 401
        assert response.json()["detail"] == "Please enter your name."


class TestNotification:
    """提示消息接口测试"""

    def test_get_and_dismiss(self, client, dashboard):
        dashboard.notify("hello")
        assert client.get("/api/notification").json()["notification"]["message"] == "hello"

        client.delete("/api/notification")
        assert client.get("/api/notification").json()["notification"] is None
