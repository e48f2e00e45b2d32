import pytest
from sqlmodel import select

from conftest import auth_headers, make_sales_person, report_payload
from models import ManagerComment


@pytest.fixture
def report(client, yamada_headers, customers):
    response = client.post("/api/reports", json=report_payload(customers), headers=yamada_headers)
    assert response.status_code == 201
    return response.json()


def test_manager_adds_comment(client, manager, manager_headers, report):
    response = client.post(f"/api/reports/{report['id']}/comments",
                           json={"comment": "Please follow up tomorrow"}, headers=manager_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["report_id"] == report["id"]
    assert data["manager_id"] == manager.id
    assert data["manager"] == {"id": manager.id, "name": "Manager Tanaka"}
    assert data["comment"] == "Please follow up tomorrow"


def test_non_manager_cannot_comment(client, session, yamada_headers, report):
    response = client.post(f"/api/reports/{report['id']}/comments",
                           json={"comment": "Commenting on my own report"}, headers=yamada_headers)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"
    assert session.exec(select(ManagerComment)).all() == []


def test_non_manager_forbidden_before_validation(client, session, yamada_headers, report):
    response = client.post(f"/api/reports/{report['id']}/comments", json={"comment": ""}, headers=yamada_headers)

    assert response.status_code == 403


def test_demoted_manager_with_old_token(client, session, manager, manager_headers, report):
    manager.is_manager = False
    session.add(manager)
    session.commit()

    response = client.post(f"/api/reports/{report['id']}/comments",
                           json={"comment": "Still allowed?"}, headers=manager_headers)

    assert response.status_code == 403
    assert session.exec(select(ManagerComment)).all() == []


@pytest.mark.parametrize("length,status_code", [(500, 201), (501, 400), (0, 400)])
def test_comment_length_boundary(client, manager_headers, report, length, status_code):
    response = client.post(f"/api/reports/{report['id']}/comments",
                           json={"comment": "c" * length}, headers=manager_headers)

    assert response.status_code == status_code


def test_comment_on_missing_report(client, manager_headers):
    response = client.post("/api/reports/99999/comments", json={"comment": "Hello"}, headers=manager_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "REPORT_NOT_FOUND"


def test_comment_invalid_report_id(client, manager_headers):
    response = client.post("/api/reports/abc/comments", json={"comment": "Hello"}, headers=manager_headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REPORT_ID"


def test_list_comments_newest_first(client, session, yamada_headers, manager_headers, report):
    other = make_sales_person(session, "Manager Sato", "sato@example.com", is_manager=True)
    client.post(f"/api/reports/{report['id']}/comments", json={"comment": "First"}, headers=manager_headers)
    client.post(f"/api/reports/{report['id']}/comments", json={"comment": "Second"}, headers=auth_headers(other))

    response = client.get(f"/api/reports/{report['id']}/comments", headers=yamada_headers)

    assert response.status_code == 200
    comments = response.json()["data"]
    assert [c["comment"] for c in comments] == ["Second", "First"]
    assert comments[0]["manager"]["name"] == "Manager Sato"

    # the report detail lists them oldest first
    detail = client.get(f"/api/reports/{report['id']}", headers=yamada_headers).json()
    assert [c["comment"] for c in detail["comments"]] == ["First", "Second"]


def test_list_comments_missing_report(client, yamada_headers):
    response = client.get("/api/reports/99999/comments", headers=yamada_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "REPORT_NOT_FOUND"


def test_comments_cannot_be_edited_or_deleted(client, manager_headers, report):
    created = client.post(f"/api/reports/{report['id']}/comments",
                          json={"comment": "Final"}, headers=manager_headers).json()

    url = f"/api/reports/{report['id']}/comments/{created['id']}"
    assert client.put(url, json={"comment": "Edited"}, headers=manager_headers).status_code in (404, 405)
    assert client.delete(url, headers=manager_headers).status_code in (404, 405)
