from datetime import datetime, timezone

from conftest import load_fixture
from openproject_client.models import (
    Project,
    ProjectCollection,
    User,
    WorkPackage,
    parse_id_from_href,
)


def test_work_package_parses_with_link_helpers():
    wp = WorkPackage.model_validate(load_fixture("work_package.json"))

    assert wp.type_ == "WorkPackage"
    assert wp.lock_version == 3
    assert wp.description_text == "Users land on the wrong page after login."
    assert wp.status_title == "In progress"
    assert wp.status_id == 7
    assert wp.priority_title == "High"
    assert wp.project_id == 3
    assert wp.link_href("assignee") is None
    # arrays of links are not single relations
    assert wp.link_href("children") is None


def test_work_package_defaults_without_links():
    wp = WorkPackage(subject="Bare")

    assert wp.description_text == ""
    assert wp.status_title == "Unknown"
    assert wp.priority_title == "Normal"
    assert wp.project_id is None


def test_project_collection_parses():
    collection = ProjectCollection.model_validate(load_fixture("project_list.json"))

    assert collection.total == 2
    assert collection.page_size == 20
    first, second = collection.elements
    assert isinstance(first, Project)
    assert first.description_text == "Company website"
    assert first.created_at == datetime(2019, 11, 20, 9, 0, tzinfo=timezone.utc)
    assert second.description is None
    assert second.description_text == ""


def test_empty_collection_defaults():
    collection = ProjectCollection.model_validate({"_type": "Collection"})

    assert collection.elements == []
    assert (collection.total, collection.count, collection.page_size, collection.offset) == (
        0,
        0,
        0,
        0,
    )


def test_user_parses_with_null_time():
    user = User.model_validate(load_fixture("user.json"))

    assert user.id == 7
    assert user.login == "ada"
    assert user.last_name == "Lovelace"
    assert user.updated_at is None
    assert user.link_title("self") == "Ada Lovelace"


def test_to_payload_drops_unset_fields_and_empty_links():
    assert User().to_payload() == {}
    assert User(login="ada", admin=False).to_payload() == {"login": "ada", "admin": False}

    wp = WorkPackage(subject="x", links={"project": {"href": "/api/v3/projects/3"}})
    assert wp.to_payload() == {
        "subject": "x",
        "_links": {"project": {"href": "/api/v3/projects/3"}},
    }


def test_parse_id_from_href():
    assert parse_id_from_href("/api/v3/work_packages/42") == 42
    assert parse_id_from_href("/api/v3/projects/42/") == 42
    assert parse_id_from_href("/api/v3/projects/website") is None
    assert parse_id_from_href(None) is None
