"""
Pytest configuration and shared fixtures for the truthgen test suite.
"""

from pathlib import Path

import pytest

from truthgen.config import OutputPaths, SourcePaths
from truthgen.paths import PathResolver
from truthgen.spec import AppDefinition
from truthgen.templates import TemplateLoader


TASK_APP_YAML = """
name: TaskApp
version: 1.0.0
description: Track tasks

entities:
  Task:
    fields:
      id:
        type: uuid
        auto: true
      title:
        type: string
        required: true
      status:
        type: enum
        options: [todo, in-progress, done]
        required: true
      priority:
        type: enum
        options: [low, medium, high]
      dueDate:
        type: date
      assignee:
        type: relation
        to: User
      createdAt:
        type: datetime
        auto: true
    behaviors:
      complete:
        type: update
        fields:
          status: done
    ui:
      display:
        primary: title
        secondary: assignee
        badge: status
        color:
          field: status
          map:
            todo: gray
            done: green
        metadata: [dueDate]
      list:
        columns: [title, status, priority, dueDate]
        filterable: [status, priority]
        searchable: [title]
      form:
        fields: [title, status, priority, dueDate, assignee]
      detail:
        sections:
          - title: Overview
            fields: [title, status]
          - title: Schedule
            fields: [dueDate]

  User:
    fields:
      id:
        type: uuid
        auto: true
      name:
        type: string
        required: true
      email:
        type: email
      role:
        type: enum
        values: [admin, member]

views:
  TaskList:
    type: list
    route: /tasks
    entity: Task
  TaskDetail:
    type: detail
    route: /tasks/:id
    entity: Task
  TaskCreate:
    type: form
    route: /tasks/new
    entity: Task
    mode: create
  TaskEdit:
    type: form
    route: /tasks/:id/edit
    entity: Task
    mode: edit
  TaskBoard:
    type: kanban
    route: /tasks/board
    entity: Task
    groupBy: status
  TaskCalendar:
    type: calendar
    route: /tasks/calendar
    entity: Task
    dateField: dueDate
  TaskDashboard:
    type: dashboard
    route: /
    entity: Task

workflows:
  notifyOnDone:
    trigger: Task.updated
    condition: "status == 'done'"
    actions: [notify]
"""


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def task_app_yaml():
    """Return a complete two-entity schema with every view kind."""
    return TASK_APP_YAML


@pytest.fixture
def task_app():
    """Parsed TaskApp schema."""
    return AppDefinition.from_yaml(TASK_APP_YAML)


@pytest.fixture
def task_entity(task_app):
    return task_app.entities["Task"]


@pytest.fixture
def scenario_app():
    """Minimal Task{id, title, status, priority} with no UI configuration."""
    return AppDefinition.model_validate({
        "name": "Scenario",
        "entities": {
            "Task": {
                "fields": {
                    "id": {"type": "uuid"},
                    "title": {"type": "string", "required": True},
                    "status": {"type": "enum", "options": ["todo", "in-progress", "done"], "required": True},
                    "priority": {"type": "enum", "options": ["low", "medium", "high"]},
                },
            },
        },
        "views": {},
    })


@pytest.fixture
def scenario_task(scenario_app):
    return scenario_app.entities["Task"]


@pytest.fixture
def loader():
    """Template loader backed by the packaged skeletons only."""
    return TemplateLoader()


@pytest.fixture
def write_schema(tmp_path):
    """Write schema content to a temporary file and return its path."""

    def _write(content: str, filename: str = "app.truth.yaml") -> Path:
        path = tmp_path / filename
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def project_dir(tmp_path):
    """Empty project layout rooted at tmp_path."""
    (tmp_path / "app" / "templates").mkdir(parents=True)
    (tmp_path / "app" / "static").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def resolver(project_dir):
    return PathResolver(SourcePaths(), OutputPaths(), base_dir=project_dir)
