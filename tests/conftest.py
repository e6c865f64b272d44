"""Pytest configuration and fixtures for jinja_schema tests."""

import pytest
from jinja2 import Environment as Jinja2Environment
from jinja2 import StrictUndefined

from jinja_schema import ExtractionConfig, SchemaWalker

# Realistic templates with the root variables each must report, in order
SAMPLE_TEMPLATES: dict[str, tuple[str, list[str]]] = {
    "simple": ("Hello {{ name }}!", ["name"]),
    "greeting": (
        "Hello {{ user.name }}, you have {{ message_count }} new messages.",
        ["user", "message_count"],
    ),
    "simple_loop": ("{% for item in items %}{{ item }}{% endfor %}", ["items"]),
    "object_loop": (
        "{% for user in users %}\nName: {{ user.name }}\nEmail: {{ user.email }}\n{% endfor %}",
        ["users"],
    ),
    "nested_loop": (
        "{% for category in categories %}\n<h2>{{ category.name }}</h2>\n"
        "{% for product in category.products %}\n"
        "<p>{{ product.name }}: ${{ product.price }}</p>\n"
        "{% endfor %}\n{% endfor %}",
        ["categories"],
    ),
    "simple_condition": ("{% if is_admin %}Admin Panel{% endif %}", ["is_admin"]),
    "complex_condition": (
        '{% if age >= 18 and status == "active" %}\nWelcome!\n'
        "{% elif age >= 13 %}\nTeen account\n{% else %}\nParent required\n{% endif %}",
        ["age", "status"],
    ),
    "filter_chain": ('{{ text | lower | trim | replace("old", "new") }}', ["text"]),
    "filter_with_vars": ("{{ value | default(fallback) }}", ["value", "fallback"]),
    "template_extends": (
        '{% extends "base.html" %}\n{% block title %}{{ page_title }}{% endblock %}\n'
        "{% block content %}\n<h1>{{ heading }}</h1>\n<p>{{ content }}</p>\n{% endblock %}",
        ["page_title", "heading", "content"],
    ),
    "macro_definition": (
        "{% macro render_user(user) %}\n<div>{{ user.name }} {{ user.email }}</div>\n"
        "{% endmacro %}\n{% for user in users %}\n{{ render_user(user) }}\n{% endfor %}",
        ["users"],
    ),
    "email": (
        "<title>{{ email_subject }}</title>\n<h1>Hello {{ recipient.name }}!</h1>\n"
        '{% if notification_type == "welcome" %}\n<p>Welcome to {{ site_name }}!</p>\n'
        '{% elif notification_type == "alert" %}\n<p>Alert: {{ alert_message }}</p>\n'
        "{% endif %}\n<ul>\n{% for item in items %}\n"
        "<li>{{ item.title }} - {{ item.date | dateformat }}</li>\n{% endfor %}\n</ul>\n"
        "<p>Best regards,<br>{{ sender.name }}</p>",
        [
            "email_subject",
            "recipient",
            "notification_type",
            "site_name",
            "alert_message",
            "items",
            "sender",
        ],
    ),
    "config_file": (
        "server:\n  host: {{ config.server.host }}\n  port: {{ config.server.port }}\n"
        "database:\n  name: {{ config.database.name }}\n"
        "{% if config.database.credentials %}\n"
        "  username: {{ config.database.credentials.username }}\n"
        "  password: {{ config.database.credentials.password }}\n{% endif %}\n"
        "features:\n{% for feature in config.features %}\n"
        "  - {{ feature.name }}: {{ feature.enabled }}\n{% endfor %}",
        ["config"],
    ),
    "report": (
        "# {{ report.title }}\nTotal Records: {{ stats.total }}\n"
        "Success Rate: {{ (stats.success / stats.total * 100) | round(2) }}%\n"
        "{% for section in report.sections %}\n### {{ section.name }}\n"
        "{% if section.data %}{% for key, value in section.data.items() %}\n"
        "| {{ key }} | {{ value }} |\n{% endfor %}{% endif %}\n{% endfor %}\n"
        "{% for rec in recommendations %}\n{{ loop.index }}. {{ rec.title }}\n{% endfor %}",
        ["report", "stats", "recommendations"],
    ),
    "playbook": (
        "- name: {{ playbook.name }}\n  hosts: {{ playbook.hosts }}\n"
        "  become: {{ playbook.become | default(true) }}\n"
        "  vars:\n    app_name: {{ app.name }}\n    app_version: {{ app.version }}\n"
        "  tasks:\n{% for task in tasks %}\n    - name: {{ task.name }}\n"
        "{% for key, value in task.params.items() %}\n        {{ key }}: {{ value }}\n"
        "{% endfor %}\n{% if task.when %}\n      when: {{ task.when }}\n{% endif %}\n"
        "{% endfor %}",
        ["playbook", "app", "tasks"],
    ),
    "empty": ("", []),
    "plain_text": ("This is just plain text with no variables.", []),
    "comments": (
        "{# This is a comment with {{ fake_var }} #}\n{{ real_var }}\n{# Another comment #}",
        ["real_var"],
    ),
    "whitespace_control": ("{{- variable -}}", ["variable"]),
    "raw_block": ("{% raw %}{{ not_parsed }}{% endraw %}{{ parsed }}", ["parsed"]),
    "set_statements": (
        "{% set total = price * quantity %}\n"
        "{% set discount_price = total * (1 - discount_rate) %}\n"
        "Final: {{ discount_price }}",
        ["price", "quantity", "discount_rate"],
    ),
    "with_block": (
        "{% with total = items | length %}\nTotal items: {{ total }}\n{% endwith %}",
        ["items"],
    ),
    "ternary": ("{{ 'Active' if is_active else 'Inactive' }}", ["is_active"]),
    "array_access": (
        "First: {{ items[0] }}\nLast: {{ items[-1] }}\nSlice: {{ items[1:5] }}",
        ["items"],
    ),
    "dictionary_access": ('{{ data["key"] }} {{ data.attribute }}', ["data"]),
    "mermaid": (
        "graph TD\n    A[{{ components.frontend.name }}] -->|API| "
        "B[{{ components.backend.name }}]",
        ["components"],
    ),
    "markdown": (
        "# {{ document.title }}\n**Author:** {{ document.author }}\n"
        "{% for section in document.sections %}\n### {{ section.title }}\n"
        "{% if section.code %}\n```{{ section.code.language }}\n"
        "{{ section.code.content }}\n```\n{% endif %}\n{% endfor %}\n"
        "{{ document.conclusion }}",
        ["document"],
    ),
}


@pytest.fixture
def walker():
    """Create a SchemaWalker with the default configuration."""
    return SchemaWalker()


@pytest.fixture
def walker_keep_raw():
    """Create a SchemaWalker that analyzes markup inside raw blocks."""
    return SchemaWalker(ExtractionConfig(raw_is_inert=False))


@pytest.fixture
def strict_env():
    """Create a Jinja2 Environment that fails on any undefined variable."""
    return Jinja2Environment(
        undefined=StrictUndefined,
        extensions=["jinja2.ext.do", "jinja2.ext.loopcontrols"],
    )


@pytest.fixture
def template_file(tmp_path):
    """Write a template to a temporary file and return its path."""

    def _write(source: str, name: str = "template.html"):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write
