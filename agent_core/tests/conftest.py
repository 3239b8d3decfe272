"""Shared fixtures for agent_core tests."""

import logging

import pytest

from agent_core.logger import WorkflowLogger
from agent_core.plugin import PluginRegistry

from workflow_fixtures import EchoPlugin, FakeAgentClient, RecordedEvents


@pytest.fixture
def events(caplog):
    caplog.set_level(logging.DEBUG, logger="agent_core.events")
    return RecordedEvents(caplog)


@pytest.fixture
def event_logger(events):
    return WorkflowLogger()


@pytest.fixture
def registry(event_logger):
    return PluginRegistry(event_logger)


@pytest.fixture
def echo_plugin():
    return EchoPlugin()


@pytest.fixture
def agent_client():
    return FakeAgentClient()
