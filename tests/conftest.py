"""
Shared fixtures: a throwaway test project on disk, a scripted generative
backend and a fake runner, so no test talks to a model or launches Appium.
"""

from __future__ import annotations

import json

import pytest

import config
from features.jobs import JobStore
from models.schemas import RunResult, RunSummary
from utils.llm import LLMBackend
from workflows.pipeline import GenerationPipeline

STEP_DEFS = """import { Given, When, Then } from '@cucumber/cucumber'
import SettingsPage from '../pageobjects/settings.page.js'

Given('I launch the Settings app', async () => {
    await SettingsPage.launchApp()
})
"""

PAGE_OBJECT = """class SettingsPage {
    async launchApp () {
        await driver.activateApp('com.apple.Preferences')
    }
}

export default new SettingsPage()
"""

FONTS_FEATURE = """Feature: System Fonts
  Scenario: Helvetica is listed
    Given I launch the Settings app
    When I open System Fonts
    Then I should see "Helvetica" font listed
"""


class FakeBackend(LLMBackend):
    """Returns a canned response, or raises ``error`` if one is set."""

    name = "fake"

    def __init__(self, response: dict | str | None = None, error: Exception | None = None):
        if response is None:
            response = {
                "featureFile": FONTS_FEATURE,
                "stepDefinitions": "",
                "pageObjectMethods": "",
                "explanation": "Reuses existing steps",
            }
        self.response = response if isinstance(response, str) else json.dumps(response)
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def chat_json(self, system, user, temperature=0.3, max_tokens=None):
        self.calls.append((system, user))
        if self.error is not None:
            raise self.error
        return self.response


class FakeRunner:
    """Async stand-in for activities.test_run.run_tests."""

    def __init__(self, result: RunResult | None = None):
        self.result = result or RunResult(
            success=True,
            exit_code=0,
            stdout="3 passing (12.4s)\n",
            stderr="",
            summary=RunSummary(passing=3, failing=0),
        )
        self.calls: list[str] = []

    async def __call__(self, feature_file: str) -> RunResult:
        self.calls.append(feature_file)
        return self.result


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A test project with a features dir and both support files."""
    features = tmp_path / "features"
    (features / "step-definitions").mkdir(parents=True)
    (features / "pageobjects").mkdir(parents=True)
    step_defs = features / "step-definitions" / "settings.steps.js"
    page_object = features / "pageobjects" / "settings.page.js"
    step_defs.write_text(STEP_DEFS)
    page_object.write_text(PAGE_OBJECT)

    monkeypatch.setattr(config, "TEST_PROJECT_DIR", tmp_path)
    monkeypatch.setattr(config, "FEATURES_DIR", features)
    monkeypatch.setattr(config, "STEP_DEFINITIONS_FILE", step_defs)
    monkeypatch.setattr(config, "PAGE_OBJECT_FILE", page_object)
    return tmp_path


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def store():
    return JobStore()


@pytest.fixture
def pipeline(project, backend, runner, store):
    return GenerationPipeline(backend=backend, store=store, runner=runner)
