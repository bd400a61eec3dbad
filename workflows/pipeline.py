"""
Test Generation Pipeline

Drives one job through:
  1. Parsing prompt          → test name + feature path
  2. Generating test files   → feature file, new step definitions, new page object methods
  3. Writing test files      → feature written, fragments merged into support files
  4. Running tests           → external runner on the new feature file
  5. Validating results      → heuristic diagnostics on the run output

Final status is ``completed`` when the run passed, ``failed`` when it ran and
failed, and ``error`` when any step raised. Blocking work (backend calls, file
I/O) runs in the default executor so jobs never stall the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone

import config
from activities.merge import (
    append_step_definitions,
    insert_page_object_methods,
    read_support_file,
    write_feature_file,
)
from activities.parse_prompt import derive_test_name, parse_prompt
from activities.test_gen import generate_artifacts
from activities.test_run import run_tests
from activities.validate import validate_results
from features.jobs import JobStore, JobTracker
from models.errors import ValidationError
from models.schemas import ArtifactBundle, GeneratedTestDetails, Job, JobStatus
from utils.llm import LLMBackend

log = logging.getLogger(__name__)


def new_job_id() -> str:
    return f"job-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:6]}"


class GenerationPipeline:
    """Accepts prompts and runs each one as an independent asyncio task."""

    def __init__(
        self,
        backend: LLMBackend,
        store: JobStore,
        namer=derive_test_name,
        runner=run_tests,
    ):
        self.backend = backend
        self.store = store
        self.namer = namer
        self.runner = runner
        self._tasks: set[asyncio.Task] = set()

    # ── Submission ────────────────────────────────────────────────────

    def submit(self, prompt: str | None) -> str:
        """Register a job and start its pipeline in the background.

        Must be called from within a running event loop. Raises
        ValidationError before creating anything if the prompt is empty.
        """
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValidationError("Prompt is required")

        job = Job(
            id=new_job_id(),
            prompt=prompt,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self.store.add(job)

        task = asyncio.get_running_loop().create_task(self.run(job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        log.info("Job %s submitted", job.id)
        return job.id

    async def wait_idle(self) -> None:
        """Wait for every in-flight job to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── Pipeline ──────────────────────────────────────────────────────

    async def run(self, job: Job) -> Job:
        """Run all steps for ``job``; never raises."""
        tracker = JobTracker(self.store, job)
        loop = asyncio.get_running_loop()

        try:
            # Step 1: Parse prompt
            tracker.start("Parsing prompt")
            details = parse_prompt(job.prompt, namer=self.namer)
            tracker.update(test_details=details)
            tracker.complete()

            # Step 2: Generate artifacts
            tracker.start("Generating test files")
            bundle = await loop.run_in_executor(None, self._generate, job.prompt)
            tracker.update(explanation=bundle.explanation)
            tracker.complete(explanation=bundle.explanation)

            # Step 3: Merge artifacts
            tracker.start("Writing test files")
            touched = await loop.run_in_executor(None, self._merge, details, bundle)
            tracker.complete(files=touched)

            # Step 4: Run tests
            tracker.start("Running tests")
            result = await self.runner(details.feature_file)
            tracker.update(test_result=result)
            output = result.stdout[-config.MAX_OUTPUT_CHARS:]
            if result.success:
                tracker.complete(output=output)
            else:
                tracker.fail(output=output)

            # Step 5: Validate
            tracker.start("Validating results")
            validation = validate_results(result)
            tracker.update(validation=validation)
            tracker.complete(issues=list(validation.issues))

            tracker.finish(JobStatus.COMPLETED if result.success else JobStatus.FAILED)

        except Exception as e:
            log.error("Job %s failed: %s", job.id, e, exc_info=True)
            message = str(e) or type(e).__name__
            tracker.fail_running(message)
            tracker.finish(JobStatus.ERROR, error=message)

        return tracker.job

    def _generate(self, prompt: str) -> ArtifactBundle:
        step_defs = read_support_file(config.STEP_DEFINITIONS_FILE)
        page_object = read_support_file(config.PAGE_OBJECT_FILE)
        return generate_artifacts(self.backend, step_defs, page_object, prompt)

    def _merge(self, details: GeneratedTestDetails, bundle: ArtifactBundle) -> list[str]:
        """Write the artifacts and return the files that changed."""
        feature_file, step_defs_file, page_object_file = details.files
        touched = []
        if write_feature_file(config.TEST_PROJECT_DIR / feature_file, bundle.feature_file):
            touched.append(feature_file)
        if append_step_definitions(config.STEP_DEFINITIONS_FILE, bundle.step_definitions):
            touched.append(step_defs_file)
        if insert_page_object_methods(config.PAGE_OBJECT_FILE, bundle.page_object_methods):
            touched.append(page_object_file)
        log.info("Merged artifacts into %d file(s): %s", len(touched), ", ".join(touched))
        return touched
