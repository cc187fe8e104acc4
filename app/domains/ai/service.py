"""AI gateway with Google Gemini integration."""

import asyncio
import json
import logging
import re
from typing import Any

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.config import Settings
from app.exceptions.ai import (
    AIContentFilterError,
    AIParsingError,
    AIQuotaExceededError,
    AIRateLimitError,
    AIServiceError,
    AIServiceUnavailableError,
    AITimeoutError,
)
from app.schemas.ai import (
    DailyAssessmentResult,
    ProjectInsightsResult,
    ProjectIntelligenceResult,
    TaskAssistanceResult,
    TaskExpansionResult,
    TaskReviewResult,
)

logger = logging.getLogger(__name__)

DEPENDENCY_ANALYSIS_TEMPERATURE = 0.5


class AIGateway:
    """Builds prompts, calls Gemini and validates the JSON replies.

    Most operations never raise: on any failure (no API key, timeout,
    unparsable reply) they log and return an empty result of the same shape.
    ``analyze_project_intelligence`` and ``generate_project_insights`` let the
    error propagate instead.
    """

    def __init__(self, config: Settings, model: Any = None):
        """Initialize the gateway.

        Args:
            config: Application settings.
            model: Pre-built model object, mainly for tests. When omitted a
                Gemini model is built if an API key is configured.
        """
        self.settings = config
        self.model = model
        if self.model is None and config.gemini_api_key:
            self._initialize_client()

    @property
    def is_available(self) -> bool:
        return self.model is not None

    def _initialize_client(self):
        """Initialize Google Gemini client."""
        try:
            genai.configure(api_key=self.settings.gemini_api_key)
            self.model = genai.GenerativeModel(
                model_name=self.settings.gemini_model,
                safety_settings={
                    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                },
            )
            logger.info(f"Gemini client initialized with model {self.settings.gemini_model}")
        except Exception as e:
            logger.error(f"Failed to initialize Gemini client: {str(e)}")
            self.model = None

    # ----- operations returning empty defaults on failure -----

    async def expand_task(
        self,
        title: str,
        description: str | None = None,
        existing_subtasks: list[str] | None = None,
    ) -> TaskExpansionResult:
        """Break a task down into 3-8 actionable subtasks."""
        prompt = self._build_expand_task_prompt(title, description, existing_subtasks)
        try:
            data = await self._generate_json(prompt)
            return TaskExpansionResult.model_validate(data)
        except (AIServiceError, ValidationError) as e:
            logger.error(f"Error expanding task: {str(e)}")
            return TaskExpansionResult()

    async def generate_daily_assessment(
        self,
        completed_tasks: list[str],
        pending_tasks: list[str],
        overdue_tasks: list[str],
    ) -> DailyAssessmentResult:
        """Plan the day from yesterday's progress and the open backlog."""
        prompt = f"""
You are an AI assistant providing a daily task assessment and planning guidance.

Yesterday's completed tasks: {", ".join(completed_tasks)}
Current pending tasks: {", ".join(pending_tasks)}
Overdue tasks: {", ".join(overdue_tasks)}

Please provide:
1. A prioritized plan for today (3-5 most important tasks)
2. Quick wins that can be completed in under 30 minutes
3. Potential risks or blockers
4. General suggestions for productivity

**Response Format (JSON only):**
```json
{{
    "today_plan": ["task1", "task2", "task3"],
    "quick_wins": ["quick task1", "quick task2"],
    "risks": ["risk1", "risk2"],
    "suggestions": ["suggestion1", "suggestion2"]
}}
```

Focus on actionable, specific advice.
"""
        try:
            data = await self._generate_json(prompt)
            return DailyAssessmentResult.model_validate(data)
        except (AIServiceError, ValidationError) as e:
            logger.error(f"Error generating daily assessment: {str(e)}")
            return DailyAssessmentResult()

    async def analyze_dependencies(
        self, task_id: str, task_title: str, dependent_tasks: list[str]
    ) -> list[str]:
        """List risks of a task whose dependencies are still open."""
        prompt = f"""
You are analyzing task dependencies to identify potential risks.

Task: {task_title}
Dependent tasks that will be blocked: {", ".join(dependent_tasks)}

Please identify potential risks and suggest mitigation strategies.

**Response Format (JSON array of risk descriptions only):**
```json
["risk1", "risk2", "risk3"]
```

Focus on practical, actionable risks.
"""
        try:
            data = await self._generate_json(prompt, temperature=DEPENDENCY_ANALYSIS_TEMPERATURE)
            if not isinstance(data, list):
                raise AIParsingError("Expected a JSON array of risks")
            return [item if isinstance(item, str) else json.dumps(item) for item in data]
        except AIServiceError as e:
            logger.error(f"Error analyzing dependencies for task {task_id}: {str(e)}")
            return []

    async def get_task_assistance(
        self,
        task_title: str,
        task_description: str | None = None,
        user_query: str | None = None,
        project_context: str | None = None,
    ) -> TaskAssistanceResult:
        """Answer a free-form question about a task."""
        prompt = f"""
You are an AI assistant helping a user make progress on a task.

**Task:** {task_title}
"""
        if task_description:
            prompt += f"**Description:** {task_description}\n"
        if project_context:
            prompt += f"**Project Context:** {project_context}\n"
        if user_query:
            prompt += f"**User Question:** {user_query}\n"

        prompt += """
Please provide:
1. Suggestions that answer the user's question
2. Concrete next steps
3. Useful resources or references
4. Warnings about pitfalls to avoid

**Response Format (JSON only):**
```json
{
    "suggestions": ["suggestion1"],
    "next_steps": ["step1"],
    "resources": ["resource1"],
    "warnings": ["warning1"]
}
```
"""
        try:
            data = await self._generate_json(prompt)
            return TaskAssistanceResult.model_validate(data)
        except (AIServiceError, ValidationError) as e:
            logger.error(f"Error getting task assistance: {str(e)}")
            return TaskAssistanceResult()

    async def review_task_creation(
        self,
        task_data: dict[str, Any],
        calendar_events: list[dict[str, Any]] | None = None,
    ) -> TaskReviewResult:
        """Review a task draft before it is created."""
        events = calendar_events or []
        events_text = (
            "\n".join(f"- {e.get('title') or 'Busy'}: {e.get('start')} to {e.get('end')}" for e in events[:20])
            or "None"
        )
        prompt = f"""
You are reviewing a new task before it is created in a task management application.

**Task Draft (JSON):**
{json.dumps(task_data, default=str, indent=2)}

**Upcoming Calendar Events:**
{events_text}

Please provide:
1. A concise project name for this task
2. Suggestions to make the task clearer and more achievable
3. Clarifying questions to ask the user
4. Total estimated duration in minutes
5. Complexity: "low", "medium" or "high"
6. Recommended subtasks with priority "high", "medium" or "low"
7. Risks
8. Conflicts with the calendar events listed above
9. Tools and supplies needed

**Response Format (JSON only):**
```json
{{
    "suggested_project_name": "Project name",
    "suggestions": ["suggestion1"],
    "clarifying_questions": ["question1"],
    "estimated_duration": 120,
    "complexity": "medium",
    "recommended_subtasks": [
        {{
            "title": "Subtask title",
            "description": "Brief description",
            "estimated_time": 30,
            "priority": "high",
            "suggested_due_date": "2025-01-31"
        }}
    ],
    "risks": ["risk1"],
    "calendar_conflicts": ["conflict1"],
    "tools_and_supplies": ["tool1"]
}}
```
"""
        try:
            data = await self._generate_json(prompt)
            return TaskReviewResult.model_validate(data)
        except (AIServiceError, ValidationError) as e:
            logger.error(f"Error reviewing task creation: {str(e)}")
            return TaskReviewResult()

    async def generate_context_questions(self, task_data: dict[str, Any]) -> list[str]:
        """Questions that would help plan the drafted task."""
        prompt = f"""
You are helping a user plan a new task. Ask the questions whose answers would
most improve the plan (scope, deadline, resources, stakeholders).

**Task Draft (JSON):**
{json.dumps(task_data, default=str, indent=2)}

**Response Format (JSON array of 3-5 questions only):**
```json
["question1", "question2", "question3"]
```
"""
        try:
            data = await self._generate_json(prompt)
            if isinstance(data, dict):
                data = data.get("questions", [])
            if not isinstance(data, list):
                raise AIParsingError("Expected a JSON array of questions")
            return [str(q) for q in data if q]
        except AIServiceError as e:
            logger.error(f"Error generating context questions: {str(e)}")
            return []

    # ----- operations that propagate failures -----

    async def analyze_project_intelligence(self, project: dict[str, Any]) -> ProjectIntelligenceResult:
        """Schedule, critical path and risk analysis of a project.

        Raises:
            AIServiceError: On any failure, including an unconfigured model.
        """
        prompt = f"""
You are a project planning assistant. Analyze the project below.

**Project:** {project.get("title")}
**Due Date:** {project.get("due_date") or "not set"}

**Tasks (JSON):**
{json.dumps(project.get("tasks", []), default=str, indent=2)}

**Weekly Availability (day_of_week 0 = Sunday):**
{json.dumps(project.get("category_schedules", []), indent=2)}

**Calendar Events:**
{json.dumps(project.get("calendar_events", []), default=str, indent=2)}

Please provide:
1. An optimized schedule for the tasks
2. The critical path (task titles in order)
3. A risk assessment
4. Efficiency suggestions
5. Time optimization with minutes saved and recommendations

**Response Format (JSON only):**
```json
{{
    "optimized_schedule": [{{"task": "title", "start": "ISO datetime", "end": "ISO datetime"}}],
    "critical_path": ["task1", "task2"],
    "risk_assessment": ["risk1"],
    "efficiency_suggestions": ["suggestion1"],
    "time_optimization": {{"time_saved": 60, "recommendations": ["recommendation1"]}}
}}
```
"""
        try:
            data = await self._generate_json(prompt)
            return ProjectIntelligenceResult.model_validate(data)
        except ValidationError as e:
            raise AIParsingError(f"Unexpected project intelligence shape: {str(e)}") from e

    async def generate_project_insights(
        self, project_id: str, tasks: list[dict[str, Any]]
    ) -> ProjectInsightsResult:
        """Productivity patterns and completion trends of a project.

        Raises:
            AIServiceError: On any failure, including an unconfigured model.
        """
        prompt = f"""
You are analyzing the task history of project {project_id}.

**Tasks (JSON):**
{json.dumps(tasks, default=str, indent=2)}

Identify productivity patterns and completion trends.

**Response Format (JSON only):**
```json
{{
    "productivity_patterns": ["pattern1", "pattern2"],
    "completion_trends": {{"on_time": 0, "late": 0, "summary": "text"}}
}}
```
"""
        try:
            data = await self._generate_json(prompt)
            return ProjectInsightsResult.model_validate(data)
        except ValidationError as e:
            raise AIParsingError(f"Unexpected project insights shape: {str(e)}") from e

    # ----- prompt builders -----

    def _build_expand_task_prompt(
        self, title: str, description: str | None, existing_subtasks: list[str] | None
    ) -> str:
        """Build prompt for subtask breakdown."""
        prompt = f"""
You are an AI assistant helping to break down a task into actionable subtasks.

**Task:** {title}
"""
        if description:
            prompt += f"**Description:** {description}\n"
        if existing_subtasks:
            prompt += f"**Existing subtasks:** {', '.join(existing_subtasks)}\n"

        prompt += """
Please provide:
1. A list of 3-8 specific, actionable subtasks
2. Any dependencies this task might have on other tasks
3. Suggestions for improving efficiency

**Response Format (JSON only):**
```json
{
    "subtasks": [
        {
            "title": "Specific action item",
            "description": "Brief description if needed",
            "estimated_time": 30
        }
    ],
    "dependencies": ["dependency1", "dependency2"],
    "suggestions": ["suggestion1", "suggestion2"]
}
```

Keep subtasks specific and actionable. Estimated time should be in minutes.
"""
        return prompt

    # ----- model access -----

    async def _generate_json(self, prompt: str, temperature: float | None = None) -> Any:
        text = await self._generate(prompt, temperature)
        return self._extract_json(text)

    async def _generate(self, prompt: str, temperature: float | None = None) -> str:
        if not self.model:
            raise AIServiceUnavailableError("AI service not configured")

        try:
            return await asyncio.wait_for(
                self._generate_content_with_retry(
                    prompt, self.settings.ai_temperature if temperature is None else temperature
                ),
                timeout=self.settings.ai_request_timeout,
            )
        except TimeoutError:
            raise AITimeoutError("AI request timed out") from None

    def _extract_retry_delay(self, error_message: str) -> int:
        """Extract retry delay from Gemini API error message."""
        # Pattern: "Please retry in 32.984803332s"
        match = re.search(r"retry in (\d+(?:\.\d+)?)s", error_message)
        if match:
            return int(float(match.group(1))) + 1
        return self.settings.ai_retry_min_wait

    async def _generate_content_with_retry(self, prompt: str, temperature: float) -> str:
        """Generate content with exponential backoff retry logic."""
        retrying = AsyncRetrying(
            retry=retry_if_exception_type((AIRateLimitError, AIQuotaExceededError)),
            stop=stop_after_attempt(self.settings.ai_max_retry_attempts),
            wait=wait_exponential(
                multiplier=self.settings.ai_retry_backoff_factor,
                min=self.settings.ai_retry_min_wait,
                max=self.settings.ai_retry_max_wait,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return await retrying(self._generate_content_async, prompt, temperature)

    async def _generate_content_async(self, prompt: str, temperature: float) -> str:
        """Generate content using Gemini API asynchronously."""
        generation_config = genai.types.GenerationConfig(
            candidate_count=1,
            max_output_tokens=self.settings.gemini_max_tokens,
            temperature=temperature,
        )
        try:
            # Run the synchronous Gemini API call in a thread pool
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(
                None,
                lambda: self.model.generate_content(prompt, generation_config=generation_config),
            )

            if not response or not getattr(response, "candidates", None):
                logger.error("AI response has no candidates - content may be blocked")
                raise AIContentFilterError(
                    "Content was blocked by AI safety filters. Please rephrase your request."
                )

            text = response.text
            if not text or not text.strip():
                raise AIServiceError("AI returned empty text response")
            return text

        except AIServiceError:
            raise
        except Exception as e:
            error_msg = str(e).lower()
            full_error_msg = str(e)
            retry_delay = self._extract_retry_delay(full_error_msg)

            # Check quota first, as it often includes "429"
            if "quota" in error_msg:
                logger.error(f"Quota exceeded. Retry after {retry_delay}s. Error: {full_error_msg}")
                raise AIQuotaExceededError(
                    f"API quota exceeded. Please try again in {retry_delay} seconds",
                    details={"retry_after": retry_delay},
                ) from e
            if "429" in full_error_msg or ("rate" in error_msg and "limit" in error_msg):
                logger.warning(f"Rate limit hit. Retry after {retry_delay}s")
                raise AIRateLimitError(
                    f"Rate limit exceeded. Retry after {retry_delay} seconds",
                    retry_after=retry_delay,
                ) from e
            logger.error(f"Gemini API call failed: {full_error_msg}")
            raise AIServiceError(f"AI generation failed: {full_error_msg}") from e

    @staticmethod
    def _extract_json(response: str) -> Any:
        """Extract the JSON object or array from a model reply (handles code blocks)."""
        starts = [i for i in (response.find("{"), response.find("[")) if i != -1]
        if not starts:
            raise AIParsingError("No JSON found in response")

        json_start = min(starts)
        closing = "}" if response[json_start] == "{" else "]"
        json_end = response.rfind(closing) + 1
        if json_end <= json_start:
            raise AIParsingError("No JSON found in response")

        try:
            return json.loads(response[json_start:json_end])
        except json.JSONDecodeError as e:
            raise AIParsingError(f"Invalid JSON response: {str(e)}") from e
