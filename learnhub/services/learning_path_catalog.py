"""
Default learning paths. Module ids are the content ids that MODULE progress
submissions carry.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PathModuleRule:
    module_id: str
    title: str
    estimated_time: int  # minutes
    is_required: bool = True


@dataclass(frozen=True)
class LearningPathRule:
    key: str
    title: str
    description: str
    category: str
    difficulty: str
    is_recommended: bool
    modules: tuple[PathModuleRule, ...]

    @property
    def estimated_time(self) -> int:
        return sum(m.estimated_time for m in self.modules)


DEFAULT_LEARNING_PATHS: tuple[LearningPathRule, ...] = (
    LearningPathRule(
        "ai-agents-foundations",
        "AI Agents Foundations",
        "From a single tool-using agent to multi-agent projects",
        "AI Agents",
        "BEGINNER",
        True,
        (
            PathModuleRule("agents-level-1", "What is an agent?", 45),
            PathModuleRule("agents-level-2", "Tools and memory", 60),
            PathModuleRule("agents-level-3", "Planning and reasoning", 75),
            PathModuleRule("agents-level-4", "Multi-agent orchestration", 90),
            PathModuleRule("agents-projects", "Agent projects", 120, is_required=False),
        ),
    ),
    LearningPathRule(
        "ai-integration-essentials",
        "AI Integration Essentials",
        "Calling language models from real applications",
        "AI Integration",
        "INTERMEDIATE",
        True,
        (
            PathModuleRule("llm-tutorial", "Working with LLMs", 40),
            PathModuleRule("prompting-tutorial", "Prompt engineering", 40),
            PathModuleRule("api-best-practices-tutorial", "API best practices", 30),
            PathModuleRule("ai-agents-tutorial", "Agents in production", 50),
        ),
    ),
    LearningPathRule(
        "multimodal-ai",
        "Multimodal AI",
        "Vision, speech and image generation models",
        "Multimodal",
        "INTERMEDIATE",
        False,
        (
            PathModuleRule("vlm-basics", "Vision-language models", 45),
            PathModuleRule("tts-basics", "Text to speech", 35),
            PathModuleRule("text2image-tutorial", "Text to image", 40),
        ),
    ),
)
