"""Business logic services for skillchat-server.

This package contains service classes that implement business logic
outside the tool-orchestration core, such as loading skills.
"""

from skillchat_server.services.skills import Skill, SkillService, build_system_prompt

__all__ = [
    "Skill",
    "SkillService",
    "build_system_prompt",
]
