"""Pydantic models for skill API responses."""

from pydantic import BaseModel, Field


class SkillResourceResponse(BaseModel):
    """A file bundled with a skill."""

    resource_type: str = Field(..., description="script, reference or asset")
    relative_path: str


class SkillListItem(BaseModel):
    """A skill in the list response."""

    skill_id: str
    name: str
    description: str = ""
    resource_count: int = 0


class SkillListResponse(BaseModel):
    """Response model for listing skills."""

    skills: list[SkillListItem]


class SkillResponse(BaseModel):
    """Response model for a single skill with its rendered system prompt."""

    skill_id: str
    name: str
    description: str = ""
    instructions: str = ""
    resources: list[SkillResourceResponse] = Field(default_factory=list)
    system_prompt: str = Field(..., description="System prompt the skill installs")
