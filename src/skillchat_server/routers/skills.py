"""Skills router for discovering skills on disk."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from skillchat_server.dependencies import get_skill_service
from skillchat_server.models.skills import (
    SkillListItem,
    SkillListResponse,
    SkillResourceResponse,
    SkillResponse,
)
from skillchat_server.services import SkillService, build_system_prompt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/skills", tags=["skills"])


@router.get(
    "",
    response_model=SkillListResponse,
    summary="List all skills",
)
async def list_skills(
    service: Annotated[SkillService, Depends(get_skill_service)],
) -> SkillListResponse:
    """List every skill found in the skills directory."""
    skills = [
        SkillListItem(
            skill_id=skill.skill_id,
            name=skill.name,
            description=skill.description,
            resource_count=len(skill.resources),
        )
        for skill in service.list_skills()
    ]
    return SkillListResponse(skills=skills)


@router.get(
    "/{skill_id}",
    response_model=SkillResponse,
    summary="Get a skill",
)
async def get_skill(
    skill_id: str,
    service: Annotated[SkillService, Depends(get_skill_service)],
) -> SkillResponse:
    """Get a skill with its instructions, resources and rendered system prompt.

    Raises:
        HTTPException: 404 if the skill is not found
        HTTPException: 400 if the skill id is invalid or SKILL.md is malformed
    """
    try:
        skill = service.load_skill(skill_id)
    except FileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Skill '{skill_id}' not found",
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return SkillResponse(
        skill_id=skill.skill_id,
        name=skill.name,
        description=skill.description,
        instructions=skill.instructions,
        resources=[
            SkillResourceResponse(
                resource_type=r.resource_type, relative_path=r.relative_path
            )
            for r in skill.resources
        ],
        system_prompt=build_system_prompt(skill),
    )
