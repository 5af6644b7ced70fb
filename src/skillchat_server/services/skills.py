"""Skill loading service.

A skill is a directory under the configured skills_dir:

    skills/
        pdf-helper/
            SKILL.md          # YAML front matter (name, description) + instructions
            scripts/          # files listed to the model as "script" resources
            references/       # ... as "reference" resources
            assets/           # ... as "asset" resources

Loading a skill yields a Skill whose system prompt is installed into a
session's conversation.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"

# Subdirectory -> resource type shown to the model
RESOURCE_DIRS = {
    "scripts": "script",
    "references": "reference",
    "assets": "asset",
}


@dataclass
class SkillResource:
    """A file bundled with a skill."""

    resource_type: str
    relative_path: str


@dataclass
class Skill:
    """A loaded skill definition.

    Attributes:
        skill_id: Directory name of the skill
        name: Display name (front matter "name", defaults to the id)
        description: Short description (front matter "description")
        instructions: Markdown body of SKILL.md
        resources: Bundled files, scripts first, then references, then assets
        path: Directory the skill was loaded from
    """

    skill_id: str
    name: str
    description: str = ""
    instructions: str = ""
    resources: list[SkillResource] = field(default_factory=list)
    path: Path | None = None


def parse_front_matter(content: str) -> tuple[dict[str, Any], str]:
    """Split a markdown document into YAML front matter and body.

    Args:
        content: Full document text

    Returns:
        Tuple of (front matter mapping, body). The mapping is empty when the
        document has no front matter.

    Raises:
        ValueError: If the front matter is not a valid YAML mapping
    """
    if not content.startswith("---"):
        return {}, content.strip()

    lines = content.splitlines()
    for index in range(1, len(lines)):
        if lines[index].strip() == "---":
            header = "\n".join(lines[1:index])
            body = "\n".join(lines[index + 1 :])
            break
    else:
        raise ValueError("Front matter is not terminated with '---'")

    try:
        data = yaml.safe_load(header) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid front matter: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Front matter must be a mapping")

    return data, body.strip()


def build_system_prompt(skill: Skill) -> str:
    """Render the system prompt for a skill.

    Args:
        skill: The loaded skill

    Returns:
        Markdown prompt: title, description, instructions and resource list
    """
    lines = [f"# {skill.name}", "", skill.description, ""]

    if skill.instructions:
        lines += ["## Instructions", "", skill.instructions]

    if skill.resources:
        lines += ["", "## Available Resources", ""]
        lines += [f"- {r.resource_type}: {r.relative_path}" for r in skill.resources]

    return "\n".join(lines) + "\n"


class SkillService:
    """Service for discovering and loading skills from disk."""

    def __init__(self, skills_dir: Path):
        """Initialize the SkillService.

        Args:
            skills_dir: Path to the directory containing skill directories
        """
        self.skills_dir = skills_dir

    def list_skills(self) -> list[Skill]:
        """Load every skill under skills_dir, sorted by id.

        Directories without a SKILL.md are ignored; skills that fail to load
        are logged and skipped.
        """
        skills: list[Skill] = []

        if not self.skills_dir.is_dir():
            logger.debug(f"Skills directory does not exist: {self.skills_dir}")
            return skills

        for skill_path in sorted(self.skills_dir.iterdir()):
            if not (skill_path / SKILL_FILE).is_file():
                continue
            try:
                skills.append(self.load_skill(skill_path.name))
            except ValueError as e:
                logger.warning(f"Failed to load skill {skill_path.name}: {e}")

        return skills

    def load_skill(self, skill_id: str) -> Skill:
        """Load a single skill.

        Args:
            skill_id: Directory name of the skill

        Returns:
            The loaded Skill

        Raises:
            FileNotFoundError: If the skill does not exist
            ValueError: If the id is invalid or SKILL.md cannot be parsed
        """
        self._validate_skill_id(skill_id)
        skill_path = self.skills_dir / skill_id
        skill_file = skill_path / SKILL_FILE

        if not skill_file.is_file():
            raise FileNotFoundError(f"Skill '{skill_id}' not found")

        try:
            content = skill_file.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"{SKILL_FILE} is not valid UTF-8: {e}") from e

        front_matter, instructions = parse_front_matter(content)

        skill = Skill(
            skill_id=skill_id,
            name=str(front_matter.get("name") or skill_id),
            description=str(front_matter.get("description") or ""),
            instructions=instructions,
            resources=self._collect_resources(skill_path),
            path=skill_path,
        )
        logger.debug(f"Loaded skill {skill_id} with {len(skill.resources)} resources")
        return skill

    def _collect_resources(self, skill_path: Path) -> list[SkillResource]:
        resources: list[SkillResource] = []
        for dir_name, resource_type in RESOURCE_DIRS.items():
            resource_dir = skill_path / dir_name
            if not resource_dir.is_dir():
                continue
            for file_path in sorted(p for p in resource_dir.rglob("*") if p.is_file()):
                resources.append(
                    SkillResource(
                        resource_type=resource_type,
                        relative_path=file_path.relative_to(skill_path).as_posix(),
                    )
                )
        return resources

    def _validate_skill_id(self, skill_id: str) -> None:
        """Validate that a skill id is a plain directory name.

        Raises:
            ValueError: If the id is empty or could escape skills_dir
        """
        if not skill_id:
            raise ValueError("Skill id cannot be empty")

        if "/" in skill_id or "\\" in skill_id:
            raise ValueError("Skill id cannot contain path separators")

        if skill_id.startswith("."):
            raise ValueError("Skill id cannot start with a dot")
