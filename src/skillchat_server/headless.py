"""Headless mode: run a single chat turn without the HTTP server.

Used for automation: connect the tool servers, optionally load a skill,
send one message, print the outcome and shut everything down again.
"""

import logging
import sys
from typing import TextIO

from skillchat_server.app import build_tool_manager
from skillchat_server.config import SkillChatSettings
from skillchat_server.dependencies import create_orchestrator
from skillchat_server.ollama import OllamaClient
from skillchat_server.services import SkillService, build_system_prompt
from skillchat_server.sessions import ChatSession, TurnResult
from skillchat_server.tools import ToolServerManager

logger = logging.getLogger(__name__)


def print_turn_result(result: TurnResult, out: TextIO = sys.stdout) -> None:
    """Write the tool calls and final response of a turn."""
    for record in result.tool_calls:
        out.write(f"[tool] {record.tool_name}({record.arguments_json}) -> {record.result}\n")
    if result.success:
        out.write(f"{result.response}\n")
    else:
        out.write(f"Error: {result.error}\n")


async def run_headless(
    settings: SkillChatSettings,
    message: str,
    skill_id: str | None = None,
    tool_manager: ToolServerManager | None = None,
    out: TextIO = sys.stdout,
) -> int:
    """Run one turn and report it.

    Args:
        settings: Application settings
        message: The user message to send
        skill_id: Optional skill to load before sending
        tool_manager: Manager to use (built from settings by default)
        out: Where to write the outcome

    Returns:
        Process exit code: 0 if the turn succeeded, 1 otherwise
    """
    skill_prompt = None
    if skill_id:
        try:
            skill = SkillService(settings.resolved_skills_dir).load_skill(skill_id)
        except (FileNotFoundError, ValueError) as e:
            out.write(f"Error: {e}\n")
            return 1
        skill_prompt = build_system_prompt(skill)

    tool_manager = tool_manager or build_tool_manager(settings)
    ollama_client = OllamaClient(host=settings.ollama_host)

    try:
        await tool_manager.initialize()

        session = ChatSession(session_id=ChatSession.generate_session_id(), model=settings.model)
        if skill_id and skill_prompt is not None:
            session.load_skill(skill_id, skill_prompt)

        orchestrator = create_orchestrator(session, settings, ollama_client, tool_manager)
        result = await orchestrator.send_message(message)
    finally:
        await tool_manager.shutdown()
        await ollama_client.close()

    print_turn_result(result, out)
    logger.info(f"Headless turn finished: success={result.success}, rounds={result.rounds}")
    return 0 if result.success else 1
