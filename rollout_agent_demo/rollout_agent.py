"""Chat loop that saves the session rollout after every assistant reply."""

import sys
import uuid
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from openai import OpenAI
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rollouts.config import AppConfig, load_config
from rollouts.rollout_writer import RolloutWriter
from rollouts.runtime_config import add_rollout_args, rollout_settings_from_args
from rollouts.sessions_root import resolve_sessions_root


logger = logging.getLogger("Rollout-Agent")

load_dotenv()

SYSTEM_PROMPT = "You are a helpful assistant. Answer concisely."


def build_client(config: AppConfig) -> OpenAI:
    """Build an OpenAI-compatible client from LLM_* settings."""
    return OpenAI(
        base_url = config.base_url,
        api_key = config.api_key,
    )


def chat(
    prompt: str,
    client: Any,
    model: str,
    writer: RolloutWriter,
    session_id: str,
    history: Optional[List[Dict]] = None,
    system_prompt: str = SYSTEM_PROMPT,
) -> str:
    """
    Run one chat turn and save the session rollout afterwards.

    Args:
        prompt: User message for this turn.
        client: OpenAI-compatible client instance.
        model: Model name for chat completions.
        writer: Rollout writer persisting the history.
        session_id: Identifier of the current session.
        history: Chat history for multi-turn conversation (mutated in place).
        system_prompt: System message prepended to each request.
    Returns:
        str: Assistant reply text.
    """
    if history is None:
        history = []

    history.append({"role": "user", "content": prompt})
    messages = [{"role": "system", "content": system_prompt}]
    messages.extend(history)

    response = client.chat.completions.create(
        model = model,
        messages = messages,
    )
    content = response.choices[0].message.content or ""
    history.append({"role": "assistant", "content": content})

    writer.save_rollout(session_id, history)
    return content


def parse_args(argv: Optional[List[str]] = None):
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed CLI arguments.
    """
    import argparse

    parser = argparse.ArgumentParser(description = "Rollout Agent - Chat with LLM and save session rollouts")
    parser.add_argument(
        "prompt",
        nargs = "?",
        help = "User prompt for the agent",
    )
    parser.add_argument(
        "--session-id",
        dest = "session_id",
        default = None,
        help = "Session identifier (default: random UUID).",
    )
    parser.add_argument(
        "--print-root",
        dest = "print_root",
        action = "store_true",
        help = "Print the resolved sessions directory and exit.",
    )
    add_rollout_args(parser)

    args = parser.parse_args(argv)
    args.rollout_settings = rollout_settings_from_args(args)
    return args


def main(argv: Optional[List[str]] = None):
    """
    Main function to run the rollout agent from command line.
    """
    args = parse_args(argv)
    settings = args.rollout_settings

    if args.print_root:
        print(resolve_sessions_root(settings))
        return 0

    logging.basicConfig(
        level = logging.INFO,
        format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers = [logging.StreamHandler()],
    )

    config = load_config()
    model = config.model
    if not model:
        logger.error("Error: LLM_MODEL is not set")
        return 1

    client = build_client(config)
    writer = RolloutWriter(settings = settings)
    session_id = args.session_id or str(uuid.uuid4())
    logger.info(f"Session id: {session_id}")

    history = []
    if args.prompt:
        try:
            print(chat(args.prompt, client, model, writer, session_id, history))
        except Exception as exc:
            logger.error(f"Error: {exc}")
            return 1
    else:
        logger.info("Type 'exit' or 'quit' to end the conversation")
        try:
            while True:
                prompt = input("\033[94mUser:\033[0m ").strip()
                if prompt.lower() in ["exit", "quit"]:
                    logger.info("Conversation ended.")
                    break
                if not prompt:
                    continue
                result = chat(prompt, client, model, writer, session_id, history)
                print(f"\033[92mAssistant:\033[0m {result}")
        except KeyboardInterrupt:
            logger.info("\nConversation interrupted.")
        except Exception as exc:
            logger.error(f"Error: {exc}")
            writer.flush()
            return 1

    writer.flush()
    logger.info(f"Rollouts directory: {resolve_sessions_root(settings)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
