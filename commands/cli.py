#!/usr/bin/env python3
"""
Overlay assistant - command line front end

Runs the processing pipelines against captured files without the overlay
window. Useful for checking a provider setup and for scripting.

Usage:
    overlay-assist process screen.png                   # Initial extraction
    overlay-assist process screen.png --debug out.png   # ...then debug run
    overlay-assist describe clip.wav                    # Free-text analysis
    overlay-assist chat "What does this error mean?"
    overlay-assist --local models                       # Local models
    overlay-assist --local --model llama3.2 test-connection
"""

from typing import Any, Dict, List, Optional
import argparse
import asyncio
import logging
import sys

from config import apply_env_overrides, load_config
from core.events import CallbackEventSink, EventKind, ProcessingEvent
from core.errors import AssistantError
from core.models import DebugResult, ProblemInfo
from commands.handlers import AssistantCommands, create_assistant
from utils.log_setup import setup_logging
from utils.media import is_audio_path
from utils.string_utils import word_wrap

logger = logging.getLogger(__name__)

ERROR_EVENTS = (EventKind.INITIAL_SOLUTION_ERROR, EventKind.DEBUG_ERROR)


def print_event(event: ProcessingEvent) -> None:
    """Print a lifecycle event in a readable form."""
    print(f"[{event.timestamp:%H:%M:%S}] {event.kind.name}")

    payload = event.payload
    if isinstance(payload, ProblemInfo):
        for line in word_wrap(payload.problem_statement, 76):
            print(f"    {line}")
    elif isinstance(payload, DebugResult):
        if payload.feedback:
            for line in word_wrap(payload.feedback, 76):
                print(f"    {line}")
        for thought in payload.thoughts:
            print(f"    - {thought}")
        if payload.new_code:
            print()
            print(payload.new_code)
    elif payload is not None:
        print(f"    {payload}")


def build_settings(args: argparse.Namespace) -> Dict[str, Any]:
    """Load the config file and apply environment and command line overrides."""
    settings = apply_env_overrides(load_config(args.config))
    provider = settings['provider']

    if args.local:
        provider['type'] = 'local'
    elif args.cloud:
        provider['type'] = 'cloud'

    section = 'local' if provider.get('type') == 'local' else 'cloud'
    if args.model:
        provider[section]['model'] = args.model
    if args.url:
        provider['local']['url'] = args.url

    return settings


async def run_process(commands: AssistantCommands, paths: List[str], debug_paths: List[str]) -> int:
    for path in paths:
        commands.context.primary_queue.add(path)

    await commands.process_screenshots()

    if debug_paths:
        for path in debug_paths:
            commands.context.debug_queue.add(path)
        await commands.process_screenshots()

    return 0


async def run_describe(commands: AssistantCommands, path: str) -> int:
    if is_audio_path(path):
        result = await commands.analyze_audio_file(path)
    else:
        result = await commands.analyze_image_file(path)

    print("\n".join(word_wrap(result.text, 80)))
    return 0


async def run_command(args: argparse.Namespace, settings: Dict[str, Any]) -> int:
    errors: List[ProcessingEvent] = []

    def on_event(event: ProcessingEvent) -> None:
        if event.kind in ERROR_EVENTS:
            errors.append(event)
        print_event(event)

    commands = await create_assistant(settings, CallbackEventSink(on_event))
    config = commands.current_provider()
    logger.info(f"Using {config['provider']} provider ({config['model']})")

    if args.command == 'process':
        await run_process(commands, args.paths, args.debug or [])
        return 1 if errors else 0

    if args.command == 'describe':
        return await run_describe(commands, args.path)

    if args.command == 'chat':
        print(await commands.chat(args.message))
        return 0

    if args.command == 'test-connection':
        result = await commands.test_connection()
        if result.success:
            print(f"Connection OK ({config['provider']}: {config['model']})")
            return 0
        print(f"Connection failed: {result.error}")
        return 1

    if args.command == 'models':
        models = await commands.list_local_models()
        if not models:
            print("No local models found")
            return 1
        for name in models:
            print(name)
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Overlay assistant processing core',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--config', '-c', help='Path to configuration file')

    provider = parser.add_mutually_exclusive_group()
    provider.add_argument('--local', action='store_true', help='Use the local Ollama server')
    provider.add_argument('--cloud', action='store_true', help='Use the cloud provider')

    parser.add_argument('--model', '-m', help='Model name for the selected provider')
    parser.add_argument('--url', help='Local server URL')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    process = subparsers.add_parser('process', help='Run the initial (and optionally debug) pipeline')
    process.add_argument('paths', nargs='+', help='Screenshots or audio files, last one is processed')
    process.add_argument('--debug', nargs='+', metavar='PATH', help='Follow-up screenshots for a debug run')

    describe = subparsers.add_parser('describe', help='Free-text analysis of one image or audio file')
    describe.add_argument('path')

    chat = subparsers.add_parser('chat', help='Single-turn chat')
    chat.add_argument('message')

    subparsers.add_parser('test-connection', help='Probe the active provider')
    subparsers.add_parser('models', help='List models on the local server')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = build_settings(args)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging_config = dict(settings.get('logging') or {})
    if args.verbose:
        logging_config['level'] = 'DEBUG'
    setup_logging(logging_config, console=args.verbose)

    try:
        return asyncio.run(run_command(args, settings))
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    except AssistantError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logging.exception(f"Fatal error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
