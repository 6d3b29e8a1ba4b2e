#!/usr/bin/env python3
"""
GameTorch command-line interface.

Your API key is loaded from the ``GAMETORCH_API_KEY`` environment variable.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, List, Optional

from temporalio.client import WorkflowFailureError
from temporalio.service import RPCError

from gametorch import animations
from gametorch.config import AppConfig, get_config
from gametorch.config.retry_policies import GameTorchError
from gametorch.models.animation_request import build_animation_request
from gametorch.models.animation_result import describe_statuses
from gametorch.utils.api_client import AnimationsClient

API_KEY_HELP = (
    "Error: environment variable GAMETORCH_API_KEY not set.\n"
    "Create an API key from your account at https://gametorch.app and export it before using this CLI:\n"
    "  export GAMETORCH_API_KEY=<your key>"
)


def setup_logging(app_config: AppConfig, verbose: bool = False):
    """Console logging: bare messages on stderr, request logs only when verbose."""
    level = logging.DEBUG if verbose else getattr(logging, app_config.logging.level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=app_config.logging.format if verbose else app_config.logging.console_format,
        stream=sys.stderr
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="gametorch",
        description="GameTorch command-line interface"
    )
    parser.add_argument(
        "-l", "--local",
        action="store_true",
        help="Use local server (http://localhost:8000) instead of production"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    animations_parser = commands.add_parser("animations", help="Animation-related operations")
    actions = animations_parser.add_subparsers(dest="action", required=True)

    get_parser = actions.add_parser("get", help="Retrieve an existing animation")
    get_parser.add_argument("id", help="The identifier of the animation to fetch")
    get_parser.add_argument(
        "--porcelain",
        action="store_true",
        help="Print the raw response without status labels"
    )

    list_parser = actions.add_parser("list", help="List your animations")
    list_parser.add_argument(
        "--porcelain",
        action="store_true",
        help="Print the raw response without status labels"
    )

    generate_parser = actions.add_parser("generate", help="Generate a new animation")
    generate_parser.add_argument("prompt", help="The prompt used for generation")
    generate_parser.add_argument(
        "-b", "--block",
        action="store_true",
        help="Block until rendering finishes and download ZIP"
    )
    generate_parser.add_argument(
        "-o", "--output-file",
        help="Output file for the resulting ZIP when using --block"
    )
    generate_parser.add_argument(
        "-i", "--input-image",
        metavar="FILE",
        help="Optional input image file path to include in generation"
    )
    model = generate_parser.add_mutually_exclusive_group()
    model.add_argument(
        "--model-id",
        type=int,
        metavar="ID",
        help="Optional animation model ID (defaults to 6)"
    )
    model.add_argument(
        "--model-name",
        metavar="NAME",
        help="Optional animation model name"
    )
    generate_parser.add_argument(
        "-s", "--silent",
        action="store_true",
        help="Suppress informational logs"
    )
    generate_parser.add_argument(
        "-d", "--duration",
        type=int,
        default=5,
        metavar="SECONDS",
        help="Duration in seconds (allowed values: 5 or 10, defaults to 5)"
    )
    generate_parser.add_argument(
        "--max-wait",
        type=float,
        metavar="SECONDS",
        help="Give up if the whole run takes longer than this"
    )
    generate_parser.add_argument(
        "--temporal",
        action="store_true",
        help="Run the blocking workflow through a Temporal worker (requires --block; "
             "the ZIP and any --output-file path are written on the worker host)"
    )

    regenerate_parser = actions.add_parser(
        "regenerate",
        help="Regenerate an animation using the same parameters as an existing one"
    )
    regenerate_parser.add_argument("id", help="The identifier of the animation to regenerate")

    commands.add_parser("worker", help="Run a Temporal worker for animation workflows")

    args = parser.parse_args(argv)
    if getattr(args, "temporal", False) and not args.block:
        generate_parser.error("--temporal requires --block")
    return args


def _failure_message(error: BaseException) -> str:
    # Workflow failures wrap the activity/application error that caused them
    while getattr(error, "cause", None) is not None:
        error = error.cause
    return str(error)


def _print_json(value: Any):
    print(json.dumps(value, indent=2))


async def _generate_via_temporal(args: argparse.Namespace, app_config: AppConfig) -> Any:
    from gametorch.worker import execute_animation_workflow

    request = build_animation_request(
        args.prompt,
        duration_seconds=args.duration,
        input_image_path=args.input_image,
        model_id=args.model_id,
        model_name=args.model_name,
        default_model_id=app_config.polling.default_model_id
    )
    return await execute_animation_workflow(
        request.to_payload(),
        base_url=app_config.api.resolve_base_url(args.local),
        output_file=args.output_file,
        app_config=app_config
    )


async def run_animations(args: argparse.Namespace, app_config: AppConfig) -> Any:
    """Dispatch an ``animations`` action and return what should be printed."""
    if args.action == "generate" and args.temporal:
        return await _generate_via_temporal(args, app_config)

    async with AnimationsClient.from_config(app_config, local=args.local) as client:
        if args.action == "get":
            result = await animations.get_animation(client, args.id)
            return result if args.porcelain else describe_statuses(result)

        if args.action == "list":
            result = await animations.list_animations(client)
            return result if args.porcelain else describe_statuses(result)

        if args.action == "regenerate":
            return await animations.regenerate(client, args.id)

        return await animations.generate(
            client,
            args.prompt,
            duration_seconds=args.duration,
            block=args.block,
            output_file=args.output_file,
            input_image_path=args.input_image,
            model_id=args.model_id,
            model_name=args.model_name,
            silent=args.silent,
            polling=app_config.polling
        )


ACTION_LABELS = {
    "get": "fetch animation",
    "list": "list animations",
    "generate": "generate animation",
    "regenerate": "regenerate animation",
}


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit status."""
    args = parse_arguments(argv)
    app_config = get_config()
    setup_logging(app_config, verbose=args.verbose)

    if not app_config.api.api_key:
        print(API_KEY_HELP, file=sys.stderr)
        return 1

    if args.command == "worker":
        from gametorch.worker import run_worker
        try:
            asyncio.run(run_worker(app_config))
        except RPCError as e:
            print(f"Worker failed: {e}", file=sys.stderr)
            return 1
        return 0

    label = ACTION_LABELS[args.action]
    max_wait = getattr(args, "max_wait", None)

    try:
        coro = run_animations(args, app_config)
        if max_wait:
            coro = asyncio.wait_for(coro, timeout=max_wait)
        result = asyncio.run(coro)
    except asyncio.TimeoutError:
        print(f"Failed to {label}: gave up after {max_wait} seconds", file=sys.stderr)
        return 1
    except (GameTorchError, OSError) as e:
        print(f"Failed to {label}: {e}", file=sys.stderr)
        return 1
    except (WorkflowFailureError, RPCError) as e:
        print(f"Failed to {label}: {_failure_message(e)}", file=sys.stderr)
        return 1

    _print_json(result)
    return 0


def run():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
