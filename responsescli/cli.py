"""
ResponsesCLI — Entry Point
Terminal client for the OpenAI streaming Responses API.
"""

import argparse
import asyncio
import logging
import signal
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from responsescli import __version__
from responsescli.config.settings import Settings, load_settings
from responsescli.core.chat_session import ChatSession
from responsescli.core.errors import (
    ChatStorageError,
    ProviderError,
    TurnCancelledError,
    TurnFailedError,
)
from responsescli.core.provider import ResponsesProvider
from responsescli.core.request_builder import FeatureModes
from responsescli.ui.colors import (
    ACCENT_FG,
    BRIGHT_MAGENTA,
    ERROR_FG,
    MUTED_FG,
    SUCCESS_FG,
    colorize,
)
from responsescli.ui.displayers import DisplayHub

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130

CHAT_HELP = """Commands:
  /new            start a new chat
  /history        list saved sessions
  /resume N       continue session N
  /web            toggle web search
  /files          toggle file search
  /reasoning      toggle reasoning mode
  /quit           leave"""


def _error(message: str) -> None:
    print(colorize(f"❌ {message}", ERROR_FG), file=sys.stderr)


def _format_time(timestamp: int) -> str:
    if not timestamp:
        return "-"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M")


# =====================================================================
#  BOOTSTRAP
# =====================================================================

def _build_provider(args) -> Optional[ResponsesProvider]:
    """Load settings and wire the provider. Prints the error and returns None on failure."""
    try:
        settings: Settings = load_settings(Path(args.config) if args.config else None)
        provider = ResponsesProvider.create(settings, displays=DisplayHub.for_terminal())
    except (FileNotFoundError, ValueError, ChatStorageError) as e:
        _error(f"Fatal Error: {e}")
        logger.error("Startup failed", exc_info=True)
        return None

    provider.modes = FeatureModes(
        web_search=args.web,
        file_search_disabled=args.no_file_search,
        reasoning=args.reasoning,
    )
    return provider


def _session_at(provider: ResponsesProvider, index: int) -> Optional[ChatSession]:
    sessions = provider.chat.data.sessions
    if 0 <= index < len(sessions):
        return sessions[index]
    _error(f"No session at index {index}")
    return None


def _install_cancel_handler(provider: ResponsesProvider) -> None:
    """Route Ctrl+C to the turn's cancellation flag."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, provider.cancel)
    except NotImplementedError:
        # Windows event loops have no signal handlers; Ctrl+C raises KeyboardInterrupt
        logger.debug("SIGINT handler not supported on this platform")


def _remove_cancel_handler() -> None:
    loop = asyncio.get_running_loop()
    try:
        loop.remove_signal_handler(signal.SIGINT)
    except NotImplementedError:
        pass


async def _run_turn(provider: ResponsesProvider, prompt: str) -> int:
    _install_cancel_handler(provider)
    try:
        await provider.execute(prompt)
    except TurnCancelledError:
        return EXIT_CANCELLED
    except TurnFailedError as e:
        logger.debug(f"Turn failed: {e}")
        return EXIT_ERROR
    finally:
        _remove_cancel_handler()
        provider.displays.render_panels()
    return EXIT_OK


# =====================================================================
#  SUBCOMMAND HANDLERS
# =====================================================================

async def cmd_ask(provider: ResponsesProvider, args) -> int:
    if args.session is not None:
        session = _session_at(provider, args.session)
        if session is None:
            return EXIT_ERROR
        provider.resume_session(session)
    return await _run_turn(provider, " ".join(args.prompt))


async def cmd_silent(provider: ResponsesProvider, args) -> int:
    try:
        text = await provider.execute_silently(" ".join(args.prompt), args.instructions or "")
    except ProviderError as e:
        _error(str(e))
        return EXIT_ERROR
    print(text)
    return EXIT_OK


def cmd_history(provider: ResponsesProvider, args) -> int:
    sessions = provider.chat.data.sessions
    if not sessions:
        print(colorize("No saved sessions.", MUTED_FG))
        return EXIT_OK
    for index, session in enumerate(sessions):
        print(
            f"{colorize(f'[{index}]', ACCENT_FG)} {session.title or '-'} "
            f"{colorize(f'({len(session.turns)} turns, {_format_time(session.modified_at)})', MUTED_FG)}"
        )
    return EXIT_OK


def cmd_rename(provider: ResponsesProvider, args) -> int:
    if _session_at(provider, args.index) is None:
        return EXIT_ERROR
    provider.chat.data.rename(args.index, " ".join(args.title))
    provider.chat.save()
    return EXIT_OK


async def cmd_delete_session(provider: ResponsesProvider, args) -> int:
    session = _session_at(provider, args.index)
    if session is None:
        return EXIT_ERROR
    await provider.delete_session(session)
    print(colorize(f"Session {args.index} deleted", SUCCESS_FG))
    return EXIT_OK


async def cmd_link(provider: ResponsesProvider, args) -> int:
    if args.resource:
        resource = provider.resources.find(args.resource)
        if resource is None:
            _error(f"No vector resource named {args.resource!r}")
            return EXIT_ERROR
        ok = await provider.link_resource_files(resource)
        if ok:
            print(colorize(f"{resource.name}: {len(resource.files)} file(s) linked to {resource.vector_store_id}", SUCCESS_FG))
        return EXIT_OK if ok else EXIT_ERROR

    if not args.file:
        _error("Give a file to link or --resource NAME")
        return EXIT_ERROR
    result = await provider.ensure_vector_store_file_linked(
        args.file, args.file_id or "", args.vector_store_id or ""
    )
    if not result:
        return EXIT_ERROR
    print(result)
    return EXIT_OK


async def cmd_cleanup(provider: ResponsesProvider, args) -> int:
    orphans = await provider.cleanup_orphans()
    print(colorize(f"{len(orphans)} orphan response(s) cleaned up", SUCCESS_FG))
    return EXIT_OK


async def _remote(coro) -> int:
    try:
        print(await coro)
    except ProviderError as e:
        _error(str(e))
        return EXIT_ERROR
    return EXIT_OK


async def cmd_chat(provider: ResponsesProvider, args) -> int:
    """Interactive loop: one streamed turn per line of input."""
    if args.session is not None:
        session = _session_at(provider, args.session)
        if session is None:
            return EXIT_ERROR
        provider.resume_session(session)

    print(colorize(f"ResponsesCLI {__version__}", BRIGHT_MAGENTA) + colorize(" /help for commands", MUTED_FG))
    loop = asyncio.get_running_loop()
    while True:
        try:
            line = await loop.run_in_executor(None, input, colorize("› ", ACCENT_FG))
        except (EOFError, KeyboardInterrupt):
            break
        line = line.strip()
        if not line:
            continue
        if line.startswith("/"):
            if not _chat_command(provider, args, line):
                break
            continue
        await _run_turn(provider, line)
    return EXIT_OK


def _chat_command(provider: ResponsesProvider, args, line: str) -> bool:
    """Handle a slash command. Returns False to leave the loop."""
    command, _, rest = line.partition(" ")
    modes = provider.modes
    if command in ("/quit", "/exit"):
        return False
    if command == "/new":
        provider.new_chat()
    elif command == "/history":
        cmd_history(provider, args)
    elif command == "/resume":
        try:
            session = _session_at(provider, int(rest))
        except ValueError:
            _error("Usage: /resume N")
            return True
        if session is not None:
            provider.resume_session(session)
    elif command == "/web":
        modes.web_search = not modes.web_search
    elif command == "/files":
        modes.file_search_disabled = not modes.file_search_disabled
    elif command == "/reasoning":
        modes.reasoning = not modes.reasoning
    else:
        print(CHAT_HELP)
        return True
    print(colorize(
        f"web={modes.web_search} file_search={not modes.file_search_disabled} reasoning={modes.reasoning}",
        MUTED_FG,
    ))
    return True


# =====================================================================
#  CLI ENTRY WITH SUBCOMMANDS
# =====================================================================

def _create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="responsescli",
        description="ResponsesCLI — streaming OpenAI Responses client with file search, web search and reasoning",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  responsescli                          # Interactive chat
  responsescli --web ask "latest Python release?"
  responsescli --reasoning ask "prove that sqrt(2) is irrational"
  responsescli history                  # List saved sessions
  responsescli link --resource docs     # Upload and index a resource
  responsescli cleanup                  # Delete orphan server-side responses
        """
    )

    # Global options
    parser.add_argument("--version", action="version", version=f"responsescli {__version__}")
    parser.add_argument("--config", type=str, help="Path to config.json (default: ~/.responsescli/config.json)")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
    parser.add_argument("--web", action="store_true", help="Enable the web search tool")
    parser.add_argument("--no-file-search", action="store_true", help="Disable the file search tool")
    parser.add_argument("--reasoning", action="store_true", help="Use the reasoning model (no tools)")
    parser.add_argument("--session", type=int, help="Continue the saved session at this index")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_ask = subparsers.add_parser("ask", help="Stream one answer into the chat history")
    parser_ask.add_argument("prompt", nargs="+")

    parser_silent = subparsers.add_parser("silent", help="One-shot answer, nothing stored")
    parser_silent.add_argument("prompt", nargs="+")
    parser_silent.add_argument("--instructions", type=str, help="System instructions")

    subparsers.add_parser("history", help="List saved sessions")

    parser_rename = subparsers.add_parser("rename", help="Rename a saved session")
    parser_rename.add_argument("index", type=int)
    parser_rename.add_argument("title", nargs="+")

    parser_delete_session = subparsers.add_parser("delete-session", help="Delete a saved session and its server-side state")
    parser_delete_session.add_argument("index", type=int)

    parser_link = subparsers.add_parser("link", help="Upload a file and attach it to a vector store")
    parser_link.add_argument("file", nargs="?")
    parser_link.add_argument("--file-id", type=str, help="Previously uploaded file id")
    parser_link.add_argument("--vector-store-id", type=str, help="Existing vector store id")
    parser_link.add_argument("--resource", type=str, help="Link every file of this vector resource")

    subparsers.add_parser("cleanup", help="Delete server-side responses no session references")

    parser_del_resp = subparsers.add_parser("delete-response", help="Delete a stored response")
    parser_del_resp.add_argument("response_id")

    parser_del_file = subparsers.add_parser("delete-file", help="Delete an uploaded file")
    parser_del_file.add_argument("file_id")

    parser_unlink = subparsers.add_parser("unlink", help="Detach a file from a vector store")
    parser_unlink.add_argument("vector_store_id")
    parser_unlink.add_argument("file_id")

    parser_del_vs = subparsers.add_parser("delete-vector-store", help="Delete a vector store")
    parser_del_vs.add_argument("vector_store_id")

    subparsers.add_parser("chat", help="Interactive chat (default if no command specified)")

    return parser


async def _dispatch(provider: ResponsesProvider, args) -> int:
    command = args.command
    if command == "ask":
        return await cmd_ask(provider, args)
    elif command == "silent":
        return await cmd_silent(provider, args)
    elif command == "history":
        return cmd_history(provider, args)
    elif command == "rename":
        return cmd_rename(provider, args)
    elif command == "delete-session":
        return await cmd_delete_session(provider, args)
    elif command == "link":
        return await cmd_link(provider, args)
    elif command == "cleanup":
        return await cmd_cleanup(provider, args)
    elif command == "delete-response":
        return await _remote(provider.delete_response(args.response_id))
    elif command == "delete-file":
        return await _remote(provider.delete_file(args.file_id))
    elif command == "unlink":
        return await _remote(provider.delete_vector_store_file(args.vector_store_id, args.file_id))
    elif command == "delete-vector-store":
        return await _remote(provider.remove_vector_store(args.vector_store_id))
    return await cmd_chat(provider, args)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with subcommand routing."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    provider = _build_provider(args)
    if provider is None:
        return EXIT_ERROR

    try:
        return asyncio.run(_dispatch(provider, args))
    except ChatStorageError as e:
        _error(str(e))
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main() or 0)
