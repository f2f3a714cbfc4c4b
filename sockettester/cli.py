#!/usr/bin/env python3
"""Socket Tester command-line front end

Interactive shell for poking at a Socket.IO server. It only observes the
controller's state (new log entries and status changes are printed as they
happen) and calls its operations; all connection handling lives in
``sockettester.core``.

Commands:
- connect [url], disconnect
- send <event> <payload>   (payload is parsed as JSON, else sent as text)
- listen <event> [description], unlisten <id|event>, toggle <id|event>
- listeners, status, history, clear, help, quit
"""
import sys
import asyncio
import logging
import argparse
from typing import Callable, Optional, TextIO

from dotenv import load_dotenv

from .core import EventListener, Message, SocketTestController
from .utils.config_loader import ConfigManager
from .utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)

PROMPT = "socket-tester> "

HELP_TEXT = """Commands:
  connect [url]                 connect (default: last or configured URL)
  disconnect                    close the connection
  send <event> <payload>        emit an event; JSON payloads are sent structured
  listen <event> [description]  add an event listener
  unlisten <id|event>           remove a listener
  toggle <id|event>             enable/disable a listener
  listeners                     list listeners
  status                        show connection status
  history                       reprint the message log
  clear                         clear the message log
  help                          show this help
  quit                          disconnect and exit"""


def format_message(message: Message) -> str:
    """Format a log entry for the terminal."""
    if message.is_system:
        emoji = "ℹ️"
    elif message.is_outgoing:
        emoji = "📤"
    else:
        emoji = "📥"
    line = f"{message.formatted_timestamp} {emoji} [{message.event}] {message.formatted_data}"
    if message.error:
        line += f" ❌ {message.error}"
    return line


def format_listener(listener: EventListener) -> str:
    description = f" - {listener.description}" if listener.description else ""
    return f"{listener.display_name} ({listener.id}){description}"


class TesterShell:
    """Line-oriented front end over a SocketTestController."""

    def __init__(self, controller: SocketTestController, default_url: str,
                 default_event: str = "message", out: TextIO = None):
        self.controller = controller
        self.default_url = default_url
        self.default_event = default_event
        self.out = out or sys.stdout
        self._unsubscribers = []

    def attach(self) -> None:
        """Start echoing log entries and errors as they happen."""
        self._unsubscribers.append(self.controller.log.subscribe(self._on_message))
        self._unsubscribers.append(self.controller.subscribe_error(self._on_error))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _write(self, text: str) -> None:
        print(text, file=self.out, flush=True)

    def _on_message(self, message: Optional[Message]) -> None:
        if message is not None:
            self._write(format_message(message))

    def _on_error(self, error: Optional[Exception]) -> None:
        if error is not None:
            self._write(f"❌ {error}")

    def _resolve_listener(self, key: str) -> Optional[EventListener]:
        registry = self.controller.registry
        return registry.get(key) or registry.find_by_name(key)

    async def handle(self, line: str) -> bool:
        """Run one command line. Returns False when the shell should exit."""
        parts = line.strip().split(None, 2)
        if not parts:
            return True
        command, args = parts[0].lower(), parts[1:]

        if command in ("quit", "exit"):
            return False
        if command == "help":
            self._write(HELP_TEXT)
        elif command == "connect":
            url = args[0] if args else (self.controller.url or self.default_url)
            await self.controller.connect(url)
        elif command == "disconnect":
            await self.controller.disconnect()
        elif command == "send":
            if len(args) == 1:
                # A single argument is the payload for the default event
                await self.controller.send(self.default_event, args[0])
            elif len(args) == 2:
                await self.controller.send(args[0], args[1])
            else:
                self._write("Usage: send <event> <payload>")
        elif command == "listen":
            if not args:
                self._write("Usage: listen <event> [description]")
            else:
                description = args[1] if len(args) > 1 else "Custom event listener"
                self.controller.add_listener(args[0], description)
        elif command in ("unlisten", "toggle"):
            if not args:
                self._write(f"Usage: {command} <id|event>")
                return True
            listener = self._resolve_listener(args[0])
            if listener is None:
                self._write(f"No listener matches '{args[0]}'")
            elif command == "unlisten":
                self.controller.remove_listener(listener.id)
            else:
                self.controller.toggle_listener(listener.id)
        elif command == "listeners":
            listeners = self.controller.listeners
            if not listeners:
                self._write("No event listeners")
            for listener in listeners:
                self._write(format_listener(listener))
        elif command == "status":
            status = self.controller.status
            target = f" ({self.controller.url})" if self.controller.url else ""
            self._write(f"Status: {status.display_name}{target}")
        elif command == "history":
            for message in self.controller.messages:
                self._write(format_message(message))
        elif command == "clear":
            self.controller.clear_messages()
        else:
            self._write(f"Unknown command '{command}'. Type 'help' for a list of commands.")
        return True


async def run_shell(shell: TesterShell, initial_url: Optional[str] = None,
                    read_line: Callable[[str], str] = input) -> None:
    """Read commands until quit or end of input, then disconnect."""
    loop = asyncio.get_running_loop()
    shell.attach()
    try:
        if initial_url:
            await shell.controller.connect(initial_url)
        while True:
            try:
                line = await loop.run_in_executor(None, read_line, PROMPT)
            except EOFError:
                break
            if not await shell.handle(line):
                break
    finally:
        await shell.controller.shutdown()
        shell.detach()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Socket.IO server testing tool')
    parser.add_argument('--url', help='Connect to this URL on start')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging (including python-socketio)')
    parser.add_argument('--no-defaults', action='store_true', help='Do not register the default event listeners')
    parser.add_argument('--verbose', action='store_true', help='Also log to stderr')
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Must run before ConfigManager resolves SOCKET_TESTER_HOME
    load_dotenv()
    config_manager = ConfigManager()

    log_level = "DEBUG" if args.debug else config_manager.get('logging', 'level', default='INFO')
    setup_logging(
        level=log_level,
        log_file=config_manager.get('logging', 'file'),
        fmt=config_manager.get('logging', 'format'),
        console=args.verbose,
        library_debug=args.debug,
    )

    options = config_manager.section('transport')
    options['library_logging'] = args.debug

    controller = SocketTestController(
        transport_options=options,
        default_listeners=None if args.no_defaults else config_manager.get('listeners', 'defaults'),
        default_description=config_manager.get('listeners', 'default_description'),
    )
    shell = TesterShell(
        controller,
        default_url=config_manager.get('connection', 'default_url'),
        default_event=config_manager.get('connection', 'default_event', default='message'),
    )
    print("Socket Tester - type 'help' for commands")
    try:
        asyncio.run(run_shell(shell, args.url))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    print("Socket Tester shutdown complete.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
