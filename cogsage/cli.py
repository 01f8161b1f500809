"""CLI interface for CogSage"""

import sys
import time
import asyncio
import argparse
import logging
import textwrap
import itertools
from colorama import init, Fore, Style

from . import config
from . import __version__, __author__, __powered_by__
from .agent import CognitiveAgent, PipelineState
from .responses import format_stats

# Initialize colorama for Windows support
init(autoreset=True)

logger = logging.getLogger(__name__)


COMMANDS = [
    ("help", "Show this help message"),
    ("stats", "Show knowledge and learning statistics"),
    ("queue", "Show pending background lookups"),
    ("clear", "Clear all stored knowledge and conversation"),
    ("quit", "Exit the application"),
]

# (pathway, sample message)
EXAMPLES = [
    ("arithmetic", "12 × 5"),
    ("vocabulary", "define serendipity"),
    ("personal memory", "my name is Sam"),
    ("temporal", "what time is it?"),
    ("factual knowledge", "tell me about Nikola Tesla"),
]


# ── Output effects ───────────────────────────────────────────────────────────
def _typewrite(text: str, color: str = Fore.WHITE, delay: float = None):
    """Echo one line a character at a time; long lines type faster."""
    if delay is None:
        delay = 0.003 if len(text) > 200 else 0.008
    out = sys.stdout
    out.write(color)
    for ch in text:
        out.write(ch)
        out.flush()
        time.sleep(delay)
    out.write(f"{Style.RESET_ALL}\n")
    out.flush()


class _Spinner:
    """Braille spinner drawn by an event-loop task while a message is handled."""

    FRAMES = '⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏'

    def __init__(self, label: str, color: str = Fore.CYAN, interval: float = 0.09):
        self.label = label
        self.color = color
        self.interval = interval
        self._task = None

    async def _draw(self):
        for frame in itertools.cycle(self.FRAMES):
            sys.stdout.write(f"\r{self.color}  {frame}  {self.label}{Style.RESET_ALL}   ")
            sys.stdout.flush()
            await asyncio.sleep(self.interval)

    async def __aenter__(self):
        self._task = asyncio.get_running_loop().create_task(self._draw())
        return self

    async def __aexit__(self, *exc_info):
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        sys.stdout.write("\r" + " " * (len(self.label) + 10) + "\r")
        sys.stdout.flush()
        return False


class CogSageCLI:
    """Interactive CLI for the CogSage agent"""

    def __init__(self, agent: CognitiveAgent, show_reasoning: bool = False, animate: bool = True):
        self.agent = agent
        self.show_reasoning = show_reasoning
        self.animate = animate
        self.running = False

    def print_banner(self):
        W = config.CLI_WIDTH - 18
        title_text = '·  C o g S a g e  ·'
        sub_text = 'Cognitive Message Pipeline'

        print()
        print(f"{Fore.MAGENTA}╔{'═' * W}╗{Style.RESET_ALL}")
        print(f"{Fore.MAGENTA}║{Fore.CYAN + Style.BRIGHT}{title_text:^{W}}{Style.RESET_ALL}{Fore.MAGENTA}║{Style.RESET_ALL}")
        print(f"{Fore.MAGENTA}║{Fore.YELLOW}{sub_text:^{W}}{Style.RESET_ALL}{Fore.MAGENTA}║{Style.RESET_ALL}")
        print(f"{Fore.MAGENTA}║{f'v{__version__}  ·  {__author__}':^{W}}║{Style.RESET_ALL}")
        print(f"{Fore.MAGENTA}╚{'═' * W}╝{Style.RESET_ALL}")
        print()

    def print_help(self):
        rule = f"{Fore.CYAN}{'─' * 60}{Style.RESET_ALL}"
        print(f"\n{rule}\n{Fore.CYAN + Style.BRIGHT}  Commands{Style.RESET_ALL}\n{rule}")
        for name, summary in COMMANDS:
            print(f"  {Fore.GREEN}{name:<10}{Style.RESET_ALL}{summary}")
        print(f"\n{Fore.CYAN + Style.BRIGHT}  Try asking{Style.RESET_ALL}")
        for pathway, example in EXAMPLES:
            print(f"  {Fore.YELLOW}{pathway:<18}{Style.RESET_ALL}{example}")
        print(f"{rule}\n")

    def print_response(self, response):
        sep = f"{Fore.GREEN}{'─' * 62}{Style.RESET_ALL}"
        label = (
            f"{Fore.GREEN + Style.BRIGHT}  {config.CLI_ASSISTANT}{Style.RESET_ALL}"
            f"{Fore.WHITE}  [{response.pathway} · {response.confidence:.2f}]{Style.RESET_ALL}"
        )
        print(f"\n{sep}")
        print(label)
        print(sep)
        self._print_text(response.content)
        if self.show_reasoning and response.reasoning:
            print(f"{Fore.CYAN}  Reasoning:{Style.RESET_ALL}")
            for line in response.reasoning:
                print(f"{Fore.CYAN}    · {line}{Style.RESET_ALL}")
        print(f"{sep}\n")

    def _print_text(self, text: str):
        for raw_line in text.splitlines() or [""]:
            for line in textwrap.wrap(raw_line, width=config.CLI_WIDTH) or [""]:
                if self.animate:
                    _typewrite(line, Fore.WHITE)
                else:
                    print(f"{Fore.WHITE}{line}{Style.RESET_ALL}")

    def print_error(self, error: str):
        print(f"\n{Fore.RED}  ✗  {error}{Style.RESET_ALL}\n")

    def print_queue(self):
        pending = self.agent.state.queue.pending()
        if not pending:
            print(f"{Fore.CYAN}  Learning queue is empty.{Style.RESET_ALL}\n")
            return
        print(f"{Fore.CYAN + Style.BRIGHT}  Pending lookups ({len(pending)}){Style.RESET_ALL}")
        for item in pending:
            domain = f" [{item.domain}]" if item.domain else ""
            print(f"  {Fore.YELLOW}{item.priority}{Style.RESET_ALL}  {item.kind:<6} {item.target}{domain}")
        print()

    async def get_input(self) -> str:
        prompt = (
            f"{Fore.LIGHTMAGENTA_EX}  ╰─{Style.RESET_ALL}"
            f"{Fore.LIGHTMAGENTA_EX + Style.BRIGHT} {config.CLI_PROMPT} {Style.RESET_ALL}"
            f"{Fore.LIGHTMAGENTA_EX}›{Style.RESET_ALL} "
        )
        try:
            # Read in a worker thread so background learning keeps draining
            line = await asyncio.to_thread(input, prompt)
        except (KeyboardInterrupt, EOFError):
            return "quit"
        return line.strip()

    async def handle_command(self, command: str):
        """
        Handle special commands.
        Returns True to continue, False to exit, None if not a command.
        """
        cmd = command.lower()

        if cmd in ('quit', 'exit', 'q'):
            print(f"\n{Fore.MAGENTA}  Thanks for using CogSage! Goodbye!{Style.RESET_ALL}\n")
            return False

        if cmd == 'help':
            self.print_help()
            return True

        if cmd in ('stats', 'statistics'):
            print(f"\n{format_stats(self.agent.get_stats())}\n")
            return True

        if cmd == 'queue':
            self.print_queue()
            return True

        if cmd == 'clear':
            confirm = await asyncio.to_thread(
                input, f"{Fore.YELLOW}  Are you sure you want to clear all memory? (yes/no): {Style.RESET_ALL}"
            )
            if confirm.strip().lower() == 'yes':
                self.agent.clear_memory()
                print(f"{Fore.GREEN}  ✓  All memory cleared{Style.RESET_ALL}\n")
            else:
                print(f"{Fore.CYAN}  Cancelled.{Style.RESET_ALL}\n")
            return True

        return None

    async def answer(self, text: str):
        if self.animate:
            async with _Spinner("Thinking…"):
                response = await self.agent.handle_message(text)
        else:
            response = await self.agent.handle_message(text)
        self.print_response(response)
        return response

    async def run(self):
        """Main CLI loop."""
        self.print_banner()
        self.print_help()
        self._print_text(self.agent.get_greeting())
        print()

        self.agent.start_background_learning()
        self.running = True
        try:
            while self.running:
                user_input = await self.get_input()
                if not user_input:
                    continue

                result = await self.handle_command(user_input)
                if result is False:
                    break
                if result is True:
                    continue

                try:
                    await self.answer(user_input)
                except Exception as e:
                    self.print_error(f"Failed to process message: {e}")
                    logger.exception("Message error")
        finally:
            self.running = False
            await self.agent.stop_background_learning()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cogsage",
        description="CogSage: conversational assistant with a cognitive message pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            f"Developed by: {__author__}\n"
            f"Powered by:   {__powered_by__}\n"
            f"Version:      {__version__}"
        ),
    )
    parser.add_argument("--version", "-v", action="version", version=f"CogSage v{__version__}")
    parser.add_argument("--once", metavar="TEXT", help="Answer a single message and exit")
    parser.add_argument("--offline", action="store_true", help="Disable dictionary and encyclopedia lookups")
    parser.add_argument("--reasoning", action="store_true", help="Print the reasoning trail of each answer")
    parser.add_argument("--verbose", action="store_true", help="Show INFO-level logging")
    parser.add_argument("--data-dir", metavar="DIR", help="Directory for stored knowledge")
    return parser


async def _main(args) -> int:
    from .storage import JsonFileStorage

    storage = JsonFileStorage(args.data_dir) if args.data_dir else None
    state = PipelineState.create(storage=storage, offline=args.offline)
    agent = CognitiveAgent(state)

    if args.once is not None:
        cli = CogSageCLI(agent, show_reasoning=args.reasoning, animate=False)
        await cli.answer(args.once)
        return 0

    cli = CogSageCLI(agent, show_reasoning=args.reasoning)
    await cli.run()
    return 0


def main(argv=None):
    """Main entry point"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)
        logging.getLogger("cogsage").setLevel(logging.INFO)

    try:
        sys.exit(asyncio.run(_main(args)))
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}  Interrupted.{Style.RESET_ALL}")
        sys.exit(130)
