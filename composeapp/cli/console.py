"""Console output for the CLI.

Provides a Console class that wraps rich, and the progress reporter that turns
domain progress events into status lines. All CLI output goes through here.
"""

from rich.console import Console as RichConsole
from rich.markup import escape

from composeapp.domain.reference.model import PlatformDescriptor
from composeapp.domain.shared.event import (
    BlobUploaded,
    FileArchived,
    ImagePinned,
    ManifestPushed,
    PathIgnored,
    PinStarted,
    ProgressEvent,
)


def describe_platforms(platforms: list[PlatformDescriptor]) -> str:
    """Comma-joined platform labels, e.g. ``amd64, arm64, armv7``."""
    return ", ".join(p.label for p in platforms)


class Console:
    """CLI output manager wrapping rich."""

    def __init__(
        self,
        *,
        force_terminal: bool | None = None,
        quiet: bool = False,
    ) -> None:
        """Initialize the console.

        Args:
            force_terminal: Force terminal mode (True/False) or auto-detect (None).
            quiet: Suppress non-essential output.
        """
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    def success(self, message: str) -> None:
        """Print a success message."""
        self._console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {escape(message)}")
        if hint:
            self._err_console.print(f"  [dim]{escape(hint)}[/dim]")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(escape(message), highlight=False)

    def print(self, text: str) -> None:
        """Print raw text without markup processing."""
        self._console.print(text, markup=False, highlight=False, soft_wrap=True)


class ConsoleProgressReporter:
    """Renders progress events as status lines."""

    def __init__(self, console: Console, *, verbose: bool = False) -> None:
        self._console = console
        self._verbose = verbose

    def emit(self, event: ProgressEvent) -> None:
        match event:
            case PinStarted(service=service, image=image):
                self._console.info(f"Pinning {service}({image})")
            case ImagePinned(platforms=platforms, pinned=pinned):
                if platforms:
                    self._console.info(f"  | {describe_platforms(platforms)}")
                self._console.info(f"  |-> {pinned}")
            case PathIgnored(pattern=pattern):
                self._console.info(f"  |-> ignoring: {pattern}")
            case FileArchived(name=name, size=size):
                if self._verbose:
                    self._console.info(f"  |   {name} ({size} bytes)")
            case BlobUploaded(digest=digest):
                self._console.info(f"  |-> app: {digest}")
            case ManifestPushed(digest=digest):
                self._console.info(f"  |-> manifest: {digest}")


_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
