"""Console and file logging for relayed requests."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from core.config import Config
from core.request_types import RelayParams
from ui.log_utils import LOG_ROOT, in_flight_marker, write_cli_log, write_outgoing_log


class ConsoleLogger:
    """Print relay events with rich and append them to ``proxy.log``."""

    def __init__(
        self,
        config: Config,
        console: Console | None = None,
        log_root: Path = LOG_ROOT,
    ) -> None:
        self.debug = config.proxy.debug
        self.console = console or Console(stderr=True)
        self.log_root = log_root
        self._log_file = log_root / "proxy.log"

    def log_request(self, params: RelayParams, in_flight: int) -> None:
        self._print(f"[cyan](++req++)[/cyan] {in_flight_marker(in_flight)}")
        self._print(f"[dim]method={params.method}, url={escape(params.url)}[/dim]")
        write_outgoing_log(params.method, params.url, params.headers, log_root=self.log_root)
        write_cli_log("REQUEST", params.url, log_file=self._log_file, method=params.method, in_flight=in_flight)

    def log_response(self, url: str, status: int, in_flight: int) -> None:
        self._print(f"[green](--res--)[/green] {in_flight_marker(in_flight)}")
        write_cli_log("RESPONSE", url, log_file=self._log_file, status=status, in_flight=in_flight)

    def log_redirect(self, url: str, status: int, replayed: bool) -> None:
        if replayed:
            self._print(f"[blue]redirect {status}[/blue] {escape(url)}")
        else:
            self._print(f"[yellow]redirect {status} to untrusted host[/yellow] {escape(url)}")
        write_cli_log("REDIRECT", url, log_file=self._log_file, status=status, replayed=replayed)

    def log_rejected(self, endpoint: str | None) -> None:
        self._print(f"[red]rejected[/red] {escape(str(endpoint))}")
        write_cli_log("REJECTED", str(endpoint), log_file=self._log_file)

    def log_error(self, url: str, message: str, in_flight: int) -> None:
        self._print(f"[red](--err--)[/red] {in_flight_marker(in_flight)} {escape(message)}")
        write_cli_log("ERROR", message[:200], log_file=self._log_file, url=url, in_flight=in_flight)

    def _print(self, message: str) -> None:
        if self.debug:
            self.console.print(message, highlight=False)
