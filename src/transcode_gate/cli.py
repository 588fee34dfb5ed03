"""Command line entrypoints for the transcode gate."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, TextIO

from .client import LocalEndpoint, RetryOrchestrator, RetryPolicy, TranscoderClient
from .client.retry import BackoffStrategy
from .config import build_default_config
from .gate import TranscodeGate
from .logging_config import configure_console_logging, current_log_file
from .models import Language, Success
from .presenter import InProgress, PresenterState, TerminalError, render

_SPINNER = "|/-\\"
_LANGUAGE_CHOICES = [member.value for member in Language]


class BannerRenderer:
    """Write presenter banners to a stream, skipping repeats."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._last = ""
        self._ticks = 0

    def __call__(self, state: PresenterState) -> None:
        text = render(state)
        if not text or text == self._last:
            return
        self._last = text
        if isinstance(state, InProgress):
            self._ticks += 1
            text = f"{_SPINNER[self._ticks % len(_SPINNER)]} {text}"
        elif isinstance(state, TerminalError):
            text = f"{text} [dismiss to clear]"
        self._stream.write(text + "\n")
        self._stream.flush()


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _add_client_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--url", help="Base URL of the transcode service.")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds.")
    parser.add_argument("--max-attempts", type=_positive_int, dest="max_attempts", help="Attempts before giving up.")
    parser.add_argument(
        "--backoff",
        choices=[member.value for member in BackoffStrategy],
        help="Pause strategy between attempts.",
    )
    parser.add_argument("--local", action="store_true", help="Transcode in-process instead of over HTTP.")
    parser.add_argument("--source", default="auto", choices=_LANGUAGE_CHOICES, help="Source language.")
    parser.add_argument("--target", default="auto", choices=_LANGUAGE_CHOICES, help="Target language.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="transcode-gate", description="Submit code to the transcode service.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the transcode HTTP service.")
    serve.add_argument("--host", help="Interface to bind.")
    serve.add_argument("--port", type=int, help="Port to listen on.")
    serve.add_argument("--debug", action="store_true", help="Enable the Flask debugger.")

    health = subparsers.add_parser("health", help="Check that the service is reachable.")
    health.add_argument("--url", help="Base URL of the transcode service.")
    health.add_argument("--timeout", type=float, help="Request timeout in seconds.")

    transcode = subparsers.add_parser("transcode", help="Transcode a file (or stdin) once.")
    transcode.add_argument("path", nargs="?", default="-", help="File to transcode; '-' reads stdin.")
    _add_client_arguments(transcode)

    shell = subparsers.add_parser("shell", help="Interactive transcode loop.")
    _add_client_arguments(shell)
    return parser


def build_gate(args: argparse.Namespace, config: Mapping[str, Any]) -> TranscodeGate:
    policy = RetryPolicy.from_config(config, max_attempts=args.max_attempts, backoff=args.backoff)
    if args.local:
        endpoint: Any = LocalEndpoint()
    else:
        endpoint = TranscoderClient.from_config(config, base_url=args.url, timeout=args.timeout)
    return TranscodeGate(RetryOrchestrator(endpoint, policy))


def _wait(gate: TranscodeGate) -> Optional[Any]:
    job = gate.current_job
    if job is None:
        return None
    while not job.done:
        job.wait(0.25)
    return job.outcome


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    source = Path(path)
    if not source.exists():
        raise SystemExit(f"File not found: {source}")
    return source.read_text(encoding="utf-8")


def cmd_serve(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    from .app import create_app

    app = create_app()
    host = args.host or app.config["TRANSCODE_GATE_HOST"]
    port = args.port or app.config["TRANSCODE_GATE_PORT"]
    app.logger.info("Writing logs to %s", current_log_file())
    app.logger.info("Health check available at http://localhost:%s/health", port)
    app.run(host=host, port=port, debug=args.debug)
    return 0


def cmd_health(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    client = TranscoderClient.from_config(config, base_url=args.url, timeout=args.timeout)
    try:
        healthy = client.is_healthy()
    finally:
        client.close()
    print(f"{client.base_url}: {'ok' if healthy else 'unreachable'}")
    return 0 if healthy else 1


def cmd_transcode(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    code = _read_source(args.path)
    gate = build_gate(args, config)
    gate.presenter.subscribe(BannerRenderer(sys.stderr))
    if gate.transcode(code, args.source, args.target) is None:
        return 1
    try:
        outcome = _wait(gate)
    except KeyboardInterrupt:
        gate.dismiss()
        return 130
    if isinstance(outcome, Success):
        print(gate.last_output)
        return 0
    return 1


def _read_block(stream: TextIO) -> Optional[str]:
    """Read lines until a lone '.'; commands starting with ':' return at once."""

    lines: list[str] = []
    while True:
        sys.stderr.write("... " if lines else "code> ")
        sys.stderr.flush()
        line = stream.readline()
        if not line:
            return "\n".join(lines) if lines else None
        line = line.rstrip("\n")
        if not lines and line.startswith(":"):
            return line
        if line == ".":
            return "\n".join(lines)
        lines.append(line)


def cmd_shell(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    gate = build_gate(args, config)
    gate.presenter.subscribe(BannerRenderer(sys.stderr))
    sys.stderr.write("Enter code, finish with a line containing '.'; :logs, :clear, :dismiss, :quit\n")
    while True:
        block = _read_block(sys.stdin)
        if block is None or block.strip() == ":quit":
            return 0
        command = block.strip()
        if command == ":dismiss":
            gate.dismiss()
            continue
        if command == ":clear":
            gate.log.clear()
            sys.stderr.write("Transcode log cleared\n")
            continue
        if command == ":logs":
            for entry in gate.log.entries():
                status = "ok" if entry.success else f"error: {entry.error}"
                print(f"{entry.timestamp.isoformat()} {entry.source_language}->{entry.target_language} {status}")
            continue
        if gate.transcode(block, args.source, args.target) is None:
            continue
        try:
            outcome = _wait(gate)
        except KeyboardInterrupt:
            gate.dismiss()
            continue
        if isinstance(outcome, Success):
            print(gate.last_output)


_COMMANDS = {
    "serve": cmd_serve,
    "health": cmd_health,
    "transcode": cmd_transcode,
    "shell": cmd_shell,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command != "serve":
        configure_console_logging()
    return _COMMANDS[args.command](args, build_default_config())


if __name__ == "__main__":
    raise SystemExit(main())
