"""JSON-line STDIO server for the namer tools."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from element_namer.commands import NamerWorkspace
from element_namer.config import PREFIX_MODES, CliOverrides, NamerConfig, load_effective_config
from element_namer.host import ActiveDocument, language_for_path
from element_namer.logging import (
    AuditEvent,
    JsonlAuditLogger,
    JsonlDiagnosticLog,
    sanitize_arguments,
    utc_timestamp,
)
from element_namer.security import PathBlockedError, resolve_document_path
from element_namer.tools.builtin import register_builtin_tools
from element_namer.tools.registry import ToolDispatchError, ToolRegistry

PLAIN_TEXT_LANGUAGE = "plaintext"
TOOLS_CALL_METHOD = "tools/call"


@dataclass(slots=True, frozen=True)
class Request:
    """A validated request: which tool to run and with what arguments."""

    request_id: str
    tool_name: str
    arguments: dict[str, object]


class RequestError(Exception):
    """A request that cannot be dispatched; carries its error envelope fields."""

    def __init__(self, request_id: str, code: str, message: str) -> None:
        super().__init__(message)
        self.request_id = request_id
        self.code = code
        self.message = message


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for server startup configuration."""
    parser = argparse.ArgumentParser(prog="element-namer")
    parser.add_argument("--repo-root", default=".")
    parser.add_argument("--data-dir", default=None)
    parser.add_argument("--max-file-bytes", type=int, default=None)
    parser.add_argument("--auto-generate", choices=("true", "false"), default=None)
    parser.add_argument("--auto-prefix", default=None)
    parser.add_argument("--auto-prefix-mode", choices=PREFIX_MODES, default=None)
    return parser


def envelope(
    request_id: str,
    result: dict[str, object] | None = None,
    error: tuple[str, str] | None = None,
    blocked: bool = False,
) -> dict[str, object]:
    """Build the response envelope; ``error`` is ``(code, message)``."""
    response: dict[str, object] = {
        "request_id": request_id,
        "ok": error is None,
        "result": result if result is not None else {},
        "warnings": [],
        "blocked": blocked,
    }
    if error is not None:
        code, message = error
        response["error"] = {"code": code, "message": message}
    return response


class StdioServer:
    """Routes JSON-line requests to namer tools and audits each one."""

    def __init__(self, config: NamerConfig) -> None:
        self._config = config
        self._repo_root = config.repo_root
        self._audit_logger = JsonlAuditLogger(path=config.data_dir / "audit.jsonl")
        self._diagnostics = JsonlDiagnosticLog(path=config.data_dir / "diagnostics.jsonl")
        self._workspace = NamerWorkspace(config=config, diagnostics=self._diagnostics)
        self._registry = ToolRegistry()
        register_builtin_tools(
            self._registry,
            workspace=self._workspace,
            load_document=self._load_document,
            read_audit_entries=self._audit_logger.read,
            read_diagnostics=self._diagnostics.read,
        )
        self._fallback_request_counter = 0

    @property
    def workspace(self) -> NamerWorkspace:
        return self._workspace

    def serve(self, in_stream: TextIO, out_stream: TextIO) -> None:
        """Answer each non-blank input line with one JSON response line."""
        for raw_line in in_stream:
            line = raw_line.strip()
            if not line:
                continue
            response = self.handle_json_line(line)
            out_stream.write(json.dumps(response, sort_keys=True) + "\n")
            out_stream.flush()

    def handle_json_line(self, raw_line: str) -> dict[str, object]:
        """Decode one line and handle it."""
        try:
            payload = json.loads(raw_line)
        except json.JSONDecodeError:
            request_id = self.next_request_id()
            response = envelope(request_id, error=("INVALID_JSON", "Request must be valid JSON."))
            arguments: dict[str, object] = {"raw_line_length": len(raw_line)}
            self.log_request(request_id, "invalid_json", arguments, response)
            return response
        return self.handle_payload(payload)

    def handle_payload(self, payload: object) -> dict[str, object]:
        """Validate, dispatch and audit one decoded request."""
        try:
            request = self.parse_request(payload)
        except RequestError as error:
            response = envelope(error.request_id, error=(error.code, error.message))
            self.log_request(error.request_id, "invalid_request", {}, response)
            return response

        try:
            result = self._registry.dispatch(name=request.tool_name, arguments=request.arguments)
        except PathBlockedError as error:
            response = envelope(
                request.request_id,
                result={"reason": error.reason, "hint": error.hint},
                error=("PATH_BLOCKED", error.reason),
                blocked=True,
            )
        except ToolDispatchError as error:
            response = envelope(request.request_id, error=(error.code, error.message))
        except Exception:
            response = envelope(
                request.request_id,
                error=("INTERNAL_ERROR", "Unhandled server error while executing tool."),
            )
        else:
            response = envelope(request.request_id, result=result)

        self.log_request(request.request_id, request.tool_name, request.arguments, response)
        return response

    def parse_request(self, payload: object) -> Request:
        """Normalize both the direct and the ``tools/call`` request forms."""
        if not isinstance(payload, dict):
            raise RequestError(
                self.next_request_id(), "INVALID_REQUEST", "Request must be an object."
            )
        request_id = self.extract_request_id(payload.get("id"))
        method = payload.get("method")
        params = payload.get("params", {})
        if not isinstance(method, str) or not method:
            raise RequestError(
                request_id, "INVALID_REQUEST", "Request method must be a non-empty string."
            )
        if not isinstance(params, dict):
            raise RequestError(request_id, "INVALID_PARAMS", "Request params must be an object.")
        if method != TOOLS_CALL_METHOD:
            return Request(request_id=request_id, tool_name=method, arguments=params)

        name = params.get("name")
        arguments = params.get("arguments", {})
        if not isinstance(name, str) or not name:
            raise RequestError(
                request_id, "INVALID_PARAMS", "tools/call params.name must be a non-empty string."
            )
        if not isinstance(arguments, dict):
            raise RequestError(
                request_id, "INVALID_PARAMS", "tools/call params.arguments must be an object."
            )
        return Request(request_id=request_id, tool_name=name, arguments=arguments)

    def extract_request_id(self, request_id: object) -> str:
        """Accept string or integer ids; synthesize one otherwise."""
        if isinstance(request_id, str) and request_id:
            return request_id
        if isinstance(request_id, int) and not isinstance(request_id, bool):
            return str(request_id)
        return self.next_request_id()

    def next_request_id(self) -> str:
        self._fallback_request_counter += 1
        return f"req-{self._fallback_request_counter:06d}"

    def log_request(
        self,
        request_id: str,
        tool_name: str,
        arguments: dict[str, object],
        response: dict[str, object],
    ) -> None:
        """Append one sanitized audit event."""
        error = response.get("error")
        error_code = error.get("code") if isinstance(error, dict) else None
        self._audit_logger.append(
            AuditEvent(
                timestamp=utc_timestamp(),
                request_id=request_id,
                tool=tool_name,
                ok=bool(response.get("ok")),
                blocked=bool(response.get("blocked")),
                error_code=error_code if isinstance(error_code, str) else None,
                metadata=sanitize_arguments(arguments),
            )
        )

    def _load_document(self, arguments: dict[str, object], tool_name: str) -> ActiveDocument:
        path_value = arguments.get("path")
        if not isinstance(path_value, str) or not path_value:
            raise ToolDispatchError.invalid_params(f"{tool_name} path must be a non-empty string.")
        resolved, relative = resolve_document_path(self._repo_root, path_value)

        text_value = arguments.get("text")
        if text_value is None:
            if not resolved.is_file():
                raise ToolDispatchError.invalid_params(
                    f"{tool_name} path is not a readable file and no text was sent: {path_value}"
                )
            text_value = resolved.read_text(encoding="utf-8", errors="replace")
        if not isinstance(text_value, str):
            raise ToolDispatchError.invalid_params(f"{tool_name} text must be a string.")

        language_value = arguments.get("language_id")
        if language_value is None:
            language_value = language_for_path(relative) or PLAIN_TEXT_LANGUAGE
        if not isinstance(language_value, str):
            raise ToolDispatchError.invalid_params(f"{tool_name} language_id must be a string.")

        cursor_value = arguments.get("cursor", 0)
        if not isinstance(cursor_value, int) or not 0 <= cursor_value <= len(text_value):
            raise ToolDispatchError.invalid_params(
                f"{tool_name} cursor must be an offset inside the document."
            )
        return ActiveDocument(
            path=relative,
            language_id=language_value,
            text=text_value,
            cursor=cursor_value,
        )


def create_server(
    repo_root: str,
    data_dir: str | None = None,
    cli_overrides: CliOverrides | None = None,
) -> StdioServer:
    """Create a configured STDIO server instance."""
    overrides = cli_overrides or CliOverrides()
    if data_dir is not None and overrides.data_dir is None:
        overrides = CliOverrides(
            data_dir=Path(data_dir).resolve(),
            max_file_bytes=overrides.max_file_bytes,
            auto_generate=overrides.auto_generate,
            auto_prefix=overrides.auto_prefix,
            auto_prefix_mode=overrides.auto_prefix_mode,
        )
    config = load_effective_config(repo_root=Path(repo_root).resolve(), overrides=overrides)
    return StdioServer(config=config)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the element namer server process."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    auto_generate: bool | None = None
    if args.auto_generate == "true":
        auto_generate = True
    if args.auto_generate == "false":
        auto_generate = False
    overrides = CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        max_file_bytes=args.max_file_bytes,
        auto_generate=auto_generate,
        auto_prefix=args.auto_prefix,
        auto_prefix_mode=args.auto_prefix_mode,
    )
    try:
        server = create_server(repo_root=args.repo_root, cli_overrides=overrides)
    except ValueError as error:
        parser.error(str(error))
    server.serve(in_stream=sys.stdin, out_stream=sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
