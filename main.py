from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from leadgen.adapters.llm import ProviderError, parse_provider
from leadgen.config import get_settings
from leadgen.report.layout import LayoutConfig
from leadgen.report.lead_report_pdf import RenderingFailure, build_report
from leadgen.server import configure_logging, run_server
from leadgen.service import generate_leads
from leadgen.types import LeadRequestForm


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _load_json(path: str | None, default: Any) -> Any:
    if not path:
        return default
    return json.loads(Path(path).read_text(encoding='utf-8'))


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def _write_pdf(path: str, payload: bytes) -> Path:
    output = Path(path).expanduser().resolve()
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(payload)
    return output


def cmd_serve(args: argparse.Namespace) -> int:
    run_server(host=args.host, port=args.port)
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    markdown_path = Path(args.markdown).expanduser().resolve()
    if not markdown_path.exists():
        _print_json({'error': f'markdown file not found: {markdown_path}'})
        return 2

    try:
        payload = build_report(
            markdown_path.read_text(encoding='utf-8'),
            _load_json(args.citations, []),
            _load_json(args.criteria, None),
            generated_at=_parse_datetime(args.generated_at),
            layout=LayoutConfig.from_settings(get_settings()),
        )
    except RenderingFailure as exc:
        _print_json({'error': str(exc)})
        return 1

    output = _write_pdf(args.output, payload)
    _print_json({'status': 'ok', 'output': str(output), 'bytes': len(payload)})
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    settings = get_settings()
    request = _load_json(args.request, {})
    form = LeadRequestForm.model_validate(request.get('formData', request))
    provider = parse_provider(args.provider or request.get('provider') or settings.default_provider)
    api_key = args.api_key or request.get('apiKey') or settings.provider_api_key(provider.value)
    if not api_key:
        _print_json({'error': 'API key is required'})
        return 2

    try:
        report = generate_leads(
            form,
            provider=provider,
            api_key=api_key,
            model=args.model or request.get('geminiModel') or request.get('model'),
            settings=settings,
        )
    except (ProviderError, RenderingFailure) as exc:
        _print_json({'error': str(exc)})
        return 1

    output = _write_pdf(args.output, report.pdf_bytes)
    _print_json(
        {
            'status': 'ok',
            'provider': report.provider,
            'output': str(output),
            'summary': report.summary,
            'web_search_used': report.web_search_used,
            'citations': len(report.citations),
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='LeadGen Plus backend CLI')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Run the HTTP API server')
    serve.add_argument('--host', required=False, help='Bind address (default from settings)')
    serve.add_argument('--port', type=int, required=False, help='Port (default from settings)')
    serve.set_defaults(func=cmd_serve)

    render = sub.add_parser('render', help='Render a Markdown lead list to PDF')
    render.add_argument('--markdown', required=True, help='Path to the Markdown body')
    render.add_argument('--citations', required=False, help='JSON file with a list of citations')
    render.add_argument('--criteria', required=False, help='JSON file with the search criteria')
    render.add_argument('--generated-at', required=False, help='ISO timestamp printed in the header')
    render.add_argument('--output', required=True, help='Destination PDF path')
    render.set_defaults(func=cmd_render)

    generate = sub.add_parser('generate', help='Search for leads and write the PDF report')
    generate.add_argument('--request', required=True, help='JSON file with formData (and optional apiKey)')
    generate.add_argument('--output', required=True, help='Destination PDF path')
    generate.add_argument('--provider', choices=['claude', 'gemini'], required=False)
    generate.add_argument('--api-key', required=False, help='Provider API key override')
    generate.add_argument('--model', required=False, help='Provider model override')
    generate.set_defaults(func=cmd_generate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command != 'serve':
        configure_logging()
    return int(args.func(args))


if __name__ == '__main__':
    sys.exit(main())
