"""Tests for the command line entry point."""

from __future__ import annotations

import json

from conftest import pdf_text
from main import build_parser, main


class TestRenderCommand:
    def test_render_writes_pdf(self, tmp_path, capsys):
        markdown = tmp_path / 'leads.md'
        markdown.write_text('## Lead 1: Acme\n- **Name:** Acme Corp\n', encoding='utf-8')
        citations = tmp_path / 'citations.json'
        citations.write_text(json.dumps([{'title': 'Acme', 'url': 'https://acme.example'}]), encoding='utf-8')
        criteria = tmp_path / 'criteria.json'
        criteria.write_text(json.dumps({'locations': ['Berlin']}), encoding='utf-8')
        output = tmp_path / 'out' / 'report.pdf'

        code = main(
            [
                'render',
                '--markdown', str(markdown),
                '--citations', str(citations),
                '--criteria', str(criteria),
                '--generated-at', '2025-01-02T03:04:00+00:00',
                '--output', str(output),
            ]
        )

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload['status'] == 'ok'
        assert output.exists()
        text = pdf_text(output.read_bytes())
        assert 'Lead 1: Acme' in text
        assert 'Generated: 2025-01-02 03:04 UTC' in text

    def test_missing_markdown_file(self, tmp_path, capsys):
        code = main(['render', '--markdown', str(tmp_path / 'nope.md'), '--output', str(tmp_path / 'x.pdf')])
        assert code == 2
        assert 'markdown file not found' in json.loads(capsys.readouterr().out)['error']


class TestParser:
    def test_subcommands(self):
        parser = build_parser()
        assert parser.parse_args(['serve', '--port', '8080']).port == 8080
        args = parser.parse_args(['generate', '--request', 'r.json', '--output', 'o.pdf', '--provider', 'gemini'])
        assert args.provider == 'gemini'
