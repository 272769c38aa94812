"""
LeadGen Plus API server
=======================
Flask app that turns a lead search form into a PDF report.

Endpoints:
  - GET  /health
  - POST /api/generate-leads

Config comes from ``leadgen.config.Settings`` (environment or ``.env``):
HOST, PORT, CORS_ORIGINS, ANTHROPIC_API_KEY, GEMINI_API_KEY, ...
"""

from __future__ import annotations

import logging
import traceback
from typing import Any, Callable

from flask import Flask, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError

from leadgen.adapters.llm import ProviderError, parse_provider
from leadgen.config import Settings, get_settings
from leadgen.report.lead_report_pdf import RenderingFailure
from leadgen.service import LeadReport, generate_leads
from leadgen.types import AIProvider, LeadRequestForm


logger = logging.getLogger(__name__)

LeadService = Callable[..., LeadReport]


def _request_model(data: dict[str, Any], provider: AIProvider) -> str | None:
    if provider is AIProvider.gemini:
        value = data.get('geminiModel') or data.get('model')
    else:
        value = data.get('model')
    text = str(value or '').strip()
    return text or None


def create_app(settings: Settings | None = None, service: LeadService | None = None) -> Flask:
    settings = settings or get_settings()
    service = service or generate_leads

    app = Flask(__name__)
    CORS(app, origins=settings.cors_origin_list() or '*')

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok', 'message': settings.app_name}), 200

    @app.route('/api/generate-leads', methods=['POST'])
    def generate_leads_endpoint():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'error': 'Invalid JSON request'}), 400

        try:
            provider = parse_provider(data.get('provider') or data.get('aiProvider') or settings.default_provider)
            form = LeadRequestForm.model_validate(data.get('formData') or {})
        except ValidationError as e:
            return jsonify({'error': 'Invalid form data', 'message': str(e)}), 400
        except ValueError as e:
            return jsonify({'error': str(e)}), 400

        api_key = str(data.get('apiKey') or '').strip() or settings.provider_api_key(provider.value)
        if not api_key:
            return jsonify({'error': 'API key is required'}), 400

        try:
            report = service(
                form,
                provider=provider,
                api_key=api_key,
                model=_request_model(data, provider),
                settings=settings,
            )
        except ProviderError as e:
            logger.error('Provider %s failed (%s): %s', provider.value, e.status_code, e)
            return jsonify({'error': str(e)}), e.status_code
        except RenderingFailure as e:
            logger.error('Report rendering failed: %s', e)
            logger.error(traceback.format_exc())
            return jsonify({'error': 'Failed to render PDF', 'message': str(e)}), 500
        except Exception as e:
            logger.error('Error in /api/generate-leads endpoint: %s', e)
            logger.error(traceback.format_exc())
            return jsonify({'error': 'Internal server error', 'message': str(e)}), 500

        return (
            jsonify(
                {
                    'pdfBase64': report.pdf_base64,
                    'summary': report.summary,
                    'webSearchUsed': report.web_search_used,
                    'provider': report.provider or provider.value,
                }
            ),
            200,
        )

    return app


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


def run_server(host: str | None = None, port: int | None = None, settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    configure_logging()
    app = create_app(settings)
    host = host or settings.server_host
    port = int(port or settings.server_port)
    logger.info('Starting %s on %s:%s', settings.app_name, host, port)
    app.run(host=host, port=port, debug=False, threaded=True)


if __name__ == '__main__':
    run_server()
