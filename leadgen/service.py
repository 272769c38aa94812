from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from datetime import datetime

from leadgen.adapters.llm import LeadSearchAdapter, ProviderError, build_search_adapter, parse_provider
from leadgen.config import Settings, get_settings
from leadgen.prompts import build_lead_prompt, default_output_fields
from leadgen.report.layout import LayoutConfig
from leadgen.report.lead_report_pdf import build_report
from leadgen.types import AIProvider, Citation, LeadRequestForm


logger = logging.getLogger(__name__)


@dataclass
class LeadReport:
    pdf_bytes: bytes
    summary: str
    web_search_used: int
    citations: list[Citation] = field(default_factory=list)
    provider: str = ''

    @property
    def pdf_base64(self) -> str:
        return base64.b64encode(self.pdf_bytes).decode('ascii')


def summarize(markdown: str, limit: int = 200) -> str:
    return f'{markdown[:max(0, limit)]}...'


def generate_leads(
    form: LeadRequestForm,
    *,
    provider: str | AIProvider | None = None,
    api_key: str,
    model: str | None = None,
    settings: Settings | None = None,
    adapter: LeadSearchAdapter | None = None,
    generated_at: datetime | None = None,
) -> LeadReport:
    """Run one lead search and render its report.

    Raises ``ProviderError`` for upstream failures and ``RenderingFailure``
    when the PDF cannot be built.
    """
    settings = settings or get_settings()
    resolved = parse_provider(provider or settings.default_provider)
    if not str(api_key or '').strip():
        raise ProviderError('API key is required', 400)

    if not form.output_fields:
        form = form.model_copy(update={'output_fields': default_output_fields()})
    if adapter is None:
        adapter = build_search_adapter(resolved, api_key=api_key, model=model, settings=settings)

    prompt = build_lead_prompt(form)
    logger.info(
        'Requesting leads: provider=%s mode=%s max_results=%s',
        resolved.value,
        form.search_mode.value,
        form.max_results,
    )
    result = adapter.search(prompt)

    pdf_bytes = build_report(
        result.markdown,
        result.citations,
        form.criteria(),
        generated_at=generated_at,
        layout=LayoutConfig.from_settings(settings),
    )
    logger.info(
        'Lead report ready: provider=%s searches=%s citations=%s pdf_bytes=%s',
        resolved.value,
        result.web_search_requests,
        len(result.citations),
        len(pdf_bytes),
    )
    return LeadReport(
        pdf_bytes=pdf_bytes,
        summary=summarize(result.markdown, settings.summary_chars),
        web_search_used=result.web_search_requests,
        citations=list(result.citations),
        provider=resolved.value,
    )
