from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
        populate_by_name=True,
    )

    app_name: str = 'LeadGen Plus API Server'

    # HTTP server
    server_host: str = Field(default='127.0.0.1', validation_alias=AliasChoices('HOST', 'LEADGEN_HOST', 'SERVER_HOST'))
    server_port: int = Field(default=3001, validation_alias=AliasChoices('PORT', 'LEADGEN_PORT', 'SERVER_PORT'))
    # Comma-separated list of allowed browser origins
    cors_origins: str = 'http://localhost:5173'

    # Providers
    default_provider: str = 'claude'
    provider_timeout_seconds: int = 300
    anthropic_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices('ANTHROPIC_API_KEY', 'CLAUDE_API_KEY'),
    )
    anthropic_base_url: str = 'https://api.anthropic.com'
    anthropic_model: str = 'claude-haiku-4-5-20251001'
    anthropic_version: str = '2023-06-01'
    anthropic_max_tokens: int = 4096
    anthropic_web_search_max_uses: int = 100
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices('GEMINI_API_KEY', 'GOOGLE_API_KEY'),
    )
    gemini_base_url: str = 'https://generativelanguage.googleapis.com'
    gemini_model: str = 'gemini-2.5-flash'

    # Response
    summary_chars: int = 200

    # PDF report pagination heuristics
    report_page_break_threshold: float = 100.0
    report_lookahead_lines: int = 20
    report_lead_card_height: float = 30.0
    report_bullet_row_height: float = 15.0
    report_lead_block_padding: float = 20.0
    report_font_dir: str | None = Field(
        default=None,
        validation_alias=AliasChoices('REPORT_FONT_DIR', 'LEADGEN_FONT_DIR'),
    )

    def cors_origin_list(self) -> list[str]:
        origins: list[str] = []
        for item in self.cors_origins.split(','):
            normalized = item.strip()
            if not normalized:
                continue
            origins.append(normalized)
        return origins

    def provider_api_key(self, provider: str) -> str | None:
        if provider == 'gemini':
            return self.gemini_api_key
        return self.anthropic_api_key


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
