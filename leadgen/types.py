from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class AIProvider(str, Enum):
    claude = 'claude'
    gemini = 'gemini'


class SearchMode(str, Enum):
    accurate = 'accurate'
    loose = 'loose'


def _clean_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    rows: list[str] = []
    for item in value:
        text = str(item or '').strip()
        if text:
            rows.append(text)
    return rows


def _blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


class SearchCriteria(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')

    description: str = Field(
        default='',
        validation_alias=AliasChoices('description', 'companyDescription', 'company_description'),
    )
    locations: list[str] = Field(default_factory=list)
    industries: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices('industries', 'industry'),
    )
    company_size_min: int | None = Field(
        default=None,
        validation_alias=AliasChoices('company_size_min', 'companySizeMin'),
    )
    company_size_max: int | None = Field(
        default=None,
        validation_alias=AliasChoices('company_size_max', 'companySizeMax'),
    )
    personas: list[str] = Field(default_factory=list)

    @field_validator('description', mode='before')
    @classmethod
    def _description(cls, value: Any) -> str:
        return str(value or '').strip()

    @field_validator('locations', 'industries', 'personas', mode='before')
    @classmethod
    def _lists(cls, value: Any) -> list[str]:
        return _clean_list(value)

    @field_validator('company_size_min', 'company_size_max', mode='before')
    @classmethod
    def _sizes(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @property
    def has_size_range(self) -> bool:
        # zero means no bound
        return bool(self.company_size_min or self.company_size_max)


class Citation(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')

    title: str = 'Source'
    url: str | None = None
    cited_text: str | None = Field(
        default=None,
        validation_alias=AliasChoices('cited_text', 'citedText'),
    )

    @field_validator('title', mode='before')
    @classmethod
    def _title(cls, value: Any) -> str:
        return str(value or '').strip() or 'Source'

    @field_validator('url', 'cited_text', mode='before')
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        value = _blank_to_none(value)
        return None if value is None else str(value).strip()


class OutputField(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: str = ''
    label: str
    enabled: bool = True
    required: bool = False


class LeadRequestForm(BaseModel):
    """Search form as posted by the browser client."""

    model_config = ConfigDict(extra='ignore')

    company_description: str = Field(
        default='',
        validation_alias=AliasChoices('company_description', 'companyDescription'),
    )
    locations: list[str] = Field(default_factory=list)
    industry: list[str] = Field(default_factory=list, validation_alias=AliasChoices('industry', 'industries'))
    company_size_min: int | None = Field(
        default=None,
        validation_alias=AliasChoices('company_size_min', 'companySizeMin'),
    )
    company_size_max: int | None = Field(
        default=None,
        validation_alias=AliasChoices('company_size_max', 'companySizeMax'),
    )
    personas: list[str] = Field(default_factory=list)
    additional_criteria: str = Field(
        default='',
        validation_alias=AliasChoices('additional_criteria', 'additionalCriteria'),
    )
    output_fields: list[OutputField] = Field(
        default_factory=list,
        validation_alias=AliasChoices('output_fields', 'outputFields'),
    )
    search_mode: SearchMode = Field(
        default=SearchMode.accurate,
        validation_alias=AliasChoices('search_mode', 'searchMode'),
    )
    max_results: int = Field(
        default=10,
        ge=1,
        le=50,
        validation_alias=AliasChoices('max_results', 'maxResults'),
    )

    @field_validator('company_description', 'additional_criteria', mode='before')
    @classmethod
    def _text(cls, value: Any) -> str:
        return str(value or '').strip()

    @field_validator('locations', 'industry', 'personas', mode='before')
    @classmethod
    def _lists(cls, value: Any) -> list[str]:
        return _clean_list(value)

    @field_validator('company_size_min', 'company_size_max', mode='before')
    @classmethod
    def _sizes(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator('search_mode', mode='before')
    @classmethod
    def _mode(cls, value: Any) -> Any:
        return _blank_to_none(value) or SearchMode.accurate

    @field_validator('max_results', mode='before')
    @classmethod
    def _max_results(cls, value: Any) -> Any:
        return _blank_to_none(value) or 10

    @property
    def enabled_fields(self) -> list[str]:
        return [field.label for field in self.output_fields if field.enabled]

    @property
    def required_fields(self) -> list[str]:
        return [field.label for field in self.output_fields if field.enabled and field.required]

    def criteria(self) -> SearchCriteria:
        return SearchCriteria(
            description=self.company_description,
            locations=self.locations,
            industries=self.industry,
            company_size_min=self.company_size_min,
            company_size_max=self.company_size_max,
            personas=self.personas,
        )
