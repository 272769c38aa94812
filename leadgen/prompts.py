from __future__ import annotations

from leadgen.types import LeadRequestForm, OutputField, SearchMode


_DEFAULT_FIELDS: dict[str, list[tuple[str, bool]]] = {
    'en': [
        ('Company Name', True),
        ('Contact Person (First & Last Name)', True),
        ('Position (e.g., HR Manager, Marketing Director)', False),
        ('Phone Number (with extension if available)', False),
        ('Personal Email Address or info@example.com', False),
        ('Location', False),
        ('Website', False),
    ],
    'de': [
        ('Unternehmensname', True),
        ('Ansprechpartner (Vor- & Nachname)', True),
        ('Position (z. B. HR-Manager, Marketingleiter)', False),
        ('Telefonnummer (mit Durchwahl, falls vorhanden)', False),
        ('persönliche E-Mail-Adresse ansonsten info@beispiel.com', False),
        ('Ort', False),
        ('Website', False),
    ],
}


def default_output_fields(language: str = 'en') -> list[OutputField]:
    rows = _DEFAULT_FIELDS.get(language, _DEFAULT_FIELDS['en'])
    return [
        OutputField(id=f'field-{index}', label=label, enabled=True, required=required)
        for index, (label, required) in enumerate(rows, start=1)
    ]


def _numbered(items: list[str], indent: str = '') -> str:
    return '\n'.join(f'{indent}{index}. {item}' for index, item in enumerate(items, start=1))


def _mode_instructions(form: LeadRequestForm) -> str:
    if form.search_mode is SearchMode.loose:
        return '\n'.join(
            [
                'LOOSE SEARCH MODE (FLEXIBLE):',
                '- Include leads even if some fields are not available',
                '- For missing information, clearly state "Not publicly available" for that specific field',
                '- Prioritize leads with more complete information first',
                '- You may include general company contact information when specific contact persons are not found',
                f'- Maximum leads to include: {form.max_results}',
            ]
        )

    required = form.required_fields
    lines = [
        'ACCURATE SEARCH MODE (STRICT):',
        '- ONLY include leads where you can find ALL of these REQUIRED fields with verified information:',
    ]
    if required:
        lines.append(_numbered(required, indent='  '))
    lines.extend(
        [
            '- If you cannot find complete information for ANY required field, SKIP that lead entirely',
            '- Optional fields (not in the required list above) can be marked as "Not publicly available"',
            '- Do NOT include leads with missing required fields',
            '- Focus on quality over quantity - better to have fewer complete leads',
            '- Do NOT include apologetic messages or disclaimers about data limitations',
            '- Simply present the complete leads you found without commentary about what you couldn\'t find',
            f'- Maximum leads to include: {form.max_results}',
        ]
    )
    if not required:
        lines.append('  NOTE: No required fields specified - all enabled fields are optional')
    return '\n'.join(lines)


def build_lead_prompt(form: LeadRequestForm) -> str:
    """Research prompt for one search form.

    The formatting section asks for exactly the Markdown subset the PDF
    renderer understands: ``##`` per lead, ``###``, bullets and bold labels.
    """
    fields = form.enabled_fields
    size_min = form.company_size_min or 'Any'
    size_max = form.company_size_max or 'Any'
    if form.search_mode is SearchMode.accurate:
        missing_rule = (
            '- CRITICAL: Do NOT include apologetic messages, disclaimers, or explanations about data '
            'limitations. Just present the leads with available information.'
        )
    else:
        missing_rule = '- If specific information truly is not available, state "Not publicly available" for that field'

    return f"""You are a professional lead generation expert with web search capabilities. Your task is to research and provide practical, actionable contact information for qualified leads.

CRITICAL REQUIREMENTS:
1. Use the web search tool to find real, current information about companies matching the criteria
2. Search for companies in the specified locations and industries
3. Provide contact information found through reliable public sources
4. DO NOT generate fictional, exemplary, or placeholder data
5. Use information from credible sources such as:
   - Company websites (official contact pages, team pages, "About Us" sections)
   - Professional networks (LinkedIn, XING profiles)
   - Official business directories (Bundesanzeiger, IHK, industry associations)
   - Company press releases and news articles
   - Trade association member listings

WHAT COUNTS AS ACCEPTABLE INFORMATION:
- Contact information directly from company websites
- Phone numbers listed on official company contact pages
- Email addresses in the format shown on company websites (even if general like info@company.de)
- Names and positions from company "Team" or "About Us" pages
- LinkedIn/XING profiles showing current employment at the company
- Contact details from official business registries
- Information from recent press releases or company news

NOT ACCEPTABLE:
- DO NOT use information that appears outdated (>2 years old)
- DO NOT fabricate or guess email formats
- DO NOT include contact information from third-party recruiting sites unless it's the only available source

{_mode_instructions(form)}

Search Criteria:
Company Description: {form.company_description}
Target Locations: {', '.join(form.locations)}
Industries: {', '.join(form.industry)}
Company Size: {size_min} to {size_max} employees
Target Personas: {', '.join(form.personas)}
Additional Criteria: {form.additional_criteria or 'None'}

Required Information for Each Lead (in this exact order):
{_numbered(fields)}

PRACTICAL GUIDANCE FOR CONTACT INFORMATION:
- **Company Name**: Always available from search results
- **Contact Person**: Look for team pages, "About Us", HR department listings, management bios
- **Position/Title**: Usually shown with contact person on company website
- **Phone**: Use main company number from contact page (add extension if available)
- **Email**: Prefer a direct address from the company website, then a department address, then the general company address
- **Location**: From company address/headquarters
- **Website**: Always available from search results

FORMATTING INSTRUCTIONS:
Your output will be converted to PDF. Use clean, professional Markdown formatting:
- Use ## for main section headers (e.g., "## Lead 1: Company Name")
- Use ### for sub-headers (e.g., "### Contact Information")
- Use **bold** for field labels (e.g., **Company Name:** Company GmbH)
- Use - or * for bullet points
- Separate each lead with clear headers
- Keep paragraphs concise and well-structured
- DO NOT use tables, links, numbered lists or other complex formatting
- Present data in a clean, scannable format

OUTPUT INSTRUCTIONS:
- Use web search to find real companies matching these criteria
- Present each lead with clear ## headers for company names
- For each field, use **field name:** followed by the value
- Include the best available contact information from company sources
- If specific HR contact isn't public, use general company contact (phone/email from contact page)
{missing_rule}
- Organize leads with clear separations between each company
- Stop after finding {form.max_results} qualifying leads

Begin your web search and provide the lead information now."""
