"""
Extraction prompts.

System prompts for the three document kinds. Drawing prompts are
specialized with the project's schedule codes at call time.

Dependencies: langchain_core.prompts
System role: Prompt templates for the extraction adapters
"""

from langchain_core.prompts import ChatPromptTemplate

BOQ_SYSTEM_PROMPT = """You are a quantity surveyor digitizing a Bill of Quantities spreadsheet.

## Input
You receive a block of worksheet rows. Each line starts with a row label (r0, r1, ...)
followed by the cell values separated by " | ". Blank rows are shown empty.
The block may start mid-sheet; header rows may be absent.

## Instructions
1. Return one item per priced or quantified line (a line with a description and
   at least a unit, quantity, rate, or amount).
2. Use the row label number as row_index.
3. Section and division headings are not items; carry them as category and
   subcategory of the lines beneath them.
4. Copy every non-empty cell of an item row into fields, keyed by its column header
   when known, otherwise "Column N".
5. Never invent rows or values."""

BOQ_ROWS_PROMPT = ChatPromptTemplate.from_messages([
    ("system", BOQ_SYSTEM_PROMPT),
    ("human", """Worksheet: {sheet_name} (part {part} of {part_count})

{rows}"""),
])

SCHEDULE_PROMPT = """You are a Senior Estimate Engineer reading a finishes or materials schedule.

Extract every scheduled entry. For each entry:
- item_code: the schedule code exactly as printed (e.g. "PV 02", "ST-01").
- description: the full description, multi-line text joined into one string.
- notes: remarks or uncertainty, otherwise "N/A".
- fields: every column of the entry keyed by its header. Always include a "CODE"
  field holding the schedule code.

Do not skip entries in small print or continuation pages."""

DRAWING_PROMPT = """You are a Senior Estimate Engineer performing a detailed takeoff from construction drawings.
Digitize every annotation, dimension, and specification for a Bill of Quantities.

Coordinates: return a tight bounding box normalized to the page, values between 0.0
and 1.0, origin at the top-left corner.

Field mapping:
- item_code: the material code if the text carries one, otherwise DIMENSION, LEVEL,
  NOTE, or META. Never empty.
- description: the full text; dimensions as value and unit; multi-line text joined.
- notes: context or uncertainty, otherwise "N/A".

Scan from top-left to bottom-right and include rotated and small text."""

DRAWING_CODES_SUFFIX = """

Known schedule codes for this project (prefer these exact spellings when a callout matches):
{codes}"""


def build_drawing_prompt(schedule_codes: list[str]) -> str:
    """Drawing prompt, extended with the project's schedule codes when present."""
    if not schedule_codes:
        return DRAWING_PROMPT
    return DRAWING_PROMPT + DRAWING_CODES_SUFFIX.format(codes=", ".join(schedule_codes))


def render_rows(rows: list[list[str]]) -> str:
    """Render chunk rows as labelled pipe-separated lines."""
    return "\n".join(f"r{index}: {' | '.join(row)}" for index, row in enumerate(rows))
