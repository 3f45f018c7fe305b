"""
Structured output schemas for the Gemini extraction adapters.

Gemini rejects open-ended object maps in response schemas, so raw column
values travel as name/value pairs and are folded into dicts afterwards.

Dependencies: pydantic
System role: LLM response schema definitions
"""

from pydantic import BaseModel, Field


class FieldValue(BaseModel):
    """One named raw value (column header and cell text)."""

    name: str = Field(description="Column header or attribute name")
    value: str = Field(description="Cell text or attribute value")


class BoundingBox(BaseModel):
    """Normalized bounding box, origin top-left, values in [0, 1]."""

    left: float = Field(description="x_min (0 to 1)")
    top: float = Field(description="y_min (0 to 1)")
    right: float = Field(description="x_max (0 to 1)")
    bottom: float = Field(description="y_max (0 to 1)")


class BoqRowItem(BaseModel):
    """Priced line found in a block of BOQ rows."""

    row_index: int = Field(description="Row number as labelled in the input (r0, r1, ...)")
    item_code: str = Field(default="", description="Item number or code, empty if none")
    description: str = Field(description="Full item description")
    notes: str = Field(default="", description="Remarks or specification notes")
    category: str | None = Field(default=None, description="Section or division heading in effect")
    subcategory: str | None = Field(default=None, description="Sub-section heading in effect")
    fields: list[FieldValue] = Field(
        default_factory=list,
        description="Every non-empty cell of the row keyed by its column header",
    )


class BoqRowsResponse(BaseModel):
    """Structured response for a block of BOQ rows."""

    items: list[BoqRowItem] = Field(default_factory=list)


class ScheduleItem(BaseModel):
    """One entry of a finishes or materials schedule."""

    item_code: str = Field(description="Schedule code, e.g. 'PV 02' or 'ST-01'")
    description: str = Field(description="Full description of the scheduled item")
    notes: str = Field(default="", description="Remarks, uncertainty, or 'N/A'")
    fields: list[FieldValue] = Field(
        default_factory=list,
        description="Every schedule column for this entry; include a 'CODE' entry",
    )


class ScheduleResponse(BaseModel):
    """Structured response for a schedule document."""

    items: list[ScheduleItem] = Field(default_factory=list)


class DrawingItem(BaseModel):
    """One annotation, dimension, or specification found on a drawing."""

    item_code: str = Field(description="Material code, or DIMENSION, LEVEL, NOTE, META")
    description: str = Field(description="Full annotation text")
    notes: str = Field(default="N/A", description="Context or uncertainty")
    box: BoundingBox = Field(description="Tight normalized bounding box of the text")


class DrawingResponse(BaseModel):
    """Structured response for a drawing document."""

    items: list[DrawingItem] = Field(default_factory=list)
