from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from .rules import OUTPUT_EXTENSION, SEPARATORS


class ConversionConfig(BaseModel):
    input_path: Path
    separator: Literal["comma", "semicolon"] = "comma"
    pretty: bool = False

    @property
    def separator_char(self) -> str:
        return SEPARATORS[self.separator]

    @property
    def output_path(self) -> Path:
        # same directory, same base name
        return self.input_path.with_suffix(OUTPUT_EXTENSION)


class SkippedRow(BaseModel):
    line: int = Field(examples=[3])
    content: str
    reason: str


class ConversionSummary(BaseModel):
    rows_read: int = 0
    rows_written: int = 0
    rows_skipped: int = 0
    output_path: Optional[Path] = None
    skipped: List[SkippedRow] = Field(default_factory=list)


class JsonArray(BaseModel):
    sha256: str
    pretty: bool = False
    content: str


class ReportSummary(BaseModel):
    rows_read: int = 0
    rows_written: int = 0
    rows_skipped: int = 0


class ConversionReport(BaseModel):
    summary: ReportSummary
    skipped: List[SkippedRow] = Field(default_factory=list)


class ConvertResponse(BaseModel):
    json_array: JsonArray
    report: ConversionReport

class HealthResponse(BaseModel):
    ok: bool = True
