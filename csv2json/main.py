import hashlib
import io
from typing import Literal

from fastapi import FastAPI, UploadFile, File, HTTPException

from .encoding import detect_encoding
from .errors import InvalidInputError
from .models import ConvertResponse, HealthResponse
from .pipeline import convert_text
from .rules import INPUT_EXTENSION, OUTPUT_ENCODING

app = FastAPI(
    title="csv2json",
    description="Comma or semicolon separated text to JSON array conversion",
    version="0.1.0",
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/convert", response_model=ConvertResponse)
async def convert_csv(
    file: UploadFile = File(...),
    separator: Literal["comma", "semicolon"] = "comma",
    pretty: bool = False,
):
    if not file.filename.lower().endswith(INPUT_EXTENSION):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read()
    text = raw.decode(detect_encoding(raw), errors="replace")

    try:
        content, summary = convert_text(io.StringIO(text, newline=""), separator, pretty)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {
        "json_array": {
            "sha256": hashlib.sha256(content.encode(OUTPUT_ENCODING)).hexdigest(),
            "pretty": pretty,
            "content": content,
        },
        "report": {
            "summary": {
                "rows_read": summary.rows_read,
                "rows_written": summary.rows_written,
                "rows_skipped": summary.rows_skipped,
            },
            "skipped": summary.skipped,
        },
    }
