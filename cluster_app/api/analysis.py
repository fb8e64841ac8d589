"""
Customer Analysis API
Runs segmentation + metrics over uploaded rows, CSV text or generated sample data.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from cluster_app.shared.config import get_settings
from cluster_app.shared.utils.analysis import AnalysisResult, analyze_customers, make_rng
from cluster_app.shared.utils.data_loader import load_csv_text
from cluster_app.shared.utils.insights import (
    build_insight_context,
    build_insight_messages,
    generate_insight_markdown,
)
from cluster_app.shared.utils.sample_data import generate_sample_customers
from cluster_app.shared.utils.values import AnalysisError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/analysis", tags=["analysis"])

settings = get_settings()


class AnalysisOptionsRequest(BaseModel):
    # "detailed" | "summary"
    report_type: str = Field("detailed")
    random_seed: Optional[int] = Field(None)
    include_records: bool = Field(True)


class RowsAnalysisRequest(AnalysisOptionsRequest):
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class CsvAnalysisRequest(AnalysisOptionsRequest):
    csv_text: str
    filename: Optional[str] = None


class SampleAnalysisRequest(AnalysisOptionsRequest):
    size: Optional[int] = Field(None, ge=1, le=10000)


def _check_report_type(report_type: str) -> str:
    rt = (report_type or "detailed").lower()
    if rt not in {"detailed", "summary"}:
        raise HTTPException(status_code=400, detail="report_type must be 'detailed' or 'summary'")
    return rt


def _run(rows: List[Dict[str, Any]], req: AnalysisOptionsRequest) -> Dict[str, Any]:
    report_type = _check_report_type(req.report_type)
    try:
        result: AnalysisResult = analyze_customers(rows, options=settings.analysis_options(req.random_seed))
    except AnalysisError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("analysis failed")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {e}")

    context = build_insight_context(result, report_type)
    return {
        "success": True,
        "data": result.to_dict(include_records=req.include_records),
        "insight": {
            "report_type": report_type,
            "markdown": generate_insight_markdown(result),
            "context": context,
            "messages": build_insight_messages(context),
        },
    }


@router.post("")
def analyze_rows(req: RowsAnalysisRequest):
    """Analyze rows posted as JSON objects (first row defines the columns)."""
    return _run(req.rows, req)


@router.post("/csv")
def analyze_csv(req: CsvAnalysisRequest):
    """Analyze CSV text (header row + at least one data row)."""
    try:
        rows = load_csv_text(req.csv_text)
    except AnalysisError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("analyzing upload %s (%d rows)", req.filename or "<inline>", len(rows))
    out = _run(rows, req)
    out["filename"] = req.filename
    return out


@router.post("/sample")
def analyze_sample(req: SampleAnalysisRequest):
    """Generate the demo customer dataset and analyze it."""
    size = req.size or settings.sample_size
    seed = req.random_seed if req.random_seed is not None else settings.random_seed
    rows = generate_sample_customers(size, rng=make_rng(seed))
    return _run(rows, req)
