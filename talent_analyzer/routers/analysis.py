from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Analysis
from ..schemas import HiringReport, HistoryItem, HistoryResponse, StoredAnalysisResponse

router = APIRouter(tags=["analysis"])

HISTORY_LIMIT = 50


def build_stored_response(analysis: Analysis) -> StoredAnalysisResponse:
    """Build StoredAnalysisResponse from database entry."""
    return StoredAnalysisResponse(
        report=HiringReport.model_validate_json(analysis.report),
        username=analysis.username,
        profile_url=analysis.profile_url,
        created_at=analysis.created_at,
        analysis_id=analysis.id,
    )


@router.get("/analysis/latest/{username}", response_model=StoredAnalysisResponse)
def get_latest_analysis(username: str, db: Session = Depends(get_db)):
    """Most recent stored report for a username."""
    analysis = (
        db.query(Analysis)
        .filter(Analysis.username == username.lower())
        .order_by(Analysis.created_at.desc(), Analysis.id.desc())
        .first()
    )
    if not analysis:
        raise HTTPException(status_code=404, detail="No analysis found for this username")
    return build_stored_response(analysis)


@router.get("/analysis/{analysis_id}", response_model=StoredAnalysisResponse)
def get_analysis(analysis_id: int, db: Session = Depends(get_db)):
    analysis = db.get(Analysis, analysis_id)
    if not analysis:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return build_stored_response(analysis)


@router.get("/history", response_model=HistoryResponse)
def get_history(db: Session = Depends(get_db)):
    """The 50 most recent analyses, summarized for a list view."""
    analyses = (
        db.query(Analysis)
        .order_by(Analysis.created_at.desc(), Analysis.id.desc())
        .limit(HISTORY_LIMIT)
        .all()
    )

    items = []
    for analysis in analyses:
        report = HiringReport.model_validate_json(analysis.report)
        items.append(HistoryItem(
            id=analysis.id,
            username=analysis.username,
            display_name=report.profile.display_name or report.profile.username,
            headline=report.profile.headline,
            verdict=report.hiring_recommendation.verdict,
            overall_score=report.scores.overall,
            web3_score=report.scores.web3,
            created_at=analysis.created_at,
        ))

    return HistoryResponse(analyses=items, total=len(items))
