"""
Stateless analysis endpoints.

Run the detector and scorer on ad-hoc text without a session. Nothing is
persisted.
"""

from fastapi import APIRouter

from okr_coach.api.dependencies import PatternDetectorDep, QualityScorerDep
from okr_coach.api.schemas import (
    KeyResultAnalysisRequest,
    ObjectiveAnalysisRequest,
    OKRSetAnalysisRequest,
    OKRSetAnalysisResponse,
    PatternAnalysisRequest,
    PatternAnalysisResponse,
)
from okr_coach.domain.models.quality import QualityScore

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.post("/patterns", response_model=PatternAnalysisResponse)
async def analyze_patterns(request: PatternAnalysisRequest, detector: PatternDetectorDep):
    """Detect anti-patterns and suggest a reframing for the dominant one."""
    detection = detector.detect_patterns(request.text, request.context)
    reframing = (
        detector.generate_reframing_response(detection, request.text, request.context)
        if detection.detected
        else None
    )
    return PatternAnalysisResponse(
        detection=detection,
        reframing=reframing,
        text_score=detector.calculate_text_score(request.text),
        dependencies=detector.extract_dependencies(request.text),
    )


@router.post("/objective", response_model=QualityScore)
async def analyze_objective(request: ObjectiveAnalysisRequest, scorer: QualityScorerDep):
    return scorer.score_objective(request.text, request.context, request.scope)


@router.post("/key-result", response_model=QualityScore)
async def analyze_key_result(request: KeyResultAnalysisRequest, scorer: QualityScorerDep):
    return scorer.score_key_result(request.text, request.objective, request.context)


@router.post("/okr-set", response_model=OKRSetAnalysisResponse)
async def analyze_okr_set(request: OKRSetAnalysisRequest, scorer: QualityScorerDep):
    """Score the objective, each key result and the set as a whole."""
    return OKRSetAnalysisResponse(
        objective=scorer.score_objective(request.objective, request.context, request.scope),
        key_results=[
            scorer.score_key_result(kr, request.objective, request.context)
            for kr in request.key_results
        ],
        okr_set=scorer.score_okr_set(
            request.objective, request.key_results, request.context, request.scope
        ),
    )
