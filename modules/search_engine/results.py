"""
Records produced by a search run and the reduction from fold results to
per-candidate scores.
"""

import enum
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import joblib
import numpy as np
import pandas as pd

from modules.fold_evaluator import FoldResult
from utils.exceptions import InternalConsistencyError


class SearchState(enum.Enum):
    """Lifecycle of a single ``fit`` call."""
    IDLE = "idle"
    DISPATCHING = "dispatching"
    AGGREGATING = "aggregating"
    SELECTING = "selecting"
    REFITTING = "refitting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class CandidateScore:
    """Cross-validated score of one candidate."""
    parameters: Dict[str, Any]
    mean_validation_score: float
    cv_validation_scores: Tuple[float, ...]
    n_failed_folds: int = 0


@dataclass(frozen=True)
class SearchOutcome:
    """Everything one ``fit`` produced; replaced wholesale by the next fit."""
    grid_scores: Tuple[CandidateScore, ...]
    best: CandidateScore
    best_index: int
    best_estimator: Optional[Any] = None
    fold_results: Tuple[FoldResult, ...] = field(default=(), repr=False)


def reassemble(results: Sequence[FoldResult], n_candidates: int, n_folds: int) -> List[FoldResult]:
    """
    Put fold results back into candidate-major, fold-minor order using their tags.

    Raises:
        InternalConsistencyError: If a unit is missing, duplicated or out of range.
    """
    expected = n_candidates * n_folds
    slots: List[Optional[FoldResult]] = [None] * expected
    for result in results:
        if not (0 <= result.candidate_index < n_candidates and 0 <= result.fold_index < n_folds):
            raise InternalConsistencyError(
                f"Fold result tagged ({result.candidate_index}, {result.fold_index}) is outside "
                f"the {n_candidates} x {n_folds} unit grid"
            )
        position = result.candidate_index * n_folds + result.fold_index
        if slots[position] is not None:
            raise InternalConsistencyError(
                f"Duplicate fold result for candidate {result.candidate_index}, fold {result.fold_index}"
            )
        slots[position] = result

    missing = [i for i, slot in enumerate(slots) if slot is None]
    if missing:
        first = missing[0]
        raise InternalConsistencyError(
            f"{len(missing)} of {expected} fold results missing "
            f"(first: candidate {first // n_folds}, fold {first % n_folds})"
        )
    return slots


def aggregate(results: Sequence[FoldResult], n_folds: int, iid: bool = True) -> List[CandidateScore]:
    """
    Reduce ordered fold results to one CandidateScore per consecutive block of ``n_folds``.

    With ``iid`` the mean is weighted by test fold size, otherwise it is the
    plain mean over folds.
    """
    if n_folds <= 0 or len(results) % n_folds:
        raise InternalConsistencyError(
            f"{len(results)} fold results cannot be split into blocks of {n_folds}"
        )

    grid_scores = []
    for grid_start in range(0, len(results), n_folds):
        block = results[grid_start:grid_start + n_folds]
        first = block[0]
        signature = joblib.hash(first.parameters)
        score = 0.0
        n_test_samples = 0
        all_scores = []
        for result in block:
            # Same candidate for the whole block
            if result.candidate_index != first.candidate_index \
                    or joblib.hash(result.parameters) != signature:
                raise InternalConsistencyError(
                    f"Fold block starting at {grid_start} mixes candidates "
                    f"{first.parameters!r} and {result.parameters!r}"
                )
            all_scores.append(result.score)
            if iid:
                score += result.score * result.n_test_samples
                n_test_samples += result.n_test_samples
            else:
                score += result.score
        if iid:
            score /= n_test_samples
        else:
            score /= n_folds
        grid_scores.append(CandidateScore(
            parameters=first.parameters,
            mean_validation_score=score,
            cv_validation_scores=tuple(all_scores),
            n_failed_folds=sum(1 for r in block if r.failed),
        ))
    return grid_scores


def _selection_key(score: float) -> float:
    # NaN ranks below every number
    return -math.inf if math.isnan(score) else score


def select_best(grid_scores: Sequence[CandidateScore]) -> int:
    """
    Index of the best candidate; ties go to the earliest in iteration order.
    """
    if not grid_scores:
        raise InternalConsistencyError("Cannot select a best candidate from an empty result set")
    best_index = 0
    best_key = _selection_key(grid_scores[0].mean_validation_score)
    for index in range(1, len(grid_scores)):
        key = _selection_key(grid_scores[index].mean_validation_score)
        if key > best_key:
            best_index, best_key = index, key
    return best_index


def grid_scores_to_frame(grid_scores: Sequence[CandidateScore]) -> pd.DataFrame:
    """
    One row per candidate: parameters, mean/std/min/max and per-fold scores, rank.
    """
    rows = []
    for candidate in grid_scores:
        scores = np.asarray(candidate.cv_validation_scores, dtype=float)
        row = {'params': candidate.parameters}
        for name, value in candidate.parameters.items():
            row[f'param_{name}'] = value
        row['mean_validation_score'] = candidate.mean_validation_score
        row['std_validation_score'] = float(np.std(scores))
        row['min_validation_score'] = float(np.min(scores))
        row['max_validation_score'] = float(np.max(scores))
        for fold, value in enumerate(scores):
            row[f'split{fold}_score'] = float(value)
        row['n_failed_folds'] = candidate.n_failed_folds
        rows.append(row)

    frame = pd.DataFrame(rows)
    if not frame.empty:
        keys = frame['mean_validation_score'].map(_selection_key)
        frame['rank_validation_score'] = keys.rank(method='min', ascending=False).astype(int)
    return frame


def fold_results_to_frame(fold_results: Sequence[FoldResult]) -> pd.DataFrame:
    """Flat table of every unit of work, in candidate-major order."""
    return pd.DataFrame([{
        'candidate_index': r.candidate_index,
        'fold_index': r.fold_index,
        'score': r.score,
        'n_test_samples': r.n_test_samples,
        'fit_time': r.fit_time,
        'score_time': r.score_time,
        'failed': r.failed,
        'error': r.error,
    } for r in fold_results])
