import math

import pytest

from modules.fold_evaluator import FoldResult
from modules.search_engine import (
    CandidateScore,
    aggregate,
    fold_results_to_frame,
    grid_scores_to_frame,
    reassemble,
    select_best,
)
from utils.exceptions import InternalConsistencyError


def make_result(candidate, fold, score, n_test=10, parameters=None, failed=False):
    return FoldResult(
        candidate_index=candidate,
        fold_index=fold,
        parameters=parameters if parameters is not None else {'c': candidate},
        score=score,
        n_test_samples=n_test,
        failed=failed,
    )


def candidate(score, params=None, scores=None):
    return CandidateScore(
        parameters=params or {},
        mean_validation_score=score,
        cv_validation_scores=tuple(scores or (score,)),
    )


class TestReassemble:

    def test_restores_candidate_major_order(self):
        shuffled = [make_result(1, 1, 0.4), make_result(0, 0, 0.1),
                    make_result(1, 0, 0.3), make_result(0, 1, 0.2)]
        ordered = reassemble(shuffled, n_candidates=2, n_folds=2)
        assert [(r.candidate_index, r.fold_index) for r in ordered] == [(0, 0), (0, 1), (1, 0), (1, 1)]

    def test_missing_unit_raises(self):
        with pytest.raises(InternalConsistencyError, match="missing"):
            reassemble([make_result(0, 0, 0.1)], n_candidates=1, n_folds=2)

    def test_duplicate_unit_raises(self):
        with pytest.raises(InternalConsistencyError, match="Duplicate"):
            reassemble([make_result(0, 0, 0.1), make_result(0, 0, 0.1)], n_candidates=1, n_folds=2)

    def test_out_of_range_tag_raises(self):
        with pytest.raises(InternalConsistencyError, match="outside"):
            reassemble([make_result(0, 0, 0.1), make_result(0, 5, 0.1)], n_candidates=1, n_folds=2)


class TestAggregate:

    def test_iid_mean_weights_by_test_size(self):
        results = [make_result(0, 0, 1.0, n_test=1), make_result(0, 1, 4.0, n_test=3)]
        (score,) = aggregate(results, n_folds=2, iid=True)
        assert score.mean_validation_score == pytest.approx((1.0 * 1 + 4.0 * 3) / 4)
        assert score.cv_validation_scores == (1.0, 4.0)

    def test_plain_mean(self):
        results = [make_result(0, 0, 1.0, n_test=1), make_result(0, 1, 4.0, n_test=3)]
        (score,) = aggregate(results, n_folds=2, iid=False)
        assert score.mean_validation_score == pytest.approx(2.5)

    def test_one_score_per_candidate_in_order(self):
        results = [make_result(c, f, float(c)) for c in range(3) for f in range(2)]
        scores = aggregate(results, n_folds=2)
        assert [s.parameters for s in scores] == [{'c': 0}, {'c': 1}, {'c': 2}]
        assert [s.mean_validation_score for s in scores] == [0.0, 1.0, 2.0]

    def test_counts_failed_folds(self):
        results = [make_result(0, 0, 0.0, failed=True), make_result(0, 1, 0.5)]
        (score,) = aggregate(results, n_folds=2)
        assert score.n_failed_folds == 1

    def test_mixed_block_raises(self):
        results = [make_result(0, 0, 0.1), make_result(1, 0, 0.2)]
        with pytest.raises(InternalConsistencyError, match="mixes candidates"):
            aggregate(results, n_folds=2)

    def test_parameters_mismatch_within_block_raises(self):
        results = [make_result(0, 0, 0.1, parameters={'a': 1}),
                   make_result(0, 1, 0.2, parameters={'a': 2})]
        with pytest.raises(InternalConsistencyError):
            aggregate(results, n_folds=2)

    def test_incomplete_block_raises(self):
        results = [make_result(0, 0, 0.1), make_result(0, 1, 0.2), make_result(1, 0, 0.3)]
        with pytest.raises(InternalConsistencyError, match="blocks of 2"):
            aggregate(results, n_folds=2)


class TestSelectBest:

    def test_highest_mean_wins(self):
        assert select_best([candidate(0.1), candidate(0.9), candidate(0.5)]) == 1

    def test_ties_go_to_earliest(self):
        assert select_best([candidate(0.2), candidate(0.7), candidate(0.7)]) == 1

    def test_nan_ranks_last(self):
        assert select_best([candidate(math.nan), candidate(-5.0)]) == 1

    def test_all_nan_picks_first(self):
        assert select_best([candidate(math.nan), candidate(math.nan)]) == 0

    def test_empty_raises(self):
        with pytest.raises(InternalConsistencyError):
            select_best([])


class TestFrames:

    def test_grid_scores_frame_columns_and_rank(self):
        frame = grid_scores_to_frame([
            candidate(0.5, {'alpha': 1}, (0.4, 0.6)),
            candidate(0.8, {'alpha': 2}, (0.7, 0.9)),
            candidate(0.5, {'alpha': 3}, (0.5, 0.5)),
        ])
        assert list(frame['param_alpha']) == [1, 2, 3]
        assert list(frame['rank_validation_score']) == [2, 1, 2]
        assert list(frame['split0_score']) == [0.4, 0.7, 0.5]
        assert frame.loc[0, 'std_validation_score'] == pytest.approx(0.1)
        assert frame.loc[1, 'min_validation_score'] == pytest.approx(0.7)
        assert frame.loc[1, 'max_validation_score'] == pytest.approx(0.9)

    def test_fold_results_frame(self):
        frame = fold_results_to_frame([make_result(0, 0, 0.1), make_result(0, 1, 0.0, failed=True)])
        assert list(frame['fold_index']) == [0, 1]
        assert list(frame['failed']) == [False, True]
