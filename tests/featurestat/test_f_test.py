"""
Tests for the closed-form one-way F kernels.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import stats

from pystatmap.featurestat import classify
from pystatmap.featurestat.backends._f_test import (
    quick_ftest_between,
    quick_ftest_within,
)
from pystatmap.featurestat.backends._t_test import quick_ttest2


def _codes(groups):
    d = classify(groups, np.arange(len(groups)))
    return d.groups, d.n_groups


def _rm_anova_reference(samples, groups, replicates):
    """Repeated-measures F from a subjects x conditions table, per column."""
    k = groups.max() + 1
    r = replicates.max() + 1
    out = []
    for col in samples.T:
        table = np.empty((r, k))
        table[replicates, groups] = col
        gm = table.mean()
        ss_total = np.sum((table - gm) ** 2)
        ss_cond = r * np.sum((table.mean(axis=0) - gm) ** 2)
        ss_subj = k * np.sum((table.mean(axis=1) - gm) ** 2)
        ss_err = ss_total - ss_cond - ss_subj
        out.append((ss_cond / (k - 1)) / (ss_err / ((k - 1) * (r - 1))))
    return np.array(out)


class TestFTestBetween:

    def test_matches_f_oneway(self, wide_samples, three_groups):
        groups, k = _codes(three_groups)
        f, df = quick_ftest_between(wide_samples, groups, k)
        expected = stats.f_oneway(
            *(wide_samples[groups == j] for j in range(k)), axis=0,
        ).statistic
        assert df == (2, 27)
        assert_allclose(f, expected, rtol=1e-10)

    def test_unbalanced(self, rng):
        x = rng.standard_normal((17, 4))
        groups, k = _codes(np.array([0] * 4 + [1] * 9 + [2] * 4))
        f, df = quick_ftest_between(x, groups, k)
        expected = stats.f_oneway(x[:4], x[4:13], x[13:], axis=0).statistic
        assert df == (2, 14)
        assert_allclose(f, expected, rtol=1e-10)

    def test_translation_invariant(self, wide_samples, three_groups):
        groups, k = _codes(three_groups)
        f, _ = quick_ftest_between(wide_samples, groups, k)
        shifted, _ = quick_ftest_between(wide_samples + 123.4, groups, k)
        assert_allclose(shifted, f, rtol=1e-8)

    def test_scale_invariant(self, wide_samples, three_groups):
        # both sums of squares scale by k**2, their ratio does not
        groups, k = _codes(three_groups)
        f, _ = quick_ftest_between(wide_samples, groups, k)
        scaled, _ = quick_ftest_between(wide_samples * 7.5, groups, k)
        assert_allclose(scaled, f, rtol=1e-10)

    def test_two_groups_equals_t2_squared(self, rng):
        x = rng.standard_normal((20, 6))
        groups, k = _codes(np.repeat([0, 1], 10))
        f, df = quick_ftest_between(x, groups, k)
        t, t_df = quick_ttest2(x[groups == 0], x[groups == 1])
        assert df == (1, t_df)
        assert_allclose(f, t ** 2, rtol=1e-10)

    def test_contrast_two_groups(self, rng):
        x = rng.standard_normal((20, 6))
        groups, k = _codes(np.repeat([0, 1], 10))
        contrast = np.where(groups == 0, 1.0, -1.0)
        f_c, df_c = quick_ftest_between(x, groups, k, contrast)
        f, _ = quick_ftest_between(x, groups, k)
        assert df_c == (1, 18)
        assert_allclose(f_c, f, rtol=1e-10)

    def test_contrast_pairwise_comparison(self, rng):
        # contrast (1, -1, 0) on balanced groups: n (mu1 - mu2)^2 / 2 / MSE
        n = 10
        x = rng.standard_normal((3 * n, 5))
        groups, k = _codes(np.repeat([0, 1, 2], n))
        contrast = np.array([1.0, -1.0, 0.0])[groups]
        f, df = quick_ftest_between(x, groups, k, contrast)

        means = np.array([x[groups == j].mean(axis=0) for j in range(3)])
        wss = sum(np.sum((x[groups == j] - means[j]) ** 2, axis=0) for j in range(3))
        mse = wss / (3 * n - 3)
        expected = n * (means[0] - means[1]) ** 2 / 2 / mse
        assert df == (1, 27)
        assert_allclose(f, expected, rtol=1e-10)

    def test_constant_columns(self):
        x = np.column_stack([np.ones(6), np.array([1.0, 1, 1, 2, 2, 2])])
        groups, k = _codes(np.repeat([0, 1], 3))
        f, _ = quick_ftest_between(x, groups, k)
        assert np.isnan(f[0])
        assert np.isposinf(f[1])


class TestFTestWithin:

    def test_matches_table_reference(self, repeated_design):
        samples, groups, replicates = repeated_design
        d = classify(groups, replicates)
        f, df = quick_ftest_within(
            samples, d.groups, d.replicates, d.n_groups, d.n_replicates,
        )
        assert df == (2, 14)
        assert_allclose(f, _rm_anova_reference(samples, d.groups, d.replicates), rtol=1e-10)

    def test_two_levels_equals_paired_t_squared(self, rng):
        a = rng.standard_normal((9, 4))
        b = a + rng.normal(0.4, 1.0, size=(9, 4))
        samples = np.vstack([a, b])
        d = classify(np.repeat([0, 1], 9), np.tile(np.arange(9), 2))
        f, df = quick_ftest_within(
            samples, d.groups, d.replicates, d.n_groups, d.n_replicates,
        )
        t = stats.ttest_rel(a, b, axis=0).statistic
        assert df == (1, 8)
        assert_allclose(f, t ** 2, rtol=1e-10)

    def test_subject_offsets_removed(self, repeated_design, rng):
        samples, groups, replicates = repeated_design
        d = classify(groups, replicates)
        args = (d.groups, d.replicates, d.n_groups, d.n_replicates)
        f, _ = quick_ftest_within(samples, *args)
        offsets = rng.normal(0.0, 50.0, size=d.n_replicates)[d.replicates]
        f_shifted, _ = quick_ftest_within(samples + offsets[:, None], *args)
        assert_allclose(f_shifted, f, rtol=1e-7)

    def test_scale_invariant(self, repeated_design):
        samples, groups, replicates = repeated_design
        d = classify(groups, replicates)
        args = (d.groups, d.replicates, d.n_groups, d.n_replicates)
        f, _ = quick_ftest_within(samples, *args)
        scaled, _ = quick_ftest_within(samples * 7.5, *args)
        assert_allclose(scaled, f, rtol=1e-10)
