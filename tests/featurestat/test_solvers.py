"""
End-to-end tests for compute_statistic().

The worked example uses a 12 x 3 matrix (see the example_samples
fixture); reference values are given to three significant digits.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import stats

from pystatmap import DataSource, compute_statistic
from pystatmap.core.exceptions import (
    ClassCountError,
    ContrastError,
    DesignError,
    DimensionError,
    InvalidOutputError,
    UnsupportedFeatureError,
    ValidationError,
)
from pystatmap.core.protocols import Backend
from pystatmap.featurestat.solvers import _get_backend


@pytest.fixture
def one_group():
    return np.ones(12)


@pytest.fixture
def unique_replicates():
    return np.arange(1, 13)


class TestWorkedExample:

    def test_t_raw(self, example_samples, one_group, unique_replicates):
        s = compute_statistic(example_samples, one_group, unique_replicates, test='t')
        assert_allclose(s.values, [2.49, 3.36, 2.55], atol=0.005)
        assert s.df == 11
        assert s.label == "Ttest(11)"
        assert s.design_type == "between"

    def test_t_zscore(self, example_samples, one_group, unique_replicates):
        s = compute_statistic(example_samples, one_group, unique_replicates, 't', 'z')
        assert_allclose(s.values, [2.17, 2.73, 2.21], atol=0.005)
        assert s.label == "Zscore"
        assert s.df is None

    def test_t_pvalue_default_tail(self, example_samples, one_group, unique_replicates):
        s = compute_statistic(example_samples, one_group, unique_replicates, 't', 'p')
        assert_allclose(s.values, [0.03, 0.00633, 0.0268], rtol=0.01)
        assert s.label == "Pval"
        assert s.tail == "both"

    def test_t_left_tail(self, example_samples, one_group, unique_replicates):
        s = compute_statistic(example_samples, one_group, unique_replicates, 't', 'left')
        assert_allclose(s.values, [0.985, 0.997, 0.987], atol=0.001)
        assert s.output == "p"
        assert s.tail == "left"

    def test_f_raw(self, example_samples, unique_replicates):
        groups = np.tile([1, 2, 3], 4)
        s = compute_statistic(example_samples, groups, unique_replicates, test='F')
        assert_allclose(s.values, [0.472, 0.0638, 0.05], rtol=0.01)
        assert s.df == (2, 9)
        assert s.label == "Ftest(2,9)"

    def test_f_zscore(self, example_samples, unique_replicates):
        groups = np.tile([1, 2, 3], 4)
        s = compute_statistic(example_samples, groups, unique_replicates, 'F', 'z')
        assert_allclose(s.values, [-0.354, -1.54, -1.66], rtol=0.01)

    def test_t2(self, example_samples, unique_replicates):
        groups = np.tile([1, 2], 6)
        s = compute_statistic(example_samples, groups, unique_replicates, test='t2')
        assert_allclose(s.values, [-2.51, 5.55, -6.48], atol=0.005)
        assert s.label == "Ttest(10)"

    def test_defaults_match_explicit(self, example_samples, one_group, unique_replicates):
        explicit = compute_statistic(example_samples, one_group, unique_replicates)
        implicit = compute_statistic(example_samples)
        assert_allclose(implicit.values, explicit.values)


class TestPairedT:

    def test_paired_matches_ttest_rel(self, rng):
        a = rng.standard_normal((10, 5))
        b = a + rng.normal(0.3, 1.0, size=(10, 5))
        samples = np.vstack([a, b])
        groups = np.repeat(['pre', 'post'], 10)
        replicates = np.tile(np.arange(10), 2)

        s = compute_statistic(samples, groups, replicates, test='t')
        # levels sort as ('post', 'pre'): post - pre
        assert s.group_levels == ('post', 'pre')
        assert_allclose(s.values, stats.ttest_rel(b, a, axis=0).statistic, rtol=1e-10)
        assert s.df == 9
        assert s.design_type == "within"
        assert s.info['paired'] is True
        assert s.n_samples == 10

    def test_two_groups_without_replicates(self, example_samples):
        with pytest.raises(DesignError):
            compute_statistic(example_samples, np.tile([1, 2], 6), test='t')

    def test_three_groups(self, example_samples):
        with pytest.raises(ClassCountError) as exc_info:
            compute_statistic(
                example_samples, np.tile([1, 2, 3], 4), np.repeat(np.arange(4), 3), test='t',
            )
        assert exc_info.value.found == 3


class TestTwoSample:

    def test_wrong_group_count(self, example_samples):
        with pytest.raises(ClassCountError, match="t2 stat"):
            compute_statistic(example_samples, np.tile([1, 2, 3], 4), test='t2')

    def test_within_design_rejected(self, example_samples):
        with pytest.raises(DesignError):
            compute_statistic(
                example_samples, np.tile([1, 2], 6), np.repeat(np.arange(6), 2), test='t2',
            )


class TestAnova:

    def test_single_group(self, example_samples):
        with pytest.raises(ClassCountError, match=">=2"):
            compute_statistic(example_samples, test='F')

    def test_within_design(self, repeated_design):
        samples, groups, replicates = repeated_design
        s = compute_statistic(samples, groups, replicates, test='F')
        assert s.test_type == "f_within"
        assert s.df == (2, 14)

    def test_contrast(self, rng):
        x = rng.standard_normal((20, 4))
        groups = np.repeat([1, 2], 10)
        contrast = np.where(groups == 1, 1.0, -1.0)
        with_c = compute_statistic(x, groups, test='F', contrast=contrast)
        without = compute_statistic(x, groups, test='F')
        t2 = compute_statistic(x, groups, test='t2')
        assert with_c.df == (1, 18)
        assert_allclose(with_c.values, without.values, rtol=1e-10)
        assert_allclose(with_c.values, t2.values ** 2, rtol=1e-10)

    def test_contrast_not_constant_in_group(self, example_samples):
        groups = np.repeat([1, 2, 3], 4)
        contrast = np.repeat([1.0, -1.0, 0.0], 4)
        contrast[0] = 2.0
        with pytest.raises(ContrastError) as exc_info:
            compute_statistic(example_samples, groups, test='F', contrast=contrast)
        assert exc_info.value.level == 1

    def test_contrast_sum_nonzero(self, example_samples):
        groups = np.repeat([1, 2, 3], 4)
        contrast = np.repeat([1.0, 1.0, 0.0], 4)
        with pytest.raises(ContrastError, match="sum 2"):
            compute_statistic(example_samples, groups, test='F', contrast=contrast)

    def test_contrast_all_zero(self, example_samples):
        groups = np.repeat([1, 2, 3], 4)
        with pytest.raises(ContrastError):
            compute_statistic(example_samples, groups, test='F', contrast=np.zeros(12))

    def test_contrast_within_unsupported(self, repeated_design):
        samples, groups, replicates = repeated_design
        contrast = np.array([1.0, -1.0, 0.0])[np.searchsorted([0, 1, 2], groups)]
        with pytest.raises(UnsupportedFeatureError):
            compute_statistic(samples, groups, replicates, test='F', contrast=contrast)

    def test_contrast_with_t_unsupported(self, example_samples):
        with pytest.raises(UnsupportedFeatureError):
            compute_statistic(example_samples, test='t', contrast=np.zeros(12))


class TestValidation:

    def test_unknown_test(self, example_samples):
        with pytest.raises(ValidationError, match="test must be"):
            compute_statistic(example_samples, test='chi2')

    def test_unknown_output(self, example_samples):
        with pytest.raises(InvalidOutputError):
            compute_statistic(example_samples, output='q')

    def test_label_length_mismatch(self, example_samples):
        with pytest.raises(DimensionError):
            compute_statistic(example_samples, np.ones(11))

    def test_malformed_design(self):
        samples = np.arange(10.0).reshape(5, 2)
        with pytest.raises(DesignError):
            compute_statistic(samples, [1, 1, 2, 1, 2], [1, 1, 1, 2, 2], test='F')

    def test_single_row(self):
        with pytest.raises(ValidationError):
            compute_statistic(np.ones((1, 3)))

    def test_unknown_backend(self, example_samples):
        with pytest.raises(ValidationError, match="Unknown backend"):
            compute_statistic(example_samples, backend='tpu')

    def test_vector_is_one_feature(self):
        s = compute_statistic([1.0, 2.0, 3.0, 4.0, 5.0])
        assert s.n_features == 1
        assert s.values[0] == pytest.approx(4.2426406871192848, rel=1e-10)


class TestNonFinite:

    def test_constant_feature_warns(self, rng):
        x = rng.standard_normal((10, 4))
        x[:, 2] = 0.0
        s = compute_statistic(x)
        assert np.isnan(s.values[2])
        assert np.all(np.isfinite(np.delete(s.values, 2)))
        assert len(s.warnings) == 1
        assert "1 of 4 features" in s.warnings[0]

    def test_nan_input_isolated(self, rng):
        x = rng.standard_normal((10, 3))
        x[4, 0] = np.nan
        s = compute_statistic(x, output='p')
        assert np.isnan(s.values[0])
        assert np.all(np.isfinite(s.values[1:]))


class TestDataSourceInput:

    def test_attributes_used(self, example_samples):
        groups = np.tile([1, 2, 3], 4)
        ds = DataSource.from_arrays(
            example_samples, groups=groups,
            fa={'labels': ['Fz', 'Cz', 'Pz']}, a={'subject': 'S01'},
        )
        s = compute_statistic(ds, test='F')
        assert s.label == "Ftest(2,9)"
        assert s.feature_attributes == {'labels': ['Fz', 'Cz', 'Pz']}
        assert s.dataset_attributes == {'subject': 'S01'}

    def test_explicit_groups_override(self, example_samples):
        ds = DataSource.from_arrays(example_samples, groups=np.tile([1, 2, 3], 4))
        s = compute_statistic(ds, np.tile([1, 2], 6), test='t2')
        assert s.label == "Ttest(10)"

    def test_contrast_read_for_f(self, rng):
        x = rng.standard_normal((9, 2))
        groups = np.repeat([1, 2, 3], 3)
        contrast = np.repeat([1.0, -1.0, 0.0], 3)
        ds = DataSource.from_arrays(x, groups=groups, contrast=contrast)
        s = compute_statistic(ds, test='F')
        assert s.df == (1, 6)

    def test_contrast_ignored_for_t(self, rng):
        x = rng.standard_normal((8, 2))
        ds = DataSource.from_arrays(x, contrast=np.zeros(8))
        s = compute_statistic(ds, test='t')
        assert s.label == "Ttest(7)"

    def test_input_not_mutated(self, example_samples):
        fa = {'labels': ['a', 'b', 'c']}
        ds = DataSource.from_arrays(example_samples, fa=fa)
        before = ds.samples.copy()
        s = compute_statistic(ds)
        s.feature_attributes['labels'].append('d')
        assert ds.fa['labels'] == ['a', 'b', 'c']
        assert np.array_equal(ds.samples, before)

    def test_dataframe_source(self):
        pd = pytest.importorskip("pandas")
        df = pd.DataFrame({
            'condition': ['a', 'b', 'c'] * 4,
            'c1': np.arange(12.0) % 5,
            'c2': np.arange(12.0) ** 0.5,
        })
        ds = DataSource.from_dataframe(df, feature_columns=['c1', 'c2'], group_column='condition')
        s = compute_statistic(ds, test='F', output='p')
        assert s.feature_attributes['labels'] == ['c1', 'c2']
        assert np.all((s.values >= 0) & (s.values <= 1))

    def test_unmaterialized_datasource_rejected(self, example_samples):
        ds = DataSource(
            _samples=example_samples, _sa={}, _fa={}, _a={},
            _capabilities=frozenset(),
        )
        with pytest.raises(ValidationError, match="materialized"):
            compute_statistic(ds)


class TestGetBackend:

    def test_cpu(self):
        assert _get_backend('cpu').name == 'cpu_closed_form'

    def test_auto_returns_backend(self):
        assert _get_backend('auto').name.startswith(('cpu', 'gpu'))

    def test_satisfies_backend_protocol(self):
        assert isinstance(_get_backend('cpu'), Backend)
