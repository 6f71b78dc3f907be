import math

import pytest

from calculator_errors import EmptyDatasetError, NumericRangeError
from statistics_engine import NO_MODE, compute, median, modes, parse_dataset, summarize


def test_compute_reference_dataset():
    stats = compute([1, 2, 2, 3, 4])
    assert stats.count == 5
    assert stats.total == 12
    assert stats.mean == pytest.approx(2.4)
    assert stats.median == 2
    assert stats.modes == (2,)
    assert stats.range == 3
    assert stats.minimum == 1
    assert stats.maximum == 4
    assert stats.variance == pytest.approx(1.04)
    assert stats.std_deviation == pytest.approx(1.0198, abs=1e-4)


def test_summarize_formats_every_value():
    summary = summarize(compute([1, 2, 2, 3, 4]))
    assert summary == {
        "Cantidad": "5",
        "Suma": "12",
        "Media": "2.4",
        "Mediana": "2",
        "Moda": "2",
        "Rango": "3",
        "Mínimo": "1",
        "Máximo": "4",
        "Varianza": "1.04",
        "Desviación estándar": "1.0198039027",
    }


def test_median_even_length_averages_middle_values():
    assert median([4, 1, 3, 2]) == 2.5
    assert median([7]) == 7


def test_no_mode_when_nothing_repeats():
    assert modes([1, 2, 3]) is None
    assert modes([5]) is None
    assert summarize(compute([1, 2, 3]))["Moda"] == NO_MODE


def test_multiple_modes_keep_first_seen_order():
    assert modes([3, 1, 3, 1, 2]) == (3, 1)
    assert summarize(compute([10, 2, 2, 10, 7]))["Moda"] == "10, 2"


def test_all_values_tied_but_repeated_is_still_a_mode():
    assert modes([3, 1, 3, 1]) == (3, 1)


def test_variance_is_population_variance():
    stats = compute([2, 4, 4, 4, 5, 5, 7, 9])
    assert stats.variance == pytest.approx(4)
    assert stats.std_deviation == pytest.approx(2)


def test_empty_dataset():
    with pytest.raises(EmptyDatasetError):
        compute([])


def test_parse_dataset_discards_invalid_entries():
    assert parse_dataset("1, abc, 2,,3, inf, nan, -4.5") == [1, 2, 3, -4.5]
    assert parse_dataset("") == []


def test_single_value():
    stats = compute([math.pi])
    assert stats.variance == 0
    assert stats.range == 0
    assert stats.median == math.pi


def test_large_values_near_float_limit():
    stats = compute([1e300, 1e300])
    assert stats.total == 2e300
    assert stats.mean == 1e300
    assert stats.median == 1e300
    assert stats.variance == 0
    assert median([1.5e308, 1.7e308]) == pytest.approx(1.6e308)


@pytest.mark.parametrize("data", [[1e200, -1e200], [1e308, 1e308], [1.7e308, -1.7e308]])
def test_results_out_of_float_range(data):
    with pytest.raises(NumericRangeError):
        compute(data)
