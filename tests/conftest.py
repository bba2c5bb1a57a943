"""
Shared fixtures for the SheetViz test suite.
"""

import matplotlib
matplotlib.use('Agg')

import pytest

from sheetviz.data_model import ChartData
from sheetviz.table_parser import normalize_table


@pytest.fixture
def sales_table():
    """Small mixed-type table: text, numeric, date and a sparse column."""
    return normalize_table({
        'headers': ['Region', 'Sales', 'Units', 'Date', 'Notes'],
        'rows': [
            ['North', 120.0, 4, '2024-01-01', None],
            ['South', 80.5, 3, '2024-02-01', 'late'],
            ['East', '200', 7, '2024-03-01', None],
            ['West', 150.25, 5, '2024-04-01', None],
            ['North', 95, 3, '2024-05-01', None],
        ],
    })


@pytest.fixture
def three_slices():
    return ChartData(labels=['A', 'B', 'C'], values=[10, 10, 80])
