"""
Unit tests for table normalisation, number/date coercion and CSV loading
"""

import pytest

from sheetviz.data_model import Table
from sheetviz.errors import DuplicateColumn
from sheetviz.table_parser import (
    BLANK_LABEL,
    chart_data_from_table,
    load_csv_table,
    normalize_cell,
    normalize_table,
    parse_date,
    parse_number,
    round_half_up,
    table_from_records,
    table_from_rows,
)


class TestParseNumber:
    """Test cases for parse_number"""

    def test_plain_numbers(self):
        """Ints and finite floats pass through as float"""
        assert parse_number(3) == 3.0
        assert parse_number(2.5) == 2.5
        assert parse_number(" 42 ") == 42.0
        assert parse_number("-0.5") == -0.5

    def test_us_and_european_separators(self):
        """Both separator conventions are understood"""
        assert parse_number("1,234.5") == 1234.5
        assert parse_number("1.234,5") == 1234.5
        assert parse_number("3,14") == pytest.approx(3.14)
        assert parse_number("1,234,567") == 1234567.0
        assert parse_number("1 234") == 1234.0
        assert parse_number("1.234.567,89") == pytest.approx(1234567.89)

    def test_rejects_loose_separators(self):
        """Underscores and irregular digit groups are text, not numbers"""
        assert parse_number("1_000") is None
        assert parse_number("1,2,3") is None
        assert parse_number("12,34,567") is None
        assert parse_number("1,2.5") is None
        assert parse_number("1.2.3,4") is None

    def test_rejects_non_numbers(self):
        """Text, blanks, booleans and non-finite values are not numbers"""
        assert parse_number("abc") is None
        assert parse_number("") is None
        assert parse_number(None) is None
        assert parse_number(True) is None
        assert parse_number("nan") is None
        assert parse_number("inf") is None
        assert parse_number(float('inf')) is None

    def test_round_half_up(self):
        """Halves round away from zero"""
        assert round_half_up(2.675, 2) == 2.68
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(12.25, 1) == 12.3


class TestParseDate:
    """Test cases for parse_date"""

    def test_iso_and_common_formats(self):
        """ISO-8601 and spreadsheet formats are parsed"""
        assert parse_date("2024-03-01").month == 3
        assert parse_date("2024-03-01T10:00:00Z") is not None
        assert parse_date("03/15/2024").day == 15
        assert parse_date("15-Mar-2024").year == 2024
        assert parse_date("March 5, 2024").day == 5

    def test_non_dates(self):
        """Free text and non-strings are not dates"""
        assert parse_date("hello") is None
        assert parse_date(20240301) is None
        assert parse_date("  ") is None


class TestNormalizeCell:
    """Test cases for normalize_cell"""

    def test_blank_values_become_none(self):
        assert normalize_cell(None) is None
        assert normalize_cell("") is None
        assert normalize_cell("   ") is None
        assert normalize_cell(float('nan')) is None

    def test_scalars_kept(self):
        assert normalize_cell(5) == 5
        assert normalize_cell(1.5) == 1.5
        assert normalize_cell(" x ") == " x "
        assert normalize_cell(True) == "true"


class TestTableBuilding:
    """Test cases for building tables from both upload shapes"""

    def test_array_rows(self):
        """Array rows map cell i onto header i"""
        table = table_from_rows(['a', 'b'], [[1, 'x'], [2, None]])
        assert table.columns == ('a', 'b')
        assert table.n_rows == 2
        assert table.rows[1]['b'] is None
        assert table.column('a') == [1, 2]

    def test_ragged_rows_padded_and_truncated(self):
        """Short rows are padded, long rows truncated, with a warning"""
        with pytest.warns(UserWarning, match="Expected 2 cells"):
            table = table_from_rows(['a', 'b'], [[1], [2, 3, 4]])
        assert dict(table.rows[0]) == {'a': 1, 'b': None}
        assert dict(table.rows[1]) == {'a': 2, 'b': 3}

    def test_blank_headers_named(self):
        table = table_from_rows(['a', '', None], [[1, 2, 3]])
        assert table.columns == ('a', 'Column 2', 'Column 3')

    def test_duplicate_header_rejected(self):
        """A repeated column name is a structural error"""
        with pytest.raises(DuplicateColumn) as info:
            table_from_rows(['a', 'a'], [[1, 2]])
        assert info.value.column == 'a'

    def test_records_union_of_keys(self):
        """Record rows default to the union of keys in first-seen order"""
        table = table_from_records([{'x': 1}, {'y': 2, 'x': 3}])
        assert table.columns == ('x', 'y')
        assert table.rows[0]['y'] is None

    def test_records_explicit_columns(self):
        table = table_from_records([{'x': 1, 'z': 9}], columns=['x', 'y'])
        assert table.columns == ('x', 'y')
        assert dict(table.rows[0]) == {'x': 1, 'y': None}

    def test_row_cap(self):
        """Rows beyond the cap are dropped with a warning"""
        rows = [[i] for i in range(60)]
        with pytest.warns(UserWarning, match="row cap"):
            table = normalize_table({'headers': ['n'], 'rows': rows}, row_cap=50)
        assert table.n_rows == 50
        assert table.column('n')[-1] == 49

    def test_invalid_row_cap(self):
        with pytest.raises(ValueError):
            normalize_table({'headers': ['n'], 'rows': []}, row_cap=0)

    def test_rows_are_read_only(self):
        table = table_from_rows(['a'], [[1]])
        with pytest.raises(TypeError):
            table.rows[0]['a'] = 2

    def test_unknown_column(self):
        table = table_from_rows(['a'], [[1]])
        with pytest.raises(KeyError):
            table.column('missing')

    def test_bad_source(self):
        with pytest.raises(ValueError):
            normalize_table([1, 2, 3])
        with pytest.raises(ValueError):
            normalize_table({'headers': ['a']})

    def test_table_passthrough(self):
        table = table_from_rows(['a'], [[1], [2]])
        assert normalize_table(table) is table

    def test_row_key_mismatch(self):
        with pytest.raises(ValueError):
            Table(columns=('a', 'b'), rows=({'a': 1},))


class TestLoadCsv:
    """Test cases for load_csv_table"""

    def test_comma_file_with_bom(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("\ufeffName,Value\nA,1\n\nB,2\n", encoding='utf-8')
        table = load_csv_table(str(path))
        assert table.columns == ('Name', 'Value')
        assert table.column('Value') == ['1', '2']

    def test_semicolon_file_with_decimal_commas(self, tmp_path):
        path = tmp_path / "eu.csv"
        path.write_text("Name;Value\nA;1,5\nB;2,25\n", encoding='utf-8')
        table = load_csv_table(str(path))
        assert [parse_number(c) for c in table.column('Value')] == [1.5, 2.25]

    def test_tab_file_with_quoted_field(self, tmp_path):
        path = tmp_path / "data.tsv"
        path.write_text('Name\tNote\nA\t"x\ty"\n', encoding='utf-8')
        table = load_csv_table(str(path))
        assert table.rows[0]['Note'] == 'x\ty'

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_csv_table(str(tmp_path / "nope.csv"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("\n\n", encoding='utf-8')
        with pytest.raises(ValueError):
            load_csv_table(str(path))


class TestChartBinding:
    """Test cases for chart_data_from_table"""

    def test_binding(self):
        table = table_from_rows(['Region', 'Sales'],
                                [['North', '10'], [None, 5], ['East', 'n/a']])
        data = chart_data_from_table(table, 'Region', 'Sales')
        assert data.labels == ('North', BLANK_LABEL, 'East')
        assert data.values == (10.0, 5.0, 0.0)
        assert data.label_column == 'Region'
        assert data.value_column == 'Sales'

    def test_unknown_column(self):
        table = table_from_rows(['a'], [[1]])
        with pytest.raises(KeyError):
            chart_data_from_table(table, 'a', 'b')
