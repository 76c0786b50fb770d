import pandas as pd
import pytest

from collect import make_table
from helpers import helpers


@pytest.fixture
def raw_tables():
    bounds = pd.DataFrame({'IndividualId': [1, 2, 3],
                           'EarliestDate': ['2005-02-01', '2010-01-01', '2004-01-01'],
                           'LatestDate': ['2008-11-30', '2010-12-31', '2005-01-01']})
    individuals = pd.DataFrame({'IndividualId': [1, 2],
                                'DoB': ['2000-03-01', '2011-06-01']})
    statuses = pd.DataFrame({'IndividualId': [1, 1, 1, 1, 1],
                             'ObservationDate': ['2006-01-10', '2006-05-01', '2006-08-01', '2007-03-03',
                                                 '2008-02-02'],
                             'HighestSchoolLevel': [1, 1, 2, None, 3]})
    return bounds, individuals, statuses


def test_expand_bounds():
    assert make_table.expand_bounds('2000-06-01', '2002-01-01') == [2000, 2001, 2002]
    assert make_table.expand_bounds(pd.Timestamp('2003-12-31'), pd.Timestamp('2003-01-01')) == [2003]


def test_expand_bounds_end_before_start():
    assert make_table.expand_bounds('2005-01-01', '2003-01-01') == []


def test_person_years(raw_tables):
    bounds, _, _ = raw_tables

    years = make_table.person_years(bounds)

    assert years['IndividualId'].tolist() == [1, 1, 1, 1, 2, 3, 3]
    assert years['Year'].tolist() == [2005, 2006, 2007, 2008, 2010, 2004, 2005]


def test_add_age_drops_unborn_and_unknown(raw_tables):
    bounds, individuals, _ = raw_tables

    aged = make_table.add_age(make_table.person_years(bounds), individuals)

    assert aged['IndividualId'].tolist() == [1, 1, 1, 1]
    assert aged['Age'].tolist() == [5, 6, 7, 8]


def test_yearly_education_status_takes_mode(raw_tables):
    _, _, statuses = raw_tables

    yearly = make_table.yearly_education_status(statuses).sort_values('Year')

    assert yearly['Year'].tolist() == [2006, 2008]
    assert yearly['EducationStatus'].tolist() == [1, 3]


def test_yearly_education_status_tie_goes_to_earliest():
    statuses = pd.DataFrame({'IndividualId': [7, 7],
                             'ObservationDate': ['2001-09-01', '2001-02-01'],
                             'HighestSchoolLevel': [4, 3]})

    yearly = make_table.yearly_education_status(statuses)

    assert yearly['EducationStatus'].tolist() == [3]


def test_education_scaffold(raw_tables):
    education = make_table.education_scaffold(*raw_tables)

    assert list(education.columns) == helpers.get_header('education')
    assert education['Year'].tolist() == [2005, 2006, 2007, 2008]
    assert education['Age'].tolist() == [5, 6, 7, 8]
    assert education['EducationStatus'].fillna(-1).tolist() == [-1, 1, -1, 3]
    assert education['CleanedEducation'].isna().all()


def test_make_education_table_from_csv(tmp_path, raw_tables):
    paths = []
    for name, table in zip(['bounds', 'individuals', 'statuses'], raw_tables):
        path = str(tmp_path / (name + '.csv'))
        table.to_csv(path, index=False)
        paths.append(path)

    education = make_table.make_education_table(*paths)

    assert len(education) == 4
    assert education['EducationStatus'].fillna(-1).tolist() == [-1, 1, -1, 3]
