"""
Takes the raw tables (observation bounds, individuals, and education statuses) and turns them into a person-year
education table: one row for every calendar year in which we observe an individual, with their age that year and the
education level they reported that year, if any.
"""

import statistics
import numpy as np
import pandas as pd
from helpers import helpers


def make_education_table(bounds_path, individuals_path, statuses_path):
    """
    Load the raw tables from disk and build the person-year education table.

    :param bounds_path: str, path to the table of observation bounds (csv or arrow)
    :param individuals_path: str, path to the table of individuals, with dates of birth
    :param statuses_path: str, path to the table of education status observations
    :return: pandas DataFrame, the person-year education table
    """
    bounds = helpers.read_table(bounds_path, 'bounds')
    individuals = helpers.read_table(individuals_path, 'individuals')
    statuses = helpers.read_table(statuses_path, 'statuses')
    return education_scaffold(bounds, individuals, statuses)


def expand_bounds(start_date, end_date):
    """
    Return a list of the calendar years between the start date and the end date, both included.

    :param start_date: date-like, start of the observation window
    :param end_date: date-like, end of the observation window
    :return: list of ints
    """
    return list(range(pd.Timestamp(start_date).year, pd.Timestamp(end_date).year + 1))


def person_years(bounds):
    """
    Takes a table of individuals with the start and end of their observation window and reshapes it to a table of
    person-years.

    :param bounds: pandas DataFrame with columns IndividualId, EarliestDate, LatestDate
    :return: pandas DataFrame with columns IndividualId, Year
    """
    years = pd.DataFrame({'IndividualId': bounds['IndividualId'],
                          'Year': [expand_bounds(start, end)
                                   for start, end in zip(bounds['EarliestDate'], bounds['LatestDate'])]})

    # one row per year; windows that end before they start have no years, drop them
    years = years.explode('Year').dropna(subset=['Year'])
    years['Year'] = years['Year'].astype(np.int64)
    return years.reset_index(drop=True)


def add_age(person_year_table, individuals):
    """
    Add date of birth and age to each person-year. Drops person-years of people with no known date of birth, and
    person-years from before the year they were born.

    :param person_year_table: pandas DataFrame with columns IndividualId, Year
    :param individuals: pandas DataFrame with columns IndividualId, DoB
    :return: pandas DataFrame with columns IndividualId, Year, DoB, Age
    """
    individuals = individuals.assign(DoB=pd.to_datetime(individuals['DoB']))
    with_dob = person_year_table.merge(individuals, on='IndividualId', how='left')
    with_dob = with_dob.dropna(subset=['DoB'])

    # age is the number of calendar years since the birth year
    with_dob = with_dob.assign(Age=with_dob['Year'] - with_dob['DoB'].dt.year)
    with_dob = with_dob[with_dob['Age'] >= 0].astype({'Age': np.int64})
    return with_dob.reset_index(drop=True)


def yearly_education_status(statuses):
    """
    Reduce the education status observations to one per person-year. When a person has several observations in the
    same year we keep the most common level; if two levels are equally common, the one observed first wins.

    :param statuses: pandas DataFrame with columns IndividualId, ObservationDate, HighestSchoolLevel
    :return: pandas DataFrame with columns IndividualId, Year, EducationStatus
    """
    statuses = statuses.dropna(subset=['HighestSchoolLevel'])
    statuses = statuses.assign(ObservationDate=pd.to_datetime(statuses['ObservationDate']))
    statuses = statuses.assign(Year=statuses['ObservationDate'].dt.year)

    # sort by date (stable) so that "observed first" means first in time
    statuses = statuses.sort_values('ObservationDate', kind='mergesort')

    yearly = statuses.groupby(['IndividualId', 'Year'], sort=False)['HighestSchoolLevel'] \
        .agg(lambda levels: int(statistics.mode(levels)))
    yearly = yearly.rename('EducationStatus').reset_index()
    yearly['Year'] = yearly['Year'].astype(np.int64)
    return yearly


def education_scaffold(bounds, individuals, statuses):
    """
    Create a record for every calendar year within each individual's observation bounds, and record the highest
    school level that the individual reported in that year.

    :param bounds: pandas DataFrame with columns IndividualId, EarliestDate, LatestDate
    :param individuals: pandas DataFrame with columns IndividualId, DoB
    :param statuses: pandas DataFrame with columns IndividualId, ObservationDate, HighestSchoolLevel
    :return: pandas DataFrame with the columns of the education header, sorted by individual and year
    """
    aged = add_age(person_years(bounds), individuals)
    education = aged.merge(yearly_education_status(statuses), on=['IndividualId', 'Year'], how='left')
    education['EducationStatus'] = education['EducationStatus'].astype('Int16')
    education = education.sort_values(['IndividualId', 'Year'], kind='mergesort').reset_index(drop=True)
    education['CleanedEducation'] = pd.array([None] * len(education), dtype='Int16')

    print("     NUMBER OF PERSON-YEARS IN EDUCATION TABLE: ", len(education))
    print("     NUMBER OF INDIVIDUALS IN EDUCATION TABLE: ", education['IndividualId'].nunique())

    return education[helpers.get_header('education')]
