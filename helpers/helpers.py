"""
Handy helper functions.
"""

import pandas as pd


def get_header(table):
    """
    The different tables we work with have different columns, so the headers need to change accordingly.
    :param table: string, which table we want the header of; admissible values are "bounds", "individuals",
                  "statuses", and "education"
    :return: header, as list
    """

    headers = {'bounds': ['IndividualId', 'EarliestDate', 'LatestDate'],

               'individuals': ['IndividualId', 'DoB'],

               'statuses': ['IndividualId', 'ObservationDate', 'HighestSchoolLevel'],

               'education': ['IndividualId', 'Year', 'DoB', 'Age', 'EducationStatus', 'CleanedEducation']}

    return headers[table]


def read_table(path, table):
    """
    Load a table from a csv or an Arrow (feather) file, keeping only the columns we need for that kind of table.

    :param path: string, path to the file; the extension decides how we read it
    :param table: string, the kind of table, see get_header
    :return: pandas DataFrame
    """
    if path.endswith('.csv'):
        df = pd.read_csv(path)
    elif path.endswith('.arrow') or path.endswith('.feather'):
        df = pd.read_feather(path)
    else:
        raise ValueError("don't know how to read %s, expected a .csv, .arrow or .feather file" % path)
    return df[get_header(table)]


def write_table(df, path):
    """
    Write a table to disk as csv or Arrow (feather), depending on the extension of the out path.

    :param df: pandas DataFrame
    :param path: string, where the table will live
    :return: None
    """
    if path.endswith('.csv'):
        df.to_csv(path, index=False)
    elif path.endswith('.arrow') or path.endswith('.feather'):
        df.reset_index(drop=True).to_feather(path)
    else:
        raise ValueError("don't know how to write %s, expected a .csv, .arrow or .feather file" % path)


def percent(numerator, denominator):
    """
    Returns an integer valued percentage from a numerator and denominator. Evidently assumes that the numerator
    is the fraction of the denominator total. E.g. if n = 3 and d = 4, we get 75.

    :param numerator: int or float
    :param denominator: int or float
    :return: int, the percentage
    """

    return int(round(weird_division(numerator, denominator), 2) * 100)


def weird_division(numerator, denominator):
    """
    Returns zero if denominator is zero.
    NB: from https://stackoverflow.com/a/27317595/12973664

    :param numerator: something divisible, e.g. int or float
    :param denominator: something divisible, e.g. int or float
    :return: quotient, of type float
    """
    return float(numerator) / float(denominator) if denominator else 0.
