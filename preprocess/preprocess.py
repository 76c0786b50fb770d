"""
Functions for turning the raw tables into a cleaned person-year education table.
"""

import time
import pandas as pd
from collect import make_table
from preprocess import education
from helpers import helpers


def preprocess(bounds_path, individuals_path, statuses_path, out_path, change_log_path, workers=1):
    """
    Build the person-year education table from the raw tables, clean each individual's sequence of reported
    education levels, fill in the gaps, and write the cleaned table and a log of the changes to disk.

    :param bounds_path: str, path to the table of observation bounds (csv or arrow)
    :param individuals_path: str, path to the table of individuals, with dates of birth
    :param statuses_path: str, path to the table of education status observations
    :param out_path: str, path where we want the cleaned person-year table to live (csv or arrow)
    :param change_log_path: str, path where we want the change log (a csv) to live
    :param workers: int, how many processes to clean individuals with
    :return: pandas DataFrame, the cleaned person-year education table
    """
    print("STARTED CLEANING EDUCATION STATUS")
    start_time = time.time()

    # initialise the log in which we keep track of changes
    change_log = []

    education_table = make_table.make_education_table(bounds_path, individuals_path, statuses_path)
    log_table_overview(education_table, change_log, 'GOING IN')

    education.clean_education(education_table, workers=workers, change_log=change_log)
    log_table_overview(education_table, change_log, 'COMING OUT')

    # write the cleaned table and the change log to disk
    helpers.write_table(education_table, out_path)
    pd.DataFrame(change_log).to_csv(change_log_path)

    print("=== FINISHED CLEANING EDUCATION STATUS AFTER %s SECONDS" % round(time.time() - start_time, 2))

    return education_table


def log_table_overview(education_table, change_log, stage):
    """
    Record how many person-years and individuals there are, and how many person-years have a reported and a cleaned
    education level.

    :param education_table: pandas DataFrame, the person-year education table
    :param change_log: a list (to be written as a csv) of diagnostics
    :param stage: str, "GOING IN" or "COMING OUT"
    :return: None, just updates the change log
    """
    n_rows = len(education_table)
    n_reported = int(education_table['EducationStatus'].notna().sum())
    n_cleaned = int(education_table['CleanedEducation'].notna().sum())

    print("     NUMBER OF PERSON-YEARS %s: " % stage, n_rows)

    change_log.append(["NUMBER OF PERSON-YEARS %s: " % stage, n_rows])
    change_log.append(["NUMBER OF INDIVIDUALS %s: " % stage, education_table['IndividualId'].nunique()])
    change_log.append(["NUMBER OF PERSON-YEARS WITH A REPORTED LEVEL %s: " % stage, n_reported])
    change_log.append(["NUMBER OF PERSON-YEARS WITH A CLEANED LEVEL %s: " % stage, n_cleaned])
    change_log.append(["PERCENT OF PERSON-YEARS WITH A CLEANED LEVEL %s: " % stage,
                       helpers.percent(n_cleaned, n_rows)])
