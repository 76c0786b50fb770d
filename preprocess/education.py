"""
Functions for cleaning the person-year education table: validate each individual's sequence of reported education
levels, throw out the reports that cannot be true, and fill in the gaps that remain.

Education levels are grades 0-12, plus the sentinel 98, meaning "never went to school".
"""

import statistics
import multiprocessing
from fractions import Fraction
from collections import Counter, namedtuple
import pandas as pd

# highest grade one can plausibly have finished at a given age; below 5 it's 0, above 16 it's 12
AGE_LEVELS = {5: 1, 6: 2, 7: 3, 8: 4, 9: 5, 10: 6, 11: 7, 12: 8, 13: 9, 14: 10, 15: 11, 16: 12}

NEVER_SCHOOLED = 98
NO_DATA = -1
TERMINAL_LEVEL = 12

# "never went to school" is not believable before this age
NEVER_SCHOOLED_MIN_AGE = 10

# if the first believable report comes at or after this age we stop reading the sequence year by year
LATE_START_AGE = 25

# the running state of the sequential pass: index and level of the last accepted report
Anchor = namedtuple('Anchor', ['index', 'level'])
NO_ANCHOR = Anchor(None, None)

# the verdicts the cleaner hands out, one per person-year
ACCEPTED = 'accepted'
MISSING = 'missing'
TOO_HIGH_FOR_AGE = 'too high for age'
NEVER_SCHOOLED_TOO_YOUNG = 'never schooled before age 10'
NEVER_SCHOOLED_AFTER_LEVEL = 'never schooled after a level'
JUMP = 'jump too large'
REGRESS = 'regression'
LATE_START = 'late start'
FALLBACK = 'late start fallback'


def max_level_at_age(age):
    """
    Return the maximum feasible education level for a given age.

    :param age: int, age in completed years
    :return: int, the highest education level someone that age could have
    """
    if age < 0:
        raise ValueError("age must be non-negative, got %s" % age)
    if age > 16:
        return TERMINAL_LEVEL
    if age < 5:
        return 0
    return AGE_LEVELS[age]


def is_missing(level):
    """True for absent reports: None, NaN, pandas' NA, and the "no data" sentinel -1."""
    return level is None or pd.isna(level) or level == NO_DATA


def as_levels(levels):
    """
    Collapse all the ways of saying "no report" into None and everything else into an int.

    :param levels: iterable of reported levels, possibly holding None, NaN, pd.NA or -1
    :return: list of ints and Nones
    """
    return [None if is_missing(level) else int(level) for level in levels]


def validate(ages, levels):
    """
    Check whether a sequence of education levels is internally consistent, i.e. whether each level is feasible for
    the age, levels never go down, and no level rises by more than the number of years since the last report.
    Missing levels never make a sequence invalid.

    NB: this is stricter than the cleaner, which lets any level follow a 98; here anything below 98 that follows a
        98 is a regression

    :param ages: list of ints, one age per year
    :param levels: list of education levels, one per year, possibly missing
    :return: bool, True if the sequence is valid
    """
    last_index, last_level = None, None

    for i, level in enumerate(as_levels(levels)):
        if level is None:
            continue

        if level > max_level_at_age(ages[i]) and level != NEVER_SCHOOLED:
            return False

        # the first report anchors the rest
        if last_index is None:
            last_index, last_level = i, level
            continue

        # the increase to the next report cannot be more than the number of years in between
        if level != NEVER_SCHOOLED and (level - last_level) > (i - last_index):
            return False

        # education levels do not go down
        if level < last_level:
            return False

        last_index, last_level = i, level

    return True


def step(anchor, index, age, level):
    """
    Judge one report given the last accepted report, and return what the cleaned value for this year should be.

    :param anchor: Anchor, the last accepted report, or NO_ANCHOR if nothing was accepted yet
    :param index: int, position of the report in the sequence
    :param age: int, the individual's age that year
    :param level: int or None, the reported level
    :return: tuple of (cleaned level or None, the anchor for the next year, verdict)
    """
    if level is None:
        return None, anchor, MISSING

    if level > max_level_at_age(age) and level != NEVER_SCHOOLED:
        return None, anchor, TOO_HIGH_FOR_AGE

    if age < NEVER_SCHOOLED_MIN_AGE and level == NEVER_SCHOOLED:
        return None, anchor, NEVER_SCHOOLED_TOO_YOUNG

    if anchor.index is None:
        # first believable report comes too late in life to reason forward from it
        if age >= LATE_START_AGE:
            return None, anchor, LATE_START
        return level, Anchor(index, level), ACCEPTED

    # cannot have never gone to school if we already saw a level
    if level == NEVER_SCHOOLED:
        return None, anchor, NEVER_SCHOOLED_AFTER_LEVEL

    if (level - anchor.level) > (index - anchor.index):
        return None, anchor, JUMP

    # levels don't go down, except from 98 to a real level
    if level < anchor.level and anchor.level != NEVER_SCHOOLED:
        return None, anchor, REGRESS

    return level, Anchor(index, level), ACCEPTED


def sequential_pass(ages, levels, tally=None):
    """
    Walk the sequence once, keeping the reports that agree with what came before and blanking out the rest.
    Stops at the first believable report of someone aged 25 or over if nothing was accepted before it.

    :param ages: list of ints
    :param levels: list of ints or Nones
    :param tally: collections.Counter or None; if given, counts one verdict per year read
    :return: tuple of (cleaned levels, the index where the pass stopped or None if it read everything)
    """
    cleaned = [None] * len(levels)
    anchor = NO_ANCHOR

    for i, level in enumerate(levels):
        cleaned[i], anchor, verdict = step(anchor, i, ages[i], level)
        if verdict == LATE_START:
            return cleaned, i
        if tally is not None:
            tally[verdict] += 1

    return cleaned, None


def late_start_fallback(levels, cleaned, skip_index, tally=None):
    """
    For people whose first believable report comes at age 25 or later, set every year from that report onwards to
    the most common level reported over that stretch. Ties go to the level that was reported first.

    :param levels: list of ints or Nones, the reported levels
    :param cleaned: list, output of the sequential pass; updated in place
    :param skip_index: int, where the sequential pass stopped
    :param tally: collections.Counter or None
    :return: the updated cleaned list
    """
    observed = [level for level in levels[skip_index:] if level is not None]

    # nothing to go on, leave it all missing
    if observed:
        most_common = statistics.mode(observed)
        cleaned[skip_index:] = [most_common] * (len(cleaned) - skip_index)

    if tally is not None:
        tally[FALLBACK] += len(cleaned) - skip_index

    return cleaned


def clean(ages, levels, tally=None):
    """
    Return the cleaned education levels of one individual: implausible reports are set to missing, and people first
    seen as adults get the most common level they reported.

    :param ages: list of ints, one per year, in chronological order
    :param levels: list of reported levels, one per year; None, NaN and -1 all count as missing
    :param tally: collections.Counter or None; if given, counts the verdicts
    :return: list of cleaned levels (ints or Nones), same length as the input
    """
    levels = as_levels(levels)
    cleaned, skip_index = sequential_pass(ages, levels, tally)
    if skip_index is not None:
        cleaned = late_start_fallback(levels, cleaned, skip_index, tally)
    return cleaned


def interpolate(cleaned):
    """
    Fill in missing education levels between reports.

    - missing years before a leading 98 become 98
    - gaps that end in a 98 become 98
    - gaps going from 98 to a real level stay missing, we don't know when they started school
    - other gaps are linearly interpolated, rounding half to even (so 1.5 -> 2 and 2.5 -> 2)
    - missing years after a final 12 become 12

    :param cleaned: list of ints or Nones
    :return: new list, with the gaps filled where we can
    """
    filled = list(cleaned)
    known = [i for i, level in enumerate(filled) if level is not None]

    if not known:
        return filled

    if filled[known[0]] == NEVER_SCHOOLED:
        filled[:known[0]] = [NEVER_SCHOOLED] * known[0]

    for start, end in zip(known, known[1:]):
        if end - start < 2:
            continue
        start_level, end_level = filled[start], filled[end]

        # do not extrapolate "never schooled" to a real level
        if start_level == NEVER_SCHOOLED and end_level != NEVER_SCHOOLED:
            continue

        for j in range(start + 1, end):
            if end_level == NEVER_SCHOOLED:
                filled[j] = NEVER_SCHOOLED
            else:
                # exact arithmetic, so halves are really halves when rounding
                filled[j] = round(start_level + Fraction((end_level - start_level) * (j - start), end - start))

    if filled[known[-1]] == TERMINAL_LEVEL:
        filled[known[-1] + 1:] = [TERMINAL_LEVEL] * (len(filled) - known[-1] - 1)

    return filled


def clean_individual(individual):
    """
    Clean and interpolate one individual's sequence.

    :param individual: tuple of (individual ID, list of ages, list of reported levels)
    :return: tuple of (individual ID, cleaned levels before interpolation, filled levels, verdict tally)
    """
    individual_id, ages, levels = individual
    tally = Counter()
    cleaned = clean(ages, levels, tally)
    return individual_id, cleaned, interpolate(cleaned), tally


def clean_education(education, workers=1, change_log=None):
    """
    Fill the CleanedEducation column of the person-year education table, one individual at a time.

    NB: assumes rows are already sorted by year within each individual; does NOT sort them

    :param education: pandas DataFrame with at least the columns IndividualId, Age and EducationStatus
    :param workers: int, number of processes to spread the individuals over; 1 means no pool
    :param change_log: list or None; if given, diagnostics rows are appended to it, ready to be written as a csv
    :return: the same DataFrame, with the CleanedEducation column filled in
    """
    # one (ID, ages, levels) triple per individual, in the table's row order
    individuals = [(individual_id, [int(age) for age in group['Age']], list(group['EducationStatus']))
                   for individual_id, group in education.groupby('IndividualId', sort=False)]

    # individuals are independent of each other, so they can be handed out to any worker in any order
    if workers > 1 and len(individuals) > 1:
        with multiprocessing.Pool(processes=workers) as pool:
            results = pool.map(clean_individual, individuals, chunksize=max(1, len(individuals) // (workers * 4)))
    else:
        results = [clean_individual(individual) for individual in individuals]

    # write each individual's result back onto that individual's rows
    row_indexes = education.groupby('IndividualId', sort=False).indices
    cleaned_column = [None] * len(education)
    total_tally = Counter()
    cleaned_count, filled_count = 0, 0
    for individual_id, cleaned, filled, tally in results:
        for position, level in zip(row_indexes[individual_id], filled):
            cleaned_column[position] = level
        total_tally.update(tally)
        cleaned_count += sum(level is not None for level in cleaned)
        filled_count += sum(level is not None for level in filled)

    education['CleanedEducation'] = pd.array(cleaned_column, dtype='Int16')

    print("     NUMBER OF INDIVIDUALS CLEANED: ", len(individuals))
    print("     NUMBER OF CLEANED LEVELS BEFORE INTERPOLATION: ", cleaned_count)
    print("     NUMBER OF CLEANED LEVELS AFTER INTERPOLATION: ", filled_count)

    if change_log is not None:
        change_log.extend([['\n'], ['CLEAN EDUCATION'], ['\n']])
        change_log.append(["NUMBER OF INDIVIDUALS CLEANED: ", len(individuals)])
        for verdict in (ACCEPTED, MISSING, TOO_HIGH_FOR_AGE, NEVER_SCHOOLED_TOO_YOUNG, NEVER_SCHOOLED_AFTER_LEVEL,
                        JUMP, REGRESS, FALLBACK):
            change_log.append(["PERSON-YEARS, " + verdict.upper() + ": ", total_tally[verdict]])
        change_log.append(["NUMBER OF CLEANED LEVELS BEFORE INTERPOLATION: ", cleaned_count])
        change_log.append(["NUMBER OF CLEANED LEVELS AFTER INTERPOLATION: ", filled_count])

    return education
