"""
One file to click-and-play for the education pipeline: build the person-year table from the raw tables, clean
everyone's education trajectory, and write the cleaned table to disk.
"""

from preprocess import preprocess
from local import root
from pathlib import Path

# DIRECTORY STRUCTURE FOR RESEARCH WORKFLOW #

root = root

trunks = {'raw': 'data/raw/',
          'preprocessed': 'data/preprocessed/'}

leaves = {'raw': {'bounds': 'IndividualBounds.arrow',
                  'individuals': 'Individuals.arrow',
                  'statuses': 'EducationStatuses.arrow'},
          'preprocessed': {'education': 'CleanedEducation.arrow',
                           'change log': 'logs/education_change_log.csv'}
          }

# how many processes to clean individuals with; 1 runs everything in this process
workers = 1

if __name__ == '__main__':
    # make the directory tree for the output; NB: does not overwrite existing files
    Path(root + trunks['preprocessed'] + 'logs/').mkdir(parents=True, exist_ok=True)

    bounds_path = root + trunks['raw'] + leaves['raw']['bounds']
    individuals_path = root + trunks['raw'] + leaves['raw']['individuals']
    statuses_path = root + trunks['raw'] + leaves['raw']['statuses']
    out_path = root + trunks['preprocessed'] + leaves['preprocessed']['education']
    change_log_path = root + trunks['preprocessed'] + leaves['preprocessed']['change log']

    preprocess.preprocess(bounds_path, individuals_path, statuses_path, out_path, change_log_path, workers=workers)
