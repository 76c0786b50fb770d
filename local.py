"""
Where the data live on this machine. Change this to point at your own copy.
"""

root = './'
