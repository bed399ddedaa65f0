"""
suitectl: bulk administration for a hosted office suite from the command line.

Verbs over users, aliases, mail threads, file revisions and spreadsheets,
each runnable once or once per row of a CSV file through the batch engine.
"""

__version__ = "0.5.0"
