"""
trafficreg - Traffic Signal Record Manager

A small command-line registry of traffic signal entries (id, location,
congestion density, green-light timing) backed by a flat text file, using
the Functional Core, Imperative Shell architecture.

Structure:
- records/ : Functional Core (record model, line codec, tabular views)
- data/    : Imperative Shell (backing-file store)
- shell.py : Interactive numbered menu
- cli.py   : ``trafficreg`` console entry point
"""

__version__ = "0.1.0"
